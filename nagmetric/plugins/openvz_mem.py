# -*- coding: utf-8 -*-
#
# Création : Jan 7th, 2016
#
# @author: Eric Lapouyade
#

import re
from nagmetric import *
from .common import MetricPlugin

beancounter = RecordSchema('user_beancounters', None, resource=1, held=2, maxheld=3, barrier=4, limit=5)

class OpenvzMemory(MetricPlugin):
    """Memory usage of the OpenVZ container the check is running in

    Thresholds come from the container limits : the ``vmguarpages`` barrier for WARNING
    and the ``privvmpages`` barrier for CRITICAL. Root privileges are needed.
    """
    label = 'MEMORY'
    remote = False
    beancounters_file = '/proc/user_beancounters'

    def collect_data(self,data):
        data.beancounters = read_file(self.beancounters_file,
            not_found_msg="'%s' not found - is this a OpenVZ container?" % self.beancounters_file,
            not_readable_msg="'%s' not readable - root privileges required!" % self.beancounters_file)

    def parse_data(self,data):
        # the first resource line begins with the container uid
        lines = [ re.sub(r'^\s*\d+:', '', line) for line in filter_headers(data.beancounters, ('Version','maxheld')) ]
        counters = beancounter.parse_all(lines)
        privvm = find_entity(counters, 'resource', 'privvmpages', 'Resource')[0]
        vmguar = find_entity(counters, 'resource', 'vmguarpages', 'Resource')[0]
        data.used_mb = str(pages_to_mb(privvm.held))
        data.warning_mb = str(pages_to_mb(vmguar.barrier))
        data.critical_mb = str(pages_to_mb(privvm.barrier))
        data.max_mb = str(pages_to_mb(privvm.limit))

    def build_response(self,data):
        threshold = Threshold(data.warning_mb, data.critical_mb)
        self.response.add_result(aggregate([ Sample('memused', data.used_mb, MEMORY, maximum=to_decimal(data.max_mb),
                                                    message='%sMB used currently' % data.used_mb) ],
                                           threshold))

def main():
    OpenvzMemory.main()

if __name__ == '__main__':
    main()
