# -*- coding: utf-8 -*-
#
# Création : Jan 7th, 2016
#
# @author: Eric Lapouyade
#

import datetime
from nagmetric import *
from .common import SonasPrivilegedPlugin

class SonasVfsWarnings(ThresholdMixin, SonasPrivilegedPlugin):
    """Slow VFS calls warnings found in SONAS nodes logs since the last check

    Warnings are counted minute by minute : thresholds are numbers of warnings per minute.
    Use ``-l $LASTSERVICECHECK$`` in the nagios command definition.
    """
    label = 'VFS'
    default_warning = 10
    default_critical = 100
    warnings_cmd = "grep -e 'WARNING: VFS call.*took unexpectedly long' /var/log/messages"

    def add_cmd_options(self):
        super(SonasVfsWarnings,self).add_cmd_options()
        self._cmd_parser.add_option('-l', action='store', dest='lastcheck', metavar='EPOCH',
                                   help='Last check time in seconds since epoch ($LASTSERVICECHECK$)')

    def check_options(self):
        if not (self.options.lastcheck or '').isdigit():
            self.usage_error('-l <last check epoch> is required')
        super(SonasVfsWarnings,self).check_options()

    def get_now(self):
        return datetime.datetime.now()

    def collect_data(self,data):
        data.onnode = self.onnode_run(self.warnings_cmd)
        if len(data.onnode.splitlines()) <= 1:
            raise CollectError('Error executing remote command : %s' % (data.onnode.strip() or '<empty result>'))

    def parse_data(self,data):
        start = datetime.datetime.fromtimestamp(int(self.options.lastcheck))
        data.per_minute = [ [stamp,count] for stamp,count in count_by_minute(data.onnode, start, self.get_now()) ]

    def build_response(self,data):
        window = WindowCount.fold([ count for stamp,count in data.per_minute ], self.threshold)
        self.response.add(window.level, '%s warnings during last %sm', window.total, window.buckets)
        self.response.add_perf_data(PerfData('warnings', window.total, 'Warnings',
                                             window.warning_sum, window.critical_sum, 0))

def main():
    SonasVfsWarnings.main()

if __name__ == '__main__':
    main()
