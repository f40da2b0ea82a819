# -*- coding: utf-8 -*-
#
# Création : Jan 7th, 2016
#
# @author: Eric Lapouyade
#

from nagmetric import *
from .common import SonasPlugin

file_health = RecordSchema('lshealth', ':', 'lshealth:', host=7, sensor=8, status=9, message=10)
file_status = StatusMap('lshealth', {'OK':OK, 'WARNING':WARNING, 'ERROR':CRITICAL})

block_health = RecordSchema('lshealth -i STRG', ':', 'lshealth:', host=8, sensor=9, status=10, message=11)
block_status = StatusMap('lshealth -i STRG', {'message':OK, 'warning':WARNING, 'alert':CRITICAL})

class SonasHealth(SonasPlugin):
    """Health sensors of the SONAS FILE or BLOCK component

    Components (``-m`` option) :

        * f : FILE component (V7000 sensors are ignored)
        * b : BLOCK component
    """
    label = 'FILE'
    components = {
        'f' : ('FILE', 'lshealth -Y', file_health, file_status),
        'b' : ('BLOCK', 'lshealth -i STRG -Y', block_health, block_status),
    }

    def add_cmd_options(self):
        super(SonasHealth,self).add_cmd_options()
        self._cmd_parser.add_option('-m', action='store', dest='component', metavar='f|b',
                                   help='Component : f for FILE, b for BLOCK')

    def check_options(self):
        if self.options.component not in self.components:
            self.usage_error('-m must be f (FILE) or b (BLOCK)')
        self.response.label, self.cmd, self.schema, self.status_map = self.components[self.options.component]
        super(SonasHealth,self).check_options()

    def collect_data(self,data):
        data.lshealth = self.sonas_run(self.cmd)

    def parse_data(self,data):
        sensors = self.schema.parse_all(filter_headers(data.lshealth))
        if self.options.component == 'f':
            # V7000 sensors belong to the BLOCK component
            sensors = [ rec for rec in sensors if rec.host != 'V7000' ]
        data.sensors = sensors

    def build_response(self,data):
        samples = [ Sample(rec.sensor, rec.status, value=0,
                           level=self.status_map.resolve(rec.status, '[%s:%s]' % (rec.host, rec.sensor)),
                           message='[%s:%s] %s' % (rec.host, rec.sensor, rec.message))
                    for rec in data.sensors ]
        summary = non_ok_messages(ok_msg='All sensors OK', tag=self.response.label)
        self.response.add_result(aggregate(samples, summary=summary, kind='Sensor'))

def main():
    SonasHealth.main()

if __name__ == '__main__':
    main()
