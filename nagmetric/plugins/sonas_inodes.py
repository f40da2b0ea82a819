# -*- coding: utf-8 -*-
#
# Création : Jan 7th, 2016
#
# @author: Eric Lapouyade
#

from nagmetric import *
from .common import SonasPlugin

lsfset = RecordSchema('lsfset', ':', 'lsfset:', fileset=8, inodes_used=17, inodes_max=20)

class SonasInodes(ThresholdMixin, SonasPlugin):
    """Inodes usage of a SONAS fileset"""
    label = 'INODES'

    def add_cmd_options(self):
        super(SonasInodes,self).add_cmd_options()
        self._cmd_parser.add_option('-F', action='store', dest='filesystem', metavar='FS',
                                   help='Filesystem name')
        self._cmd_parser.add_option('-f', action='store', dest='fileset', metavar='FILESET',
                                   help='Fileset name')

    def check_options(self):
        if not self.options.filesystem or not self.options.fileset:
            self.usage_error('-F <filesystem> and -f <fileset> are required')
        super(SonasInodes,self).check_options()

    def collect_data(self,data):
        # exit status 9 is returned along with some warnings
        data.lsfset = self.sonas_run('lsfset %s -v -Y' % self.options.filesystem, accepted_rcodes=(0,9),
            vendor_errors={ 'EFSSP0010C' : EntityNotFound(self.options.filesystem, 'Filesystem') })

    def parse_data(self,data):
        lines = filter_headers(data.lsfset)
        rec = find_entity(lsfset.parse_all(lines), 'fileset', self.options.fileset, 'Fileset')[-1]
        data.inodes_used = rec.inodes_used
        data.inodes_max = rec.inodes_max
        data.utilization = str(ratio_percent(rec.inodes_used, rec.inodes_max, 0))

    def build_response(self,data):
        self.threshold_response([ Sample('inodes', data.utilization, PERCENTAGE,
                                         message='%s %% inodes used (%s out of %s)' % (
                                            data.utilization, data.inodes_used, data.inodes_max)) ])

def main():
    SonasInodes.main()

if __name__ == '__main__':
    main()
