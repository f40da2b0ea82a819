# -*- coding: utf-8 -*-
#
# Création : Jan 7th, 2016
#
# @author: Eric Lapouyade
#

from nagmetric import *
from .common import SonasPlugin

lsrepl = RecordSchema('lsrepl', ':', 'lsrepl:', status=9, description=10, time=11)
repl_status = StatusMap('lsrepl', {'FAILED':CRITICAL, 'STOPPED':CRITICAL, 'KILLED':CRITICAL,
                                   'WARNING':WARNING}, default=OK)

class SonasReplication(SonasPlugin):
    """Status of the last asynchronous replication of a SONAS filesystem"""
    label = 'REPLICATION'

    def add_cmd_options(self):
        super(SonasReplication,self).add_cmd_options()
        self._cmd_parser.add_option('-F', action='store', dest='filesystem', metavar='FS',
                                   help='Filesystem name')

    def check_options(self):
        if not self.options.filesystem:
            self.usage_error('-F <filesystem> is required')
        super(SonasReplication,self).check_options()

    def collect_data(self,data):
        data.lsrepl = self.sonas_run('lsrepl %s -Y' % self.options.filesystem, accepted_rcodes=None,
            vendor_errors={ 'EFSSP0010C' : EntityNotFound(self.options.filesystem, 'Filesystem') })

    def parse_data(self,data):
        replications = lsrepl.parse_all(filter_headers(data.lsrepl))
        if not replications:
            raise EntityNotFound(self.options.filesystem, 'Replication',
                                 'No replication found for %s!' % self.options.filesystem)
        data.last = replications[-1]
        finished = [ r for r in replications if r.status == 'FINISHED' ]
        data.last_success = finished[-1].time.replace('.',':') if finished else 'never'

    def build_response(self,data):
        level = repl_status.resolve(data.last.status)
        if level == CRITICAL:
            self.response.add(level, "Last replication %s: %s - Last successful replication at '%s'",
                              data.last.status, data.last.description, data.last_success)
        else:
            self.response.add(level, "Last replication %s at '%s'", data.last.status, data.last.time)

def main():
    SonasReplication.main()

if __name__ == '__main__':
    main()
