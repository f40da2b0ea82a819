# -*- coding: utf-8 -*-
#
# Création : Jan 7th, 2016
#
# @author: Eric Lapouyade
#

from nagmetric import *
from .common import SonasPlugin

class SonasPerfdata(ThresholdMixin, SonasPlugin):
    """Per node CPU or network statistics of a SONAS cluster

    Metrics (``-m`` option) :

        * cpu_utilization : CPU usage computed from the idle percentage
        * cpu_iowait : CPU percentage spent waiting for IO
        * public_network : bytes received on the client network interfaces

    The performance center service must be running on the cluster.
    """
    label = 'CPU'
    metrics = {
        'cpu_utilization' : ('cpu_idle_usage', 'CPU', PERCENTAGE),
        'cpu_iowait'      : ('cpu_iowait_usage', 'CPU', PERCENTAGE),
        'public_network'  : ('public_network_bytes_received', 'NETWORK', RATE),
    }
    network_warning = 100000000
    network_critical = 115000000

    def add_cmd_options(self):
        super(SonasPerfdata,self).add_cmd_options()
        self._cmd_parser.add_option('-m', action='store', dest='metric', metavar='METRIC',
                                   help='Metric : %s' % ', '.join(sorted(self.metrics)))

    def get_default_warning(self):
        if self.options.metric == 'public_network':
            return self.network_warning
        return super(SonasPerfdata,self).get_default_warning()

    def get_default_critical(self):
        if self.options.metric == 'public_network':
            return self.network_critical
        return super(SonasPerfdata,self).get_default_critical()

    def check_options(self):
        if self.options.metric not in self.metrics:
            self.usage_error('Supported metrics are %s' % ', '.join(sorted(self.metrics)))
        self.group, self.response.label, self.kind = self.metrics[self.options.metric]
        super(SonasPerfdata,self).check_options()

    def collect_data(self,data):
        data.lsperfdata = self.sonas_run('lsperfdata -g %s -t minute -n all' % self.group, vendor_errors={
            'EFSSG0002I' : "Error collecting performance data - check if performance center "
                           "service is running using 'cfgperfcenter'" })

    def parse_data(self,data):
        lines = filter_headers(data.lsperfdata, markers=('EFSSG1000I',))
        if not lines:
            raise ParseError('Error parsing remote command output', '<empty result>')
        fields = lines[-1].split(',')[2:]
        values = [ f.strip() for f in fields if f.strip() ]
        if not values:
            raise ParseError('Error parsing remote command output : no node value', lines[-1])
        if self.options.metric == 'cpu_utilization':
            data.node_values = [ str(utilization_from_idle(v)) for v in values ]
        else:
            data.node_values = [ str(to_decimal(v)) for v in values ]

    def build_response(self,data):
        self.threshold_response([ Sample('node%s' % i, v, self.kind) for i,v in enumerate(data.node_values,1) ],
                                kind='Node')

def main():
    SonasPerfdata.main()

if __name__ == '__main__':
    main()
