# -*- coding: utf-8 -*-
#
# Création : Jan 7th, 2016
#
# @author: Eric Lapouyade
#

import os
import re
from nagmetric import *
from .common import MetricPlugin

class RpiTemperature(ThresholdMixin, MetricPlugin):
    """CPU and GPU temperatures of a Raspberry Pi (in °C)"""
    label = 'TEMP'
    remote = False
    default_warning = 60
    default_critical = 70
    cpu_temp_file = '/sys/class/thermal/thermal_zone0/temp'
    vcgencmd = '/opt/vc/bin/vcgencmd'

    def collect_data(self,data):
        if not os.access(self.vcgencmd, os.X_OK):
            raise CollectError("'%s' not found - is this a Raspberry Pi?" % self.vcgencmd)
        data.cpu_temp = read_file(self.cpu_temp_file)
        data.gpu_temp = runsh([self.vcgencmd, 'measure_temp'])

    def parse_data(self,data):
        data.cpu = str(millidegrees_to_degrees(data.cpu_temp.strip()))
        m = re.search(r"temp=([-0-9.]+)'C", '\n'.join(data.gpu_temp))
        if not m:
            raise ParseError('Cannot read GPU temperature', ' '.join(data.gpu_temp))
        data.gpu = m.group(1)

    def build_response(self,data):
        self.threshold_response([ Sample('cputemp', data.cpu, TEMPERATURE,
                                         message='CPU temperature: %s°C' % data.cpu),
                                  Sample('gputemp', data.gpu, TEMPERATURE,
                                         message='GPU temperature: %s°C' % data.gpu) ],
                                summary=all_messages(' - '))

def main():
    RpiTemperature.main()

if __name__ == '__main__':
    main()
