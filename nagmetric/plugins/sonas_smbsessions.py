# -*- coding: utf-8 -*-
#
# Création : Jan 7th, 2016
#
# @author: Eric Lapouyade
#

from nagmetric import *
from .common import SonasPrivilegedPlugin, node_blocks

class SonasSmbSessions(ThresholdMixin, SonasPrivilegedPlugin):
    """Number of SMB sessions on each SONAS interface node

    The session count is read from the last ``children`` line of each node ``/var/log/messages``.
    Thresholds apply to each node, the total is displayed.
    """
    label = 'SMB'
    default_warning = 1000
    default_critical = 2000
    sessions_cmd = 'grep children /var/log/messages | tail -n 1'

    def collect_data(self,data):
        data.onnode = self.onnode_run(self.sessions_cmd)

    def parse_data(self,data):
        sessions = []
        for node, lines in node_blocks(data.onnode):
            if not lines:
                self.debug('No session line for node %s', node)
                continue
            sessions.append([node, extract_fields(lines[0], 4, None)])
        data.sessions = sessions

    def build_response(self,data):
        self.threshold_response([ Sample(node, count, ABSOLUTE_COUNT) for node,count in data.sessions ],
                                summary=sum_message('%(total)s SMB sessions on %(count)s nodes'),
                                kind='Node')

def main():
    SonasSmbSessions.main()

if __name__ == '__main__':
    main()
