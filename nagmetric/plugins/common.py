# -*- coding: utf-8 -*-
#
# Création : Jan 7th, 2016
#
# @author: Eric Lapouyade
#
"""Base classes of the nagmetric checks"""

import os
import re
import shlex
from nagmetric import *

PLUGINS_DIR = os.path.dirname(os.path.abspath(__file__))

__all__ = ['PLUGINS_DIR', 'MetricPlugin', 'SonasPlugin', 'SonasPrivilegedPlugin', 'node_blocks']

class MetricPlugin(ActivePlugin):
    """Base class for the nagmetric checks

    All checks must inherit from this class, directly or not, to be found by the
    ``nagmetric`` launcher.
    """
    abstract = True
    plugin_type = 'nagmetric_active'
    plugins_basedir = PLUGINS_DIR
    plugins_basemodule = 'nagmetric.plugins.'

    @classmethod
    def main(cls):
        """Console script entry point : instantiate the check and run it"""
        cls().run()

class SonasPlugin(MetricPlugin):
    """Base class for the checks running a SONAS CLI command through ssh with a private key

    The key is given with ``--identity``, ``~/.ssh/id_rsa`` is used otherwise :
    it must be readable by the nagios user.
    """
    abstract = True
    cmd_params = 'user,identity'
    required_params = 'user'
    default_identity = '~/.ssh/id_rsa'
    ssh_timeout = 10
    command_timeout = 60

    def get_identity(self):
        return os.path.expanduser(self.host.identity or self.default_identity)

    def sonas_run(self, cmd, accepted_rcodes=(0,), vendor_errors=None):
        """Runs a CLI command on the management node

        Args:

            cmd (str): the command to run
            accepted_rcodes (tuple): the accepted exit status, None to accept any
            vendor_errors (dict): vendor message id -> error message or exception, it is raised
                as a CollectError (when a message is given) if the message id is found in the output

        Returns:

            :class:`textops.StrExt` : the command output (stdout and stderr)

        Raises:

            CollectError: the key is not readable, the connection failed, a vendor error is found
                or the exit status is not accepted
        """
        identity = self.get_identity()
        if not os.access(identity, os.R_OK):
            raise CollectError('%s is not readable - please adjust its path!' % identity)
        ssh = Ssh(self.host.ip, self.host.user, timeout=self.ssh_timeout, key_filename=identity,
                  allow_agent=False, look_for_keys=False, expected_pattern=None)
        out = ssh.run(cmd, timeout=self.command_timeout)
        for msg_id, msg in sorted((vendor_errors or {}).items()):
            if msg_id in out:
                raise msg if isinstance(msg, Exception) else CollectError(msg)
        if accepted_rcodes is not None and ssh.last_rcode not in accepted_rcodes:
            raise CollectError('Error executing remote command [%s] (exit status %s) : %s'
                               % (cmd, ssh.last_rcode, ' '.join(out.splitlines()[-3:])))
        return out

class SonasPrivilegedPlugin(MetricPlugin):
    """Base class for the checks running a command on every node with ``sc onnode all``

    This needs a password authentication, so the ssh client is driven with :class:`~nagmetric.Expect`.
    Each node output is preceded by a ``>> NODE: <ip> <<`` line.
    """
    abstract = True
    cmd_params = 'user,passwd'
    expect_timeout = 20
    ssh_command = ('ssh -t -o PasswordAuthentication=yes -o PubkeyAuthentication=no '
                   '-o StrictHostKeyChecking=no -o ConnectTimeout=10')
    login_steps = (
        ('Permission denied', Expect.KILL),
        ('No route to host', Expect.KILL),
        ('Connection timed out', Expect.KILL),
        ('Your password has expired', Expect.KILL),
        (r'(?i)password[^:\r\n]*:\s*', '{passwd}\n'),
    )

    def get_spawn(self, cmd):
        remote_cmd = 'sc onnode all %s' % shlex.quote(cmd)
        return '%s %s@%s %s' % (self.ssh_command, self.host.user, self.host.ip, shlex.quote(remote_cmd))

    def onnode_run(self, cmd):
        """Runs a shell command on all nodes and returns the whole output"""
        return Expect(self.get_spawn(cmd), login_steps=self.login_steps,
                      context={'passwd':self.host.passwd}, timeout=self.expect_timeout,
                      expected_pattern=None).run()

def node_blocks(text, marker=re.compile(r'>>\s*NODE:\s*(\S+)\s*<<')):
    """Cuts a ``sc onnode all`` output into node blocks

    Returns:

        list : ``(node, lines)`` tuples in the output order, blank lines are removed

    Examples:

        >>> node_blocks('>> NODE: 10.0.0.1 <<\\nfoo\\n\\n>> NODE: 10.0.0.2 <<\\nbar\\n')
        [('10.0.0.1', ['foo']), ('10.0.0.2', ['bar'])]
    """
    blocks = []
    for line in text.splitlines():
        m = marker.search(line)
        if m:
            blocks.append((m.group(1), []))
        elif blocks and line.strip():
            blocks[-1][1].append(line.rstrip())
    return blocks
