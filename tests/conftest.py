# -*- coding: utf-8 -*-
#
# Création : Jan 7th, 2016
#
# @author: Eric Lapouyade
#

import os
import re
import logging
import pytest
import textops
import pexpect
import nagmetric

@pytest.fixture(autouse=True)
def reset_loggers():
    """Plugins add their handlers at each run : remove them between tests"""
    yield
    for logger in (nagmetric.logger, textops.logger):
        for handler in list(logger.handlers):
            if not isinstance(handler, logging.NullHandler):
                logger.removeHandler(handler)

@pytest.fixture(autouse=True)
def clean_nagios_env(monkeypatch):
    for k in list(os.environ):
        if k.startswith('NAGIOS_'):
            monkeypatch.delenv(k)

@pytest.fixture
def run_plugin(monkeypatch, capsys):
    """Runs a plugin instance with the given command line arguments

    Returns the exit code and the stdout output line.
    """
    def run(plugin, *args):
        monkeypatch.setattr('sys.argv', ['check'] + list(args))
        with pytest.raises(SystemExit) as excinfo:
            plugin.run()
        out = capsys.readouterr().out.strip()
        return excinfo.value.code, out
    return run

class FakeStream(object):
    def __init__(self, data):
        self.data = data
        self.channel = self

    def read(self):
        return self.data.encode('utf-8')

class FakeChannel(FakeStream):
    def __init__(self, data, rcode):
        super(FakeChannel,self).__init__(data)
        self.rcode = rcode

    def recv_exit_status(self):
        return self.rcode

class FakeSSHClient(object):
    """Stands for paramiko.SSHClient : ``outputs`` maps commands to (stdout, stderr, exit status)"""
    outputs = {}
    connect_error = None
    instances = []

    def __init__(self):
        self.closed = False
        self.commands = []
        FakeSSHClient.instances.append(self)

    def set_missing_host_key_policy(self, policy):
        self.policy = policy

    def load_system_host_keys(self):
        pass

    def connect(self, host, **kwargs):
        if self.connect_error:
            raise self.connect_error
        self.host = host
        self.connect_kwargs = kwargs

    def exec_command(self, cmd, timeout=None, get_pty=False):
        self.commands.append(cmd)
        out, err, rcode = self.outputs[cmd]
        return None, FakeChannel(out, rcode), FakeStream(err)

    def close(self):
        self.closed = True

class FakeSpawn(object):
    """Stands for pexpect.spawn : it plays ``script`` as the spawned command output

    Patterns are searched in the remaining output, the earliest match wins.
    """
    script = ''
    timeout = False
    instances = []

    def __init__(self, command, timeout=30, encoding=None, codec_errors=None):
        self.command = command
        self.buffer = self.script
        self.sent = []
        self.killed = False
        self.closed = False
        self.exitstatus = 0
        FakeSpawn.instances.append(self)

    def expect(self, patterns):
        if self.timeout:
            raise pexpect.TIMEOUT('timeout')
        found = None
        for i,pattern in enumerate(patterns):
            if pattern is pexpect.EOF:
                eof_index = i
                continue
            m = re.search(pattern, self.buffer)
            if m and (found is None or m.start() < found[1].start()):
                found = (i, m)
        if found is None:
            self.before, self.after, self.buffer = self.buffer, pexpect.EOF, ''
            return eof_index
        i, m = found
        self.before, self.after, self.buffer = self.buffer[:m.start()], m.group(), self.buffer[m.end():]
        return i

    def sendline(self, s):
        self.sent.append(s + '\n')

    def send(self, s):
        self.sent.append(s)

    def kill(self, sig):
        self.killed = True

    def close(self, force=False):
        self.closed = True

@pytest.fixture
def fake_ssh(monkeypatch):
    monkeypatch.setattr(FakeSSHClient, 'outputs', {})
    monkeypatch.setattr(FakeSSHClient, 'connect_error', None)
    monkeypatch.setattr(FakeSSHClient, 'instances', [])
    monkeypatch.setattr('nagmetric.collect.paramiko.SSHClient', FakeSSHClient)
    return FakeSSHClient

@pytest.fixture
def fake_spawn(monkeypatch):
    monkeypatch.setattr(FakeSpawn, 'script', '')
    monkeypatch.setattr(FakeSpawn, 'timeout', False)
    monkeypatch.setattr(FakeSpawn, 'instances', [])
    monkeypatch.setattr('nagmetric.collect.pexpect.spawn', FakeSpawn)
    return FakeSpawn
