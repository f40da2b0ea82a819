# -*- coding: utf-8 -*-
#
# Création : Jan 7th, 2016
#
# @author: Eric Lapouyade
#

import time
import pytest
import paramiko
import nagmetric
from nagmetric import *

def test_runsh():
    assert runsh('echo hello; echo world') == ['hello', 'world']
    assert runsh(['echo', '{word}'], context={'word':'hi'}) == ['hi']

def test_runsh_empty_result():
    with pytest.raises(UnexpectedResultError):
        runsh('true')
    assert runsh('true', expected_pattern=None) == []

def test_runshex_returns_status():
    out, err, rcode = runshex('echo out; echo err >&2; exit 3', unexpected_stderr=False)
    assert out == 'out\n'
    assert err == 'err\n'
    assert rcode == 3

def test_runshex_unexpected_stderr():
    with pytest.raises(UnexpectedResultError):
        runshex('echo out; echo err >&2')

def test_runsh_empty_command():
    with pytest.raises(InvalidCommandError):
        runsh('')

def test_timeout():
    with pytest.raises(nagmetric.TimeoutError):
        with Timeout(seconds=1, error_message='too long'):
            time.sleep(3)

def test_read_file(tmp_path):
    path = tmp_path / 'temp'
    path.write_text('48312\n')
    assert read_file(str(path)) == '48312\n'

def test_read_file_not_found(tmp_path):
    with pytest.raises(CollectError) as excinfo:
        read_file(str(tmp_path / 'missing'), not_found_msg='not an OpenVZ container')
    assert str(excinfo.value) == 'not an OpenVZ container'
    with pytest.raises(CollectError) as excinfo:
        read_file(str(tmp_path / 'missing'))
    assert 'not found' in str(excinfo.value)

def test_ssh_run(fake_ssh):
    fake_ssh.outputs['lshealth -Y'] = ('line1\nline2\n', '', 0)
    ssh = Ssh('10.0.0.1', 'admin', key_filename='/tmp/id_rsa', allow_agent=False)
    out = ssh.run('lshealth -Y')
    assert out == 'line1\nline2\n'
    assert ssh.last_rcode == 0
    client = fake_ssh.instances[0]
    assert client.host == '10.0.0.1'
    assert client.connect_kwargs['username'] == 'admin'
    assert client.connect_kwargs['key_filename'] == '/tmp/id_rsa'
    assert client.closed

def test_ssh_run_adds_stderr_and_status(fake_ssh):
    fake_ssh.outputs['lsfset gpfs9 -v -Y'] = ('', 'EFSSP0010C The filesystem gpfs9 does not exist\n', 1)
    ssh = Ssh('10.0.0.1', 'admin')
    assert 'EFSSP0010C' in ssh.run('lsfset gpfs9 -v -Y')
    assert ssh.last_rcode == 1

def test_ssh_with_keeps_connection(fake_ssh):
    fake_ssh.outputs['cmd1'] = ('a', '', 0)
    fake_ssh.outputs['cmd2'] = ('b', '', 0)
    with Ssh('10.0.0.1', 'admin') as ssh:
        assert ssh.run('cmd1') == 'a'
        assert ssh.run('cmd2') == 'b'
        assert not fake_ssh.instances[0].closed
    assert fake_ssh.instances[0].closed

def test_ssh_closed(fake_ssh):
    fake_ssh.outputs['cmd'] = ('a', '', 0)
    ssh = Ssh('10.0.0.1', 'admin')
    ssh.run('cmd')
    with pytest.raises(NotConnected):
        ssh.run('cmd')

def test_ssh_empty_result(fake_ssh):
    fake_ssh.outputs['cmd'] = ('', '', 0)
    with pytest.raises(UnexpectedResultError):
        Ssh('10.0.0.1', 'admin').run('cmd')
    assert Ssh('10.0.0.1', 'admin', expected_pattern=None).run('cmd') == ''

def test_ssh_connection_error(fake_ssh):
    fake_ssh.connect_error = paramiko.AuthenticationException('Authentication failed.')
    with pytest.raises(ConnectionError) as excinfo:
        Ssh('10.0.0.1', 'admin')
    assert 'Authentication failed.' in str(excinfo.value)
    assert isinstance(excinfo.value, CollectError)

def test_ssh_needs_host_and_user(fake_ssh):
    with pytest.raises(ConnectionError):
        Ssh('', 'admin')
    with pytest.raises(ConnectionError):
        Ssh('10.0.0.1', None)

LOGIN_STEPS = (
    ('Permission denied', Expect.KILL),
    ('No route to host', Expect.KILL),
    (r'(?i)password[^:\r\n]*:\s*', '{passwd}\n'),
)

def test_expect_answers_password(fake_spawn):
    fake_spawn.script = "admin@sonas's Password: \r\n>> NODE: 10.0.0.1 <<\r\nhello\r\n"
    out = Expect('ssh admin@sonas', login_steps=LOGIN_STEPS, context={'passwd':'secret'}).run()
    child = fake_spawn.instances[0]
    assert child.sent == ['secret\n']
    assert out == '>> NODE: 10.0.0.1 <<\nhello'
    assert child.closed

def test_expect_answers_each_password_prompt(fake_spawn):
    fake_spawn.script = "admin@sonas's password: \r\nPassword: \r\n>> NODE: 10.0.0.1 <<\r\nhello\r\n"
    out = Expect('ssh admin@sonas', login_steps=LOGIN_STEPS, context={'passwd':'secret'}).run()
    assert fake_spawn.instances[0].sent == ['secret\n', 'secret\n']
    assert out == '>> NODE: 10.0.0.1 <<\nhello'

def test_expect_endless_password_prompts(fake_spawn):
    fake_spawn.script = 'Password: ' * 5
    with pytest.raises(CollectError) as excinfo:
        Expect('ssh admin@sonas', login_steps=LOGIN_STEPS, context={'passwd':'bad'}).run()
    assert 'Too many expect' in str(excinfo.value)
    assert fake_spawn.instances[0].sent == ['bad\n'] * 3

def test_expect_kill_pattern(fake_spawn):
    fake_spawn.script = "Password: \r\nPermission denied, please try again.\r\n"
    with pytest.raises(ConnectionError) as excinfo:
        Expect('ssh admin@sonas', login_steps=LOGIN_STEPS, context={'passwd':'bad'}).run()
    assert 'Permission denied' in str(excinfo.value)
    assert fake_spawn.instances[0].killed

def test_expect_timeout(fake_spawn):
    fake_spawn.timeout = True
    with pytest.raises(nagmetric.TimeoutError):
        Expect('ssh admin@sonas', login_steps=LOGIN_STEPS, context={'passwd':'secret'}).run()
    assert fake_spawn.instances[0].closed

def test_expect_too_many_answers(fake_spawn):
    fake_spawn.script = 'login: user: name: '
    steps = (('login:', 'a\n'), ('user:', 'b\n'), ('name:', 'c\n'))
    with pytest.raises(CollectError):
        Expect('telnet sonas', login_steps=steps, max_answers=2).run()

def test_expect_empty_output(fake_spawn):
    fake_spawn.script = 'Password: '
    with pytest.raises(UnexpectedResultError):
        Expect('ssh admin@sonas', login_steps=LOGIN_STEPS, context={'passwd':'secret'}).run()
