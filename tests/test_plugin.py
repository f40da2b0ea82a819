# -*- coding: utf-8 -*-
#
# Création : Jan 7th, 2016
#
# @author: Eric Lapouyade
#

import pytest
import nagmetric
from nagmetric import *

class CountPlugin(ThresholdMixin, ActivePlugin):
    """Counts things on each node

    Used to test the plugin pipeline.
    """
    label = 'COUNT'
    remote = False

    def collect_data(self,data):
        data.raw = '5\n95\n'

    def parse_data(self,data):
        data.counts = data.raw.split()

    def build_response(self,data):
        self.threshold_response([ Sample('n%s' % i, v, ABSOLUTE_COUNT) for i,v in enumerate(data.counts,1) ])

class FailingCollect(CountPlugin):
    def collect_data(self,data):
        raise ConnectionError('Cannot connect to admin@10.0.0.1 : timed out')

class FailingParse(CountPlugin):
    def parse_data(self,data):
        data.ratio = 1 / 0

class EmptyPlugin(CountPlugin):
    def parse_data(self,data):
        data.counts = []

class RemotePlugin(ActivePlugin):
    """Needs a host"""
    label = 'REMOTE'
    cmd_params = 'user,passwd'
    required_params = 'user'

    def build_response(self,data):
        self.response.add(OK, self.host.to_str('{name} {ip} {user} {passwd}'))

def test_default_thresholds(run_plugin):
    code, out = run_plugin(CountPlugin())
    assert code == 2
    assert out == 'COUNT CRITICAL - n2 : 95 | n1=5;80;90;0; n2=95;80;90;0;'

def test_command_line_thresholds(run_plugin):
    code, out = run_plugin(CountPlugin(), '-w', '100', '-c', '200')
    assert code == 0
    assert out == 'COUNT OK - n1 : 5 | n1=5;100;200;0; n2=95;100;200;0;'
    code, out = run_plugin(CountPlugin(), '-w', '50.5')
    assert code == 2
    code, out = run_plugin(CountPlugin(), '-w', '50.5', '-c', '95.1')
    assert code == 1

def test_invalid_threshold(run_plugin):
    code, out = run_plugin(CountPlugin(), '-w', 'abc')
    assert code == 3
    assert out == "COUNT UNKNOWN - Invalid warning threshold : 'abc' is not a number"

def test_collect_error(run_plugin):
    code, out = run_plugin(FailingCollect())
    assert code == 3
    assert out == 'COUNT UNKNOWN - Failed to collect data : Cannot connect to admin@10.0.0.1 : timed out'

def test_internal_error(run_plugin, capsys):
    code, out = run_plugin(FailingParse())
    assert code == 3
    assert out == 'COUNT UNKNOWN - Plugin internal error : division by zero'

def test_internal_error_logs_traceback(run_plugin, capsys, monkeypatch):
    monkeypatch.setattr('sys.argv', ['check'])
    with pytest.raises(SystemExit):
        FailingParse().run()
    err = capsys.readouterr().err
    assert 'Traceback' in err
    assert 'ZeroDivisionError' in err

def test_no_sample_is_unknown(run_plugin):
    code, out = run_plugin(EmptyPlugin())
    assert code == 3
    assert out == 'COUNT UNKNOWN - Entity any not found!'

def test_show_description(run_plugin):
    code, out = run_plugin(CountPlugin(), '-i')
    assert code == 3
    assert out.startswith('Counts things on each node')

def test_collect_and_print(run_plugin):
    code, out = run_plugin(CountPlugin(), '-a')
    assert code == 0
    assert out.startswith('Collected Data =')
    assert 'raw' in out
    assert 'counts' not in out

def test_parse_and_print(run_plugin):
    code, out = run_plugin(CountPlugin(), '-b')
    assert code == 0
    assert 'Parsed Data =' in out
    assert 'counts' in out

def test_debug_logs_go_to_stderr(run_plugin, capsys, monkeypatch):
    monkeypatch.setattr('sys.argv', ['check', '-d'])
    with pytest.raises(SystemExit):
        CountPlugin().run()
    captured = capsys.readouterr()
    assert captured.out.strip() == 'COUNT CRITICAL - n2 : 95 | n1=5;80;90;0; n2=95;80;90;0;'
    assert 'Data are collected' in captured.err

def test_logfile(run_plugin, tmp_path):
    logfile = tmp_path / 'plugin.log'
    run_plugin(CountPlugin(), '-v', '--logfile', str(logfile))
    assert 'Plugin output : COUNT CRITICAL' in logfile.read_text()

def test_remote_plugin_needs_ip(run_plugin):
    code, out = run_plugin(RemotePlugin(), '-u', 'admin')
    assert code == 3
    assert out == 'REMOTE UNKNOWN - Usage error : Missing "ip" parameter (required : ip,user)'

def test_required_params(run_plugin):
    code, out = run_plugin(RemotePlugin(), '-H', '10.0.0.1')
    assert code == 3
    assert out == 'REMOTE UNKNOWN - Usage error : Missing "user" parameter (required : ip,user)'

def test_host_from_command_line(run_plugin):
    code, out = run_plugin(RemotePlugin(), '-H', '10.0.0.1', '-u', 'admin', '--passwd', 'secret')
    assert code == 0
    assert out == 'REMOTE OK - 10.0.0.1 10.0.0.1 admin secret'

def test_host_from_environment(run_plugin, monkeypatch):
    monkeypatch.setenv('NAGIOS_HOSTNAME', 'sonas01')
    monkeypatch.setenv('NAGIOS_HOSTADDRESS', '10.0.0.2')
    monkeypatch.setenv('NAGIOS__HOSTUSER', 'monitor')
    code, out = run_plugin(RemotePlugin())
    assert out == 'REMOTE OK - sonas01 10.0.0.2 monitor -'

def test_command_line_wins_over_environment(run_plugin, monkeypatch):
    monkeypatch.setenv('NAGIOS_HOSTADDRESS', '10.0.0.2')
    monkeypatch.setenv('NAGIOS__HOSTUSER', 'monitor')
    code, out = run_plugin(RemotePlugin(), '-u', 'admin', '-H', '10.0.0.3')
    assert out == 'REMOTE OK - 10.0.0.3 10.0.0.3 admin -'

def test_host_debug_hides_password(run_plugin, capsys, monkeypatch):
    monkeypatch.setattr('sys.argv', ['check', '-d', '-H', '10.0.0.1', '-u', 'admin', '--passwd', 'secret'])
    with pytest.raises(SystemExit):
        RemotePlugin().run()
    err = capsys.readouterr().err
    assert 'admin' in err
    assert 'passwd' not in err

def test_fast_response_if(capsys):
    plugin = CountPlugin()
    plugin.fast_response_if(False, CRITICAL, 'not sent')
    with pytest.raises(SystemExit) as excinfo:
        plugin.fast_response_if(True, WARNING, 'sent')
    assert excinfo.value.code == 1
    assert capsys.readouterr().out == 'COUNT WARNING - sent\n'

def test_activate_debug(capsys):
    level = nagmetric.logger.level
    try:
        nagmetric.activate_debug()
        nagmetric.debug_listing('line1\nline2')
    finally:
        nagmetric.logger.setLevel(level)
    err = capsys.readouterr().err
    assert '| line1' in err
    assert '| line2' in err
