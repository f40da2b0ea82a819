# -*- coding: utf-8 -*-
#
# Création : Jan 7th, 2016
#
# @author: Eric Lapouyade
#

import pytest
from nagmetric.launcher import launch
from nagmetric.plugins.common import MetricPlugin
from nagmetric.plugins.rpi_temp import RpiTemperature

CHECKS = ['SonasPerfdata', 'SonasInodes', 'SonasSmbSessions', 'SonasVfsWarnings', 'SonasHealth',
          'SonasReplication', 'OpenvzMemory', 'RpiTemperature']

def test_find_plugins():
    plugins = MetricPlugin.find_plugins()
    assert sorted(p['name'] for p in plugins.values()) == sorted(CHECKS)
    assert plugins['sonasinodes']['module'] == 'nagmetric.plugins.sonas_inodes'
    assert plugins['sonasinodes']['desc'] == 'Inodes usage of a SONAS fileset'
    assert MetricPlugin.find_plugins_import_errors() == []

def test_abstract_classes_are_not_plugins():
    assert MetricPlugin.get_plugin_class('sonasplugin') is None
    assert MetricPlugin.get_plugin_class('nagmetric.plugins.common.SonasPlugin') is None

def test_get_plugin_class():
    assert MetricPlugin.get_plugin_class('RPITEMPERATURE') is RpiTemperature
    assert MetricPlugin.get_plugin_class('nagmetric.plugins.rpi_temp.RpiTemperature') is RpiTemperature
    assert MetricPlugin.get_plugin_class('nagmetric.plugins.nothere.Nothing') is None
    assert isinstance(MetricPlugin.get_instance('rpitemperature'), RpiTemperature)

def test_usage(monkeypatch, capsys):
    monkeypatch.setattr('sys.argv', ['nagmetric'])
    with pytest.raises(SystemExit) as excinfo:
        launch(MetricPlugin)
    assert excinfo.value.code == 3
    out = capsys.readouterr().out
    assert 'You must specify a valid plugin name' in out
    for name in CHECKS:
        assert name in out

def test_unknown_plugin(monkeypatch, capsys):
    monkeypatch.setattr('sys.argv', ['nagmetric', 'nothere'])
    with pytest.raises(SystemExit) as excinfo:
        launch(MetricPlugin)
    assert excinfo.value.code == 3
    assert '"nothere" is not a valid plugin' in capsys.readouterr().out

def test_launch_plugin(monkeypatch, capsys, tmp_path):
    cpu_temp = tmp_path / 'temp'
    cpu_temp.write_text('71000\n')
    monkeypatch.setattr(RpiTemperature, 'cpu_temp_file', str(cpu_temp))
    monkeypatch.setattr(RpiTemperature, 'vcgencmd', '/bin/sh')
    monkeypatch.setattr('nagmetric.plugins.rpi_temp.runsh', lambda cmd: ["temp=48.3'C"])
    monkeypatch.setattr('sys.argv', ['nagmetric', 'rpitemperature'])
    with pytest.raises(SystemExit) as excinfo:
        launch(MetricPlugin)
    assert excinfo.value.code == 2
    assert capsys.readouterr().out.startswith('TEMP CRITICAL - CPU temperature: 71°C')
