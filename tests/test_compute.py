# -*- coding: utf-8 -*-
#
# Création : Jan 7th, 2016
#
# @author: Eric Lapouyade
#

import datetime
import pytest
from decimal import Decimal
from nagmetric import *

def test_to_decimal():
    assert to_decimal('12.50') == Decimal('12.50')
    assert to_decimal(3) == Decimal(3)
    assert to_decimal(Decimal('1.1')) == Decimal('1.1')
    assert to_decimal(0.1) == Decimal('0.1')

@pytest.mark.parametrize('value', ['n/a', '', 'NaN', 'inf', True, None])
def test_to_decimal_rejects(value):
    with pytest.raises(ParseError):
        to_decimal(value)

def test_utilization_from_idle():
    assert utilization_from_idle(100) == 0
    assert utilization_from_idle(0) == 100
    assert utilization_from_idle('30') == 70
    assert utilization_from_idle('97.25') == Decimal('2.75')

def test_ratio_percent():
    assert ratio_percent(50, 200) == 25
    assert ratio_percent('1', '3', 2) == Decimal('33.33')
    assert ratio_percent(2, 3, 0) == 66
    assert ratio_percent(850, 1000, 0) == 85

def test_ratio_percent_zero_maximum():
    with pytest.raises(DivisionByZero) as excinfo:
        ratio_percent(5, 0)
    assert excinfo.value.numerator == 5
    assert isinstance(excinfo.value, MetricError)

def test_pages_to_mb():
    assert pages_to_mb(262144) == Decimal('1048.576')
    assert str(pages_to_mb('53126')) == '212.504'
    assert str(pages_to_mb(1)) == '0.004'
    assert str(pages_to_mb(2)) == '0.008'
    assert str(pages_to_mb(3)) == '0.012'

def test_millidegrees_to_degrees():
    assert millidegrees_to_degrees('48312') == Decimal('48.312')
    assert millidegrees_to_degrees('48050') == Decimal('48.05')
    assert millidegrees_to_degrees(48000) == 48

def test_truncate():
    assert str(truncate(Decimal('85.96'))) == '85'
    assert str(truncate('12.3456', 3)) == '12.345'

def test_elapsed_minutes():
    assert elapsed_minutes(1000, 1299) == 4
    assert elapsed_minutes(1000, 1000) == 0
    assert elapsed_minutes(2000, 1000) == 0
    start = datetime.datetime(2016, 1, 7, 12, 0, 30)
    assert elapsed_minutes(start, datetime.datetime(2016, 1, 7, 12, 5, 29)) == 4

def test_minute_stamps():
    now = datetime.datetime(2016, 1, 7, 12, 5, 10)
    assert minute_stamps(now - datetime.timedelta(minutes=3), now) == [
        '2016-01-07T12:03', '2016-01-07T12:04', '2016-01-07T12:05']
    assert minute_stamps(now, now) == ['2016-01-07T12:05']

def test_count_by_minute():
    now = datetime.datetime(2016, 1, 7, 12, 5, 10)
    lines = ['2016-01-07T12:04:01 node1 WARNING: VFS call took unexpectedly long',
             '2016-01-07T12:04:59 node2 WARNING: VFS call took unexpectedly long',
             '2016-01-07T12:05:02 node1 something else',
             '2016-01-07T11:59:00 node1 WARNING: VFS call took unexpectedly long']
    assert count_by_minute(lines, now - datetime.timedelta(minutes=2), now) == [
        ('2016-01-07T12:04', 2), ('2016-01-07T12:05', 1)]
    assert count_by_minute('\n'.join(lines), now - datetime.timedelta(minutes=2), now,
                           pattern='WARNING: VFS') == [('2016-01-07T12:04', 2), ('2016-01-07T12:05', 0)]

def test_window_count_scenario():
    window = WindowCount.fold([0, 2, 15, 3, 0], Threshold(10, 100))
    assert window.level == WARNING
    assert window.total == 20
    assert window.buckets == 5
    assert window.warning_sum == 50
    assert window.critical_sum == 500

def test_window_count_is_immutable():
    start = WindowCount.start(Threshold(10, 100))
    after = start.add(150)
    assert start.total == 0 and start.level == OK
    assert after.total == 150 and after.level == CRITICAL

def test_window_count_never_downgrades():
    window = WindowCount.fold([100, 0, 0], Threshold(10, 100))
    assert window.level == CRITICAL
