# -*- coding: utf-8 -*-
#
# Création : Oct 5th, 2015
#
# @author: Eric Lapouyade
#
"""This module computes the reported values from the raw collected values

All arithmetic is done with :class:`decimal.Decimal` so that percentages and ratios are
exactly the ones a shell ``bc`` would have given.
"""

import re
import time
import datetime
import functools
from collections import namedtuple
from decimal import Decimal, InvalidOperation, ROUND_DOWN
import nagmetric
from .parse import MetricError, ParseError
from .response import OK

__all__ = ['DivisionByZero', 'PAGES_PER_MB', 'MINUTE_STAMP_FORMAT', 'to_decimal', 'truncate',
           'utilization_from_idle', 'ratio_percent', 'pages_to_mb', 'millidegrees_to_degrees',
           'elapsed_minutes', 'minute_stamps', 'count_by_minute', 'WindowCount']

PAGES_PER_MB = 250
MINUTE_STAMP_FORMAT = '%Y-%m-%dT%H:%M'

class DivisionByZero(MetricError):
    """Exception raised when a ratio is asked with a zero maximum

    Args:

        numerator: the value that was to be divided
    """
    def __init__(self, numerator):
        super(DivisionByZero,self).__init__('Cannot compute a ratio of %s over a zero maximum' % numerator)
        self.numerator = numerator

def to_decimal(value):
    """Converts a collected token into a Decimal

    Args:

        value (str, int, float or Decimal): the value to convert

    Returns:

        Decimal : the converted value

    Raises:

        ParseError: the value is not a finite number

    Examples:

        >>> to_decimal(' 12.50 ')
        Decimal('12.50')
        >>> to_decimal('n/a')
        Traceback (most recent call last):
        ...
        ParseError: Not a number : 'n/a'
    """
    if isinstance(value, Decimal):
        return value
    if isinstance(value, bool):
        raise ParseError('Not a number', repr(value))
    if isinstance(value, int):
        return Decimal(value)
    if isinstance(value, float):
        value = repr(value)
    try:
        dec = Decimal(str(value).strip())
    except InvalidOperation:
        raise ParseError('Not a number', repr(value))
    if not dec.is_finite():
        raise ParseError('Not a number', repr(value))
    return dec

def truncate(value, places=0):
    """Truncates (rounds toward zero) a decimal value to a given number of decimal places

    Examples:

        >>> truncate(Decimal('85.96'))
        Decimal('85')
        >>> truncate(Decimal('12.3456'),3)
        Decimal('12.345')
    """
    return to_decimal(value).quantize(Decimal(1).scaleb(-places), rounding=ROUND_DOWN)

def utilization_from_idle(idle):
    """Returns ``100 - idle``

    Examples:

        >>> utilization_from_idle('30')
        Decimal('70')
        >>> utilization_from_idle('100')
        Decimal('0')
    """
    return 100 - to_decimal(idle)

def ratio_percent(used, maximum, places=None):
    """Returns ``100 * used / maximum``

    Args:

        used (str, int or Decimal): the used quantity
        maximum (str, int or Decimal): the maximum quantity
        places (int): if not None, the result is truncated to this number of decimals

    Raises:

        DivisionByZero: if ``maximum`` is zero

    Examples:

        >>> ratio_percent(50,200)
        Decimal('25')
        >>> ratio_percent(2,3,0)
        Decimal('66')
    """
    used = to_decimal(used)
    maximum = to_decimal(maximum)
    if maximum == 0:
        raise DivisionByZero(used)
    ratio = 100 * used / maximum
    if places is not None:
        ratio = truncate(ratio, places)
    return ratio

def pages_to_mb(pages):
    """Converts memory pages into megabytes, with 3 decimals

    Examples:

        >>> pages_to_mb(262144)
        Decimal('1048.576')
    """
    return truncate(to_decimal(pages) / PAGES_PER_MB, 3)

def millidegrees_to_degrees(value):
    """Converts millidegrees into degrees

    Examples:

        >>> millidegrees_to_degrees('48312')
        Decimal('48.312')
        >>> millidegrees_to_degrees('48050')
        Decimal('48.05')
    """
    return to_decimal(value) / 1000

def _to_datetime(value):
    if isinstance(value, datetime.datetime):
        return value
    return datetime.datetime.fromtimestamp(float(to_decimal(value)))

def elapsed_minutes(start, now=None):
    """Returns the number of whole minutes between two timestamps

    Args:

        start (int, str or datetime): the start time, as an epoch or a datetime
        now (int, str or datetime): the end time (Default : current time)

    Returns:

        int : the elapsed minutes, never negative

    Examples:

        >>> elapsed_minutes(1000, 1299)
        4
    """
    if now is None:
        now = time.time()
    if isinstance(start, datetime.datetime) or isinstance(now, datetime.datetime):
        seconds = (_to_datetime(now) - _to_datetime(start)).total_seconds()
    else:
        seconds = to_decimal(now) - to_decimal(start)
    return max(int(seconds // 60), 0)

def minute_stamps(start, now=None):
    """Returns the ``YYYY-MM-DDTHH:MM`` stamps of every elapsed minute, oldest first

    There is always at least one stamp : the current minute.
    """
    if now is None:
        now = time.time()
    minutes = max(elapsed_minutes(start, now), 1)
    now = _to_datetime(now)
    return [ (now - datetime.timedelta(minutes=i)).strftime(MINUTE_STAMP_FORMAT)
             for i in range(minutes - 1, -1, -1) ]

def count_by_minute(lines, start, now=None, pattern=None):
    """Counts the lines of each elapsed minute

    A line belongs to a minute when it contains the minute stamp (``YYYY-MM-DDTHH:MM``).

    Args:

        lines (str or list): the lines to count
        start (int, str or datetime): the window start time
        now (int, str or datetime): the window end time (Default : current time)
        pattern (str or regex): if given, only lines matching the pattern are counted

    Returns:

        list : ``(stamp, count)`` tuples, oldest minute first
    """
    if isinstance(lines, str):
        lines = lines.splitlines()
    if isinstance(pattern, str):
        pattern = re.compile(pattern)
    if pattern is not None:
        lines = [ line for line in lines if pattern.search(line) ]
    buckets = [ (stamp, sum(1 for line in lines if stamp in line))
                for stamp in minute_stamps(start, now) ]
    nagmetric.logger.debug('compute -> minute buckets : %s', buckets)
    return buckets

class WindowCount(namedtuple('WindowCount','threshold buckets total warning_sum critical_sum level')):
    """Running totals of a per-minute count

    Each bucket count is classified against the per-minute threshold, while the total and the
    thresholds sums grow with each bucket. A WindowCount is never modified : :meth:`add` returns
    a new one.

    Examples:

        >>> window = WindowCount.fold([0,2,15,3,0], Threshold(10,100))
        >>> window.total, window.level, window.warning_sum
        (20, WARNING, Decimal('50'))
    """
    __slots__ = ()

    @classmethod
    def start(cls, threshold):
        return cls(threshold, 0, 0, Decimal(0), Decimal(0), OK)

    @classmethod
    def fold(cls, counts, threshold):
        return functools.reduce(lambda window, count: window.add(count), counts, cls.start(threshold))

    def add(self, count):
        return self._replace(buckets = self.buckets + 1,
                             total = self.total + count,
                             warning_sum = self.warning_sum + self.threshold.warning,
                             critical_sum = self.critical_sum + self.threshold.critical,
                             level = max(self.level, self.threshold.classify(count)))
