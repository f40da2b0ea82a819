# -*- coding: utf-8 -*-
#
# Création : Oct 5th, 2015
#
# @author: Eric Lapouyade
#
"""This module classifies the computed values and aggregates them into one result"""

import functools
from collections import namedtuple
from decimal import Decimal
import nagmetric
from .response import OK, WARNING, CRITICAL, worst
from .perf import PerfData
from .parse import MetricError, ParseError, EntityNotFound
from .compute import to_decimal

__all__ = ['InvalidThreshold', 'Threshold', 'classify', 'MetricKind', 'PERCENTAGE', 'ABSOLUTE_COUNT',
           'RATE', 'TEMPERATURE', 'MEMORY', 'Sample', 'EvaluationResult', 'aggregate',
           'worst_message', 'sum_message', 'all_messages', 'non_ok_messages']

class InvalidThreshold(MetricError):
    """Exception raised when a threshold is not a number

    Args:

        value: the given threshold
        name (str): the threshold name (``warning`` or ``critical``)
    """
    def __init__(self, value, name='threshold'):
        super(InvalidThreshold,self).__init__('Invalid %s threshold : %r is not a number' % (name, value))
        self.value = value
        self.name = name

class Threshold(object):
    """A warning/critical thresholds pair

    Higher is worse : a value is CRITICAL when it is greater or equal to the critical threshold,
    WARNING when it is greater or equal to the warning threshold, OK otherwise.

    Args:

        warning (str, int or Decimal): the WARNING threshold
        critical (str, int or Decimal): the CRITICAL threshold

    Raises:

        InvalidThreshold: one threshold is not a number

    Examples:

        >>> t = Threshold(80, '90')
        >>> t.classify(70), t.classify(80), t.classify('90.5')
        (OK, WARNING, CRITICAL)
    """
    def __init__(self, warning, critical):
        self.warning = self._to_bound(warning, 'warning')
        self.critical = self._to_bound(critical, 'critical')

    @staticmethod
    def _to_bound(value, name):
        try:
            return to_decimal(value)
        except ParseError:
            raise InvalidThreshold(value, name)

    def __repr__(self):
        return 'Threshold(warning=%s, critical=%s)' % (self.warning, self.critical)

    def classify(self, value):
        value = to_decimal(value)
        if value >= self.critical:
            return CRITICAL
        if value >= self.warning:
            return WARNING
        return OK

    def apply(self, sample):
        """Returns a copy of the sample with its level set by this threshold"""
        return sample._replace(level=self.classify(sample.value), threshold=self)

def classify(value, warning, critical):
    """Returns the level of a value for the given thresholds

    Examples:

        >>> classify(85, 80, 90)
        WARNING
    """
    return Threshold(warning, critical).classify(value)

class MetricKind(object):
    """What a sample measures : it gives the unit and the bounds for the performance data"""
    def __init__(self, name, uom='', minval=None, maxval=None):
        self.name = name
        self.uom = uom
        self.minval = minval
        self.maxval = maxval

    def __repr__(self):
        return self.name

PERCENTAGE     = MetricKind('percentage', '%', 0, 100)
ABSOLUTE_COUNT = MetricKind('absolute_count', '', 0)
RATE           = MetricKind('rate', 'B', 0)
TEMPERATURE    = MetricKind('temperature', '', 0)
MEMORY         = MetricKind('memory', 'MB', 0)

class Sample(namedtuple('Sample','entity_id raw_value metric_kind value level message maximum threshold')):
    """One measurement for one entity (a node, a fileset, a sensor...)

    Args:

        entity_id (str): the entity identifier, it is also the performance data label
        raw_value (str): the collected token
        metric_kind (:class:`MetricKind`): what is measured, ``None`` if no performance data
            is wanted for this sample
        value (Decimal): the computed value (Default : ``raw_value`` as a Decimal)
        level (:class:`~nagmetric.ResponseLevel`): the sample level, usually set by
            :meth:`Threshold.apply`
        message (str): the message describing the sample
        maximum: the performance data maximum when it is not fixed by the metric kind
        threshold (:class:`Threshold`): the threshold used for the level
    """
    __slots__ = ()

    def __new__(cls, entity_id, raw_value, metric_kind=None, value=None, level=None, message=None,
                maximum=None, threshold=None):
        if value is None:
            value = to_decimal(raw_value)
        return super(Sample,cls).__new__(cls, entity_id, raw_value, metric_kind, value, level,
                                         message, maximum, threshold)

    def describe(self):
        if self.message is not None:
            return self.message
        uom = self.metric_kind.uom if self.metric_kind else ''
        return '%s : %s%s' % (self.entity_id, self.value, uom)

    def perfdata(self):
        kind = self.metric_kind
        warn = self.threshold.warning if self.threshold else None
        crit = self.threshold.critical if self.threshold else None
        maxval = self.maximum if self.maximum is not None else kind.maxval
        return PerfData(self.entity_id, self.value, kind.uom, warn, crit, kind.minval, maxval)

EvaluationResult = namedtuple('EvaluationResult','level summary perf_items')

def worst_message(samples, level):
    """Summary policy : the message of the first sample having the worst level"""
    for sample in samples:
        if (sample.level or OK) == level:
            return sample.describe()
    return samples[0].describe()

def sum_message(fmt='%(total)s'):
    """Summary policy factory : report the sum of all sample values

    The format gets ``total`` and ``count`` keys.

    Examples:

        >>> policy = sum_message('%(total)s sessions on %(count)s nodes')
    """
    def policy(samples, level):
        total = sum((s.value for s in samples), Decimal(0))
        return fmt % {'total':total, 'count':len(samples)}
    return policy

def all_messages(sep=' - '):
    """Summary policy factory : every sample message, in input order"""
    def policy(samples, level):
        return sep.join(s.describe() for s in samples)
    return policy

def non_ok_messages(sep=' +++ ', ok_msg='All OK', tag=None):
    """Summary policy factory : the messages of the samples that are not OK, or ``ok_msg``

    If ``tag`` is given and several samples are not OK, each message is preceded by
    ``<tag> <sample level> - `` : the level of every message is still readable after the
    response header.
    """
    def policy(samples, level):
        nok = [ s for s in samples if (s.level or OK) != OK ]
        if not nok:
            return ok_msg
        if tag and len(nok) > 1:
            return sep.join('%s %s - %s' % (tag, s.level, s.describe()) for s in nok)
        return sep.join(s.describe() for s in nok)
    return policy

def aggregate(samples, threshold=None, summary=worst_message, entity=None, kind='Entity'):
    """Folds samples into one evaluation result

    Args:

        samples (iterable): the :class:`Sample` objects, in the order they must be reported
        threshold (:class:`Threshold`): if given, it is applied to the samples having no level yet
        summary (callable): the summary policy : ``summary(samples, level)`` returns the message
        entity (str): the looked-for entity, used in the error when there is no sample
        kind (str): the entity kind, used in the error when there is no sample

    Returns:

        :class:`EvaluationResult` : the worst level, the summary message and one
        :class:`~nagmetric.PerfData` per sample having a metric kind

    Raises:

        EntityNotFound: when there is no sample at all

    Examples:

        >>> samples = [ Sample('node%s' % i, v, PERCENTAGE) for i,v in enumerate(['12','85','40'],1) ]
        >>> result = aggregate(samples, Threshold(80,90))
        >>> result.level, result.summary
        (WARNING, 'node2 : 85%')
        >>> [ str(p) for p in result.perf_items ]
        ['node1=12%;80;90;0;100', 'node2=85%;80;90;0;100', 'node3=40%;80;90;0;100']
    """
    samples = list(samples)
    if not samples:
        raise EntityNotFound(entity if entity is not None else 'any', kind)
    if threshold is not None:
        samples = [ s if s.level is not None else threshold.apply(s) for s in samples ]
    level = worst(s.level or OK for s in samples)
    result = EvaluationResult(level,
                              summary(samples, level),
                              [ s.perfdata() for s in samples if s.metric_kind is not None ])
    nagmetric.logger.debug('evaluate -> %s sample(s) : %s', len(samples), result.level)
    return result
