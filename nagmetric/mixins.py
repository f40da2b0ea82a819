# -*- coding: utf-8 -*-
#
# Creation : 2016-03-01
#
# author: Eric Lapouyade
#
"""This module contains mixins to extended nagmetric with some additional features"""

from .evaluate import Threshold, aggregate, worst_message

__all__ = ['ThresholdMixin']

class ThresholdMixin(object):
    """ Threshold response helper Mixin

    This mixin adds the ``-w`` and ``-c`` command line options, then helps to classify samples
    against these thresholds. It has be to be declared in the parent classes of a plugin class,
    before ActivePlugin class. :meth:`threshold_response` has to be used into
    :meth:`nagmetric.ActivePlugin.build_response` method.

    Example::

        class SonasInodes(ThresholdMixin, SonasPlugin):
            default_warning = 80
            default_critical = 90
            ...
            def build_response(self,data):
                self.threshold_response([ Sample('inodes', data.util, PERCENTAGE) ])
    """

    default_warning = 80
    """WARNING threshold when ``-w`` is not given"""

    default_critical = 90
    """CRITICAL threshold when ``-c`` is not given"""

    threshold = None
    """The :class:`~nagmetric.Threshold` object, available once options are checked"""

    def add_cmd_options(self):
        super(ThresholdMixin,self).add_cmd_options()
        self._cmd_parser.add_option('-w', action='store', dest='warning', metavar='WARN',
                                   help='WARNING threshold (Default : %s)' % self.get_default_warning())
        self._cmd_parser.add_option('-c', action='store', dest='critical', metavar='CRIT',
                                   help='CRITICAL threshold (Default : %s)' % self.get_default_critical())

    def get_default_warning(self):
        """Returns the WARNING threshold to use when ``-w`` is not given

        Override it when the default depends on another option.
        """
        return self.default_warning

    def get_default_critical(self):
        """Returns the CRITICAL threshold to use when ``-c`` is not given"""
        return self.default_critical

    def get_threshold(self):
        """Builds the Threshold object from the command line or the defaults

        Raises:

            InvalidThreshold: a threshold is not a number
        """
        warning = self.options.warning
        critical = self.options.critical
        return Threshold(self.get_default_warning() if warning is None else warning,
                         self.get_default_critical() if critical is None else critical)

    def check_options(self):
        self.threshold = self.get_threshold()
        self.debug('response -> %s', self.threshold)
        super(ThresholdMixin,self).check_options()

    def threshold_response(self, samples, summary=worst_message, entity=None, kind='Entity'):
        """Classify samples against the thresholds and add the result into the response

        Args:

            samples (iterable): the :class:`~nagmetric.Sample` objects
            summary (callable): the summary policy (see :func:`~nagmetric.aggregate`)
            entity (str): the looked-for entity, used in the error when there is no sample
            kind (str): the entity kind, used in the error when there is no sample

        Returns:

            :class:`~nagmetric.EvaluationResult` : the result that has been added
        """
        if self.threshold is None:
            self.threshold = self.get_threshold()
        result = aggregate(samples, self.threshold, summary, entity, kind)
        self.debug('response -> %s : %s', result.level, result.summary)
        self.response.add_result(result)
        return result
