# -*- coding: utf-8 -*-
#
# Création : July 8th, 2015
#
# @author: Eric Lapouyade
#

import sys
import functools
import nagmetric

__all__ = [ 'ResponseLevel', 'PluginResponse', 'OK', 'WARNING', 'CRITICAL', 'UNKNOWN', 'worst' ]

@functools.total_ordering
class ResponseLevel(object):
    """Object to use when exiting a nagmetric plugin

    Instead of using numeric code that may be hard to memorize, predefined objects has be created :

    =====================   =========
    Response level object   exit code
    =====================   =========
    OK                      0
    WARNING                 1
    CRITICAL                2
    UNKNOWN                 3
    =====================   =========

    Levels are ordered by their exit code, so ``max()`` gives the worst one.
    To exit a plugin with the correct exit code number, one have just to call the :meth:`exit` method
    of the wanted ResponseLevel object
    """
    def __init__(self, name, exit_code):
        self.name = name
        self.exit_code = exit_code

    def __repr__(self):
        return self.name

    def __str__(self):
        return self.name

    def __int__(self):
        return self.exit_code

    def __eq__(self, other):
        if not isinstance(other, ResponseLevel):
            return NotImplemented
        return self.exit_code == other.exit_code

    def __lt__(self, other):
        if not isinstance(other, ResponseLevel):
            return NotImplemented
        return self.exit_code < other.exit_code

    def __hash__(self):
        return hash(self.exit_code)

    def info(self):
        """Get name and exit code for a Response Level

        Examples:

            >>> level = CRITICAL
            >>> level.info()
            'CRITICAL (exit_code=2)'
            >>> level.name
            'CRITICAL'
            >>> level.exit_code
            2
        """
        return '%s (exit_code=%s)' % (self.name,self.exit_code)

    def exit(self):
        """This is the official way to exit a nagmetric plugin

        Example:

            >>> level = CRITICAL
            >>> level.exit()  #doctest: +SKIP
                SystemExit: 2
        """
        sys.exit(self.exit_code)

    @classmethod
    def from_name(cls, name):
        """Returns the level object having the given name (case insensitive)

        Examples:

            >>> ResponseLevel.from_name('warning')
            WARNING
        """
        try:
            return LEVELS[name.strip().upper()]
        except KeyError:
            raise ValueError('Unknown response level : %r' % name)

OK       = ResponseLevel('OK',0)
WARNING  = ResponseLevel('WARNING',1)
CRITICAL = ResponseLevel('CRITICAL',2)
UNKNOWN  = ResponseLevel('UNKNOWN',3)

LEVELS = dict((l.name,l) for l in (OK, WARNING, CRITICAL, UNKNOWN))

def worst(levels, start=OK):
    """Returns the worst level of a sequence of levels

    The result never goes below ``start``, an empty sequence gives ``start`` back.

    Examples:

        >>> worst([OK, WARNING, OK])
        WARNING
        >>> worst([OK, CRITICAL, WARNING])
        CRITICAL
        >>> worst([])
        OK
    """
    return functools.reduce(max, levels, start)

class PluginResponse(object):
    """Response to return to Nagios for a nagmetric plugin

    Args:

        label (str): The short metric tag displayed before the level name
            (``CPU``, ``INODES``, ...). It may be empty.
        default_level (:class:`ResponseLevel`): The level to return when no level messages
            has been added to the response (for exemple when no error has be found).
            usually it is set to ``OK`` or ``UNKNOWN``

    A nagmetric response is a single line made of :

        * The label and the response level
        * A synopsis (The message that is directly visible onto Nagios interface)
        * Some performance Data, after a pipe

    PluginResponse object takes care to calculate the right ResponseLevel to return to Nagios :
    it will depend on the Levels messages you will add to the plugin response. For example,
    if you add one ``OK`` message and one ``WARNING`` message, the response level will be
    ``WARNING``. if you add again one ``CRITICAL`` message then an ``OK`` message , the response
    level will be ``CRITICAL``. The level never goes down.

    Examples:

        >>> r = PluginResponse('CPU',OK)
        >>> print(r)
        CPU OK - OK
    """
    def __init__(self,label='',default_level=OK):
        self.label = label
        self.level = None
        self.default_level = default_level
        self.synopsis = None
        self.level_msgs = { OK:[], WARNING:[], CRITICAL:[], UNKNOWN:[] }
        self.perf_items = []

    def set_level(self, level):
        """Manually set the response level

        The level is only changed if the new one is worse than the current one.

        Args:

            level (:class:`ResponseLevel`): OK, WARNING, CRITICAL or UNKNOWN

        Examples:

            >>> r = PluginResponse('CPU',OK)
            >>> print(r.level)
            None
            >>> r.set_level(WARNING)
            >>> r.set_level(OK)
            >>> print(r.level)
            WARNING
        """
        if not isinstance(level,ResponseLevel):
            raise TypeError('A response level must be an instance of ResponseLevel, Found level=%s (%s).' % (level,type(level)))
        if self.level is None or level > self.level:
            self.level = level

    def get_current_level(self):
        """get current level

        If no level has not been set yet, it will return the default_level.
        Use this method if you want to know what ResponseLevel will be sent.

        Returns:

            :class:`ResponseLevel` : the response level to be sent

        Examples:

            >>> r = PluginResponse('CPU',OK)
            >>> print(r.get_current_level())
            OK
            >>> r.set_level(WARNING)
            >>> print(r.get_current_level())
            WARNING
        """
        return self.default_level if self.level is None else self.level

    def _reformat_msg(self,msg,*args,**kwargs):
        if isinstance(msg,(list,tuple)):
            msg = ' '.join(msg)
        elif not isinstance(msg,str):
            msg = str(msg)
        if args:
            msg = msg % args
        if kwargs:
            msg = msg.format(**kwargs)
        return msg

    def add(self,level,msg,*args,**kwargs):
        r"""Add a message in levels messages section and sets the response level at the same time

        Use this method each time your plugin detects a WARNING or a CRITICAL error. You can also
        use this method to add a message saying there is an UNKNOWN or OK state somewhere.
        This method updates the calculated ResponseLevel.

        Args:

            level (ResponseLevel): the message level (Will affect the final response level)
            msg (str): the message to add in levels messages section.
            args (list): if additionnal arguments are given,
                ``msg`` will be formatted with ``%`` (old-style python string formatting)
            kwargs (dict): if named arguments are given,
                ``msg`` will be formatted with :meth:`str.format`

        Examples:

            >>> r = PluginResponse('FILE',OK)
            >>> r.add(CRITICAL,'[%s:%s] %s','NAS','mgmt001st001','Disk failure')
            >>> r.add(WARNING,'[{ctx}] fan degraded',ctx='NAS:int001st001')
            >>> print(r)
            FILE CRITICAL - [NAS:mgmt001st001] Disk failure +++ [NAS:int001st001] fan degraded
        """
        if isinstance(level,ResponseLevel):
            self.level_msgs[level].append(self._reformat_msg(msg,*args,**kwargs))
            self.set_level(level)
        else:
            raise TypeError('A response level must be an instance of ResponseLevel, Found level=%s (%s).' % (level,type(level)))

    def add_list(self,level,msg_list,*args,**kwargs):
        """Add several level messages having a same level

        Args:

            level (ResponseLevel): the message level (Will affect the final response level)
            msg_list (list): messages to add, empty or ``None`` items are ignored.
            args, kwargs : used to format each message
        """
        for msg in msg_list:
            if msg:
                self.add(level, msg,*args,**kwargs)

    def add_many(self,lst,*args,**kwargs):
        """Add several level messages NOT having a same level

        Args:

            lst (list): A list of ``(level,msg)`` tuples
            args, kwargs : used to format each message

        Examples:

            >>> r = PluginResponse('FILE',OK)
            >>> r.add_many([(WARNING,'fan 1 degraded'),(OK,'fan 2 ok')])
            >>> print(r.get_current_level())
            WARNING
        """
        for i in lst:
            self.add(*i,**kwargs)

    def add_if(self, test, level, msg=None, *args,**kwargs):
        """Test than add a message in levels messages section and sets the response level at the same time

        If ``test`` is truthy, the message is added. If ``msg`` is ``None``, ``test`` itself is
        used as the message.

        Examples:

            >>> r = PluginResponse('REPLICATION',OK)
            >>> r.add_if(False, CRITICAL, 'replication failed')
            >>> r.add_if('replication stopped', WARNING)
            >>> print(r)
            REPLICATION WARNING - replication stopped
        """
        if test:
            self.add(level, msg if msg is not None else test, *args,**kwargs)

    def add_perf_data(self,data):
        r"""Add performance object into the response

        Args:

            data (str or :class:`~nagmetric.PerfData`): the perf data string or PerfData object to add to
                the response. Have a look to
                `Performance data string syntax <http://nagios-plugins.org/doc/guidelines.html#AEN200>`_.

        Examples:

            >>> r = PluginResponse('CPU',OK)
            >>> r.add(OK,'node1 utilization 12%')
            >>> r.add_perf_data(PerfData('node1','12','%','80','90','0','100'))
            >>> r.add_perf_data('node2=7%;80;90;0;100')
            >>> print(r)
            CPU OK - node1 utilization 12% | node1=12%;80;90;0;100 node2=7%;80;90;0;100
        """
        if not isinstance(data,str):
            data = str(data)
        self.perf_items.append(data)

    def add_result(self, result):
        """Add an evaluation result into the response

        The result level and summary are added as a level message, then its performance data items
        are appended in the same order.

        Args:

            result (:class:`~nagmetric.EvaluationResult`): the aggregated evaluation
        """
        self.add(result.level, result.summary)
        for perf in result.perf_items:
            self.add_perf_data(perf)

    def set_synopsis(self,msg,*args,**kwargs):
        r"""Sets the response synopsis.

        By default, if no synopsis has been set manually, the response synopsis will be built
        by :meth:`get_default_synopsis`. If something else is wanted, one can define a custom
        synopsis with this method.

        Args:

            msg (str): the synopsis.
            args (list): if additional arguments are given,
                ``msg`` will be formatted with ``%`` (old-style python string formatting)
            kwargs (dict): if named arguments are give,
                ``msg`` will be formatted with :meth:`str.format`

        Examples:

            >>> r = PluginResponse('VFS',OK)
            >>> r.add(CRITICAL,'This is critical !')
            >>> r.set_synopsis('Mayday, Mayday, Mayday')
            >>> print(r)
            VFS CRITICAL - Mayday, Mayday, Mayday
        """
        self.synopsis = self._reformat_msg(msg,*args,**kwargs)

    def get_default_synopsis(self):
        """Returns the default synopsis

        This method is called if no synopsis has been set manually. The synopsis will be :

            * The CRITICAL, WARNING and UNKNOWN messages joined by `` +++ `` if there is any
            * Otherwise the OK messages joined the same way
            * Otherwise the level name

        If you want to have a different default synopsis, you can subclass the :class:`PluginResponse`
        class and redefine this method.

        Examples:
            >>> r = PluginResponse('FILE',OK)
            >>> r.add(OK,'All sensors OK')
            >>> print(r.get_default_synopsis())
            All sensors OK
            >>> r.add(WARNING,'This is just a warning.')
            >>> r.add(CRITICAL,'This is critical !')
            >>> print(r.get_default_synopsis())
            This is critical ! +++ This is just a warning.
        """
        nok_msgs = self.level_msgs[CRITICAL] + self.level_msgs[WARNING] + self.level_msgs[UNKNOWN]
        if nok_msgs:
            return ' +++ '.join(nok_msgs)
        if self.level_msgs[OK]:
            return ' +++ '.join(self.level_msgs[OK])
        return str(self.get_current_level())

    def escape_msg(self,msg):
        """Escapes forbidden chars in messages

        Nagios does not accept the pipe symbol in messages because it is a separator for performance
        data. This method escapes or replace such forbidden chars.
        Default behaviour is to replace the pipe ``|`` by an exclamation mark ``!`` and to put
        every line on a single one.

        Args:

            msg(str): The message to escape

        Returns

            str : The escaped message
        """
        return ' '.join(msg.replace('|','!').split('\n'))

    def get_output(self):
        r"""Renders the whole response following the Nagios syntax

        The output is ``<LABEL> <LEVEL> - <synopsis> | <perfdata>``, the perfdata part being
        omitted when no performance data has been added.

        Returns:

            str: The response text output following the Nagios syntax

        Example:

            >>> r = PluginResponse('INODES',OK)
            >>> r.add(WARNING,'85 % inodes used (850 out of 1000)')
            >>> r.add_perf_data('inodes=85%;80;90;0;100')
            >>> print(r.get_output())
            INODES WARNING - 85 % inodes used (850 out of 1000) | inodes=85%;80;90;0;100
        """
        synopsis = self.escape_msg(self.synopsis or self.get_default_synopsis())
        level = self.get_current_level()
        if self.label:
            out = '%s %s - %s' % (self.label, level, synopsis)
        else:
            out = '%s - %s' % (level, synopsis)
        if self.perf_items:
            out += ' | ' + ' '.join(self.perf_items)
        return out

    def __str__(self):
        return self.get_output()

    def send(self, level=None, synopsis='', msg=''):
        r"""Send the response to Nagios

        This method is automatically called by :meth:`nagmetric.ActivePlugin.run` method and
        follow these steps :

            * if defined, force a level, a synopsis or add a last message
            * render the response string following the Nagios syntax
            * display the string on stdout
            * exit the plugin with the exit code corresponding to the response level.

        Args:

            level(:class:`ResponseLevel`): force a level (optional),
            synopsis(str): force a synopsis (optional),
            msg(str): add a last level message (optional),
        """
        if isinstance(level,ResponseLevel):
            self.set_level(level)
        if self.level is None:
            self.level = self.default_level or UNKNOWN
        if synopsis:
            self.synopsis = synopsis
        if msg:
            self.add(self.level,msg)

        out = self.get_output()
        nagmetric.logger.info('Plugin output : %s', out)

        print(out)
        sys.stdout.flush()

        nagmetric.logger.info('Exiting plugin with response level : %s', self.level.info())
        self.level.exit()
