# -*- coding: utf-8 -*-
#
# Création : July 8th, 2015
#
# @author: Eric Lapouyade
#

import os
import sys
import datetime
import logging
import logging.handlers
import pprint
import traceback
from optparse import OptionParser, OptionGroup
import textops
from textops import DictExt
import nagmetric
from .host import Host
from .response import PluginResponse, OK, UNKNOWN
from .parse import MetricError
from .collect import CollectError

pp = pprint.PrettyPrinter(indent=4)

__all__ = [ 'Plugin', 'ActivePlugin' ]

class Plugin(object):
    """Plugin base class

    This is an abstract class used with :class:`~nagmetric.ActivePlugin`, it brings :

        * plugin search in a directory of python files
        * plugin instance generation
        * plugin logging management
        * plugin command line options management
    """

    plugin_type = 'plugin'
    """For plugin search, it will search for classes having this attribute in all python files"""

    plugins_basedir = '/path/to/your/plugins/python/modules'
    """For plugin search, it will search recursively from this directory """

    plugins_basemodule = 'plugins.python.'
    """For plugin search, the module prefix to add to have the module accessible from python path.
    Do not forget the ending dot. You can set empty if your plugin modules are in python path.
    """

    logger_format = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    """The logging format to use """

    logger_logsize = 1000000
    """Log file max size """

    logger_logbackup = 5
    """Log file backup file number"""

    @classmethod
    def get_instance(cls, plugin_name):
        """Generate a plugin instance from its name string

        This method is useful when you only know at execution time the name of
        the plugin to instantiate.

        You can get an instance by giving only the class name (case insensitive)::

            plugin = MetricPlugin.get_instance('sonasinodes')

        Or with the full doted path (case sensitive this time)::

            plugin = MetricPlugin.get_instance('nagmetric.plugins.sonas_inodes.SonasInodes')

        Returns:

            A plugin instance or None if not found
        """
        plugin_class = cls.get_plugin_class(plugin_name)
        if not plugin_class:
            return None
        return plugin_class()

    @classmethod
    def get_plugin(cls,plugin_name):
        """find a plugin and return its module name and its class name

        Args:

            plugin_name(str): the plugin name to find (case insensitive)

        Returns:

            str, str: A tuple containing the plugin's module name and plugin's class name
        """
        plugin_name = plugin_name.lower()
        plugins = cls.find_plugins()
        if plugin_name in plugins:
            return plugins[plugin_name]['module'],plugins[plugin_name]['name']
        return None,None

    @classmethod
    def get_plugin_class(cls,plugin_name):
        """get the plugin class from its name

        If the dotted notation is used, the string is case sensitive and the corresponding module
        is loaded at once, otherwise the plugin name is case insensitive and a recursive file search
        is done from the directory ``plugin_class.plugins_basedir``

        Args:

            plugin_name(str): the plugin name to find.

        Returns:

            class object or None: plugin's class object or None if not found.
        """
        module_and_class = plugin_name.rsplit('.',1)
        if len(module_and_class) == 1:
            module_name,class_name = cls.get_plugin(module_and_class[0])
        else:
            module_name,class_name = module_and_class
        if not module_name:
            return None
        try:
            module = __import__(module_name, fromlist=[''])
        except ImportError as e:
            cls.debug('Cannot import %s : %s', module_name, e)
            return None
        plugin_class = getattr(module,class_name,None)
        if getattr(plugin_class,'plugin_type',None) == cls.plugin_type and not plugin_class.__dict__.get('abstract',False):
            return plugin_class
        return None

    @classmethod
    def _iter_plugin_modules(cls):
        basedir = os.path.normpath(cls.plugins_basedir)
        for root,dirs,files in os.walk(basedir):
            if '/.' not in root and '__init__.py' in files:
                for f in sorted(files):
                    if f.endswith('.py') and not f.startswith('__'):
                        path = os.path.join(root,f)
                        yield path[len(basedir)+1:-3].replace(os.sep,'.')

    @classmethod
    def find_plugins(cls):
        """Recursively find all plugin classes for all python files present in a directory.

        It finds all python files inside ``YourPluginsBaseClass.plugins_basedir`` then look for
        all classes having the attribute ``plugin_type`` with the value
        ``YourPluginsBaseClass.plugin_type``

        It returns a dictionary where keys are plugin class name in lower case and the values
        are a dictionary containing :

            =======  ==============================================
            Keys     Values
            =======  ==============================================
            name     the class name (case sensitive)
            module   the plugin module name with a full dotted path
            path     the module file path
            desc     the plugin description (first docstring line)
            =======  ==============================================

        Modules that cannot be imported are skipped, see :meth:`find_plugins_import_errors`.
        """
        plugins = {}
        for module_name in cls._iter_plugin_modules():
            try:
                module = __import__(cls.plugins_basemodule + module_name,fromlist=[''])
            except Exception as e:
                cls.debug('Cannot import %s : %s', module_name, e)
                continue
            for name,member in module.__dict__.items():
                if isinstance(member,type) and getattr(member,'plugin_type',None) == cls.plugin_type \
                        and not member.__dict__.get('abstract',False):
                    plugins[member.__name__.lower()] = {
                        'class' : member,
                        'name'  : member.__name__,
                        'module': cls.plugins_basemodule + module_name,
                        'path'  : os.sep.join(module_name.split('.'))+'.py',
                        'desc'  : member.get_plugin_desc().splitlines()[0]
                    }
        return plugins

    @classmethod
    def find_plugins_import_errors(cls):
        """Find all import errors all python files present in a directory.

        It finds all python files inside ``YourPluginsBaseClass.plugins_basedir`` and try to import
        them. If an error occurs, the file path and linked exception is memorized.

        It returns a list of tuples containing the file path and the exception.
        """
        plugin_files = []
        for module_name in cls._iter_plugin_modules():
            try:
                __import__(cls.plugins_basemodule + module_name,fromlist=[''])
            except Exception as e:
                plugin_files.append((os.sep.join(module_name.split('.'))+'.py',e))
        return plugin_files

    def get_cmd_usage(self):
        """Returns the command line usage """
        return self.usage

    @classmethod
    def get_plugin_desc(cls):
        """Returns the plugin description. By default return the class docstring. """
        return (cls.__doc__ or '').strip() or 'no description.'

    def init_cmd_options(self):
        """Create OptionParser instance and add some basic options

        This is automatically called when the plugin is run.
        Avoid to override this method, prefer to customize :meth:`add_cmd_options`
        """
        self._cmd_parser = OptionParser(usage = self.get_cmd_usage())
        self._cmd_parser.add_option('-v', action='store_true', dest='verbose',
                                   default=False, help='Verbose : display informational messages')
        self._cmd_parser.add_option('-d', action='store_true', dest='debug',
                                   default=False, help='Debug : display debug messages')
        self._cmd_parser.add_option('--logfile', action='store', dest='logfile', metavar="FILE",
                                   help='Redirect logs into a file')
        self._cmd_parser.add_option('-i', action='store_true', dest='show_description',
                                   default=False, help='Display plugin description')

    def add_cmd_options(self):
        """This method can be customized to add some OptionParser options for the current plugin

        Example::

            self._cmd_parser.add_option('-F', action='store', dest='filesystem',
                                       help='Filesystem name')

        """
        pass

    def get_logger_format(self):
        """gets logger format, by default the one defined in ``logger_format`` attribute """
        return self.logger_format

    def get_logger_level(self):
        """gets logger level. By default sets to ``logging.ERROR`` to get only errors """
        if self.options.debug:
            return logging.DEBUG
        elif self.options.verbose:
            return logging.INFO
        return logging.ERROR

    def get_logger_file_level(self):
        """gets logger level specific for log file output.

        Note : This is possible to set different logger level between log file and console"""
        return self.get_logger_level()

    def get_logger_console_level(self):
        """gets logger level specific for the console output.

        Note : This is possible to set different logger level between log file and console"""
        return self.get_logger_level()

    def get_logger_file_logfile(self):
        """get log file path """
        return self.options.logfile

    def add_logger_file_handler(self):
        """Activate logging to the log file """
        logfile = self.get_logger_file_logfile()
        if logfile:
            fh = logging.handlers.RotatingFileHandler(logfile, maxBytes=self.logger_logsize,
                                                           backupCount=self.logger_logbackup)
            fh.setLevel(self.get_logger_file_level())
            formatter = logging.Formatter(self.get_logger_format())
            fh.setFormatter(formatter)
            nagmetric.logger.addHandler(fh)
            textops.logger.addHandler(fh)
            self.debug('Debug log file = %s' % logfile)

    def add_logger_console_handler(self):
        """Activate logging to the console (stderr : stdout is for Nagios) """
        ch = logging.StreamHandler(sys.stderr)
        ch.setLevel(self.get_logger_console_level())
        formatter = logging.Formatter(self.get_logger_format())
        ch.setFormatter(formatter)
        nagmetric.logger.addHandler(ch)
        textops.logger.addHandler(ch)

    def init_logger(self):
        """Initialize logging """
        nagmetric.logger.setLevel(logging.DEBUG)
        textops.logger.setLevel(logging.DEBUG)
        self.add_logger_console_handler()
        self.add_logger_file_handler()

    def handle_cmd_options(self):
        """Parse command line options

        The parsed options are stored in ``self.options`` and arguments in ``self.args``
        """
        (options, args) = self._cmd_parser.parse_args()
        self.options = options
        self.args = args

    def manage_cmd_options(self):
        """Manage commande line options

        OptionParser instance is created, options are added, then command line is parsed.
        """
        self.init_cmd_options()
        self.add_cmd_options()
        self.handle_cmd_options()

    @classmethod
    def error(cls,msg,*args,**kwargs):
        """log an error message

        Args:

            msg(str): the message to log
            args(list): if additional arguments are given,
                ``msg`` will be formatted with ``%`` (old-style python string formatting)
        """
        nagmetric.logger.error(msg,*args,**kwargs)

    @classmethod
    def warning(cls,msg,*args,**kwargs):
        """log a warning message

        Args:

            msg(str): the message to log
            args(list): if additional arguments are given,
                ``msg`` will be formatted with ``%`` (old-style python string formatting)
        """
        nagmetric.logger.warning(msg,*args,**kwargs)

    @classmethod
    def info(cls,msg,*args,**kwargs):
        """log an informational message

        Args:

            msg(str): the message to log
            args(list): if additional arguments are given,
                ``msg`` will be formatted with ``%`` (old-style python string formatting)
        """
        nagmetric.logger.info(msg,*args,**kwargs)

    @classmethod
    def debug(cls,msg,*args,**kwargs):
        """log a debug message

        Args:

            msg(str): the message to log
            args(list): if additional arguments are given,
                ``msg`` will be formatted with ``%`` (old-style python string formatting)

        Examples:

            This logs a debug message in log file and/or console::

                p = Plugin()
                p.debug('my_variable = %s',my_variable)
        """
        nagmetric.logger.debug(msg,*args,**kwargs)

class ActivePlugin(Plugin):
    """Python base class for active nagios plugins

    This is the base class for developping Active Nagios plugin with the nagmetric module
    """

    plugin_type = 'active'
    """Attribute for the plugin type

    This is used during plugin recursive search : should be the same string
    accross all your plugins"""

    host_class = Host
    """Attribute that must contain the host class to use.

    You have to modify this class when you have redefined your own host class """

    response_class = PluginResponse
    """Attribute that must contain the response class to use.

    You have to modify this class when you have redefined your own response class """

    label = ''
    """The short metric tag displayed at the beginning of the plugin output (``CPU``, ``INODES``...)"""

    usage = 'usage: \n%prog [options]'
    """Attribute for the command line usage """

    options = DictExt()
    """Attribute that contains the command line options as parsed by :class:`optparse.OptionParser` """

    host = DictExt()
    """This will contain the :class:`~nagmetric.Host` object. not that it is devrived from a dict."""

    cmd_params = ''
    """Attribute that must contain a list of all possible :class:`~nagmetric.Host`
    parameters for the current plugin

    This will automatically add options to the :class:`optparse.OptionParser` object. This means
    that the given parameters can be set at command line (use '-h' for plugin help to see them
    appear).
    This also ask nagmetric to get parameters from environment variables if
    available. Once the parameters value found, nagmetric will store them into the host object at the
    same index.
    For example, if ``plugin.cmd_params = 'user,passwd'`` then parameters values will be available
    at ``self.host.user`` and ``self.host.passwd`` inside the definition of :meth:`collect_data`.

    The parameter list can be a python list or a coma separated string.
    """

    required_params = None
    """Attribute that contains the list of parameters required for the :class:`~nagmetric.Host` object

    If the list is ``None`` (by default), this means that all parameters from attribute
    :attr:`cmd_params` are required.
    """

    forced_params = 'name'
    """Attribute you can set to force all your plugins to have some default :class:`~nagmetric.Host`
    parameters. These parameters are automatically added to the plugin attribute :attr:`cmd_params`.
    """

    remote = True
    """If True, the monitored host is a remote one : the ``ip`` parameter is required.
    Set it to False for plugins that read local files."""

    host_params_short_options = { 'ip':'-H', 'user':'-u' }
    """Short command line options for some host parameters"""

    nagios_status_on_error = UNKNOWN
    """Attribute giving the :class:`ResponseLevel` to return to Nagios on error."""

    default_level = OK
    """Attribute giving the response level to return if no level has been set.

    By default, nagmetric consider that if no level message has been added to the response, there is
    no errors and return the ``OK`` level to Nagios.
    """

    def __init__(self):
        self.starttime = datetime.datetime.now()
        self.response = self.response_class(self.label, default_level=self.default_level)
        self.data = DictExt()
        """The place to put collected and parsed data

        As data is a :class:`textops.DictExt` object, one can use the dotted notation for reading and for
        writing.
        """

    def get_plugin_host_params_tab(self):
        """Returns a dictionary of Host parameters description

        This dictionary helps nagmetric to build the plugin help (``-h`` option in command line).
        If you want to create specific parameters, add them in the dictionary with their description
        by overriding this method in a subclass.
        """
        return  {   'name'           : 'Hostname',
                    'ip'             : 'Host IP address',
                    'user'           : 'User',
                    'passwd'         : 'Password',
                    'identity'       : 'SSH private key file',
                    'port'           : 'Port number',
                }

    def _params_list(self, params):
        if isinstance(params,str):
            return [ p for p in params.split(',') if p ]
        return list(params or [])

    def get_plugin_host_params_desc(self):
        """Builds a dictionary giving description of plugin host parameters

        This merges :attr:`cmd_params` and :attr:`forced_params` paramters and returns their description
        """
        params_tab = self.get_plugin_host_params_tab()
        cmd_params = set(self._params_list(self.cmd_params)).union(self._params_list(self.forced_params))
        if self.remote:
            cmd_params.add('ip')
        return dict([(k,params_tab.get(k,k.title())) for k in cmd_params if k ])

    def init_cmd_options(self):
        """Initialize command line options

        This create :class:`optparse.OptionParser` instance and add some basic options

        It also add options corresponding to Host parameters. The host parameters will be stored
        first into OptionParse's options object (``plugin.options``) at ``host__<parameter>`` attribute, later it is
        set to host object at attribute ``<parameter>``

        This method is automatically called when the plugin is run.
        Avoid to override this method, prefer to customize :meth:`add_cmd_options`
        """
        super(ActivePlugin,self).init_cmd_options()
        host_params_desc = self.get_plugin_host_params_desc()
        if host_params_desc:
            group = OptionGroup(self._cmd_parser, 'Host attributes','To be used to force host attributes values')
            for param,desc in sorted(host_params_desc.items()):
                opts = ['--%s' % param]
                if param in self.host_params_short_options:
                    opts.insert(0,self.host_params_short_options[param])
                group.add_option(*opts, action='store', type='string', dest="host__%s" % param, metavar=param.upper(), help=desc)
            self._cmd_parser.add_option_group(group)
        self._cmd_parser.add_option('-a', action='store_true', dest='collect_and_print',
                                   default=False, help='Collect data only and print them')
        self._cmd_parser.add_option('-b', action='store_true', dest='parse_and_print',
                                   default=False, help='Collect and parse data only and print them')

    def handle_cmd_options(self):
        """Parse command line options

        The parsed options are stored in ``plugin.options`` and arguments in ``plugin.args``
        If the user requests plugin description, it is displayed and the plugin exited
        with UNKOWN response level.
        """
        super(ActivePlugin,self).handle_cmd_options()
        if self.options.show_description:
            print(self.get_plugin_desc())
            UNKNOWN.exit()

    def check_options(self):
        """Check the plugin specific options

        This method is called after the host required fields have been checked. It should raise
        a :class:`~nagmetric.MetricError` or call :meth:`usage_error` when an option is invalid.
        It is highly recommended to call the super/parent ``check_options()`` to take advantage of
        optional mixins like :class:`nagmetric.ThresholdMixin`.
        """
        pass

    def fast_response(self,level, synopsis):
        """Exit the plugin at once by sending a basic message level to Nagios

        This is used mainly on errors : the goal is to avoid the plugin to go any further.

        Args:

            level(:class:`ResponseLevel`): Response level to give to Nagios
            synopsis(str): Response message
        """
        self.response.level = level
        self.response.set_synopsis(synopsis)
        self.response.perf_items = []
        self.response.send()

    def fast_response_if(self,test, level, synopsis):
        """If test is True, exit the plugin at once by sending a basic message level to Nagios

        This works like :meth:`fast_response` except that it exits only if test is True.
        """
        if test:
            self.fast_response(level, synopsis)

    def usage_error(self, msg):
        """Exit with the error level and a usage error message"""
        self.fast_response(self.nagios_status_on_error, 'Usage error : %s' % msg)

    def error(self, msg, exception=None, *args,**kwargs):
        """Log an error and exit the plugin

        Not only it logs an error to console and/or log file, it also send a fast response that
        will exit the plugin with the level given by :attr:`nagios_status_on_error`.
        If the exception that has generated the error is not derived from CollectError or MetricError,
        the stack and available data are also logged.

        Args:

            msg(str): The error message
            exception(Exception): The exception that is the error's origin (Optional).
        """
        if exception is not None and not isinstance(exception, (CollectError, MetricError)):
            nagmetric.logger.error('traceback : %s', traceback.format_exc())
            if self.data:
                nagmetric.logger.error('Data = \n%s', pp.pformat(dict(self.data)))
        nagmetric.logger.error(msg,*args,**kwargs)
        self.fast_response(self.nagios_status_on_error, msg)

    def collect_data(self,data):
        """Collect data from monitored host

        This method should be overridden when developing a new plugin.
        One should use :mod:`nagmetric.collect` module to retrieve raw data from monitored equipment.
        Do not parse raw data in this method : see :meth:`parse_data`.
        Note that no data is returned : one just have to modify ``data`` with a dotted notation.

        Args:

            data(:class:`textops.DictExt`): the data dictionary to write collected raw data to.

        Example:

            Here we execute the command ``lshealth -Y`` on a remote host via SSH::

                def collect_data(self,data):
                    data.health = Ssh(self.host.ip,self.host.user,key_filename=self.host.identity).run('lshealth -Y')
        """
        pass

    def parse_data(self,data):
        r"""Parse data

        This method should be overridden when developing a new plugin.
        When raw data are not usable at once, one should parse them to structure the informations.
        :meth:`parse_data` will get the data dictionary updated by :meth:`collect_data`.
        One should then use :mod:`nagmetric.parse` and :mod:`nagmetric.compute` to get the values.
        There is no data to return : one just have to modify ``data`` with a dotted notation.

        Note:

            The data dictionary is the same for collected data and parsed data, so do not use
            already existing keys for collected data to store new parsed data.
        """
        pass

    def build_response(self,data):
        r"""Build a response

        This method should be overridden when developing a new plugin.
        You must use data dictionary to decide what alerts and/or informations to send to Nagios.
        To do so, a :class:`~nagmetric.PluginResponse` object has already been initialized by
        the framework and is available at ``self.response`` : you just have to use `add*` methods.

        Example::

            def build_response(self,data):
                self.threshold_response(data.samples)
        """
        pass

    def check_host_required_fields(self):
        """Checks host required fields

        This checks the presence of values for host parameters specified in attribute
        :attr:`required_params`. If this attribute is None, all parameters specified in attribute
        :attr:`cmd_params` will  be considerated as required. ``ip`` is always required for
        remote plugins.
        """
        req_fields = self._params_list(self.required_params if self.required_params is not None else self.cmd_params)
        if self.remote and 'ip' not in req_fields:
            req_fields = ['ip'] + req_fields
        for f in req_fields:
            if not self.host.get(f):
                self.usage_error('Missing "%s" parameter (required : %s)' % (f, ','.join(req_fields)))

    def print_data(self, title, data):
        print('%s =' % title)
        print(pp.pformat(dict(data)).replace('\\n','\n'))

    def run(self):
        """Run the plugin

        This is the only method to call in your plugin script once you have define your own plugin class.
        It will take care of everything in that order :

            #. Manage command line options (uses :attr:`cmd_params`)
            #. Create the :class:`~nagmetric.Host` object (store it in attribute :attr:`host`)
            #. Activate logging (if asked in command line options with ``-v`` or ``-d``)
            #. Check required host parameters and plugin options
            #. Collect monitoring informations with :meth:`collect_data`
            #. Parse collected data with :meth:`parse_data`
            #. Build a response with :meth:`build_response`
            #. Send the response (render the response to stdout and exit the plugin
               with appropriate exit code)

        Any collect or parse error gives an UNKNOWN response.
        """
        try:
            self.manage_cmd_options()
            self.host = self.host_class(self)
            self.init_logger()
            self.host.load_data()
            self.info('Start plugin %s.%s for %s' % (self.__module__,self.__class__.__name__,self.host.name))
            self.host.debug()
            self.check_host_required_fields()
            self.check_options()
            try:
                self.collect_data(self.data)
            except CollectError as e:
                self.error('Failed to collect data : %s' % e, exception=e)
            self.info('Data are collected')
            self.debug('Collected Data = \n%s' % pp.pformat(dict(self.data)).replace('\\n','\n'))
            collected_keys = list(self.data.keys())
            if self.options.collect_and_print or self.options.parse_and_print:
                self.print_data('Collected Data',self.data)
                if not self.options.parse_and_print:
                    sys.exit(0)
            self.parse_data(self.data)
            self.info('Data are parsed')
            parsed = dict([ (k,v) for k,v in self.data.items() if k not in collected_keys ])
            self.debug('Parsed Data = \n%s' % pp.pformat(parsed).replace('\\n','\n'))
            if self.options.parse_and_print:
                self.print_data('Parsed Data',parsed)
                sys.exit(0)
            self.build_response(self.data)
            self.response.send()
        except (MetricError, CollectError) as e:
            self.error('%s' % e, exception=e)
        except Exception as e:
            self.error('Plugin internal error : %s' % e, exception=e)
        self.error('Should never reach this point')
