# -*- coding: utf-8 -*-
#
# Création : July 8th, 2015
#
# @author: Eric Lapouyade
"""This module defined the nagmetric Host object.

The Host object will store all informations about the equipment to monitor.
It could be for exemple :

    * The hostname
    * Host IP address
    * The user login
    * The user password
    * The ssh identity file
    * ...

Informations come from 2 sources in this order :

    * From environment variables
    * From command line

Informations from command line have priority over environment vars.
Nothing is kept from one plugin execution to another.
"""

import os
from textops import NoAttr, dformat

__all__ = ['Host']

class Host(dict):
    r"""Contains equipment informations

    Host object is a dict with some additional methods.

    Args:

        plugin (:class:`Plugin`): The plugin object that is used to monitor the equipment


    Informations can be accessed and modified by 2 ways :

        * By attribute
        * By Index

    A missing information is :class:`textops.NoAttr` (a false value that gives an empty
    string when printed).

    Examples :

        >>> os.environ['NAGIOS_HOSTNAME']='sonas01'
        >>> plugin = ActivePlugin()
        >>> host = Host(plugin)
        >>> host.load_data()
        >>> print(host.name)
        sonas01
        >>> print(host['name'])
        sonas01
    """
    def __init__(self, plugin):
        self._plugin = plugin

        self._params_from_env = self._get_params_from_env()
        self._params_from_cmd_options = self._get_params_from_cmd_options()
        self.set('name', ( self._params_from_cmd_options.get('name') or
                    self._params_from_env.get('name') or
                    self._params_from_cmd_options.get('ip') or
                    self._params_from_env.get('ip') ) )

    def load_data(self):
        """load data to the :class:`Host` object

        That is from environment variables and then from command line.
        """
        self._merge(self._params_from_env)
        self._merge(self._params_from_cmd_options)

    def to_str(self, str, defvalue='-'):
        """Formats a string with Host informations

        Not available data are replaced by a dash

        Args:

            str (str): A format string
            defvalue (str): String to display when a data is not available

        Returns:

            str : the formatted string

        Examples:

            >>> os.environ['NAGIOS_HOSTNAME']='sonas01'
            >>> os.environ['NAGIOS_HOSTADDRESS']='192.168.0.33'
            >>> plugin = ActivePlugin()
            >>> host = Host(plugin)
            >>> host.load_data()
            >>> print(host.to_str('{name} as got IP={ip} and user {user}'))
            sonas01 as got IP=192.168.0.33 and user -
        """
        return dformat(str,self,defvalue)

    def debug(self):
        """Log Host informations for debug

        Passwords are not logged.
        """
        self._plugin.debug('Host informations :')
        for k,v in sorted(self.items()):
            if k not in ('passwd','password'):
                self._plugin.debug('  %-12s : %s', k, v)

    def __getattr__(self, name):
        return self.get(name,NoAttr)

    def __setattr__(self, name, value):
        if name[0] != '_':
            self[name] = value
        else:
            super(Host,self).__setattr__(name, value)

    def get(self, name, default=NoAttr):
        return super(Host,self).get(name,default)

    def set(self, name, value):
        self[name] = value

    def _merge(self,dct):
        self.update([ (k,v) for k,v in dct.items() if v not in [None,NoAttr] ])

    def _get_env_to_param(self):
        """Returns a dict for the environment variable to extract

        The keys are the environment variables to extract, the values are the attribute name to use
        for the Host object.

        Only a few environment variables are automatically extracted, they are renamed when saved into
        Host object :

            =====================  =========
            Environment Variables  Stored as
            =====================  =========
            NAGIOS_HOSTNAME        name
            NAGIOS_HOSTALIAS       alias
            NAGIOS_HOSTADDRESS     ip
            =====================  =========

        Nagios custom host macros (``NAGIOS__HOSTUSER`` for ``_USER`` macro) are stored without their
        prefix, in lower case (``user``).
        """
        return {
           'NAGIOS_HOSTNAME'        : 'name',
           'NAGIOS_HOSTALIAS'       : 'alias',
           'NAGIOS_HOSTADDRESS'     : 'ip',
        }

    def _get_params_from_env(self):
        dct = dict([(k[12:].lower(),v) for k,v in os.environ.items() if k.startswith('NAGIOS__HOST') ])
        for e,p in self._get_env_to_param().items():
            v = os.environ.get(e)
            if v is not None:
                dct[p] = v
        return dct

    def _get_params_from_cmd_options(self):
        return dict([(k[6:],v) for k,v in vars(self._plugin.options).items() if k.startswith('host__')])
