#!/usr/bin/env python
# -*- coding: utf-8 -*-
#
# Création : 11 Jan 2016
#
# @author: Eric Lapouyade

import sys
import traceback
from .response import UNKNOWN

def usage(plugin_base_class,error=''):
    """Prints launcher usage and display all available plugin classes"""
    print('Usage : %s <plugin name or path.to.module.PluginClass> [options]\n' % sys.argv[0])
    if error:
        print('%s\n' % error)
    print('Available plugins :')
    print('=' * 110)
    print('%-30s %-30s %s' % ('Name','File','Description'))
    print('-' * 110)
    for name,plugin in sorted(plugin_base_class.find_plugins().items(),key=lambda x: x[1]['name']):
        print('%-30s %-30s %s' % (plugin['name'],plugin['path'],plugin['desc'].strip()))
    print('-' * 110)

    import_errors = plugin_base_class.find_plugins_import_errors()
    if import_errors:
        print()
        print('*** Some errors have been found when importing modules ***')
        print()
        for filename, e in import_errors:
            print('%s :' % filename)
            print('-' * 80)
            print(''.join(traceback.format_exception(type(e), e, e.__traceback__)))
            print()

    UNKNOWN.exit()

def launch(plugin_base_class):
    """Load the class specified in command line then instantiate and run it.

    It will read command line first argument and instantiate the specified class with
    a dotted notation. It will also accept only the class name without any dot, in this case,
    a recursive search will be done from the directory given by ``plugin_base_class.plugins_basedir``
    and will find the class with the right name and having the same ``plugin_type`` attribute value as
    ``plugin_base_class``. the search is case insensitive on the class name.
    Once the plugin instance has been create, the ``run()`` method is executed.
    If you start your launcher without any parameters, it will show you all plugin classes
    it has discovered in ``plugin_base_class.plugins_basedir`` with their first line description.

    Args:

        plugin_base_class(:class:`nagmetric.ActivePlugin`): the base class from which all your active
            plugins are inherited. This class must redefine attributes
            :attr:`~nagmetric.plugin.Plugin.plugins_basedir` and
            :attr:`~nagmetric.plugin.Plugin.plugin_type`.

    The plugin name is removed from the command line before the plugin parses its options,
    so that you can run a plugin like that::

        nagmetric sonasinodes -H 10.0.0.1 -u admin -F gpfs0 -f home
    """
    args=sys.argv
    if len(args) < 2:
        usage(plugin_base_class,'*** You must specify a valid plugin name')
    if args[1].startswith('-'):
        usage(plugin_base_class)
    plugin_name = args.pop(1)
    plugin = plugin_base_class.get_instance(plugin_name)
    if not plugin:
        usage(plugin_base_class,'*** "%s" is not a valid plugin' % plugin_name)
    plugin.usage = 'usage: \n%%prog %s [options]' % plugin_name
    plugin.run()

def main():
    from .plugins.common import MetricPlugin
    launch(MetricPlugin)

if __name__ == '__main__':
    main()
