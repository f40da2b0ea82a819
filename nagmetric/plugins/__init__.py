# -*- coding: utf-8 -*-
#
# Création : Jan 7th, 2016
#
# @author: Eric Lapouyade
#
"""Ready to use checks : each module holds one plugin class and a ``main()`` entry point"""
