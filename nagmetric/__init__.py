# -*- coding: utf-8 -*-
#
# python-nagios-metric-plugins - Nagios checks for storage appliances and small hosts
# Copyright (C) 2015 Eric Lapouyade
#

__version__ = '0.2.0'
__author__ = 'Eric Lapouyade'
__copyright__ = 'Copyright 2015-2016, python-nagios-metric-plugins project'
__credits__ = ['Eric Lapouyade']
__license__ = 'LGPL'
__maintainer__ = 'Eric Lapouyade'
__status__ = 'Beta'

import logging
import traceback

logger = logging.getLogger(__name__)
logger.addHandler(logging.NullHandler())

from .response import *
from .perf import *
from .parse import *
from .compute import *
from .evaluate import *
from .tools import *
from .collect import *
from .host import *
from .plugin import *
from .mixins import *

def activate_debug():
    ch = logging.StreamHandler()
    ch.setLevel(logging.DEBUG)
    logger.addHandler(ch)
    logger.setLevel(logging.DEBUG)

def debug_caller():
    if logger.getEffectiveLevel() == logging.DEBUG:
        stack = list(reversed(traceback.extract_stack()))
        for frame in stack:
            if '/nagmetric/' not in frame[0]:
                return '[%s:%s]' % (frame[0],frame[1])
    return ''

def debug_listing(data):
    if isinstance(data, str):
        data = data.splitlines()
    for line in data:
        logger.debug('| %s',line)
