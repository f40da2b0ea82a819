# -*- coding: utf-8 -*-
#
# Création : July 7th, 2015
#
# @author: Eric Lapouyade
#
"""This module provides utility classes"""

import signal
import nagmetric

__all__ = ['Timeout']

class Timeout:
    """Set an execution timeout for a block of code

    It uses process signals, it should not work on windows platforms.

    Args:

        seconds (int): The time in seconds after which a TimeoutError will be raise if the block
            has not finished its execution.
        error_message(str): The string to pass to the TimeoutError exception.

    Raises:

        :class:`~nagmetric.collect.TimeoutError`: When the block execution has not finished on-time.

    Examples:

        >>> with Timeout(seconds=3):
        >>>     time.sleep(4)

    """
    def __init__(self, seconds=1, error_message='Timeout'):
        self.seconds = int(seconds)
        self.error_message = error_message
    def handle_timeout(self, signum, frame):
        raise nagmetric.TimeoutError(self.error_message)
    def __enter__(self):
        self.previous_handler = signal.signal(signal.SIGALRM, self.handle_timeout)
        signal.alarm(self.seconds)
        return self
    def __exit__(self, type, value, traceback):
        signal.alarm(0)
        if self.previous_handler is not None:
            signal.signal(signal.SIGALRM, self.previous_handler)
