# -*- coding: utf-8 -*-
#
# Création : July 7th, 2015
#
# @author: Eric Lapouyade
#
"""This module provides funcions and classes to collect data remotely and locally"""

import re
import socket
import subprocess
import textops
import paramiko
import pexpect
import nagmetric
from .tools import Timeout

__all__ = ['runsh', 'runshex', 'read_file', 'Expect', 'Ssh',
           'CollectError', 'ConnectionError', 'NotConnected', 'UnexpectedResultError',
           'InvalidCommandError', 'TimeoutError']

class CollectError(Exception):
    """Exception raised when a collect is unsuccessful

    It may come from internal error from libraries pexpect/paramiko. This includes
    some internal timeout exception.
    """
    pass

class NotConnected(CollectError):
    """Exception raised when trying to collect data on an already close connection

    After a run() without a ``with:`` clause, the connection is automatically closed.
    Do not do another run() in the row otherwise you will have the exception.
    Solution : use ``with:``
    """
    pass

class ConnectionError(CollectError):
    """Exception raised when trying to initialize the connection

    It may come from bad login/password, bad port, inappropriate parameters and so on
    """
    pass

class UnexpectedResultError(CollectError):
    """Exception raised when a command gave an unexpected result

    This works with ``expected_pattern`` and ``unexpected_pattern`` available in some
    collecting classes.
    """
    pass

class InvalidCommandError(CollectError):
    """Exception raised when a command to be run is invalid

    Usually, this is raised for empty command
    """
    pass

class TimeoutError(CollectError):
    """Exception raised when a connection or a collect it too long to process

    It may come from unreachable remote host, too long lasting commands, bad pattern matching on
    Expect/Ssh for connection or prompt search steps.
    """
    pass

def _raise_unexpected_result(result, key, cmd, help_str=''):
    if isinstance(result,textops.ListExt):
        result = '\n'.join(result)
    if isinstance(result,str):
        if result == '':
            result = '<empty result>'
        else:
            result = ' '.join(result.splitlines()[:5])
    else:
        result = '%s (%s)' % (result,type(result))
    key_str = ' for command key "%s"' % key if key else ''
    s='Unexpected result%s, command = %s %s : %s' % (key_str,cmd,help_str,result)
    raise UnexpectedResultError(s)

def _filter_result(result, key, cmd, expected_pattern=r'\S', unexpected_pattern=None, filter=None):
    if callable(filter):
        filtered = filter(result, key, cmd)
        if filtered is not None:
            result = filtered

    if unexpected_pattern:
        if isinstance(unexpected_pattern,str):
            unexpected_pattern = re.compile(unexpected_pattern)
        if result and result | textops.haspattern(unexpected_pattern):
            found = result | textops.grep(unexpected_pattern)
            _raise_unexpected_result(found, key, cmd, '-> found the pattern "%s"' % unexpected_pattern.pattern)

    if expected_pattern:
        if isinstance(expected_pattern,str):
            expected_pattern = re.compile(expected_pattern)
        if not result | textops.haspattern(expected_pattern):
            if expected_pattern.pattern==r'\S':
                _raise_unexpected_result(result, key, cmd, '-> empty result')
            else:
                _raise_unexpected_result(result, key, cmd, '-> cannot find the pattern "%s"' % expected_pattern.pattern)

    return textops.extend_type(result)

def runsh(cmd, context = {}, timeout = 30, expected_pattern=r'\S', unexpected_pattern=None, filter=None, key='' ):
    r"""Run a local command with a timeout

    | If the command is a string, it will be executed within a shell.
    | If the command is a list (the command and its arguments), the command is executed without a shell.
    | If a context dict is specified, the command is formatted with that context (:meth:`str.format`)

    Args:

        cmd (str or a list): The command to run
        context (dict): The context to format the command to run (Optional)
        timeout (int): The timeout in seconds after with the forked process is killed
            and TimeoutError is raised (Default : 30s).
        expected_pattern (str or regex): raise UnexpectedResultError if the pattern is not found.
            if None, there is no test. By default, tests the result is not empty.
        unexpected_pattern (str or regex): raise UnexpectedResultError if the pattern is found
            if None, there is no test. By default, there is no test.
        filter (callable): call a filter function with ``result, key, cmd`` parameters.
            The function should return the modified result (if there is no return statement,
            the original result is used).
        key (str): a key string to appear in UnexpectedResultError if any.

    Returns:

        list: Command execution stdout as a list of lines.

    Note:

        It returns **ONLY** stdout. If you want to get stderr, you need to redirect it to stdout.

    Examples:

        >>> runsh('/opt/vc/bin/vcgencmd measure_temp')
        ["temp=48.3'C"]
    """
    stdout, stderr, rc = runshex(cmd, context = context, timeout = timeout,
                               expected_pattern = expected_pattern,
                               unexpected_pattern = unexpected_pattern, filter=filter, key=key,
                               unexpected_stderr = False )
    return stdout.splitlines()

def runshex(cmd, context = {}, timeout = 30, expected_pattern=r'\S', unexpected_pattern=None,filter=None, key='',unexpected_stderr=True ):
    r"""Run a local command with a timeout

    It works like :func:`runsh` but also returns stderr and the return code.

    Args:

        cmd (str or a list): The command to run
        context (dict): The context to format the command to run (Optional)
        timeout (int): The timeout in seconds after with the forked process is killed
            and TimeoutError is raised (Default : 30s).
        expected_pattern (str or regex): raise UnexpectedResultError if the pattern is not found.
            if None, there is no test. By default, tests the result is not empty.
        unexpected_pattern (str or regex): raise UnexpectedResultError if the pattern is found
            if None, there is no test. By default, there is no test.
        filter (callable): see :func:`runsh`
        key (str): a key string to appear in UnexpectedResultError if any.
        unexpected_stderr (bool): When True (Default), it raises an error if stderr is not empty

    Returns:

        tuple: stdout, stderr, return code tuple
    """
    if not cmd:
        raise InvalidCommandError('Command is empty')

    with Timeout(seconds=timeout, error_message='Timeout (%ss) for command : %s' % (timeout,cmd)):
        if isinstance(cmd, str):
            if context:
                cmd = cmd.format(**context)
            popen_cmd = ['timeout','%ss' % timeout,'sh','-c',cmd]
        else:
            cmd = [ i.format(**context) for i in cmd ] if context else list(cmd)
            popen_cmd = cmd if cmd[0] == 'timeout' else ['timeout','%ss' % timeout] + cmd
        nagmetric.logger.debug('collect -> runshex(%s) %s',cmd,nagmetric.debug_caller())
        try:
            p=subprocess.Popen(popen_cmd,stdout=subprocess.PIPE,stderr=subprocess.PIPE,
                               universal_newlines=True)
        except OSError as e:
            raise CollectError('Cannot run %s : %s' % (cmd,e))
        stdout_msg, stderr_msg = p.communicate()
        nagmetric.debug_listing(stdout_msg)
        if unexpected_stderr and stderr_msg:
            _raise_unexpected_result(stderr_msg, key, cmd, help_str='<stderr> returned :')
        return _filter_result(stdout_msg, key, cmd, expected_pattern, unexpected_pattern, filter),stderr_msg,p.returncode

def read_file(path, not_found_msg=None, not_readable_msg=None):
    """Read a local file

    Args:

        path (str): the file to read
        not_found_msg (str): the CollectError message if the file does not exist
        not_readable_msg (str): the CollectError message if the file cannot be read

    Returns:

        str : the file content

    Raises:

        CollectError: the file does not exist or cannot be read
    """
    nagmetric.logger.debug('collect -> read_file(%s) %s',path,nagmetric.debug_caller())
    try:
        with open(path) as fh:
            data = fh.read()
    except FileNotFoundError:
        raise CollectError(not_found_msg or "'%s' not found" % path)
    except (OSError, IOError) as e:
        raise CollectError(not_readable_msg or "'%s' not readable : %s" % (path,e))
    nagmetric.debug_listing(data)
    return data

class Expect(object):
    r"""Interact with a spawn command

    :class:`Expect` is a class that "talks" to other interactive programs.
    It is based on `pexpect <https://pexpect.readthedocs.org>`_ and is
    focused on running one command that needs human interaction, typically a ssh command
    asking for a password.

    Args:

        spawn (str): The command to start and to communicate with
        login_steps(list or tuple): ``(pattern, answer)`` tuples, see below
        context (dict): Dictionary that will be used to .format() answers strings (Default : {})
        timeout (int): Maximum execution time (Default : 30)
        max_answers (int): Maximum number of answers sent before giving up (Default : 3)
        expected_pattern (str or regex): raise UnexpectedResultError if the pattern is not found
            in the output. if None, there is no test. By default, tests the result is not empty.
        unexpected_pattern (str or regex): raise UnexpectedResultError if the pattern is found
            if None, there is no test. By default, there is no test.
        filter (callable): call a filter function with ``result, key, cmd`` parameters.

    **What are login steps ?**

        Each step is a pattern/answer tuple. While the spawned command is running, :class:`Expect`
        searches for all the patterns and the end of the output. When a pattern is found, the
        corresponding answer is sent : do not forget the newline otherwise you will get stuck.
        A pattern is answered each time it is found, up to ``max_answers`` answers in all.
        Use ``Expect.KILL`` as answer to kill the spawned command and raise a :class:`ConnectionError`
        with the found text as message.
        The command output is what has been received after the last answer, up to the end.

        For example, to run a command by ssh with a password::

            (
                ('Permission denied', Expect.KILL),
                ('No route to host', Expect.KILL),
                (r'(?i)password[^:\r\n]*:\s*', '{passwd}\n'),
            )

    Examples:

        >>> e = Expect('ssh -t admin@sonas sc onnode all uptime',
        ...            login_steps=((r'(?i)password', '{passwd}\n'),),
        ...            context={'passwd':'secret'})
        >>> print(e.run())      #doctest: +SKIP
    """
    KILL = 1

    def __init__(self,spawn,login_steps=None,context={},timeout = 30, max_answers=3,
                 expected_pattern=r'\S', unexpected_pattern=None, filter=None):
        self.spawn = spawn
        self.login_steps = list(login_steps or ())
        self.context = context
        self.timeout = timeout
        self.max_answers = max_answers
        self.expected_pattern = expected_pattern
        self.unexpected_pattern = unexpected_pattern
        self.filter = filter
        self.in_with = False
        self.is_connected = False
        nagmetric.logger.debug('collect -> #### Expect( %s ) ###############',spawn)
        try:
            self.child = pexpect.spawn(spawn, timeout=timeout, encoding='utf-8', codec_errors='replace')
        except pexpect.ExceptionPexpect as e:
            raise ConnectionError('Cannot spawn %s : %s' % (spawn,e))
        self.is_connected = True

    def __enter__(self):
        self.in_with = True
        return self

    def __exit__(self, type, value, traceback):
        self.in_with = False
        self.close()

    def close(self):
        if not self.in_with and self.is_connected:
            self.is_connected = False
            self.child.close(force=True)
            nagmetric.logger.debug('collect -> #### Expect : closed (exit status=%s) ###############',
                                   self.child.exitstatus)

    def _interact(self):
        steps = self.login_steps
        patterns = [ pat for pat,answer in steps ] + [ pexpect.EOF ]
        nb_answers = 0
        while True:
            nagmetric.logger.debug('collect -> <-- expect(%s) ...',patterns)
            try:
                found = self.child.expect(patterns)
            except pexpect.TIMEOUT:
                raise TimeoutError('Timeout (%ss) for pexpect : %s' % (self.timeout,self.spawn))
            if found == len(steps):
                nagmetric.logger.debug('collect ->   --> EOF')
                return self.child.before
            pattern, answer = steps[found]
            nagmetric.logger.debug('collect ->   --> found : "%s"',pattern)
            if answer == Expect.KILL:
                msg = ('%s%s' % (self.child.before, self.child.after)).strip()
                self.child.kill(9)
                raise ConnectionError(' '.join(msg.splitlines()[-3:]) or pattern)
            nb_answers += 1
            if nb_answers > self.max_answers:
                raise CollectError('Too many expect for %s' % self.spawn)
            to_send = answer.format(**self.context)
            if to_send and to_send[-1] == '\n':
                nagmetric.logger.debug('collect ->   ==> sendline : ********')
                self.child.sendline(to_send[:-1])
            else:
                nagmetric.logger.debug('collect ->   ==> send : ********')
                self.child.send(to_send)

    def run(self, auto_close=True, expected_pattern=0, unexpected_pattern=0, filter=0):
        r"""Follow the login steps, then get the spawned command output up to its end

        Args:

            auto_close (bool): Automatically close the interaction.
            expected_pattern (str or regex): raise UnexpectedResultError if the pattern is not found
                if None, there is no test. By default, use the value defined at object level.
            unexpected_pattern (str or regex): raise UnexpectedResultError if the pattern is found
                if None, there is no test. By default, use the value defined at object level.
            filter (callable): By default, use the filter defined at object level.

        Return:

            :class:`textops.StrExt` : The command output
        """
        if not self.is_connected:
            raise NotConnected('No expect connection to run your command.')
        try:
            with Timeout(seconds = self.timeout, error_message='Timeout (%ss) for pexpect : %s' % (self.timeout,self.spawn)):
                out = self._interact()
        finally:
            if auto_close:
                self.close()
        out = out.replace('\r','').strip('\n')
        nagmetric.debug_listing(out)
        return textops.StrExt(_filter_result(out,'',self.spawn, expected_pattern if expected_pattern != 0 else self.expected_pattern,
                                                         unexpected_pattern if unexpected_pattern != 0 else self.unexpected_pattern,
                                                         filter if filter != 0 else self.filter))

class Ssh(object):
    r"""Ssh class helper

    This class create a ssh connection in order to run one or many commands.

    Args:

        host (str): IP address or hostname to connect to
        user (str): The username to use for login
        password (str): The password
        timeout (int): Time in seconds before raising an error or a None value
        auto_accept_new_host (bool): accept unknown host keys (Default: True)
        get_pty (bool): Create a pty, this is useful for some ssh connection (Default: False)
        expected_pattern (str or regex): raise UnexpectedResultError if the pattern is not found
            in methods that collect data (like run)
            if None, there is no test. By default, tests the result is not empty.
        unexpected_pattern (str or regex): raise UnexpectedResultError if the pattern is found
            if None, there is no test. By default, it tests <timeout>.
        filter (callable): call a filter function with ``result, key, cmd`` parameters.
        add_stderr (bool): If True, the stderr will be added at the end of results (Default: True)
        kwargs: other paramiko ``connect()`` parameters, for example :

            * key_filename (str): the filename, or list of filenames, of optional private key(s) to
              try for authentication
            * allow_agent (bool): set to False to disable connecting to the SSH agent
            * look_for_keys (bool): set to False to disable searching for discoverable private key
              files in ``~/.ssh/``
            * port (int): port number to use (Default : 22)

    After each :meth:`run`, the remote command exit status is available in ``last_rcode``.
    """
    def __init__(self,host, user, password=None, timeout=30, auto_accept_new_host=True,
                 get_pty=False, expected_pattern=r'\S', unexpected_pattern=r'<timeout>',
                 filter=None, add_stderr=True, **kwargs):
        self.in_with = False
        self.is_connected = False
        self.get_pty = get_pty
        self.expected_pattern = expected_pattern
        self.unexpected_pattern = unexpected_pattern
        self.filter = filter
        self.add_stderr = add_stderr
        self.last_rcode = None
        if not host:
            raise ConnectionError('No host specified for Ssh')
        if not user:
            raise ConnectionError('No user specified for Ssh')
        self.client = paramiko.SSHClient()
        if auto_accept_new_host:
            self.client.set_missing_host_key_policy(paramiko.AutoAddPolicy())
        self.client.load_system_host_keys()
        nagmetric.logger.debug('collect -> #### Ssh( %s@%s ) ###############',user, host)
        try:
            self.client.connect(host,username=user,password=password, timeout=timeout, **kwargs)
        except (paramiko.SSHException, socket.error) as e:
            raise ConnectionError('Cannot connect to %s@%s : %s' % (user,host,e))
        nagmetric.logger.debug('collect -> is_connected = True')
        self.is_connected = True

    def __enter__(self):
        self.in_with = True
        return self

    def __exit__(self, type, value, traceback):
        self.in_with = False
        self.close()

    def close(self):
        if not self.in_with:
            self.client.close()
            self.is_connected = False
            nagmetric.logger.debug('collect -> #### Ssh : Connection closed ###############')

    def _run_cmd(self,cmd,timeout):
        nagmetric.logger.debug('collect -> run("%s") %s',cmd,nagmetric.debug_caller())
        stdin, stdout, stderr = self.client.exec_command(cmd,timeout=timeout,get_pty=self.get_pty)
        out = stdout.read().decode('utf-8','replace')
        if self.add_stderr:
            out += stderr.read().decode('utf-8','replace')
        self.last_rcode = stdout.channel.recv_exit_status()
        nagmetric.logger.debug('collect -> exit status : %s',self.last_rcode)
        nagmetric.debug_listing(out)
        return out

    def run(self, cmd, timeout=30, auto_close=True, expected_pattern=0, unexpected_pattern=0, filter=0):
        r"""Execute one command

        Runs a single command and then close the connection. A timeout gives a ``<timeout>``
        output, that is rejected by the default ``unexpected_pattern``.
        If you want to execute many commands without closing the connection, use ``with`` syntax.

        Args:

            cmd (str): The command to be executed
            timeout (int): A timeout in seconds after which the result will be ``<timeout>``
            auto_close (bool): Automatically close the connection.
            expected_pattern (str or regex): raise UnexpectedResultError if the pattern is not found
                if None, there is no test. By default, use the value defined at object level.
            unexpected_pattern (str or regex): raise UnexpectedResultError if the pattern is found
                if None, there is no test. By default, use the value defined at object level.
            filter (callable): By default, use the filter defined at object level.

        Return:

            :class:`textops.StrExt` : The command output

        Examples:

            SSH with an identity file::

                ssh = Ssh('sonas','admin',key_filename='/home/nagios/.ssh/id_rsa')
                print(ssh.run('lshealth -Y'))
        """
        if not self.is_connected:
            raise NotConnected('No ssh connection to run your command.')
        try:
            out = self._run_cmd(cmd,timeout=timeout)
        except socket.timeout:
            out = '<timeout>'
        finally:
            if auto_close:
                self.close()
        return _filter_result(out,'',cmd, expected_pattern if expected_pattern != 0 else self.expected_pattern,
                                                         unexpected_pattern if unexpected_pattern != 0 else self.unexpected_pattern,
                                                         filter if filter != 0 else self.filter)
