# This file is part of spindle. See LICENSE file for copyright and license info.

import itertools
import logging
import time

from contextlib import contextmanager
from functools import wraps

# Logging items for easy access
getLogger = logging.getLogger

CRITICAL = logging.CRITICAL
FATAL = logging.FATAL
ERROR = logging.ERROR
WARNING = logging.WARNING
WARN = logging.WARN
INFO = logging.INFO
DEBUG = logging.DEBUG
NOTSET = logging.NOTSET


class NullHandler(logging.Handler):
    def emit(self, record):
        pass


def basicConfig(**kwargs):
    # basically like logging.basicConfig but only output for our logger
    if kwargs.get('filename'):
        handler = logging.FileHandler(filename=kwargs['filename'],
                                      mode=kwargs.get('filemode', 'a'))
    elif kwargs.get('stream'):
        handler = logging.StreamHandler(stream=kwargs['stream'])
    else:
        handler = NullHandler()

    if 'verbosity' in kwargs:
        level = ((logging.ERROR, logging.INFO, logging.DEBUG)
                 [min(kwargs['verbosity'], 2)])
    else:
        level = kwargs.get('level', logging.NOTSET)

    handler.setFormatter(logging.Formatter(fmt=kwargs.get('format'),
                                           datefmt=kwargs.get('datefmt')))
    handler.setLevel(level)

    logging.getLogger().setLevel(level)

    logger = _getLogger()
    for h in list(logger.handlers):
        logger.removeHandler(h)
    logger.setLevel(level)
    logger.addHandler(handler)


def _getLogger(name='spindle'):
    return logging.getLogger(name)


if not logging.getLogger().handlers:
    logging.getLogger().addHandler(NullHandler())


def _repr_call(name, *args, **kwargs):
    return "%s(%s)" % (
        name,
        ', '.join([str(repr(a)) for a in args] +
                  ["%s=%s" % (k, repr(v)) for k, v in kwargs.items()]))


def log_call(func, *args, **kwargs):
    return log_time(
        "TIMED %s: " % _repr_call(func.__name__, *args, **kwargs),
        func, *args, **kwargs)


def log_time(msg, func, *args, **kwargs):
    start = time.time()
    try:
        return func(*args, **kwargs)
    finally:
        LOG.debug(msg + "%.3f", (time.time() - start))


def logged_call():
    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            return log_call(func, *args, **kwargs)
        return wrapper
    return decorator


def logged_time(msg):
    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            return log_time("TIMED %s: " % msg, func, *args, **kwargs)
        return wrapper
    return decorator


LOG = _getLogger()


class OperationLogger(object):
    """Logger handed to each storage component.

    Messages carry a stack of prefixes (``createFilesystems: createFiles:``)
    and multi-step actions are wrapped with :meth:`log_op`, which logs a
    numbered started/finished/failed triple around the call.
    """

    _op_counter = itertools.count(1)

    def __init__(self, logger=None):
        if logger is None:
            logger = LOG
        self.logger = logger
        self.prefixes = []

    def push_prefix(self, name):
        self.prefixes.append(name)

    def pop_prefix(self):
        self.prefixes.pop()

    @contextmanager
    def prefix(self, name):
        self.push_prefix(name)
        try:
            yield self
        finally:
            self.pop_prefix()

    def _format(self, fmt, args):
        msg = fmt % args if args else fmt
        return ''.join('%s: ' % p for p in self.prefixes) + msg

    def _log(self, level, fmt, *args):
        self.logger.log(level, self._format(fmt, args))

    def debug(self, fmt, *args):
        self._log(DEBUG, fmt, *args)

    def info(self, fmt, *args):
        self._log(INFO, fmt, *args)

    # a notice has no stdlib level of its own
    notice = info

    def warning(self, fmt, *args):
        self._log(WARNING, fmt, *args)

    def crit(self, fmt, *args):
        self._log(CRITICAL, fmt, *args)

    def log_op(self, func, fmt, *args):
        """Call func() as a named, logged operation and return its result.

        Any exception raised by func is logged as the operation failure and
        re-raised unchanged.
        """
        desc = fmt % args if args else fmt
        opnum = next(self._op_counter)
        self.info("op(%d): [started]  %s", opnum, desc)
        start = time.time()
        try:
            ret = func()
        except Exception as e:
            self.crit("op(%d): [failed]   %s: %s", opnum, desc, e)
            raise
        self.info("op(%d): [finished] %s", opnum, desc)
        self.debug("op(%d): took %.3f seconds", opnum, time.time() - start)
        return ret

    def log_cmd(self, cmd, fmt, *args):
        """Run cmd through util.subp as a logged operation."""
        # imported here, util imports this module
        from spindle import util

        def _run():
            out, err = util.subp(cmd, capture=True)
            self.debug("executing: %s", ' '.join(cmd))
            if out:
                self.debug("stdout: %s", out.rstrip())
            if err:
                self.debug("stderr: %s", err.rstrip())
            return out, err

        return self.log_op(_run, fmt, *args)

# vi: ts=4 expandtab syntax=python
