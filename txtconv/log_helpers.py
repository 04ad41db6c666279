# Copyright (c) 2013-2025 NASK. All rights reserved.

import collections
import contextlib
import copy
import logging
import logging.config
import os.path
import sys

from txtconv.const import (
    ETC_DIR,
    USER_DIR,
    TOPLEVEL_TXTCONV_PACKAGES,
)


#
# Logging preparation'n'configuration

def get_logger(name=None):
    """
    Like logging.getLogger(...) but replacing '__main__' with a sensible name.

    For example, if the script path is '/whatever/txtconv/foo.py'
    get_logger('__main__') is equivalent to logging.getLogger('txtconv.foo').
    """
    if name == '__main__':
        # try to get the script path from __main__.__file__
        script_path = getattr(sys.modules['__main__'], '__file__', None)
        if not script_path:
            # or, if __main__ does not have a non-blank __file__ attribute,
            # extract the script path from sys.argv...
            script_path = sys.argv[0]
        # strip off the filename extension...
        remaining = os.path.splitext(script_path)[0]
        # ..and pop path name segments up to
        # (and including) the txtconv toplevel package name
        aggregated_segments = collections.deque()
        while True:
            remaining, segment = os.path.split(remaining)
            segment = segment.replace('.', 'D')  # just in case of '.' or '..'
            aggregated_segments.appendleft(segment)
            if segment in TOPLEVEL_TXTCONV_PACKAGES or remaining in ('', '/'):
                break
        name = '.'.join(aggregated_segments)
    return logging.getLogger(name)


_LOGGER = get_logger(__name__)

_loaded_configuration_paths = set()


def configure_logging(suffix=None, *, fallback_level=None):
    """
    Load the logging configuration from the `logging.conf` file (or
    `logging-<suffix>.conf`, if `suffix` is given) placed in the
    system-wide and/or the user's configuration directory (both are
    tried, in this order; a file that has already been loaded is
    skipped, with a warning).

    If no file could be loaded: when `fallback_level` is `None`,
    `RuntimeError` is raised; otherwise the basic configuration is
    applied (`logging.basicConfig()` with the given level).

    An example configuration file (making use of the custom formatters
    defined below) is shipped as `txtconv/data/conf/logging.conf`.
    """
    file_name = ('logging.conf' if suffix is None
                 else 'logging-{0}.conf'.format(suffix))
    file_paths = [os.path.join(config_dir, file_name)
                  for config_dir in (ETC_DIR, USER_DIR)]
    for path in file_paths:
        if path in _loaded_configuration_paths:
            _LOGGER.warning('ignored attempt to load logging configuration '
                            'file %a that has already been used', path)
            continue
        try:
            _try_reading(path)
        except OSError:
            pass
        else:
            try:
                logging.config.fileConfig(path, disable_existing_loggers=False)
            except Exception as exc:
                raise RuntimeError('error while configuring logging, '
                                   'using settings from configuration file {0!a}'
                                   .format(path)) from exc
            else:
                _LOGGER.info('logging configuration loaded from %a', path)
                _loaded_configuration_paths.add(path)
    if not _loaded_configuration_paths:
        if fallback_level is None:
            raise RuntimeError('logging configuration not loaded: '
                               'could not open any of the files: {0}'
                               .format(', '.join(map(ascii, file_paths))))
        logging.basicConfig(level=fallback_level)
        _LOGGER.debug('no logging configuration file found, basic '
                      'configuration applied (level: %s)',
                      logging.getLevelName(fallback_level))


@contextlib.contextmanager
def logging_configured(suffix=None, *, fallback_level=None):
    configure_logging(suffix, fallback_level=fallback_level)
    try:
        yield
    except SystemExit as exc:
        if exc.code:
            _LOGGER.debug("SystemExit(%a) occurred. Exiting...", exc.code)
        raise
    except KeyboardInterrupt:
        _LOGGER.warning("KeyboardInterrupt occurred. Exiting...")
        sys.exit(1)
    except Exception:
        _LOGGER.critical('Irrecoverable problem. Exiting...', exc_info=True)
        raise


def _try_reading(path):
    open(path).close()


#
# Custom log formatters

class NoTracebackFormatter(logging.Formatter):

    r"""
    >>> fmt='* %(message)s *'
    >>> std_formatter = logging.Formatter(fmt)
    >>> ntb_formatter = NoTracebackFormatter(fmt)
    >>> record = logging.LogRecord('mylog', 10, '/', 997,
    ...                            msg='error: %r', args=(42,),
    ...                            exc_info=(ValueError,
    ...                                      ValueError('Traceback!!!!!!!!!!!!'),
    ...                                      None))

    >>> std_formatter.format(record)
    '* error: 42 *\nValueError: Traceback!!!!!!!!!!!!'

    >>> ntb_formatter.format(record)
    '* error: 42 *'
    """

    def format(self, record):
        # the `logging.Formatter.format()`'s functionality
        # without the exc_info/stack_info stuff
        record.message = record.getMessage()
        if self.usesTime():
            record.asctime = self.formatTime(record, self.datefmt)
        return self.formatMessage(record)


class CutFormatter(logging.Formatter):

    r"""
    >>> fmt='* %(message)s *'
    >>> cut_formatter = CutFormatter(fmt,
    ...                              msg_length_limit=4,
    ...                              cut_indicator='... [!]')
    >>> record = logging.LogRecord('mylog', 10, '/', 997,
    ...                            msg='error: %r', args=(42,),
    ...                            exc_info=(ValueError,
    ...                                      ValueError('Traceback!!!!!!!!!!!!'),
    ...                                      None))

    >>> cut_formatter.format(record)
    '* erro... [!] *\nValueError: Traceback!!!!!!!!!!!!'
    >>> record.message    # (the record itself is left intact)
    'error: 42'
    """

    DEFAULT_MSG_LENGTH_LIMIT = 2000
    DEFAULT_CUT_INDICATOR = '... <- cut!!!'

    def __init__(self, *args, msg_length_limit=None, cut_indicator=None, **kwargs):
        self.msg_length_limit = (msg_length_limit if msg_length_limit is not None
                                 else self.DEFAULT_MSG_LENGTH_LIMIT)
        self.cut_indicator = (cut_indicator if cut_indicator is not None
                              else self.DEFAULT_CUT_INDICATOR)
        super().__init__(*args, **kwargs)

    def formatMessage(self, record):
        if len(record.message) > self.msg_length_limit:
            record = copy.copy(record)
            record.message = record.message[:self.msg_length_limit] + self.cut_indicator
        return super().formatMessage(record)


class NoTracebackCutFormatter(CutFormatter, NoTracebackFormatter):
    r"""
    >>> fmt='* %(message)s *'
    >>> ntb_cut_formatter = NoTracebackCutFormatter(fmt,
    ...                                             msg_length_limit=4,
    ...                                             cut_indicator='... [!]')
    >>> record = logging.LogRecord('mylog', 10, '/', 997,
    ...                            msg='error: %r', args=(42,),
    ...                            exc_info=(ValueError,
    ...                                      ValueError('Traceback!!!!!!!!!!!!'),
    ...                                      None))

    >>> ntb_cut_formatter.format(record)
    '* erro... [!] *'
    """
