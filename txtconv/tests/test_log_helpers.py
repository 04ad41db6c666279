# Copyright (c) 2013-2025 NASK. All rights reserved.

import configparser
import importlib
import logging
import os.path
import types
import unittest
from unittest.mock import call, patch, sentinel

from unittest_expander import expand, foreach, param

import txtconv
from txtconv.const import ETC_DIR, USER_DIR
from txtconv.log_helpers import (
    CutFormatter,
    NoTracebackCutFormatter,
    NoTracebackFormatter,
    configure_logging,
    get_logger,
    logging_configured,
)


@expand
class Test__get_logger(unittest.TestCase):

    def test_regular_name(self):
        self.assertIs(get_logger('txtconv.foo'), logging.getLogger('txtconv.foo'))
        self.assertIs(get_logger(), logging.getLogger())

    @foreach(
        param('/whatever/txtconv/foo.py', expected_name='txtconv.foo'),
        param('/whatever/txtconv/sub/foo.py', expected_name='txtconv.sub.foo'),
        param('/x/y/script.py', expected_name='x.y.script'),
        param('../script', expected_name='DD.script'),
    )
    def test_main_with_file(self, script_path, expected_name):
        fake_main = types.SimpleNamespace(__file__=script_path)
        with patch.dict('sys.modules', {'__main__': fake_main}):
            logger = get_logger('__main__')
        self.assertEqual(logger.name, expected_name)

    def test_main_without_file(self):
        fake_main = types.SimpleNamespace()
        with patch.dict('sys.modules', {'__main__': fake_main}), \
             patch('sys.argv', ['/usr/lib/txtconv/cli.py', 'parse-url']):
            logger = get_logger('__main__')
        self.assertEqual(logger.name, 'txtconv.cli')


@patch('txtconv.log_helpers._loaded_configuration_paths', new_callable=set)
@patch('txtconv.log_helpers._try_reading')
@patch('txtconv.log_helpers._LOGGER')
@patch('txtconv.log_helpers.logging')
class Test__configure_logging(unittest.TestCase):

    etc_path = os.path.join(ETC_DIR, 'logging.conf')
    user_path = os.path.join(USER_DIR, 'logging.conf')
    etc_path_suffixed = os.path.join(ETC_DIR, 'logging-mysuffix.conf')
    user_path_suffixed = os.path.join(USER_DIR, 'logging-mysuffix.conf')

    def test_no_file(self, mocked__logging,
                     mocked___LOGGER,
                     mocked__try_reading,
                     _loaded_configuration_paths):
        mocked__try_reading.side_effect = OSError
        mocked__fileConfig = mocked__logging.config.fileConfig
        with self.assertRaises(RuntimeError):
            configure_logging()
        self.assertFalse(_loaded_configuration_paths)
        self.assertEqual(mocked__try_reading.call_args_list,
                         [call(self.etc_path),
                          call(self.user_path)])
        self.assertFalse(mocked__fileConfig.called)
        self.assertFalse(mocked__logging.basicConfig.called)
        # and when repeated...
        mocked__try_reading.reset_mock()
        with self.assertRaises(RuntimeError):
            configure_logging()
        self.assertFalse(_loaded_configuration_paths)
        self.assertEqual(mocked__try_reading.call_args_list,
                         # both paths tried again:
                         [call(self.etc_path),
                          call(self.user_path)])
        self.assertFalse(mocked__fileConfig.called)

    def test_no_file_with_fallback_level(self, mocked__logging,
                                         mocked___LOGGER,
                                         mocked__try_reading,
                                         _loaded_configuration_paths):
        mocked__try_reading.side_effect = OSError
        mocked__fileConfig = mocked__logging.config.fileConfig
        configure_logging(fallback_level=sentinel.level)
        self.assertFalse(_loaded_configuration_paths)
        self.assertFalse(mocked__fileConfig.called)
        self.assertEqual(mocked__logging.basicConfig.call_args_list,
                         [call(level=sentinel.level)])

    def test_etc_file_only(self, mocked__logging,
                           mocked___LOGGER,
                           mocked__try_reading,
                           _loaded_configuration_paths):
        # ok for etc path, error for user path
        mocked__try_reading.side_effect = [None, OSError]
        mocked__fileConfig = mocked__logging.config.fileConfig
        configure_logging()
        self.assertEqual(_loaded_configuration_paths, {self.etc_path})
        self.assertEqual(mocked__try_reading.call_args_list,
                         [call(self.etc_path),
                          call(self.user_path)])
        self.assertEqual(mocked__fileConfig.call_args_list,
                         [call(self.etc_path,
                               disable_existing_loggers=False)])
        # and when repeated...
        mocked__fileConfig.reset_mock()
        mocked__try_reading.reset_mock()
        mocked__try_reading.side_effect = OSError
        configure_logging()
        self.assertEqual(_loaded_configuration_paths, {self.etc_path})
        self.assertEqual(mocked__try_reading.call_args_list,
                         # only user path tried again:
                         [call(self.user_path)])
        self.assertFalse(mocked__fileConfig.called)

    def test_user_file_only(self, mocked__logging,
                            mocked___LOGGER,
                            mocked__try_reading,
                            _loaded_configuration_paths):
        # error for etc path, ok for user path
        mocked__try_reading.side_effect = [OSError, None]
        mocked__fileConfig = mocked__logging.config.fileConfig
        configure_logging(fallback_level=sentinel.level)
        self.assertEqual(_loaded_configuration_paths, {self.user_path})
        self.assertEqual(mocked__try_reading.call_args_list,
                         [call(self.etc_path),
                          call(self.user_path)])
        self.assertEqual(mocked__fileConfig.call_args_list,
                         [call(self.user_path,
                               disable_existing_loggers=False)])
        # (file loaded, so the fallback is not used)
        self.assertFalse(mocked__logging.basicConfig.called)

    def test_both_files_exist(self, mocked__logging,
                              mocked___LOGGER,
                              mocked__try_reading,
                              _loaded_configuration_paths):
        mocked__fileConfig = mocked__logging.config.fileConfig
        configure_logging()
        self.assertEqual(_loaded_configuration_paths, {self.etc_path,
                                                       self.user_path})
        self.assertEqual(mocked__try_reading.call_args_list,
                         [call(self.etc_path),
                          call(self.user_path)])
        self.assertEqual(mocked__fileConfig.call_args_list,
                         [call(self.etc_path,
                               disable_existing_loggers=False),
                          call(self.user_path,
                               disable_existing_loggers=False)])
        # and when repeated...
        mocked__fileConfig.reset_mock()
        mocked__try_reading.reset_mock()
        configure_logging()
        self.assertEqual(_loaded_configuration_paths, {self.etc_path,
                                                       self.user_path})
        self.assertFalse(mocked__try_reading.called)
        self.assertFalse(mocked__fileConfig.called)
        self.assertEqual(mocked___LOGGER.warning.call_count, 2)

    def test_with_suffix(self, mocked__logging,
                         mocked___LOGGER,
                         mocked__try_reading,
                         _loaded_configuration_paths):
        mocked__fileConfig = mocked__logging.config.fileConfig
        configure_logging('mysuffix')
        self.assertEqual(_loaded_configuration_paths, {self.etc_path_suffixed,
                                                       self.user_path_suffixed})
        self.assertEqual(mocked__try_reading.call_args_list,
                         [call(self.etc_path_suffixed),
                          call(self.user_path_suffixed)])
        self.assertEqual(mocked__fileConfig.call_args_list,
                         [call(self.etc_path_suffixed,
                               disable_existing_loggers=False),
                          call(self.user_path_suffixed,
                               disable_existing_loggers=False)])

    def test_broken_file(self, mocked__logging,
                         mocked___LOGGER,
                         mocked__try_reading,
                         _loaded_configuration_paths):
        mocked__fileConfig = mocked__logging.config.fileConfig
        mocked__fileConfig.side_effect = KeyError('formatters')
        with self.assertRaises(RuntimeError) as cm:
            configure_logging(fallback_level=sentinel.level)
        self.assertIsInstance(cm.exception.__cause__, KeyError)
        self.assertFalse(_loaded_configuration_paths)
        self.assertFalse(mocked__logging.basicConfig.called)


@patch('txtconv.log_helpers._LOGGER')
@patch('txtconv.log_helpers.configure_logging')
class Test__logging_configured(unittest.TestCase):

    def test_ok(self, mocked__configure_logging, mocked___LOGGER):
        with logging_configured('mysuffix', fallback_level=sentinel.level):
            pass
        self.assertEqual(mocked__configure_logging.call_args_list,
                         [call('mysuffix', fallback_level=sentinel.level)])
        self.assertFalse(mocked___LOGGER.critical.called)

    def test_system_exit_propagated(self, mocked__configure_logging, mocked___LOGGER):
        with self.assertRaises(SystemExit) as cm:
            with logging_configured():
                raise SystemExit(3)
        self.assertEqual(cm.exception.code, 3)
        self.assertTrue(mocked___LOGGER.debug.called)
        self.assertFalse(mocked___LOGGER.critical.called)

    def test_keyboard_interrupt_turned_into_exit(self, mocked__configure_logging,
                                                 mocked___LOGGER):
        with self.assertRaises(SystemExit) as cm:
            with logging_configured():
                raise KeyboardInterrupt
        self.assertEqual(cm.exception.code, 1)
        self.assertTrue(mocked___LOGGER.warning.called)

    def test_exception_logged_and_propagated(self, mocked__configure_logging,
                                             mocked___LOGGER):
        with self.assertRaises(ZeroDivisionError):
            with logging_configured():
                1 / 0
        self.assertEqual(mocked___LOGGER.critical.call_count, 1)


class Test__formatters(unittest.TestCase):

    def _make_record(self, msg):
        try:
            raise ValueError('Traceback!')
        except ValueError as exc:
            exc_info = (ValueError, exc, exc.__traceback__)
        return logging.LogRecord('mylog', logging.ERROR, '/', 997,
                                 msg=msg, args=(), exc_info=exc_info)

    def test_NoTracebackFormatter(self):
        record = self._make_record('error')
        formatted = NoTracebackFormatter('%(levelname)s: %(message)s').format(record)
        self.assertEqual(formatted, 'ERROR: error')

    def test_CutFormatter_default_limit(self):
        record = self._make_record('x' * (CutFormatter.DEFAULT_MSG_LENGTH_LIMIT + 1))
        formatted = CutFormatter('%(message)s').format(record)
        self.assertTrue(formatted.startswith(
            'x' * CutFormatter.DEFAULT_MSG_LENGTH_LIMIT
            + CutFormatter.DEFAULT_CUT_INDICATOR + '\n'))
        self.assertIn('ValueError: Traceback!', formatted)

    def test_CutFormatter_short_message_intact(self):
        record = self._make_record('short')
        formatted = CutFormatter('%(message)s', msg_length_limit=5).format(record)
        self.assertTrue(formatted.startswith('short\n'))

    def test_NoTracebackCutFormatter(self):
        record = self._make_record('abcdef')
        formatter = NoTracebackCutFormatter('%(message)s',
                                            msg_length_limit=3,
                                            cut_indicator='[...]')
        self.assertEqual(formatter.format(record), 'abc[...]')


class Test__example_logging_conf(unittest.TestCase):

    path = os.path.join(os.path.dirname(txtconv.__file__), 'data', 'conf', 'logging.conf')

    def setUp(self):
        self.config_parser = configparser.ConfigParser()
        with open(self.path, encoding='utf-8') as f:
            self.config_parser.read_file(f)

    def test_sections(self):
        for kind in ['loggers', 'handlers', 'formatters']:
            for key in self.config_parser[kind]['keys'].split(','):
                sect_name = '{}_{}'.format(kind[:-1], key.strip())
                self.assertIn(sect_name, self.config_parser)

    def test_formatter(self):
        formatter_sect = self.config_parser['formatter_brief']
        module_name, _, class_name = formatter_sect['class'].rpartition('.')
        formatter_class = getattr(importlib.import_module(module_name), class_name)
        self.assertIs(formatter_class, NoTracebackCutFormatter)

        formatter = formatter_class(formatter_sect.get('format', raw=True))
        try:
            raise ValueError('Traceback!')
        except ValueError as exc:
            exc_info = (ValueError, exc, exc.__traceback__)
        record = logging.LogRecord('txtconv.cli', logging.ERROR, '/', 997,
                                   msg='error: %a', args=('x',), exc_info=exc_info)
        self.assertEqual(formatter.format(record), "txtconv [ERROR] txtconv.cli: error: 'x'")
