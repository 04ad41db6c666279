# Copyright (c) 2013-2025 NASK. All rights reserved.

import configparser
import os
import os.path as osp
import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import (
    Callable,
    Final,
    Optional,
)

from txtconv.const import ETC_DIR, USER_DIR
from txtconv.encoding_helpers import (
    as_unicode,
    ascii_str,
    str_to_bool,
)
from txtconv.log_helpers import get_logger
from txtconv.number_helpers import parse_bytes


LOGGER = get_logger(__name__)


OptConverter = Callable[[str], object]



#
# Exceptions
#

class ConfigError(Exception):

    """
    A generic, `Config`-related, exception class.

    >>> print(ConfigError('Some Message'))
    [configuration-related error] Some Message

    >>> from decimal import Decimal as D
    >>> print(ConfigError('Some arg', D(42), 'Yet another arg'))
    [configuration-related error] ('Some arg', Decimal('42'), 'Yet another arg')
    """

    def __str__(self):
        return '[configuration-related error] ' + super().__str__()


class _KeyErrorSubclassMixin(KeyError):  # a non-public helper

    def __str__(self):
        # (skipping `KeyError.__str__()` which applies `repr()`
        # to the value of the sole argument)
        return super(KeyError, self).__str__()


class NoConfigSectionError(_KeyErrorSubclassMixin, ConfigError):

    """
    Raised by `Config.__getitem__()` when the specified section is missing.

    >>> exc = NoConfigSectionError('some_sect')
    >>> isinstance(exc, ConfigError) and isinstance(exc, KeyError)
    True
    >>> print(exc)
    [configuration-related error] no config section `some_sect`
    >>> exc.sect_name
    'some_sect'
    """

    def __init__(self, sect_name=None):
        sect_ref = f'`{sect_name}`' if sect_name is not None else '<unspecified>'
        super().__init__(f'no config section {sect_ref}')
        self.sect_name = sect_name


class NoConfigOptionError(_KeyErrorSubclassMixin, ConfigError):

    """
    Raised by `ConfigSection.__getitem__()` when the specified option is missing.

    >>> exc = NoConfigOptionError('mysect', 'myopt')
    >>> isinstance(exc, ConfigError) and isinstance(exc, KeyError)
    True
    >>> print(exc)
    [configuration-related error] no config option `myopt` in section `mysect`
    >>> exc.sect_name, exc.opt_name
    ('mysect', 'myopt')
    """

    def __init__(self, sect_name=None, opt_name=None):
        sect_ref = f'`{sect_name}`' if sect_name is not None else '<unspecified>'
        opt_ref = f'`{opt_name}`' if opt_name is not None else '<unspecified>'
        super().__init__(f'no config option {opt_ref} in section {sect_ref}')
        self.sect_name = sect_name
        self.opt_name = opt_name



#
# Config spec parsing
#

_SECT_HEADER_REGEX = re.compile(r'\A\[(?P<name>[^\]]+)\]\Z')
_FREE_OPTS_REGEX = re.compile(r'\A\.\.\.(?:\s*::\s*(?P<converter_spec>\S+))?\Z')
_OPT_REGEX = re.compile(r'''
    \A
    (?P<name>
        [^=\s:\[]+
    )
    \s*
    (?:
        =
        \s*
        (?P<default>
            .*?
        )
    )?
    \s*
    (?:
        ::
        \s*
        (?P<converter_spec>
            \S+
        )
    )?
    \s*
    \Z
''', re.VERBOSE)


@dataclass
class _OptSpec:
    name: str                       # option name
    default: Optional[str]          # default value (None => option is required)
    converter_spec: str = 'str'     # value converter name (aka *converter spec*)


@dataclass
class _SectSpec:
    name: str
    opt_specs: list[_OptSpec] = field(default_factory=list)
    free_opts_allowed: bool = False
    free_opts_converter_spec: str = 'str'

    @property
    def required(self) -> bool:
        """Whether the section is obligatory."""
        return any(opt.default is None for opt in self.opt_specs)


def parse_config_spec(config_spec):
    r"""
    Parse the given *config spec* string.

    A *config spec* looks like an INI file whose option lines have the
    form: `<name> [= <default>] [:: <converter spec>]`; an option with
    no default is *required*; the `...` line (optionally followed by
    `:: <converter spec>`) means that *free* (undeclared) options are
    allowed in the section. The `""` default means the empty string.
    Lines starting with `#` or `;` are comments.

    Returns:
        A list of `_SectSpec` instances.

    Raises:
        `ConfigError` if the config spec is malformed.

    >>> [sect_spec] = parse_config_spec('''
    ...     [foo]
    ...     # a comment
    ...     abc = 42 :: int
    ...     name = ""
    ...     spam :: list_of_str
    ...     ...
    ... ''')
    >>> sect_spec.name, sect_spec.required, sect_spec.free_opts_allowed
    ('foo', True, True)
    >>> for opt_spec in sect_spec.opt_specs:
    ...     print(opt_spec)
    _OptSpec(name='abc', default='42', converter_spec='int')
    _OptSpec(name='name', default='', converter_spec='str')
    _OptSpec(name='spam', default=None, converter_spec='list_of_str')

    >>> parse_config_spec('abc = 42')                  # doctest: +IGNORE_EXCEPTION_DETAIL
    Traceback (most recent call last):
      ...
    ConfigError: ...
    """
    sect_specs = []
    cur_sect_spec = None
    for line_no, line in enumerate(as_unicode(config_spec).splitlines(), start=1):
        line = line.strip()
        if not line or line.startswith(('#', ';')):
            continue
        match = _SECT_HEADER_REGEX.search(line)
        if match:
            cur_sect_spec = _SectSpec(match['name'].strip())
            sect_specs.append(cur_sect_spec)
            continue
        if cur_sect_spec is None:
            raise ConfigError('config spec line #{} ({}) is not within '
                              'any section'.format(line_no, ascii_str(line)))
        match = _FREE_OPTS_REGEX.search(line)
        if match:
            cur_sect_spec.free_opts_allowed = True
            cur_sect_spec.free_opts_converter_spec = (
                match['converter_spec'] or Config.DEFAULT_CONVERTER_SPEC)
            continue
        match = _OPT_REGEX.search(line)
        if match is None:
            raise ConfigError('config spec line #{} ({}) is '
                              'malformed'.format(line_no, ascii_str(line)))
        default = match['default']
        if default == '""':
            default = ''
        cur_sect_spec.opt_specs.append(_OptSpec(
            name=match['name'].lower(),
            default=default,
            converter_spec=(match['converter_spec'] or Config.DEFAULT_CONVERTER_SPEC)))
    return sect_specs



#
# Config and ConfigSection
#

def _make_list_converter(item_converter, name, delimiter=','):

    def converter(s):
        s = s.strip()
        if s.endswith(delimiter):
            # remove trailing delimiter
            s = s[:-len(delimiter)].rstrip()
        if s:
            return [item_converter(item.strip())
                    for item in s.split(delimiter)]
        else:
            return []

    converter.__name__ = name
    return converter


def _bytes_size_converter(s):
    value = parse_bytes(s)
    if value is None:
        raise ValueError('{!a} is not a valid byte size'.format(s))
    return value


class Config(dict):

    r"""
    Parse the configuration and provide a `dict`-like access to it.

    A `Config` instance maps configuration section names (`str`) to
    `ConfigSection` instances. Lookup-by-key failures are signalled
    with `NoConfigSectionError` (a subclass of both `KeyError` and
    `ConfigError`).

    Args:
        `config_spec` (str):
            The *config spec* (see: `parse_config_spec()`) that declares
            which sections and options are expected, what are their
            default values and which converters are to be applied.

    Kwargs:
        `settings` (a mapping or `None`; default: `None`):
            If `None`, the configuration is loaded from the `*.conf`
            files (see: `DEFAULT_CONFIG_FILENAME_REGEX`) that are placed
            in `/etc/txtconv/` and `~/.txtconv/` (the latter ones take
            precedence). Otherwise, it should be a mapping whose keys
            are `'<section>.<option>'` strings and whose values are
            strings to be converted -- then no files are read.
        `overrides` (a dict or `None`; default: `None`):
            A dict that maps section names to dicts of option names
            mapped to raw values; they replace any loaded values (see:
            `txtconv.argument_parser`).
        `custom_converters` (a mapping or `None`; default: `None`):
            Additional converters (their names can be used in the
            config spec).

    Raises:
        `ConfigError` -- if the configuration is not valid (e.g., a
        required option is missing, or a converter failed).

    >>> config_spec = '''
    ... [foo]
    ... abc = 42 :: int
    ... sizes = 1K, 2K :: list_of_str
    ... limit = 64K :: bytes_size
    ... enabled = no :: bool
    ...
    ... [bar]
    ... spam
    ... '''
    >>> config = Config(config_spec, settings={'bar.spam': 'Ham'},
    ...                 overrides={'foo': {'enabled': 'yes'}})
    >>> config['foo'] == {'abc': 42, 'sizes': ['1K', '2K'], 'limit': 65536, 'enabled': True}
    True
    >>> config['bar']
    ConfigSection('bar', {'spam': 'Ham'})
    >>> config['bar']['spam']
    'Ham'
    >>> config['bar']['eggs']                          # doctest: +IGNORE_EXCEPTION_DETAIL
    Traceback (most recent call last):
      ...
    NoConfigOptionError: ...
    >>> config['baz']                                  # doctest: +IGNORE_EXCEPTION_DETAIL
    Traceback (most recent call last):
      ...
    NoConfigSectionError: ...

    >>> Config(config_spec, settings={})               # doctest: +IGNORE_EXCEPTION_DETAIL
    Traceback (most recent call last):
      ...
    ConfigError: missing required config sections: bar
    """

    DEFAULT_CONVERTER_SPEC: Final[str] = 'str'
    BASIC_CONVERTERS: Final[Mapping[str, OptConverter]] = {
        'str': str,
        'bool': str_to_bool,
        'int': int,
        'float': float,
        'bytes_size': _bytes_size_converter,
        'list_of_str': _make_list_converter(str, 'list_of_str'),
        'list_of_int': _make_list_converter(int, 'list_of_int'),
    }
    assert DEFAULT_CONVERTER_SPEC in BASIC_CONVERTERS

    DEFAULT_CONFIG_FILENAME_REGEX: Final[str] = r'\A[0-9][0-9]_.*\.conf\Z'
    DEFAULT_CONFIG_FILENAME_EXCLUDING_REGEX: Final[str] = r'\Alogging[-.]'

    def __init__(self, config_spec, /, *,
                 settings=None,
                 overrides=None,
                 custom_converters=None):
        super().__init__()
        converters = {
            **self.BASIC_CONVERTERS,
            **(custom_converters or {}),
        }
        try:
            sect_specs = parse_config_spec(config_spec)
            if settings is None:
                sect_name_to_opt_dict = self._load_config_files()
            else:
                sect_name_to_opt_dict = self._convert_settings_mapping(settings)
            self._apply_overrides(sect_name_to_opt_dict, overrides or {})
            self.update(
                (config_sect.sect_name, config_sect)
                for config_sect in self._make_config_sections(
                    sect_name_to_opt_dict,
                    sect_specs,
                    converters))
        except ConfigError as exc:
            LOGGER.error('%s', ascii_str(exc))
            raise
        except Exception as exc:
            e = ConfigError('{0}: {1}'.format(type(exc).__qualname__, ascii_str(exc)))
            LOGGER.error('%s', e, exc_info=True)
            raise e from exc
        finally:
            e = None  # noqa   # To break a traceback-related reference cycle (if any).

    @classmethod
    def section(cls, config_spec, sect_name=None, /, **kwargs):
        """
        A class method that creates a `Config` and picks one section.

        Args:
            `config_spec` -- like for the `Config` constructor.
            `sect_name` (optional) -- the name of the section to pick;
            if not given, the config spec is required to define exactly
            one section.

        Kwargs: like for the `Config` constructor.

        Returns:
            A `ConfigSection` instance.

        Raises:
            `ConfigError` -- also if the section cannot be picked.

        >>> config_spec = '''
        ... [foo]
        ... abc = 42 :: int'''
        >>> Config.section(config_spec, settings={'foo.abc': '123'})
        ConfigSection('foo', {'abc': 123})
        >>> Config.section(config_spec, 'foo', settings={})
        ConfigSection('foo', {'abc': 42})

        >>> Config.section('', settings={})             # doctest: +IGNORE_EXCEPTION_DETAIL
        Traceback (most recent call last):
          ...
        ConfigError: ...but no sections found
        """
        config = cls(config_spec, **kwargs)
        if sect_name is not None:
            return config[sect_name]
        try:
            [section] = config.values()
        except ValueError:
            all_sections = sorted(config)
            sections_descr = (
                'the following sections found: {0}'.format(
                    ', '.join(map(repr, map(ascii_str, all_sections))))
                if all_sections else 'no sections found')
            raise ConfigError(
                'expected config spec that defines '
                'exactly one section but ' + sections_descr) from None
        return section

    def __missing__(self, key):
        raise NoConfigSectionError(key)

    def __repr__(self):
        return '{}({})'.format(type(self).__qualname__, super().__repr__())

    #
    # Non-public helpers

    # internal sentinel object
    _NOT_CONVERTED = object()

    def _convert_settings_mapping(self, settings):
        sect_name_to_opt_dict = {}
        for key, value in settings.items():
            if not isinstance(value, str):
                LOGGER.warning('Coercing non-`str` value %a (of setting %s) '
                               'to `str` (before further conversion)',
                               value, ascii_str(key))
                value = as_unicode(value)
            sect_name, dotted, opt_name = key.partition('.')
            if not dotted:
                raise ConfigError('setting key {!a} does not have the '
                                  '<section>.<option> form'.format(key))
            opt_name_to_value = sect_name_to_opt_dict.setdefault(sect_name, {})
            opt_name_to_value[opt_name.lower()] = value
        return sect_name_to_opt_dict

    @staticmethod
    def _apply_overrides(sect_name_to_opt_dict, overrides):
        for sect_name, opt_name_to_value in overrides.items():
            sect_name_to_opt_dict.setdefault(sect_name, {}).update(
                (opt_name.lower(), value)
                for opt_name, value in opt_name_to_value.items())

    def _make_config_sections(self,
                              sect_name_to_opt_dict,
                              sect_specs,
                              converters):
        resultant_config_sections = []
        conversion_errors = []
        missing_sect_names = []
        missing_opt_locations = []
        illegal_opt_locations = []

        for sect_spec in sect_specs:
            input_opt_dict = sect_name_to_opt_dict.get(sect_spec.name)
            if input_opt_dict is None:
                if sect_spec.required:
                    missing_sect_names.append(sect_spec.name)
                    continue
                input_opt_dict = {}

            resultant_config_sect = ConfigSection(sect_spec.name)
            for opt_spec in sect_spec.opt_specs:
                opt_location = '{0}.{1}'.format(sect_spec.name, opt_spec.name)
                opt_value = input_opt_dict.get(opt_spec.name)
                if opt_value is None:
                    if opt_spec.default is None:
                        missing_opt_locations.append(opt_location)
                        continue
                    opt_value = opt_spec.default
                opt_value = self._convert_value(
                    'option {0}'.format(ascii_str(opt_location)),
                    opt_value,
                    opt_spec.converter_spec,
                    converters,
                    conversion_errors)
                if opt_value is self._NOT_CONVERTED:
                    continue
                resultant_config_sect[opt_spec.name] = opt_value

            free_opt_names = sorted(
                input_opt_dict.keys() - {opt_spec.name for opt_spec in sect_spec.opt_specs})
            if free_opt_names:
                if sect_spec.free_opts_allowed:
                    for opt_name in free_opt_names:
                        opt_value = self._convert_value(
                            'option {0}.{1}'.format(sect_spec.name, opt_name),
                            input_opt_dict[opt_name],
                            sect_spec.free_opts_converter_spec,
                            converters,
                            conversion_errors)
                        if opt_value is self._NOT_CONVERTED:
                            continue
                        resultant_config_sect[opt_name] = opt_value
                else:
                    illegal_opt_locations.extend(
                        '{0}.{1}'.format(sect_spec.name, opt_name)
                        for opt_name in free_opt_names)

            resultant_config_sections.append(resultant_config_sect)

        if (conversion_errors or
              missing_sect_names or
              missing_opt_locations or
              illegal_opt_locations):
            error_msg = '; '.join(filter(None, [
                    ("missing required config sections: {0}".format(
                        ", ".join(map(ascii_str, missing_sect_names)))
                     if missing_sect_names else None),
                    ("missing required config options: {0}".format(
                        ", ".join(map(ascii_str, missing_opt_locations)))
                     if missing_opt_locations else None),
                    ("illegal config options: {0}".format(
                        ", ".join(map(ascii_str, illegal_opt_locations)))
                     if illegal_opt_locations else None)
                ] + conversion_errors))
            raise ConfigError(error_msg)

        return resultant_config_sections

    def _convert_value(self, opt_descr, opt_value, converter_spec, converters, conversion_errors):
        try:
            converter = converters[converter_spec]
        except KeyError:
            conversion_errors.append(
                'unknown config value converter '
                '`{0}` (for {1})'.format(converter_spec, opt_descr))
            return self._NOT_CONVERTED
        try:
            return converter(opt_value)
        except Exception as exc:
            conversion_errors.append(
                'error when applying config value converter {0!a} '
                'to {1}={2!a} ({3}: {4})'.format(
                    getattr(converter, '__name__', converter),
                    opt_descr,
                    opt_value,
                    type(exc).__qualname__,
                    ascii_str(exc)))
            # We use this special sentinel object because `None` is a valid value.
            return self._NOT_CONVERTED

    @classmethod
    def _load_config_files(cls):
        sect_name_to_opt_dict = {}
        config_parser = configparser.ConfigParser(interpolation=None)
        config_files = []
        config_files.extend(cls._get_config_file_paths(ETC_DIR))
        config_files.extend(cls._get_config_file_paths(USER_DIR))
        if not config_files:
            LOGGER.debug('No config files to read')
            return sect_name_to_opt_dict

        ok_config_files = config_parser.read(config_files, encoding='utf-8')
        err_config_files = set(config_files).difference(ok_config_files)
        if err_config_files:
            LOGGER.warning(
                'Config files that could not be read '
                '(check their permission modes?): %s', ', '.join(
                    '"{0}"'.format(ascii_str(name))
                    for name in sorted(
                        err_config_files,
                        key=config_files.index)))
        if ok_config_files:
            LOGGER.info('Config files read properly: %s', ', '.join(
                '"{0}"'.format(ascii_str(name))
                for name in ok_config_files))

        for sect_name in config_parser.sections():
            sect_name_to_opt_dict[sect_name] = dict(config_parser.items(sect_name))
        return sect_name_to_opt_dict

    @classmethod
    def _get_config_file_paths(cls, path):
        """
        Get the paths of configuration files from a given dir.

        (All files whose names match `DEFAULT_CONFIG_FILENAME_REGEX`
        except those whose names match
        `DEFAULT_CONFIG_FILENAME_EXCLUDING_REGEX`.)

        Returns:
            A sorted list of paths of configuration files.
        """
        config_filename_regex = re.compile(cls.DEFAULT_CONFIG_FILENAME_REGEX)
        config_filename_excluding_regex = re.compile(cls.DEFAULT_CONFIG_FILENAME_EXCLUDING_REGEX)
        config_files = []
        for directory, _, fnames in os.walk(path):
            for fname in fnames:
                if (config_filename_regex.search(fname)
                      and not config_filename_excluding_regex.search(fname)):
                    config_files.append(osp.join(directory, fname))
        return sorted(config_files)


class ConfigSection(dict):

    """
    A subclass of `dict`; its instances are values of `Config` mappings.

    Lookup-by-key failures are signalled with `NoConfigOptionError`
    (a subclass of both `KeyError` and `ConfigError`).

    >>> s = ConfigSection('some_sect', {'some_opt': 'FOO_bar,spam'})
    >>> s
    ConfigSection('some_sect', {'some_opt': 'FOO_bar,spam'})
    >>> s.sect_name
    'some_sect'
    >>> s['some_opt']
    'FOO_bar,spam'
    >>> s == {'some_opt': 'FOO_bar,spam'}
    True
    >>> s == ConfigSection('another_sect', {'some_opt': 'FOO_bar,spam'})
    False
    >>> s != ConfigSection('another_sect', {'some_opt': 'FOO_bar,spam'})
    True
    >>> s['another_opt']                               # doctest: +IGNORE_EXCEPTION_DETAIL
    Traceback (most recent call last):
      ...
    NoConfigOptionError: ...
    """

    def __init__(self, sect_name, opt_name_to_value=None):
        self.sect_name = sect_name
        if opt_name_to_value is None:
            opt_name_to_value = {}
        super().__init__(opt_name_to_value)

    def __eq__(self, other):
        if isinstance(other, ConfigSection) and other.sect_name != self.sect_name:
            return False
        return super().__eq__(other)

    def __ne__(self, other):
        equal = self.__eq__(other)
        if equal is NotImplemented:
            return NotImplemented
        return not equal

    def __missing__(self, key):
        raise NoConfigOptionError(self.sect_name, key)

    def __repr__(self):
        return '{}({!r}, {})'.format(type(self).__qualname__,
                                     self.sect_name,
                                     super().__repr__())
