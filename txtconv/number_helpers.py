# Copyright (c) 2025 NASK. All rights reserved.

"""
Parsing numbers that may be followed by a unit suffix.

Two families of units are supported:

* *shorthand* units, recognized by `parse_number()` (and by its
  specialized variants: `parse_int()`, `parse_long()`, `parse_float()`,
  `parse_double()`): `M` (million) and `B` (billion);

* *byte-size* units, recognized by `parse_bytes()`: `B`, `K`, `M`,
  `G`, `T`, `P`, `E`, `Z`, `Y` (powers of 1024, case-insensitive).

None of the parsing functions raises an exception when given a value
that cannot be parsed -- `None` is returned instead.
"""

import math
import re
import struct
from decimal import Decimal
from fractions import Fraction
from types import MappingProxyType

from txtconv.encoding_helpers import (
    as_unicode,
    ascii_str,
)
from txtconv.log_helpers import get_logger


LOGGER = get_logger(__name__)



#
# Public constants
#

# (never to be modified; note that these mappings are read-only)

BYTE_SCALE = MappingProxyType({
    unit: 1024 ** power
    for power, unit in enumerate('BKMGTPEZY')
})

SHORTHAND_SCALE = MappingProxyType({
    'M': 1_000_000,
    'B': 1_000_000_000,
})



#
# Non-public helpers (+ the `NUMERIC_KINDS` constant)
#

_NUMBER_REGEX_PATTERN_FMT = r'''
    \A
    \s*
    (?P<number>
        [-+]?
        [0-9]+
        (?:
            \.
            [0-9]*
        )?
        (?:
            [eE]
            [-+]?
            [0-9]+
        )?
    )
    {unit_subpattern}
    # (anything else is just ignored)
'''

def _compile_number_regex(unit_chars=''):
    if unit_chars:
        unit_subpattern = '(?P<unit>[{}])?'.format(unit_chars)
    else:
        unit_subpattern = '(?P<unit>)'
    return re.compile(
        _NUMBER_REGEX_PATTERN_FMT.format(unit_subpattern=unit_subpattern),
        re.ASCII | re.VERBOSE)


_SHORTHAND_NUMBER_REGEX = _compile_number_regex(''.join(SHORTHAND_SCALE))
_BYTES_NUMBER_REGEX = _compile_number_regex(''.join(BYTE_SCALE) + ''.join(BYTE_SCALE).lower())
_PLAIN_NUMBER_REGEX = _compile_number_regex()

# (exponent limit for `parse_bytes()`, so that no absurdly huge
# integers are materialized)
_MAX_DECIMAL_EXPONENT = 4000


def _make_integral_converter(bits):
    min_value = -(2 ** (bits - 1))
    max_value = 2 ** (bits - 1) - 1

    def convert(number_str, multiplier):
        result = int(number_str) * multiplier
        if not min_value <= result <= max_value:
            raise OverflowError('{} is out of the {}-bit integer range'.format(result, bits))
        return result

    convert.__name__ = 'int{}'.format(bits)
    return convert


def _convert_to_double(number_str, multiplier):
    result = float(number_str) * multiplier
    if not math.isfinite(result):
        raise OverflowError('{!a} is out of the double precision range'.format(number_str))
    return result


def _convert_to_float(number_str, multiplier):
    result = _convert_to_double(number_str, multiplier)
    # rounding to IEEE-754 single precision (`struct.pack()`
    # raises `OverflowError` if the value is out of range)
    [result] = struct.unpack('<f', struct.pack('<f', result))
    return result


def _convert_to_exact_integer(number_str, multiplier):
    number = Decimal(number_str)
    if number.adjusted() > _MAX_DECIMAL_EXPONENT:
        raise OverflowError('{!a} is too large'.format(number_str))
    if number.adjusted() < -len(str(multiplier)):
        # (the absolute value of the result is less than 1)
        return 0
    # (`int()` applied to a `Fraction` truncates toward zero)
    return int(Fraction(number) * multiplier)


NUMERIC_KINDS = MappingProxyType({
    'int': _make_integral_converter(32),
    'long': _make_integral_converter(64),
    'float': _convert_to_float,
    'double': _convert_to_double,
})


def _parse(value, regex, converter, unit_to_multiplier, case_insensitive_units=False):
    s = _coerce_to_str(value)
    if s is None:
        return None
    match = regex.match(s)
    if match is None:
        LOGGER.debug('%a does not look like a number', s)
        return None
    number_str, unit = match.group('number', 'unit')
    if unit:
        if case_insensitive_units:
            unit = unit.upper()
        multiplier = unit_to_multiplier[unit]
    else:
        multiplier = 1
    try:
        return converter(number_str, multiplier)
    except (ValueError, ArithmeticError) as exc:
        # (note: `OverflowError` and `decimal.InvalidOperation`
        # are subclasses of `ArithmeticError`)
        LOGGER.debug('could not convert %a to a number (%s)', s, ascii_str(exc))
        return None


def _coerce_to_str(value):
    if value is None:
        return None
    try:
        return as_unicode(value)
    except UnicodeDecodeError:
        return None



#
# Public functions
#

def parse_number(value, kind='double'):
    """
    Parse the given value (coerced to `str`) as a number, optionally
    followed by a *shorthand* unit: `M` (=> multiplied by 1,000,000)
    or `B` (=> multiplied by 1,000,000,000).

    Args:
        `value`:
            The value to be parsed. Leading whitespace is ignored, as
            is any content after the number (and the optional unit).

    Kwargs:
        `kind` (str; default: 'double'):
            The name of the numeric kind (one of the keys of the
            `NUMERIC_KINDS` mapping): 'int' (32-bit signed integer),
            'long' (64-bit signed integer), 'float' (single precision
            floating point) or 'double' (double precision floating
            point).

    Returns:
        An `int` or a `float` (depending on the numeric kind); or `None`
        if the value could not be parsed, including the cases when the
        number (after applying the unit) does not fit in the range of
        the numeric kind.

    Raises:
        `ValueError` if `kind` is not a known numeric kind name.

    >>> parse_number('42')
    42.0
    >>> parse_number(' -1.5e3 ')
    -1500.0
    >>> parse_number('1.5M')
    1500000.0
    >>> parse_number('2B', kind='long')
    2000000000
    >>> parse_number('2B', kind='int')
    2000000000
    >>> parse_number('3B', kind='int') is None     # (out of 32-bit range)
    True
    >>> parse_number('3B', kind='long')
    3000000000
    >>> parse_number('7k', kind='int')              # (unknown unit ignored)
    7
    >>> parse_number('M') is None
    True
    >>> parse_number('1.5', kind='int') is None
    True
    >>> parse_number('1e400') is None
    True
    >>> parse_number('42', kind='complex')          # doctest: +IGNORE_EXCEPTION_DETAIL
    Traceback (most recent call last):
      ...
    ValueError: ...
    """
    try:
        converter = NUMERIC_KINDS[kind]
    except KeyError:
        raise ValueError('unknown numeric kind: {}'.format(ascii_str(kind))) from None
    return _parse(value, _SHORTHAND_NUMBER_REGEX, converter, SHORTHAND_SCALE)


def parse_int(value):
    """
    >>> parse_int('3M')
    3000000
    >>> parse_int('2B')
    2000000000
    >>> parse_int('2147483648') is None
    True
    >>> parse_int('not a number') is None
    True
    """
    return parse_number(value, kind='int')


def parse_long(value):
    """
    >>> parse_long('-9223372036854775808')
    -9223372036854775808
    >>> parse_long('9223372036854775808') is None
    True
    """
    return parse_number(value, kind='long')


def parse_float(value):
    """
    >>> parse_float('0.5M')
    500000.0
    >>> parse_float('0.1')
    0.10000000149011612
    >>> parse_float('1e39') is None
    True
    """
    return parse_number(value, kind='float')


def parse_double(value):
    """
    >>> parse_double('0.1')
    0.1
    >>> parse_double('1e39')
    1e+39
    """
    return parse_number(value, kind='double')


def parse_bytes(value):
    """
    Parse the given value (coerced to `str`) as a byte size: a number
    optionally followed by a single-letter (case-insensitive) unit: `B`
    (bytes), `K` (kibibytes), `M` (mebibytes), `G`, `T`, `P`, `E`, `Z`,
    `Y` (see: `BYTE_SCALE`).

    The number is multiplied by the unit's scale as an *exact* decimal
    value, and then the result is truncated (toward zero) to an `int`.

    Returns:
        An `int`, or `None` if the value could not be parsed.

    >>> parse_bytes('10')
    10
    >>> parse_bytes('10B')
    10
    >>> parse_bytes('1.5K')
    1536
    >>> parse_bytes('1.5k')
    1536
    >>> parse_bytes('2M')
    2097152
    >>> parse_bytes('0.3K')
    307
    >>> parse_bytes('1Y')
    1208925819614629174706176
    >>> parse_bytes('1.5Y')
    1813388729421943762059264
    >>> parse_bytes('-1.5K')
    -1536
    >>> parse_bytes('5Q')     # (unknown unit ignored)
    5
    >>> parse_bytes('abc') is None
    True
    >>> parse_bytes('K') is None
    True
    """
    return _parse(value, _BYTES_NUMBER_REGEX, _convert_to_exact_integer, BYTE_SCALE,
                  case_insensitive_units=True)


def parse_percent(value):
    """
    Parse the given value (coerced to `str`), ignoring any `%`
    characters in it, as a double precision floating point number
    (*without* applying any unit suffixes).

    >>> parse_percent('42.5%')
    42.5
    >>> parse_percent('%12')
    12.0
    >>> parse_percent('5M%')
    5.0
    >>> parse_percent('%') is None
    True
    """
    s = _coerce_to_str(value)
    if s is None:
        return None
    return _parse(s.replace('%', ''), _PLAIN_NUMBER_REGEX, _convert_to_double, {})
