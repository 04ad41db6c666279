# Copyright (c) 2025 NASK. All rights reserved.

import unittest
from unittest.mock import patch

from unittest_expander import (
    expand,
    foreach,
    param,
)

from txtconv.number_helpers import (
    BYTE_SCALE,
    NUMERIC_KINDS,
    SHORTHAND_SCALE,
    parse_bytes,
    parse_double,
    parse_float,
    parse_int,
    parse_long,
    parse_number,
    parse_percent,
)
from txtconv.tests._generic_helpers import TestCaseMixin


@expand
class Test__scale_constants(unittest.TestCase):

    def test_BYTE_SCALE(self):
        self.assertEqual(dict(BYTE_SCALE), {
            'B': 1,
            'K': 1024,
            'M': 1024 ** 2,
            'G': 1024 ** 3,
            'T': 1024 ** 4,
            'P': 1024 ** 5,
            'E': 1024 ** 6,
            'Z': 1024 ** 7,
            'Y': 1024 ** 8,
        })

    def test_SHORTHAND_SCALE(self):
        self.assertEqual(dict(SHORTHAND_SCALE), {
            'M': 1000000,
            'B': 1000000000,
        })

    def test_NUMERIC_KINDS(self):
        self.assertEqual(sorted(NUMERIC_KINDS), ['double', 'float', 'int', 'long'])

    @foreach(
        param(BYTE_SCALE).label('BYTE_SCALE'),
        param(SHORTHAND_SCALE).label('SHORTHAND_SCALE'),
        param(NUMERIC_KINDS).label('NUMERIC_KINDS'),
    )
    def test_read_only(self, mapping):
        with self.assertRaises(TypeError):
            mapping['X'] = 42                                       # noqa
        with self.assertRaises(TypeError):
            del mapping[next(iter(mapping))]                        # noqa


@expand
class Test__parse_number(TestCaseMixin, unittest.TestCase):

    @foreach(
        param('42', expected=42.0),
        param('-42', expected=-42.0),
        param('+7', expected=7.0),
        param(' -1.5e3 ', expected=-1500.0).label('whitespace around'),
        param('5.', expected=5.0),
        param('1.5M', expected=1500000.0),
        param('2B', expected=2000000000.0),
        param('1e3M', expected=1000000000.0),
        param('12abc', expected=12.0).label('trailing garbage ignored'),
        param('3m', expected=3.0).label('lowercase unit letter is garbage'),
        param('5K', expected=5.0).label('byte unit letter is garbage'),
        param(b'42', expected=42.0).label('bytes'),
        param(42, expected=42.0).label('int coerced to str'),
    )
    def test_double_kind(self, value, expected):
        self.assertEqualIncludingTypes(parse_number(value), expected)
        self.assertEqualIncludingTypes(parse_number(value, kind='double'), expected)
        self.assertEqualIncludingTypes(parse_double(value), expected)

    @foreach(
        param('42', expected=42),
        param('-2147483648', expected=-2147483648),
        param('2147483647', expected=2147483647),
        param('3M', expected=3000000),
        param('2B', expected=2000000000),
        param('-2B', expected=-2000000000),
        param('5X', expected=5),
    )
    def test_int_kind(self, value, expected):
        self.assertEqualIncludingTypes(parse_number(value, kind='int'), expected)
        self.assertEqualIncludingTypes(parse_int(value), expected)

    @foreach(
        param('2147483648').label('just out of range'),
        param('-2147483649').label('just out of range (negative)'),
        param('3B').label('out of range after scaling'),
        param('1.5M').label('fractional'),
        param('1e3').label('exponent'),
        param('not a number'),
    )
    def test_int_kind_not_parsed(self, value):
        self.assertIsNone(parse_int(value))

    @foreach(
        param('3B', expected=3000000000),
        param('9223372036854775807', expected=9223372036854775807),
        param('-9223372036854775808', expected=-9223372036854775808),
        param('9223372036B', expected=9223372036000000000),
    )
    def test_long_kind(self, value, expected):
        self.assertEqualIncludingTypes(parse_number(value, kind='long'), expected)
        self.assertEqualIncludingTypes(parse_long(value), expected)

    @foreach(
        param('9223372036854775808'),
        param('10000000000B'),
        param('1.5'),
    )
    def test_long_kind_not_parsed(self, value):
        self.assertIsNone(parse_long(value))

    @foreach(
        param('1.5', expected=1.5),
        param('0.5M', expected=500000.0),
        param('0.1', expected=0.10000000149011612).label('rounded to single precision'),
        param('-2', expected=-2.0),
    )
    def test_float_kind(self, value, expected):
        self.assertEqualIncludingTypes(parse_number(value, kind='float'), expected)
        self.assertEqualIncludingTypes(parse_float(value), expected)

    @foreach(
        param('1e39'),
        param('-1e39'),
        param('1e300'),
        param('1e400'),
    )
    def test_float_kind_out_of_range(self, value):
        self.assertIsNone(parse_float(value))

    def test_double_kind_range(self):
        self.assertEqual(parse_double('1e39'), 1e39)
        self.assertEqual(parse_double('1e300'), 1e300)
        self.assertIsNone(parse_double('1e400'))
        self.assertIsNone(parse_double('-1e400'))
        self.assertIsNone(parse_double('1e300B'))

    @foreach(
        param(None),
        param(''),
        param('   '),
        param('M'),
        param('B'),
        param('.5'),
        param('-'),
        param('e5'),
        param('Infinity'),
        param('NaN'),
        param(b'\xff'),
    )
    def test_not_parsed(self, value):
        for kind in NUMERIC_KINDS:
            self.assertIsNone(parse_number(value, kind=kind))

    def test_unknown_kind(self):
        with self.assertRaises(ValueError):
            parse_number('42', kind='complex')

    @patch('txtconv.number_helpers.LOGGER')
    def test_failure_logged_at_debug_level(self, LOGGER_mock):
        self.assertIsNone(parse_int('1.5'))
        self.assertTrue(LOGGER_mock.debug.called)
        self.assertFalse(LOGGER_mock.warning.called)
        self.assertFalse(LOGGER_mock.error.called)


@expand
class Test__parse_bytes(TestCaseMixin, unittest.TestCase):

    @foreach(
        param('10', expected=10),
        param('10B', expected=10),
        param('10b', expected=10),
        param('1.5K', expected=1536),
        param('1.5k', expected=1536),
        param('2M', expected=2097152),
        param('1G', expected=1073741824),
        param('1T', expected=1099511627776),
        param('1P', expected=1125899906842624),
        param('1E', expected=1152921504606846976).label('exa, not exponent'),
        param('1E5', expected=100000).label('exponent, not exa'),
        param('1e3K', expected=1024000),
        param('1Z', expected=1180591620717411303424),
        param('1Y', expected=1208925819614629174706176),
        param('1.5Y', expected=1813388729421943762059264).label('exact, no float rounding'),
        param('0.3K', expected=307).label('truncated'),
        param('1.999B', expected=1).label('truncated toward zero'),
        param('-1.5K', expected=-1536),
        param('-0.3K', expected=-307).label('truncated toward zero (negative)'),
        param(' 64K', expected=65536),
        param('5Q', expected=5).label('unknown unit is garbage'),
        param(b'4K', expected=4096),
        param('1e-100000000K', expected=0).label('absurdly small exponent'),
        param('-1e-100000000K', expected=0).label('absurdly small exponent (negative)'),
        param('0.000000000000000000000001Y', expected=1).label('small fraction of a huge unit'),
        param('0e-100000000', expected=0),
    )
    def test_parsed(self, value, expected):
        self.assertEqualIncludingTypes(parse_bytes(value), expected)

    @foreach(
        param(None),
        param(''),
        param('abc'),
        param('K'),
        param('.5K'),
        param('1e5000').label('absurdly large exponent'),
    )
    def test_not_parsed(self, value):
        self.assertIsNone(parse_bytes(value))


@expand
class Test__parse_percent(TestCaseMixin, unittest.TestCase):

    @foreach(
        param('42.5%', expected=42.5),
        param('%12', expected=12.0),
        param('100', expected=100.0),
        param('-0.5 %', expected=-0.5),
        param('1e2%', expected=100.0),
        param('5M%', expected=5.0).label('no unit scaling'),
        param('5B', expected=5.0).label('no unit scaling (B)'),
    )
    def test_parsed(self, value, expected):
        self.assertEqualIncludingTypes(parse_percent(value), expected)

    @foreach(
        param(None),
        param(''),
        param('%'),
        param('%%'),
        param('abc%'),
        param('1e400%'),
    )
    def test_not_parsed(self, value):
        self.assertIsNone(parse_percent(value))
