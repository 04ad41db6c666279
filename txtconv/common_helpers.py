# Copyright (c) 2013-2025 NASK. All rights reserved.

import re
from collections.abc import Sequence


#
# Regex-related constants
#

COMMA_SPLITTING_REGEX = re.compile(r'\s*,\s*')

# (characters having special meaning in regular expression patterns)
PATTERN_SPECIAL_CHARS = frozenset('[]^$|()\\+*?{}=!.')

SEPARATOR_REGEX = re.compile(r'\A[a-zA-Z0-9_-]+([^a-zA-Z0-9_-]+)')


#
# Sequence/string-related helpers

def is_seq(obj):
    """
    Check if the given object is a *sequence* but *not* a string-like
    (`str`, `bytes` or `bytearray`) object.

    >>> is_seq(['a', 'b'])
    True
    >>> is_seq(('a',))
    True
    >>> is_seq(range(3))
    True
    >>> is_seq('ab')
    False
    >>> is_seq(b'ab')
    False
    >>> is_seq(bytearray(b'ab'))
    False
    >>> is_seq({'a': 'b'})
    False
    >>> is_seq(42)
    False
    """
    return (isinstance(obj, Sequence)
            and not isinstance(obj, (str, bytes, bytearray)))


def split_by_regex(value, pattern):
    r"""
    Split the given string using the given regex pattern (a `str` or a
    compiled regex).

    If `value` is already a (non-string) sequence it is returned
    unchanged. If it is an empty or whitespace-only string, `None` is
    returned.

    >>> split_by_regex('a1b22c', r'[0-9]+')
    ['a', 'b', 'c']
    >>> split_by_regex('a;b', re.compile(';'))
    ['a', 'b']
    >>> split_by_regex(['a', 'b'], ';')
    ['a', 'b']
    >>> split_by_regex('  ', ';') is None
    True
    >>> split_by_regex(42, ';')                     # doctest: +IGNORE_EXCEPTION_DETAIL
    Traceback (most recent call last):
      ...
    TypeError: ...
    """
    if is_seq(value):
        return value
    if not isinstance(value, str):
        raise TypeError('{!a} is neither a str nor a non-string sequence'.format(value))
    if not value.strip():
        return None
    return re.split(pattern, value)


def split_by_comma(value):
    """
    Split the given string by commas (ignoring any whitespace around
    them, as well as any leading/trailing whitespace).

    The `None`-on-blank and the sequence-passed-unchanged rules of
    `split_by_regex()` apply.

    >>> split_by_comma('a, b ,c')
    ['a', 'b', 'c']
    >>> split_by_comma('  foo,bar  ')
    ['foo', 'bar']
    >>> split_by_comma('foo')
    ['foo']
    >>> split_by_comma('a,,b')
    ['a', '', 'b']
    >>> split_by_comma(('a', 'b'))
    ('a', 'b')
    >>> split_by_comma('') is None
    True
    """
    if isinstance(value, str):
        value = value.strip()
    return split_by_regex(value, COMMA_SPLITTING_REGEX)


def pattern_quote(s):
    r"""
    Escape (with backslashes) characters that have special meaning in
    regular expression patterns (see: `PATTERN_SPECIAL_CHARS`).

    >>> pattern_quote('a.b*c')
    'a\\.b\\*c'
    >>> pattern_quote('(x|y)?')
    '\\(x\\|y\\)\\?'
    >>> pattern_quote('{a=b!}[^$]')
    '\\{a\\=b\\!\\}\\[\\^\\$\\]'
    >>> pattern_quote('1+1\\2')
    '1\\+1\\\\2'
    >>> pattern_quote('no-special chars_here')
    'no-special chars_here'
    """
    return ''.join(('\\' + c if c in PATTERN_SPECIAL_CHARS else c)
                   for c in s)


def separator(s):
    """
    Get the separator following the leading *token* (i.e., the leading
    run of `[a-zA-Z0-9_-]` characters) of the given string.

    Returns:
        The first run of non-token characters that follows the leading
        token; or `None` if the string does not start with a token
        followed by at least one non-token character.

    >>> separator('foo, bar, baz')
    ', '
    >>> separator('key=value')
    '='
    >>> separator('a_b-c :: d')
    ' :: '
    >>> separator('foo') is None
    True
    >>> separator(';foo') is None
    True
    """
    match = SEPARATOR_REGEX.search(s)
    if match is None:
        return None
    return match.group(1)
