# Copyright (c) 2013-2025 NASK. All rights reserved.

"""
Text/binary conversion primitives: coercion to `str`, ASCII-safe
representation of arbitrary objects, and the percent-encoding and
base64 codecs used by the rest of *txtconv*.
"""

import base64
from urllib.parse import (
    quote_plus,
    unquote_plus,
)

from txtconv.const import DEFAULT_ENCODING


def ascii_str(obj):

    r"""
    Safely convert the given object to an ASCII-only :class:`str`.

    This function does its best to obtain a string representation
    (:class:`bytes`-like objects are decoded as *UTF-8*, with undecodable
    bytes turned into lone surrogates; other objects are converted with
    :class:`str`, and :func:`repr` is the last-resort fallback) and then
    escapes any non-ASCII characters -- *not raising* any encoding or
    decoding exceptions. It is intended to be used to embed arbitrary
    (possibly user-supplied) data in log and exception messages.

    >>> ascii_str('')
    ''
    >>> ascii_str('Ala ma kota\nA kot?\n2=2 ')
    'Ala ma kota\nA kot?\n2=2 '
    >>> ascii_str(b'Ala ma kota')
    'Ala ma kota'
    >>> ascii_str('Ech, ale błąd!')
    'Ech, ale b\\u0142\\u0105d!'
    >>> ascii_str(b'Ech, ale b\xc5\x82\xc4\x85d!')
    'Ech, ale b\\u0142\\u0105d!'
    >>> ascii_str(b'\xee\xdd ja\xc5\xba\xc5\x84')
    '\\udcee\\udcdd ja\\u017a\\u0144'
    >>> ascii_str(bytearray(b'\xee'))
    '\\udcee'
    >>> ascii_str(ValueError('Ech, ale błąd!'))
    'Ech, ale b\\u0142\\u0105d!'
    >>> ascii_str(42)
    '42'

    >>> class Nasty(object):
    ...     def __str__(self): raise ValueError
    ...     def __repr__(self): return 'quite nasŧy'
    ...
    >>> ascii_str(Nasty())
    'quite nas\\u0167y'
    """
    if isinstance(obj, str):
        s = obj
    elif isinstance(obj, (bytes, bytearray, memoryview)):
        s = bytes(obj).decode('utf-8', 'surrogateescape')
    else:
        try:
            s = str(obj)
        except ValueError:
            s = repr(obj)
    return s.encode('ascii', 'backslashreplace').decode('ascii')


def as_unicode(obj, decode_error_handling='strict'):

    r"""
    Convert the given object to a :class:`str` (possibly containing
    various **non**-ASCII characters).

    * :class:`bytes`/:class:`bytearray`/:class:`memoryview` objects are
      decoded using *UTF-8* (by default, strictly: you can modify that
      by specifying `decode_error_handling`, which is passed as the
      second argument to :meth:`bytes.decode`);

    * any other object is converted with :class:`str` (or, if that
      fails with :exc:`ValueError`, with :func:`repr`).

    >>> as_unicode('')
    ''
    >>> as_unicode(b'O\xc5\x82\xc3\xb3wek') == 'Oł\xf3wek'
    True
    >>> as_unicode(memoryview(b'O\xc5\x82\xc3\xb3wek')) == 'Oł\xf3wek'
    True
    >>> as_unicode(b'\xdd', decode_error_handling='surrogateescape') == '\udcdd'
    True
    >>> as_unicode(b'\xdd')                        # doctest: +IGNORE_EXCEPTION_DETAIL
    Traceback (most recent call last):
      ...
    UnicodeDecodeError: ...
    >>> as_unicode(42)
    '42'
    """
    if isinstance(obj, memoryview):
        obj = bytes(obj)
    if isinstance(obj, (bytes, bytearray)):
        return obj.decode('utf-8', decode_error_handling)
    try:
        return str(obj)
    except ValueError:
        return repr(obj)


def as_bytes(obj, encoding=DEFAULT_ENCODING):
    """
    Convert the given object to :class:`bytes`.

    >>> as_bytes(b'abc')
    b'abc'
    >>> as_bytes(bytearray(b'abc'))
    b'abc'
    >>> as_bytes('ą')
    b'\\xc4\\x85'
    >>> as_bytes('ą', encoding='iso-8859-2')
    b'\\xb1'
    >>> as_bytes(42)
    b'42'
    """
    if isinstance(obj, (bytes, bytearray, memoryview)):
        return bytes(obj)
    return as_unicode(obj).encode(encoding)


def str_to_bool(s):
    """
    Return True or False, given one of the known strings (see examples below).

    >>> str_to_bool('1')
    True
    >>> str_to_bool('yes')
    True
    >>> str_to_bool('Yes')  # note: checks are case-insensitive
    True
    >>> str_to_bool('on')
    True

    >>> str_to_bool('0')
    False
    >>> str_to_bool('nO')
    False
    >>> str_to_bool('off')
    False

    Other string values cause ValueError:

    >>> str_to_bool('unknown')        # doctest: +IGNORE_EXCEPTION_DETAIL
    Traceback (most recent call last):
      ...
    ValueError: ...

    Non-str values cause TypeError:

    >>> str_to_bool(True)             # doctest: +IGNORE_EXCEPTION_DETAIL
    Traceback (most recent call last):
      ...
    TypeError: ...
    """
    if not isinstance(s, str):
        raise TypeError('{!a} is not a str'.format(s))
    try:
        return str_to_bool.LOWERCASE_TO_BOOL[s.lower()]
    except KeyError:
        raise ValueError('"{}" is not a valid YES/NO flag'.format(
            ascii_str(s))) from None

str_to_bool.LOWERCASE_TO_BOOL = {
    '1': True,
    'y': True,
    'yes': True,
    't': True,
    'true': True,
    'on': True,

    '0': False,
    'n': False,
    'no': False,
    'f': False,
    'false': False,
    'off': False,
}


#
# Percent-encoding

def percent_encode(s, encoding=DEFAULT_ENCODING):
    r"""
    Percent-encode the given string as a URL (query) component.

    The standard form-urlencoding is applied (every character except
    ASCII letters, digits and `-._~` is encoded; the space becomes `+`),
    which already yields the *legacy-compatible* form: `~` is left
    literal, and `*` becomes `%2A`.

    Args:
        `s`: the string to be encoded (non-`str` objects are coerced
             with `as_unicode()`).

    Kwargs:
        `encoding` (default: 'utf-8'): the name of the codec used to
             turn characters into the bytes being percent-encoded.

    >>> percent_encode('abc-XYZ_0.9~')
    'abc-XYZ_0.9~'
    >>> percent_encode('a b*c')
    'a+b%2Ac'
    >>> percent_encode('x&y=z/?')
    'x%26y%3Dz%2F%3F'
    >>> percent_encode('zaż\xf3łć')
    'za%C5%BC%C3%B3%C5%82%C4%87'
    >>> percent_encode('ą', encoding='iso-8859-2')
    '%B1'
    >>> percent_encode(42)
    '42'
    """
    # (with `safe=''`, `quote_plus()` leaves only ASCII letters, digits
    # and `-._~` unencoded; so `~` is never turned into `%7E`, and `*`
    # is always turned into `%2A`)
    return quote_plus(as_unicode(s), safe='', encoding=encoding)


def percent_decode(s, encoding=DEFAULT_ENCODING):
    r"""
    Decode the given percent-encoded (form-urlencoded) string.

    >>> percent_decode('a+b%2Ac~d')
    'a b*c~d'
    >>> percent_decode('a%20b')
    'a b'
    >>> percent_decode('za%C5%BC%C3%B3%C5%82%C4%87') == 'zaż\xf3łć'
    True
    >>> percent_decode('%B1', encoding='iso-8859-2') == 'ą'
    True
    >>> percent_decode('100%')  # (a malformed escape is left intact)
    '100%'
    """
    return unquote_plus(as_unicode(s), encoding=encoding)


#
# Base64

def base64_encode(data, encoding=DEFAULT_ENCODING):
    """
    Encode the given text (or binary data) using the standard base64
    alphabet (with padding), returning an ASCII `str`.

    >>> base64_encode('hello')
    'aGVsbG8='
    >>> base64_encode(b'\\x00\\xff')
    'AP8='
    >>> base64_encode('')
    ''
    """
    return base64.b64encode(as_bytes(data, encoding)).decode('ascii')


def base64_decode(s, encoding=DEFAULT_ENCODING):
    """
    Decode the given base64 (standard alphabet, padded) string.

    The decoded bytes are decoded to `str` using the given `encoding`;
    if `encoding` is `None`, the raw `bytes` are returned.

    Any non-alphabet characters or incorrect padding cause
    `binascii.Error` (which is a subclass of `ValueError`).

    >>> base64_decode('aGVsbG8=')
    'hello'
    >>> base64_decode('AP8=', encoding=None)
    b'\\x00\\xff'
    >>> base64_decode('aGVsbG8')                    # doctest: +IGNORE_EXCEPTION_DETAIL
    Traceback (most recent call last):
      ...
    binascii.Error: ...
    >>> base64_decode('a?==')                       # doctest: +IGNORE_EXCEPTION_DETAIL
    Traceback (most recent call last):
      ...
    binascii.Error: ...
    """
    raw = base64.b64decode(as_bytes(s, 'ascii'), validate=True)
    if encoding is None:
        return raw
    return raw.decode(encoding)
