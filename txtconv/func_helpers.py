# Copyright (c) 2025 NASK. All rights reserved.

import functools

from txtconv.encoding_helpers import ascii_str
from txtconv.log_helpers import get_logger


LOGGER = get_logger(__name__)


DEFAULT_MAX_RETRIES = 3


def call_with_retries(func, /, *args,
                      max_retries=DEFAULT_MAX_RETRIES,
                      retry_on=Exception,
                      **kwargs):
    """
    Call the given function with the given arguments; if it raises an
    exception being an instance of `retry_on` (an exception class or a
    tuple of such classes), call it again -- up to `max_retries`
    *additional* times (so the total number of attempts is at most
    `max_retries + 1`). There is no delay between attempts.

    Returns:
        The result of the first successful call.

    Raises:
        * the exception from the last attempt if all attempts failed;
        * any exception *not* matching `retry_on` (immediately);
        * `ValueError` if `max_retries` is not a non-negative `int`.

    >>> attempts = []
    >>> def flaky(x):
    ...     attempts.append(x)
    ...     if len(attempts) < 3:
    ...         raise OSError('not yet')
    ...     return x * 2
    ...
    >>> call_with_retries(flaky, 21)
    42
    >>> attempts
    [21, 21, 21]

    >>> attempts.clear()
    >>> call_with_retries(flaky, 21, max_retries=1)    # doctest: +IGNORE_EXCEPTION_DETAIL
    Traceback (most recent call last):
      ...
    OSError: not yet
    >>> attempts
    [21, 21]

    >>> attempts.clear()
    >>> call_with_retries(flaky, 21, retry_on=KeyError)  # doctest: +IGNORE_EXCEPTION_DETAIL
    Traceback (most recent call last):
      ...
    OSError: not yet
    >>> attempts
    [21]

    >>> call_with_retries(flaky, 21, max_retries=-1)   # doctest: +IGNORE_EXCEPTION_DETAIL
    Traceback (most recent call last):
      ...
    ValueError: ...
    """
    if (not isinstance(max_retries, int)
          or isinstance(max_retries, bool)
          or max_retries < 0):
        raise ValueError('`max_retries` should be a non-negative int '
                         '(got: {!a})'.format(max_retries))
    retries_left = max_retries
    while True:
        try:
            return func(*args, **kwargs)
        except retry_on as exc:
            if retries_left <= 0:
                raise
            retries_left -= 1
            LOGGER.warning(
                'Call of %a failed (%s: %s); retrying (%d of %d)...',
                getattr(func, '__qualname__', func),
                type(exc).__qualname__,
                ascii_str(exc),
                max_retries - retries_left,
                max_retries)


def with_retries(func=None, *, max_retries=DEFAULT_MAX_RETRIES, retry_on=Exception):
    """
    A decorator that makes the decorated function be called with
    `call_with_retries()`.

    Simple usage (with the defaults):

        @with_retries
        def some(...):
            ...

    Usage with keyword arguments:

        @with_retries(max_retries=5, retry_on=(OSError, TimeoutError))
        def another(...):
            ...

    >>> counter = iter(range(10))
    >>> @with_retries(max_retries=2, retry_on=LookupError)
    ... def next_item(seq):
    ...     return seq[next(counter)]
    ...
    >>> next_item('ab')
    'a'
    >>> next_item('ab')
    'b'
    >>> next_item('ab')                               # doctest: +IGNORE_EXCEPTION_DETAIL
    Traceback (most recent call last):
      ...
    IndexError: ...
    >>> next_item.func.__name__
    'next_item'
    """
    if func is None:
        return functools.partial(with_retries,
                                 max_retries=max_retries,
                                 retry_on=retry_on)

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        return call_with_retries(func, *args,
                                 max_retries=max_retries,
                                 retry_on=retry_on,
                                 **kwargs)

    wrapper.func = func  # making the original function still available
    return wrapper
