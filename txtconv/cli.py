# Copyright (c) 2025 NASK. All rights reserved.

"""
The `txtconv` command line tool -- a thin front-end to the *txtconv*
parsing/formatting functions.

Exit statuses:

* 0 -- success;
* 1 -- the input could not be parsed;
* 2 -- invalid input (e.g., malformed JSON, or a URL that cannot be
  formatted in the strict mode) or a configuration error (also
  argparse's usage errors).
"""

import binascii
import codecs
import json
import logging
import sys

from txtconv.argument_parser import TxtConvArgumentParser
from txtconv.config import (
    Config,
    ConfigError,
)
from txtconv.encoding_helpers import (
    as_bytes,
    ascii_str,
    base64_decode,
    base64_encode,
    percent_decode,
    percent_encode,
)
from txtconv.log_helpers import (
    get_logger,
    logging_configured,
)
from txtconv.number_helpers import (
    NUMERIC_KINDS,
    parse_bytes,
    parse_number,
    parse_percent,
)
from txtconv.url_helpers import (
    URLFormatError,
    format_query_params,
    format_url,
    parse_query_params,
    parse_url,
)


LOGGER = get_logger(__name__)


CONFIG_SPEC = '''
[txtconv]
encoding = utf-8 :: str
strict_url_format = no :: bool
json_indent = 2 :: int
max_input_size = 64K :: bytes_size
'''

EXIT_OK = 0
EXIT_NOT_PARSED = 1
EXIT_INVALID_INPUT = 2

STDIN_MARKER = '-'

# (`format-url`'s input fields, mapped to the allowed types and
# descriptions of their non-null values)
_URL_FIELD_TYPES = {
    'scheme': (str, 'a string'),
    'server_name': (str, 'a string'),
    'user': (str, 'a string'),
    'password': (str, 'a string'),
    'server_port': (int, 'an integer'),
    'uri': (str, 'a string'),
    'query_params': (dict, 'an object'),
    'query_string': (str, 'a string'),
}


class InvalidInput(Exception):
    """Raised by command handlers when the input cannot be processed."""


class NotParsed(Exception):
    """Raised by command handlers when the parsing function returned `None`."""



#
# Command handlers
#

# Each of them takes the parsed command line arguments, the config
# section and the input text; returns the text to be printed.

def _parse_url_command(args, config, text):
    parsed = parse_url(text, encoding=config['encoding'])
    if parsed is None:
        raise NotParsed
    return _dump_json(parsed.as_dict(), config)


def _format_url_command(args, config, text):
    url = _load_json_object(text)
    _verify_url_field_types(url)
    try:
        return format_url(url,
                          strict=config['strict_url_format'],
                          encoding=config['encoding'])
    except URLFormatError as exc:
        raise InvalidInput(exc) from exc


def _parse_query_command(args, config, text):
    return _dump_json(parse_query_params(text, encoding=config['encoding']), config)


def _format_query_command(args, config, text):
    query_string = format_query_params(_load_json_object(text), encoding=config['encoding'])
    if query_string is None:
        raise NotParsed
    return query_string


def _parse_number_command(args, config, text):
    return _str_unless_none(parse_number(text, kind=args.kind))


def _parse_bytes_command(args, config, text):
    return _str_unless_none(parse_bytes(text))


def _parse_percent_command(args, config, text):
    return _str_unless_none(parse_percent(text))


def _encode_command(args, config, text):
    try:
        if args.codec == 'base64':
            return base64_encode(text, encoding=config['encoding'])
        return percent_encode(text, encoding=config['encoding'])
    except UnicodeError as exc:
        raise InvalidInput('cannot encode the input ({}: {})'.format(
            type(exc).__qualname__,
            ascii_str(exc))) from exc


def _decode_command(args, config, text):
    try:
        if args.codec == 'base64':
            return base64_decode(text, encoding=config['encoding'])
        return percent_decode(text, encoding=config['encoding'])
    except (binascii.Error, UnicodeError) as exc:
        raise InvalidInput('cannot decode the input ({}: {})'.format(
            type(exc).__qualname__,
            ascii_str(exc))) from exc


def _str_unless_none(result):
    if result is None:
        raise NotParsed
    return str(result)


def _dump_json(obj, config):
    return json.dumps(obj, indent=config['json_indent'], ensure_ascii=False)


def _load_json_object(text):
    try:
        obj = json.loads(text)
    except ValueError as exc:
        raise InvalidInput('malformed JSON ({})'.format(ascii_str(exc))) from exc
    if not isinstance(obj, dict):
        raise InvalidInput('a JSON object is expected')
    return obj


def _verify_url_field_types(url):
    for field_name, value in url.items():
        if value is None or field_name not in _URL_FIELD_TYPES:
            continue
        expected_type, type_descr = _URL_FIELD_TYPES[field_name]
        # (note: `bool` is a subclass of `int`)
        if not isinstance(value, expected_type) or isinstance(value, bool):
            raise InvalidInput('the {!a} field should be {} or null (got: {})'.format(
                field_name,
                type_descr,
                ascii_str(value)))



#
# Command line arguments
#

def make_argument_parser():
    parser = TxtConvArgumentParser(
        prog='txtconv',
        description=('Parse and format URLs, query strings, numbers '
                     'with unit suffixes, byte sizes and percentages.'))
    parser.add_argument('-v', '--verbose', action='store_true',
                        help='log debug messages (if no logging configuration file is found)')
    subparsers = parser.add_subparsers(dest='command', metavar='COMMAND', required=True)

    def add_command(name, handler, help_text, value_help='the input value'):
        subparser = subparsers.add_parser(name, help=help_text, description=help_text)
        subparser.add_argument(
            'value',
            metavar='VALUE',
            help='{} (`{}` => read it from the standard input)'.format(value_help, STDIN_MARKER))
        subparser.set_defaults(handler=handler)
        return subparser

    add_command('parse-url', _parse_url_command,
                help_text='split a URL into its components (JSON output)',
                value_help='the URL')
    add_command('format-url', _format_url_command,
                help_text='make a URL from its components (given as a JSON object)',
                value_help='the JSON object')
    add_command('parse-query', _parse_query_command,
                help_text='decode a query string (JSON output)',
                value_help='the query string')
    add_command('format-query', _format_query_command,
                help_text='make a query string from parameters (given as a JSON object)',
                value_help='the JSON object')
    parse_number_parser = add_command(
        'parse-number', _parse_number_command,
        help_text='parse a number, possibly with the M (million) or B (billion) suffix')
    parse_number_parser.add_argument(
        '--kind', choices=sorted(NUMERIC_KINDS), default='double',
        help='the numeric kind (default: %(default)s)')
    add_command('parse-bytes', _parse_bytes_command,
                help_text='parse a byte size, possibly with a unit suffix (B, K, M, G, ...)')
    add_command('parse-percent', _parse_percent_command,
                help_text='parse a percentage')
    for name, handler, help_text in [
            ('encode', _encode_command, 'percent-encode or base64-encode the given text'),
            ('decode', _decode_command, 'percent-decode or base64-decode the given text')]:
        codec_parser = add_command(name, handler, help_text=help_text)
        codec_parser.add_argument(
            '--codec', choices=['percent', 'base64'], default='percent',
            help='the codec (default: %(default)s)')
    return parser



#
# Main
#

def main(argv=None):
    parser = make_argument_parser()
    args = parser.parse_args(argv)
    fallback_level = logging.DEBUG if args.verbose else logging.WARNING
    with logging_configured(fallback_level=fallback_level):
        return run_command(args)


def run_command(args):
    try:
        config = Config.section(CONFIG_SPEC, overrides=args.config_override)
    except ConfigError as exc:
        _print_error(exc)
        return EXIT_INVALID_INPUT
    try:
        codecs.lookup(config['encoding'])
    except LookupError:
        _print_error('unknown encoding: {}'.format(ascii_str(config['encoding'])))
        return EXIT_INVALID_INPUT
    try:
        text = _get_input_text(args.value, config)
        output = args.handler(args, config, text)
    except InvalidInput as exc:
        _print_error(exc)
        return EXIT_INVALID_INPUT
    except NotParsed:
        _print_error('could not parse {}'.format(ascii_str(text)))
        return EXIT_NOT_PARSED
    print(output)
    return EXIT_OK


def _get_input_text(value, config):
    max_input_size = config['max_input_size']
    if value == STDIN_MARKER:
        value = sys.stdin.read(max_input_size + 1).rstrip('\r\n')
    try:
        input_size = len(as_bytes(value, config['encoding']))
    except UnicodeError as exc:
        raise InvalidInput('the input cannot be encoded with {!a} ({})'.format(
            config['encoding'],
            ascii_str(exc))) from exc
    if input_size > max_input_size:
        raise InvalidInput('the input is too large (the limit is {} bytes)'.format(max_input_size))
    LOGGER.debug('input: %a', value)
    return value


def _print_error(msg):
    print('txtconv: {}'.format(ascii_str(msg)), file=sys.stderr)


if __name__ == '__main__':
    sys.exit(main())
