# Copyright (c) 2013-2025 NASK. All rights reserved.

import copy
from argparse import Action, ArgumentParser, ArgumentTypeError


class ConfigValuesAction(Action):

    """
    A custom implementation of the `argparser`'s `action` argument.

    Splits arguments provided by user into dictionary
    which holds dictionaries with values for various
    options of config sections.

    The option can be given multiple times (the values are merged;
    later ones win).

    >>> parser = ArgumentParser()
    >>> _ = parser.add_argument('--override', action=ConfigValuesAction, default={})
    >>> parser.parse_args(['--override', 'a.x=1',
    ...                    '--override', 'a.y=',
    ...                    '--override', 'b.z=foo=bar',
    ...                    '--override', 'a.x=2']).override
    {'a': {'x': '2', 'y': ''}, 'b': {'z': 'foo=bar'}}
    >>> parser.parse_args([]).override
    {}
    """

    def __init__(self, option_strings, dest, nargs=1, **kwargs):
        super().__init__(option_strings, dest, nargs, **kwargs)

    def __call__(self, parser, namespace, values, option_string=None):
        # (copying, so that the `default` dict is never modified)
        custom_config_values = copy.deepcopy(getattr(namespace, self.dest, None) or {})
        for value in values:
            try:
                section, option, section_option_value = self._split_value(value)
            except ArgumentTypeError as exc:
                parser.error('{}: {}'.format(option_string, exc))
            custom_config_values.setdefault(section, {})[option] = section_option_value
        setattr(namespace, self.dest, custom_config_values)

    @staticmethod
    def _split_value(value):
        section_option, eq, section_option_value = value.partition('=')
        section, dot, option = section_option.partition('.')
        if not (eq and dot and section and option):
            raise ArgumentTypeError('{!a} does not have the <section>.<option>=<value> '
                                    'form'.format(value))
        return section, option, section_option_value


class TxtConvArgumentParser(ArgumentParser):

    """
    Generic argument parser for *txtconv* scripts.

    This is an implementation of `ArgumentParser` which has arguments
    used by all *txtconv* scripts.

    Command line arguments provided by this class::
        `--config-override`:
            makes it possible to override any configuration options
            for the particular script run.

    >>> parser = TxtConvArgumentParser(prog='foo')
    >>> parser.parse_args([]).config_override
    {}
    >>> parser.parse_args(['--config-override', 'txtconv.json_indent=4']).config_override
    {'txtconv': {'json_indent': '4'}}
    """

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)

        if not self.description:
            self.description = "txtconv-specific options"
        self.add_argument('--config-override',
                          action=ConfigValuesAction,
                          default={},
                          metavar='SECT.OPT=VAL',
                          help=('override the script\'s config options '
                                'for the particular run. Provide an option '
                                'in the format: <section>.<option>=<value> '
                                '(to provide several options, just repeat '
                                'the argument, e.g.: --config-override '
                                'sect_a.opt1=val1 --config-override '
                                'sect_b.opt2=val2)'))

    def add_subparsers(self, **kwargs):
        # (subcommand parsers must not re-add `--config-override`,
        # otherwise their `{}` default would replace the values
        # given before the subcommand name)
        kwargs.setdefault('parser_class', ArgumentParser)
        return super().add_subparsers(**kwargs)
