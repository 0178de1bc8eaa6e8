# License: BSD3

"""
Command line options shared by the textlayers subcommands
"""

import argparse
import sys

from textlayers.config import Settings, get_settings, load_configuration
from textlayers.resources import read_lines
from textlayers.toolkit import Toolkit


def add_usual_input_args(parser):
    """
    Augment a subcommand argparser with the input text and the
    model configuration flags
    """
    parser.add_argument('input', nargs='?', metavar='FILE',
                        help='text file to read (default: stdin)')
    parser.add_argument('--charset', metavar='NAME',
                        help='encoding of the input file')
    parser.add_argument('--lines', action='store_true',
                        help='treat every line as a separate piece of text '
                        '(sentences never cross lines; sentences without '
                        'final punctuation get a period)')
    add_model_args(parser)


def add_model_args(parser):
    """
    Augment a subcommand argparser with flags overriding where models
    are found
    """
    parser.add_argument('--config', metavar='FILE',
                        help='model configuration (YAML)')
    parser.add_argument('--model-path', metavar='DIRS',
                        help='directories to search for models')
    parser.add_argument('--wordnet-dir', metavar='DIR',
                        help='WordNet dictionary (coreference only)')


def get_settings_from_args(args):
    """
    Process-wide settings, with the command line overrides applied
    """
    settings = get_settings()
    overrides = {}
    for field in ['config_file', 'model_path', 'wordnet_dir', 'charset']:
        flag = 'config' if field == 'config_file' else field
        value = getattr(args, flag, None)
        if value is not None:
            overrides[field] = value
    if overrides:
        settings = Settings(**dict(settings.model_dump(), **overrides))
    return settings


def get_toolkit(args):
    """
    Toolkit configured according to the settings and the command line
    """
    settings = get_settings_from_args(args)
    config = load_configuration(settings=settings)
    return Toolkit.from_settings(settings=settings, config=config)


def read_input(args):
    """
    Return the input as a list of lines
    """
    if args.input is None:
        return [line.rstrip('\r\n') for line in sys.stdin]
    charset = get_settings_from_args(args).charset
    return read_lines(args.input, charset)


def read_sentences(toolkit, args):
    """
    Sentences of the input, segmented line by line with `--lines`, or
    as a single text otherwise
    """
    lines = read_input(args)
    if args.lines:
        return toolkit.segmenter.segment_lines(lines)
    return toolkit.detect_sentences('\n'.join(lines))


def add_output_format_arg(parser):
    """
    Augment a subcommand argparser with a table format flag
    """
    parser.add_argument('--format', default='simple',
                        help='table format (see the tabulate library: '
                        'simple, plain, github, tsv, ...)')


class Subcommands(object):
    """
    Collection of subcommand modules; each exposes `NAME`, a
    `config_argparser(parser)` function and a `main(args)` function
    """
    def __init__(self, modules):
        self.modules = modules

    def parser(self, prog='textlayers'):
        "the full argparser"
        parser = argparse.ArgumentParser(prog=prog,
                                         description='Layered linguistic '
                                         'annotation of text')
        parser.add_argument('--log-level', metavar='LEVEL',
                            help='logging level (DEBUG, INFO, ...)')
        subparsers = parser.add_subparsers(title='subcommands',
                                           dest='subcommand')
        subparsers.required = True
        for module in self.modules:
            subparser = subparsers.add_parser(module.NAME,
                                              help=module.__doc__.strip()
                                              .splitlines()[0])
            module.config_argparser(subparser)
        return parser
