# License: BSD3

"""
Write the default (NLTK based) models to a directory
"""

import logging

from textlayers.external.ner import DEFAULT_NAME_TYPES
from textlayers.external.nltk_models import write_model_dir

NAME = 'models'

logger = logging.getLogger(__name__)


def config_argparser(parser):
    """
    Subcommand flags.

    You should create and pass in the subparser to which the flags
    are to be added.
    """
    parser.add_argument('output', metavar='DIR',
                        help='directory to write the models to')
    parser.add_argument('--types', nargs='+', metavar='TYPE',
                        default=list(DEFAULT_NAME_TYPES),
                        help='named entity types')
    parser.set_defaults(func=main)


def main(args):
    """
    Subcommand main.

    You shouldn't need to call this yourself if you're using
    `config_argparser`
    """
    config_file = write_model_dir(args.output, name_types=args.types)
    print("Models written to", args.output)
    print("Use them with: --config", config_file)
