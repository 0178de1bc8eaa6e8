# License: BSD3

"""
textlayers subcommands
"""

import logging
import sys

from textlayers.config import get_settings
from textlayers.errors import ToolkitError
from textlayers.log import setup_logging

from . import (coref,
               entities,
               models,
               parse,
               sentences,
               tokens)
from .args import Subcommands

logger = logging.getLogger(__name__)

SUBCOMMANDS = [sentences,
               tokens,
               entities,
               parse,
               coref,
               models]


def main(argv=None):
    """
    Entry point for the `textlayers` command
    """
    parser = Subcommands(SUBCOMMANDS).parser()
    args = parser.parse_args(argv)
    setup_logging(args.log_level or get_settings().log_level)
    try:
        args.func(args)
    except ToolkitError as err:
        logger.error(str(err))
        return 1
    return 0


if __name__ == '__main__':
    sys.exit(main())
