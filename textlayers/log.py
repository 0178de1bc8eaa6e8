# License: BSD3

"""Utility functions for configuring logging in the textlayers tools."""

from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler


def setup_logging(log_level: str | int = "INFO", app_name: str = "textlayers") -> None:
    """
    Configure the root logger with a RichHandler writing to stderr.

    Existing handlers on the root logger are removed first, so this can be
    called more than once (eg. by successive command line invocations in
    the same process).

    Args:
        log_level (str | int, optional): The logging level to set for the root logger.
            Defaults to "INFO".
        app_name (str, optional): Name used for the initial log message.
    """
    for handler in logging.root.handlers[:]:
        logging.root.removeHandler(handler)
    logging.root.setLevel(log_level)

    rich_handler = RichHandler(
        level=log_level,
        show_path=False,
        show_level=True,
        show_time=True,
        rich_tracebacks=True,
        tracebacks_show_locals=False,
        markup=False,
        console=Console(stderr=True),
    )
    logging.root.addHandler(rich_handler)
    logging.getLogger(app_name).debug(f"Starting {app_name} (log level {log_level})")
