"""Logging setup for the ``apiconnector`` CLI.

Library modules log through ``logging.getLogger(__name__)`` and attach
context with ``extra=`` (``action``, ``url``, ``status_code``,
``cache_key``, ``error``). They never configure handlers themselves;
applications embedding the library keep their own logging setup.

The CLI calls :func:`configure_logging` once, which renders records on
stderr through :class:`rich.logging.RichHandler`.
"""

from __future__ import annotations

import logging
import sys

from rich.console import Console
from rich.logging import RichHandler

LOGGER_NAME = "apiconnector"


def configure_logging(verbose: bool = False, quiet: bool = False, no_color: bool = False) -> None:
    """Install a stderr :class:`RichHandler` on the ``apiconnector`` logger.

    Args:
        verbose: Log at DEBUG level (object cache traffic included).
        quiet: Log errors only. Ignored when *verbose* is set.
        no_color: Disable colour in the rendered records.
    """
    level = logging.INFO
    if verbose:
        level = logging.DEBUG
    elif quiet:
        level = logging.ERROR

    logger = logging.getLogger(LOGGER_NAME)
    for handler in list(logger.handlers):
        if isinstance(handler, RichHandler):
            logger.removeHandler(handler)

    handler = RichHandler(
        console=Console(file=sys.stderr, no_color=no_color, stderr=True),
        show_path=verbose,
        rich_tracebacks=verbose,
    )
    handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(handler)
    logger.setLevel(level)
    logger.propagate = False
