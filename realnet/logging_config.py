"""Logging configuration for realnet."""

import logging
import os

from rich.console import Console
from rich.logging import RichHandler

from .constants import LOG_LEVEL_ENV


def configure_logging(verbose: bool = False) -> None:
    """Configure application-wide logging.

    Respects the ``REALNET_LOG_LEVEL`` environment variable (default:
    WARNING); *verbose* forces DEBUG.  Records go to stderr through rich.

    Examples::

        $ REALNET_LOG_LEVEL=INFO python monitor.py --listen
        $ python monitor.py --verbose
    """
    if verbose:
        level = logging.DEBUG
    else:
        level_name = os.environ.get(LOG_LEVEL_ENV, "WARNING").upper()
        level = logging.getLevelName(level_name)
        if not isinstance(level, int):
            level = logging.WARNING

    logging.basicConfig(
        level=level,
        format="%(name)s: %(message)s",
        datefmt="%H:%M:%S",
        handlers=[RichHandler(console=Console(stderr=True), rich_tracebacks=True, show_path=False)],
        force=True,
    )

    # aiohttp internals stay at INFO or above.
    logging.getLogger("aiohttp").setLevel(max(level, logging.INFO))
    logging.getLogger(__name__).debug("Logging configured: level=%s", logging.getLevelName(level))
