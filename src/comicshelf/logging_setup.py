# ABOUTME: Logging configuration for the comicshelf CLI.
# ABOUTME: Installs a Rich console handler on the package logger.

import logging

from rich.console import Console
from rich.logging import RichHandler

_LOGGER_NAME = "comicshelf"


def setup_logging(log_level: str = "WARNING") -> logging.Logger:
    """Configure the comicshelf logger to write to stderr through Rich.

    Safe to call more than once: existing handlers are replaced.

    Args:
        log_level: Logging level name (DEBUG, INFO, WARNING, ERROR).

    Returns:
        The configured package logger.
    """
    level = getattr(logging, log_level.upper(), logging.WARNING)

    logger = logging.getLogger(_LOGGER_NAME)
    logger.setLevel(level)
    logger.handlers.clear()

    handler = RichHandler(
        console=Console(stderr=True),
        show_time=False,
        show_path=False,
        rich_tracebacks=True,
    )
    handler.setLevel(level)
    logger.addHandler(handler)

    return logger
