"""Logging setup."""

import logging

from rich.logging import RichHandler

PACKAGE_LOGGER = "bible_companion"


def configure_logging(level: str | int = "WARNING") -> logging.Logger:
    """Attach a rich handler to the package logger. Safe to call repeatedly."""
    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(level.upper() if isinstance(level, str) else level)
    if not any(isinstance(h, RichHandler) for h in logger.handlers):
        handler = RichHandler(show_path=False, rich_tracebacks=False)
        handler.setFormatter(logging.Formatter("%(message)s"))
        logger.addHandler(handler)
    return logger
