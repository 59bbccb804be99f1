"""Logging configuration for cartsync."""

import logging
import sys
from typing import Any

from cartsync.config import LoggingConfig

PACKAGE_LOGGER = "cartsync"


def setup_logging(config: LoggingConfig) -> logging.Logger:
    """
    Configure the package logger.

    One handler (stderr, or a file when configured), text or JSON-like
    format, no propagation to the root logger.
    """
    handler: logging.FileHandler | logging.StreamHandler[Any]
    handler = (
        logging.FileHandler(config.file) if config.file else logging.StreamHandler[Any](sys.stderr)
    )

    if config.format == "json":
        formatter = logging.Formatter(
            '{"timestamp": "%(asctime)s", "level": "%(levelname)s", '
            '"module": "%(name)s", "message": "%(message)s"}'
        )
    else:
        formatter = logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")

    handler.setFormatter(formatter)

    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(config.level)

    # Close and remove existing handlers
    for old_handler in logger.handlers[:]:
        old_handler.close()
        logger.removeHandler(old_handler)

    logger.addHandler(handler)
    logger.propagate = False
    return logger


__all__ = ("PACKAGE_LOGGER", "setup_logging")
