"""
Logging setup for imgsync.

The CLI builds one `imgsync` logger from the requested level and hands it
to the services; the root logger is left alone.
"""

import logging
import sys
from typing import Optional, TextIO

LOGGER_NAME = "imgsync"

LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "warning": logging.WARNING,
    "error": logging.ERROR,
    "fatal": logging.CRITICAL,
    "critical": logging.CRITICAL,
}


def parse_level(name: str) -> Optional[int]:
    """Logging level for a level name, None if unknown."""
    return LEVELS.get((name or "").strip().lower())


def get_logger(level: str = "info", stream: Optional[TextIO] = None) -> logging.Logger:
    """
    Configure and return the imgsync logger.

    Unknown levels fall back to info with a warning.
    """
    logger = logging.getLogger(LOGGER_NAME)

    resolved = parse_level(level)

    handler = logging.StreamHandler(stream or sys.stderr)
    if resolved == logging.DEBUG:
        handler.setFormatter(logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        ))
    else:
        handler.setFormatter(logging.Formatter('%(levelname)s: %(message)s'))

    logger.handlers = [handler]
    logger.propagate = False

    if resolved is None:
        logger.setLevel(logging.INFO)
        logger.warning(f"Error parsing loglevel {level!r}, fallback to info")
    else:
        logger.setLevel(resolved)

    logger.debug(f"Log level set to {logging.getLevelName(logger.level).lower()}")
    return logger
