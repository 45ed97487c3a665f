"""Logging configuration for smart-reader."""

import os
import sys

from loguru import logger

_VERBOSE_FORMAT = "{time:HH:mm:ss.SSS} {level.icon} <dim>{name}</dim> {message}"


def configure_logging(*, verbose: bool = False) -> None:
    """Route loguru to stderr.

    Verbose mode logs DEBUG with timestamps and module names. Otherwise the
    level comes from SMART_READER_LOG_LEVEL, defaulting to INFO.
    """
    logger.remove()
    if verbose:
        logger.add(sys.stderr, level="DEBUG", format=_VERBOSE_FORMAT)
        return
    level = os.getenv("SMART_READER_LOG_LEVEL", "INFO").upper()
    logger.add(sys.stderr, level=level, format="{level.icon} {message}")
