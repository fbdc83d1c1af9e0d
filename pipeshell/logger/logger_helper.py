"""
Logging setup for the pipeshell command-line entry point.

Library modules only ever call logging.getLogger(__name__); configure_logging
sends those records to loguru, which writes to stderr and optionally to a
rotated log file.
"""

import logging
import sys

import loguru

from pipeshell.logger.logging_interceptor import InterceptHandler

logger = loguru.logger


def configure_logging(level="WARNING", log_file=None):
    """
    Replace loguru's default sink with a stderr sink at ``level`` and redirect
    the logging module into loguru.
    """
    level = level.upper()
    logger.remove()
    logger.add(sys.stderr, level=level, colorize=False)
    if log_file:
        logger.add(
            log_file,
            level="DEBUG",
            rotation="10 MB",
            retention="7 days",
            backtrace=True,
            colorize=False,
            delay=True,
            enqueue=True,
        )
    logging.basicConfig(handlers=[InterceptHandler()], level=logging.DEBUG if log_file else level, force=True)
    return logger
