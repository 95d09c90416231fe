"""Logging configuration for the command line interface."""

import logging
import os
from typing import Optional

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
LOG_LEVEL_ENV = "BILLCYCLE_LOG_LEVEL"


def configure_logging(verbose: bool = False, level: Optional[str] = None) -> logging.Logger:
    """Configure the ``billcycle`` logger with a single stderr handler.

    Args:
        verbose: Log at DEBUG instead of the default WARNING
        level: Explicit level name; defaults to BILLCYCLE_LOG_LEVEL if set

    Returns:
        Configured package logger
    """
    if level is None:
        level = os.environ.get(LOG_LEVEL_ENV)
    if verbose:
        resolved = logging.DEBUG
    elif level:
        resolved = logging.getLevelName(level.strip().upper())
        if not isinstance(resolved, int):
            resolved = logging.WARNING
    else:
        resolved = logging.WARNING

    package_logger = logging.getLogger("billcycle")
    package_logger.setLevel(resolved)

    # Remove existing handlers to avoid duplicates
    package_logger.handlers.clear()

    # Bound to the current sys.stderr
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(fmt=LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
    package_logger.addHandler(handler)
    return package_logger
