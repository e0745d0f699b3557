"""Logging setup for applications embedding the costing engine.

Library modules only create ``logging.getLogger(__name__)`` loggers; call
setup_logger() once from an application entry point to see their output.
"""

import logging
import os
import sys
from typing import Optional

#: Environment variable consulted when no level is passed
LOGLEVEL_ENV = "COSTNET_LOGLEVEL"

LOG_FORMAT = "%(asctime)s - [%(levelname)s][%(name)s] %(message)s"

_LEVELS = {
    "trace": logging.DEBUG,
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "warning": logging.WARNING,
    "error": logging.ERROR,
    "off": logging.CRITICAL + 10,
}


def setup_logger(level: Optional[str] = None) -> logging.Logger:
    """Configure the ``costnet`` logger with a stdout handler.

    Args:
        level: Level name; falls back to $COSTNET_LOGLEVEL, then "warning".
            An unrecognized name is reported and treated as "warning".

    Returns:
        The configured ``costnet`` logger
    """
    name = level or os.environ.get(LOGLEVEL_ENV) or "warning"
    resolved = _LEVELS.get(name.strip().lower())

    logger = logging.getLogger("costnet")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(handler)
    logger.setLevel(resolved if resolved is not None else logging.WARNING)

    if resolved is None:
        logger.warning(f"Unknown log level {name!r}, using warning")
    return logger
