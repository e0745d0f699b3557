"""Utility helpers."""

from .logger import setup_logger, LOG_FORMAT, LOGLEVEL_ENV

__all__ = [
    "setup_logger",
    "LOG_FORMAT",
    "LOGLEVEL_ENV",
]
