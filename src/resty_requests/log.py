"""Console logging for the resty_requests package logger.

Modules log through ``logging.getLogger(__name__)``, so everything the
builder and the client emit lands under the ``resty_requests`` logger.
setup_logging attaches one console handler there and leaves the root
logger alone.
"""

from __future__ import annotations

import logging
import os

LOGGER_NAME = "resty_requests"
LOG_FORMAT = "%(levelname)s %(name)s: %(message)s"


def _level_from(name: str | None) -> int:
    name = name or os.getenv("RESTY_REQUESTS_LOG_LEVEL") or "WARNING"
    level = logging.getLevelName(name.strip().upper())
    return level if isinstance(level, int) else logging.WARNING


def setup_logging(level: str | None = None) -> logging.Logger:
    """Send package log records to stderr and return the package logger.

    The level comes from ``level``, then ``RESTY_REQUESTS_LOG_LEVEL``, then
    WARNING; unknown names fall back to WARNING. Calling it again only
    updates the level.
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(_level_from(level))
    if logger.handlers:
        return logger

    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(handler)
    return logger


__all__ = ["LOGGER_NAME", "setup_logging"]
