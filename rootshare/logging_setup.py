"""Logging setup for RootShare.

Everything logs below the ``rootshare`` logger. ``setup_logging`` attaches
one stream handler to it and is safe to call repeatedly (reloads, tests).
"""

from __future__ import annotations

import logging
import sys

LOGGER_NAME = 'rootshare'
LOG_FORMAT = '%(asctime)s %(levelname)s [%(name)s] %(message)s'

_configured = False


def parse_level(level_name: str) -> int:
    s = (level_name or '').strip().upper()
    if s in ('CRITICAL', 'FATAL'):
        return logging.CRITICAL
    if s == 'ERROR':
        return logging.ERROR
    if s in ('WARN', 'WARNING'):
        return logging.WARNING
    if s in ('DEBUG', 'TRACE'):
        return logging.DEBUG
    return logging.INFO


def setup_logging(level_name: str = 'info') -> logging.Logger:
    global _configured

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(parse_level(level_name))
    if not _configured:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)
        logger.propagate = False
        _configured = True
    return logger
