"""
Logging for the catalog and maker factory.

Every module calls ``get_logger(__name__)`` once at import time.  Loggers
keep propagating to the root logger so test harnesses can capture records.
"""
from __future__ import annotations

import logging
import sys

from src.core.config import get_settings

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def _resolve_level(level: str | int | None) -> int:
    if isinstance(level, int):
        return level
    name = (level or get_settings().log_level).upper()
    return getattr(logging, name, logging.INFO)


def get_logger(name: str, level: str | int | None = None) -> logging.Logger:
    """Return *name*'s logger with a stdout handler; *level* overrides ``Settings.log_level``."""
    logger = logging.getLogger(name)
    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
        logger.addHandler(handler)
    logger.setLevel(_resolve_level(level))
    return logger
