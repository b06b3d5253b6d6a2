from __future__ import annotations

import logging
import sys
from typing import Optional

from .config import LoggingConfig

PACKAGE_LOGGER = "counter_mcp"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s - %(message)s"


def _level(name: str) -> int:
    level = logging.getLevelName(name.upper())
    return level if isinstance(level, int) else logging.INFO


def configure_logging(config: LoggingConfig) -> logging.Handler:
    """Route the package's logs to stderr, or to ``config.file`` when set.

    stdout carries the protocol and never receives log records. Calling this
    again replaces the previously installed handler.
    """
    if config.file:
        handler: logging.Handler = logging.FileHandler(config.file, encoding="utf-8")
    else:
        handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))

    logger = logging.getLogger(PACKAGE_LOGGER)
    for previous in list(logger.handlers):
        logger.removeHandler(previous)
        previous.close()
    logger.addHandler(handler)
    logger.setLevel(_level(config.level))
    logger.propagate = False
    return handler


def get_logger(name: Optional[str] = None) -> logging.Logger:
    return logging.getLogger(name or PACKAGE_LOGGER)
