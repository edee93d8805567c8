"""Console logger shared by the renderer."""

from __future__ import annotations

import logging
import sys

_LOGGER_NAME = "PBRT"
_PATTERN = "[%(asctime)s] [%(levelname)s] %(message)s"
_TIME_FORMAT = "%H:%M:%S"
_ALL_LEVELS = 1


class _LowercaseLevelFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        level_name = record.levelname
        record.levelname = level_name.lower()
        try:
            return super().format(record)
        finally:
            record.levelname = level_name


class _StdoutHandler(logging.StreamHandler):
    """Writes to whatever ``sys.stdout`` is at the time of each record."""

    def __init__(self) -> None:
        super().__init__(sys.stdout)

    @property
    def stream(self):
        return sys.stdout

    @stream.setter
    def stream(self, value) -> None:
        pass


def init_logger() -> logging.Logger:
    """Attach the console handler, enable every level and return the logger."""
    logger = get_logger()
    if not any(isinstance(handler, _StdoutHandler) for handler in logger.handlers):
        handler = _StdoutHandler()
        handler.setFormatter(_LowercaseLevelFormatter(_PATTERN, _TIME_FORMAT))
        logger.addHandler(handler)
    logger.setLevel(_ALL_LEVELS)
    logger.propagate = False
    return logger


def get_logger() -> logging.Logger:
    """Return the renderer's logger."""
    return logging.getLogger(_LOGGER_NAME)