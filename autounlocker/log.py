"""Process-wide logger dispatching to a configured log strategy."""

from __future__ import annotations

from enum import IntEnum
from typing import Optional

from . import config
from .logstrategy import LogStrategy


class LogLevel(IntEnum):
    NONE = 0
    INFO = 1
    DEBUG = 2
    VERBOSE = 3


class _Logger:
    def __init__(self) -> None:
        self.strategy: Optional[LogStrategy] = None

    def get(self) -> LogStrategy:
        if self.strategy is None:
            raise RuntimeError("Logger not initialized")
        return self.strategy


_logger = _Logger()


def _format(message: str, args: tuple) -> str:
    return message % args if args else message


def init(strategy: LogStrategy) -> None:
    """Route all further log messages to ``strategy``."""
    _logger.strategy = strategy


def free() -> None:
    """Detach the current log strategy."""
    _logger.strategy = None


def verbose(message: str, *args) -> None:
    if config.LOG_LEVEL >= LogLevel.VERBOSE:
        _logger.get().verbose(_format(message, args))


def debug(message: str, *args) -> None:
    if config.LOG_LEVEL > LogLevel.DEBUG:
        _logger.get().debug(_format(message, args))


def info(message: str, *args) -> None:
    if config.LOG_LEVEL >= LogLevel.INFO:
        _logger.get().info(_format(message, args))


def error(message: str, *args) -> None:
    _logger.get().error(_format(message, args))