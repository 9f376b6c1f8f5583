"""Destinations for log messages: terminal, text stream, or several at once."""

from __future__ import annotations

import sys
from abc import ABC, abstractmethod
from typing import Iterable, TextIO

from . import config


class LogStrategy(ABC):
    """Receives messages of the four log levels."""

    @abstractmethod
    def verbose(self, message: str) -> None:
        """Handle a verbose message."""

    @abstractmethod
    def debug(self, message: str) -> None:
        """Handle a debug message."""

    @abstractmethod
    def info(self, message: str) -> None:
        """Handle an informational message."""

    @abstractmethod
    def error(self, message: str) -> None:
        """Handle an error message."""


class CombinedLogStrategy(LogStrategy):
    """Forwards every message to each of its strategies, in order."""

    def __init__(self, strategies: Iterable[LogStrategy] = ()) -> None:
        self._strategies: list[LogStrategy] = list(strategies)

    def add(self, strategy: LogStrategy) -> None:
        self._strategies.append(strategy)

    def verbose(self, message: str) -> None:
        for strategy in self._strategies:
            strategy.verbose(message)

    def debug(self, message: str) -> None:
        for strategy in self._strategies:
            strategy.debug(message)

    def info(self, message: str) -> None:
        for strategy in self._strategies:
            strategy.info(message)

    def error(self, message: str) -> None:
        for strategy in self._strategies:
            strategy.error(message)


class StreamLogStrategy(LogStrategy):
    """Writes each message as a tagged line to a text stream."""

    def __init__(self, stream: TextIO) -> None:
        self.stream = stream

    def _write(self, tag: str, message: str) -> None:
        self.stream.write(f"::{tag} {message}\n")
        self.stream.flush()

    def verbose(self, message: str) -> None:
        self._write("VERBOSE", message)

    def debug(self, message: str) -> None:
        self._write("DEBUG", message)

    def info(self, message: str) -> None:
        self._write("INFO", message)

    def error(self, message: str) -> None:
        self._write("ERROR", message)


class TerminalLogStrategy(LogStrategy):
    """Prints messages to the terminal, coloured by level; errors go to stderr."""

    def verbose(self, message: str) -> None:
        print(f"{config.ANSI_COLOR_BLUE}{message}{config.ANSI_COLOR_RESET}", file=sys.stdout)

    def debug(self, message: str) -> None:
        print(f"{config.ANSI_COLOR_CYAN}{message}{config.ANSI_COLOR_RESET}", file=sys.stdout)

    def info(self, message: str) -> None:
        print(message, file=sys.stdout)

    def error(self, message: str) -> None:
        print(f"{config.ANSI_COLOR_RED}{message}{config.ANSI_COLOR_RESET}", file=sys.stderr)