"""Log levels shown by the lncluster CLI."""

from __future__ import annotations

import logging
from enum import Enum


class LogLevel(Enum):
    """User-facing log levels.

    Each member carries the prefix printed before its messages, the click
    color of that prefix and the standard `logging` level it maps onto.
    """

    DEBUG = ("[v]  ", "magenta", logging.DEBUG)
    INFO = ("[i]  ", "cyan", logging.INFO)
    WARN = ("[w]  ", "yellow", logging.WARNING)
    ERROR = ("[e]  ", "red", logging.ERROR)

    def __init__(self, prefix: str, color: str, py_level: int):
        self.prefix = prefix
        self.color = color
        self.py_level = py_level

    @property
    def stream(self) -> str:
        """Stream a crash dump attributes the message to."""
        return "stderr" if self is LogLevel.ERROR else "stdout"

    @classmethod
    def from_record(cls, levelno: int) -> LogLevel:
        """Return the highest level not above `levelno`.

        Records below DEBUG map to DEBUG and CRITICAL maps to ERROR.
        """
        match = cls.DEBUG
        for level in cls:
            if level.py_level <= levelno:
                match = level
        return match

    @classmethod
    def from_cli(cls, name: str, verbose: bool = False) -> LogLevel:
        """Resolve the `--log-level` choice; `--verbose` forces DEBUG."""
        return cls.DEBUG if verbose else cls[name.upper()]
