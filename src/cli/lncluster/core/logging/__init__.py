"""Logging utilities for lncluster."""

from . import common, formatter, handler, levels, logger, sink, spinner, utils

__all__ = [
    "common",
    "formatter",
    "handler",
    "levels",
    "logger",
    "sink",
    "spinner",
    "utils",
]
