"""Common constants and helpers for lncluster logging."""

import re
import shutil

DEFAULT_INDENT = " " * 5

_OSC_RE = re.compile(r"\x1b\][^\x07\x1b]*(?:\x07|\x1b\\)")
_CSI_RE = re.compile(r"\x1b(?:[@-Z\\-_]|\[[0-?]*[ -/]*[@-~])")


def get_terminal_width() -> int:
    """Get the terminal width."""
    return shutil.get_terminal_size(fallback=(80, 24)).columns


def strip_ansi(value: str = "") -> str:
    """Remove ANSI escape sequences (OSC first, then CSI) from a string."""
    return _CSI_RE.sub("", _OSC_RE.sub("", value))
