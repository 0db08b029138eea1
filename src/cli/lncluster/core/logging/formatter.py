"""Logging formatter for the lncluster logger."""

import logging
import os
import sys
import textwrap

from click import style

from lncluster.core.logging.common import DEFAULT_INDENT, get_terminal_width
from lncluster.core.logging.levels import LogLevel


class LNClusterLogFormatter(logging.Formatter):
    """Prefix, colorize and wrap lncluster log records.

    Parameters
    ----------
    always_verbose : bool
        If True, every record carries its caller location, not only
        debug records.
    """

    def __init__(self, always_verbose: bool = False):
        super().__init__()
        self.always_verbose = always_verbose
        self.enable_color = sys.stdout.isatty()

    def format(self, record: logging.LogRecord) -> str:
        """Format a log record for output.

        Parameters
        ----------
        record : logging.LogRecord
            The log record to format.

        Returns
        -------
        str
            The formatted message, or an empty string for blank records.
        """
        msg = record.getMessage()
        if not msg.strip():
            return ""

        left = self._left(record)
        lines = msg.splitlines()
        if not sys.stdout.isatty():
            return "\n".join(
                [f"{left}{lines[0]}"] + [f"{DEFAULT_INDENT}{ln}" for ln in lines[1:]]
            )

        width = get_terminal_width()
        wrapped = []
        for i, line in enumerate(lines):
            wrapped.append(
                textwrap.fill(
                    line,
                    width=width,
                    initial_indent=left if i == 0 else DEFAULT_INDENT,
                    subsequent_indent=DEFAULT_INDENT,
                )
            )
        return "\n".join(wrapped)

    def _left(self, record: logging.LogRecord) -> str:
        level = LogLevel.from_record(record.levelno)
        prefix = level.prefix
        if self.enable_color:
            prefix = style(prefix, fg=level.color, bold=True)

        if self.always_verbose or record.levelno == logging.DEBUG:
            fq_caller = getattr(record, "fq_caller", "")
            if fq_caller:
                return f"{prefix}{fq_caller} "
            if record.pathname:
                return f"{prefix}{os.path.basename(record.pathname)}:{record.lineno} "
        return prefix
