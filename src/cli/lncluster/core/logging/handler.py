"""User-facing log handler for lncluster."""

import logging

import click

from lncluster.core.logging.spinner import Spinner


class LNClusterLoggerHandler(logging.Handler):
    """Echo formatted records to stderr without tearing the spinner line.

    Output goes through `click.echo`, which resolves the stream at write
    time, so `CliRunner` captures it.
    """

    def __init__(self, spinner: Spinner, level: int = logging.INFO):
        super().__init__(level=level)
        self.spinner = spinner

    def emit(self, record: logging.LogRecord) -> None:
        """Write a record below the spinner."""
        try:
            msg = self.format(record)
            if not msg:
                return
            with self.spinner.output_lock:
                self.spinner.clear_line()
                click.echo(msg, err=True)
        except Exception:
            self.handleError(record)
