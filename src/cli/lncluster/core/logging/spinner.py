"""Terminal spinner for long-running steps."""

from __future__ import annotations

import itertools
import sys
import threading
import time
from contextlib import contextmanager
from typing import TYPE_CHECKING

from click import style

from lncluster.core.logging.levels import LogLevel
from lncluster.shutdown import shutdown_event

if TYPE_CHECKING:
    from lncluster.core.logging.logger import LNClusterLogger

_CLEAR_LINE = "\033[2K\r"


class _SpinnerThread(threading.Thread):
    """Draw the spinner until `done` (or the shutdown event) is set."""

    def __init__(
        self,
        message: str,
        output_lock: threading.RLock,
        done: threading.Event,
    ) -> None:
        super().__init__(daemon=True)
        self.message = message
        self.output_lock = output_lock
        self.done = done
        self.prefix = style(LogLevel.INFO.prefix, fg=LogLevel.INFO.color, bold=True)

    def run(self) -> None:
        """Run the spinner thread."""
        for c in itertools.cycle(r"\|/-"):
            if self.done.is_set() or shutdown_event.is_set():
                break
            # Never block a log handler that holds the lock
            if self.output_lock.acquire(blocking=False):
                try:
                    sys.stdout.write(f"\r{self.prefix}{self.message} {c}")
                    sys.stdout.flush()
                finally:
                    self.output_lock.release()
            time.sleep(0.1)


class Spinner:
    """Display a spinner while a task is in progress.

    The spinner only appears when stdout is a TTY and the logger is not in
    verbose mode.

    Parameters
    ----------
    logger : LNClusterLogger
        Logger whose level decides whether the spinner is drawn.
    always_verbose : bool
        If True, the spinner is disabled.
    """

    def __init__(self, logger: LNClusterLogger, always_verbose: bool = False) -> None:
        self.logger = logger
        self.always_verbose = always_verbose
        self.output_lock = threading.RLock()
        self._thread: _SpinnerThread | None = None

    @contextmanager
    def spinner(self, message: str = ""):
        """Spin alongside `message` for the duration of the block."""
        if (
            self.always_verbose
            or self.logger._log_level == LogLevel.DEBUG
            or not sys.stdout.isatty()
        ):
            yield
            return

        done = threading.Event()
        self._thread = _SpinnerThread(message, self.output_lock, done)
        self._thread.start()
        try:
            yield
        finally:
            done.set()
            self._thread.join(timeout=0.2)
            self.clear_line()

    def clear_line(self) -> None:
        """Erase the spinner line, if stdout is a TTY."""
        if sys.stdout.isatty():
            with self.output_lock:
                sys.stdout.write(_CLEAR_LINE)
                sys.stdout.flush()
