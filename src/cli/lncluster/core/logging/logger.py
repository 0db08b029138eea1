"""lncluster logger."""

import logging
from contextlib import contextmanager

from lncluster.core import logging as lg
from lncluster.core.errors import LNClusterError


class LNClusterLogger(logging.Logger):
    """Logger shared by the CLI and the orchestration engine.

    Obtain it through `lncluster.core.logging.utils.get_logger()` so that
    a single instance is registered under the name "lncluster".
    """

    def __init__(self, name: str, level: int = logging.NOTSET) -> None:
        super().__init__(name, level)
        self._log_level = lg.levels.LogLevel.INFO
        self._log_sink = lg.sink.SinkCollector()
        self._formatter: lg.formatter.LNClusterLogFormatter | None = None
        self._spinner: lg.spinner.Spinner | None = None

    def info(self, msg: object, *args: object, **kwargs) -> None:
        """Log an info message."""
        self._emit(logging.INFO, msg, *args, **kwargs)

    def warn(self, msg: object, *args: object, **kwargs) -> None:
        """Log a warning message."""
        self._emit(logging.WARNING, msg, *args, **kwargs)

    def warning(self, msg: object, *args: object, **kwargs) -> None:
        """Log a warning message."""
        self.warn(msg, *args, **kwargs)

    def error(self, msg: object, *args: object, **kwargs) -> None:
        """Log an error message."""
        self._emit(logging.ERROR, msg, *args, **kwargs)

    def debug(self, msg: object, *args: object, **kwargs) -> None:
        """Log a debug message."""
        self._emit(logging.DEBUG, msg, *args, **kwargs)

    def _emit(self, level: int, msg: object, *args: object, **kwargs) -> None:
        msg_str = str(msg).strip()
        if not msg_str or not self.isEnabledFor(level):
            return
        kwargs.setdefault("stacklevel", 3)
        if self.isEnabledFor(logging.DEBUG) and level <= logging.INFO:
            extra = kwargs.setdefault("extra", {})
            extra["fq_caller"] = lg.utils.get_caller_fq_name(kwargs["stacklevel"])
        super()._log(level, msg_str, args, **kwargs)

    @property
    def log_buffer(self) -> list[tuple[str, str]]:
        """Return every captured `(message, stream)` pair."""
        return list(self._log_sink.buffer)

    def clear_log_buffer(self) -> None:
        """Clear the log buffer."""
        self._log_sink.clear()

    def set_level(self, level: lg.levels.LogLevel) -> None:
        """Set the level of the user-facing handler.

        The logger itself stays at NOTSET so that the sink keeps
        receiving debug records.
        """
        self._log_level = level
        for handler in logging.getLogger().handlers:
            if isinstance(handler, lg.handler.LNClusterLoggerHandler):
                handler.setLevel(level.py_level)

        always_verbose = level == lg.levels.LogLevel.DEBUG
        if self._formatter:
            self._formatter.always_verbose = always_verbose
        if self._spinner:
            self._spinner.always_verbose = always_verbose

    @contextmanager
    def spinner(self, message: str):
        """Display a spinner while a task is in progress."""
        if self._spinner is None:
            raise LNClusterError("Logger spinner used before configure_logging().")
        with self._spinner.spinner(message):
            yield
