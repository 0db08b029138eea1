"""In-memory log sink for the lncluster logger."""

import logging

from lncluster.core.logging.common import strip_ansi
from lncluster.core.logging.levels import LogLevel


class SinkCollector:
    """Collect every formatted log line for later inspection.

    The buffer is capped; once it grows past `MAX_BUFFER_BYTES` the oldest
    half is dropped.
    """

    MAX_BUFFER_BYTES = 50 * 1024 * 1024

    def __init__(self) -> None:
        self.buffer: list[tuple[str, str]] = []
        self._size = 0

    def __call__(self, msg: str, stream: str) -> None:
        """Append a message tagged with its target stream."""
        self.buffer.append((msg, stream))
        self._size += self._entry_size(msg, stream)
        if self._size > self.MAX_BUFFER_BYTES:
            self.buffer = self.buffer[len(self.buffer) // 2 :]
            self._size = sum(self._entry_size(m, s) for m, s in self.buffer)

    @staticmethod
    def _entry_size(msg: str, stream: str) -> int:
        return len(msg.encode("utf-8")) + len(stream) + 1

    def clear(self) -> None:
        """Clear the buffer."""
        self.buffer.clear()
        self._size = 0

    @property
    def size(self) -> int:
        """Return the size of the buffer in bytes."""
        return self._size


class SinkOnlyHandler(logging.Handler):
    """Send every record to a `SinkCollector`, regardless of level."""

    def __init__(self, sink: SinkCollector, formatter: logging.Formatter) -> None:
        super().__init__(level=logging.NOTSET)
        self.sink = sink
        self.setFormatter(formatter)

    def emit(self, record: logging.LogRecord) -> None:
        """Emit a log record."""
        try:
            msg = strip_ansi(self.format(record))
            self.sink(msg, LogLevel.from_record(record.levelno).stream)
        except Exception:
            self.handleError(record)
