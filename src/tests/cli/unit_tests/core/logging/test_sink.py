"""Unit tests for logging sink."""

import logging
from unittest.mock import MagicMock

from lncluster.core.logging.sink import SinkCollector, SinkOnlyHandler


class TestSinkCollector:
    """Test suite for SinkCollector class."""

    def test_init(self):
        """Test SinkCollector initialization."""
        sink = SinkCollector()

        assert sink.buffer == []
        assert sink.size == 0
        assert sink.MAX_BUFFER_BYTES == 50 * 1024 * 1024

    def test_call_adds_to_buffer(self):
        """Test calling sink adds message to buffer."""
        sink = SinkCollector()

        sink("test message", "stdout")

        assert sink.buffer == [("test message", "stdout")]
        assert sink.size > 0

    def test_trim_buffer_when_exceeds_max(self):
        """Test the oldest half is dropped once the cap is exceeded."""
        sink = SinkCollector()
        sink.MAX_BUFFER_BYTES = 100

        for i in range(10):
            sink(f"message number {i:02d}", "stdout")

        assert sink.size <= 100
        assert sink.buffer[-1] == ("message number 09", "stdout")
        assert ("message number 00", "stdout") not in sink.buffer

    def test_clear(self):
        """Test clearing the buffer resets its size."""
        sink = SinkCollector()
        sink("a", "stdout")

        sink.clear()

        assert sink.buffer == []
        assert sink.size == 0


class TestSinkOnlyHandler:
    """Test suite for SinkOnlyHandler class."""

    def make_record(self, level, msg):
        return logging.LogRecord("test", level, "test.py", 1, msg, (), None)

    def test_routes_by_level(self):
        """Test errors are tagged stderr and everything else stdout."""
        sink = SinkCollector()
        formatter = logging.Formatter("%(message)s")
        handler = SinkOnlyHandler(sink, formatter)

        handler.emit(self.make_record(logging.DEBUG, "detail"))
        handler.emit(self.make_record(logging.ERROR, "broken"))

        assert sink.buffer == [("detail", "stdout"), ("broken", "stderr")]

    def test_strips_ansi(self):
        """Test color codes never reach the sink."""
        sink = SinkCollector()
        formatter = MagicMock()
        formatter.format.return_value = "\x1b[36m[i]  \x1b[0mhello"
        handler = SinkOnlyHandler(sink, formatter)

        handler.emit(self.make_record(logging.INFO, "hello"))

        assert sink.buffer == [("[i]  hello", "stdout")]

    def test_accepts_every_level(self):
        """Test the handler itself filters nothing."""
        handler = SinkOnlyHandler(SinkCollector(), logging.Formatter())

        assert handler.level == logging.NOTSET
