"""Unit tests for the user-facing log handler."""

import logging
import threading
from unittest.mock import MagicMock

from lncluster.core.logging.handler import LNClusterLoggerHandler


class TestLNClusterLoggerHandler:
    """Test suite for LNClusterLoggerHandler."""

    def setup_method(self):
        self.spinner = MagicMock()
        self.spinner.output_lock = threading.RLock()
        self.handler = LNClusterLoggerHandler(self.spinner)
        self.logger = logging.Logger("lncluster-handler-test")
        self.logger.addHandler(self.handler)

    def test_writes_to_stderr_after_clearing_spinner(self, capsys):
        """Test records reach stderr and the spinner line is cleared first."""
        self.logger.info("node ready")

        captured = capsys.readouterr()
        assert "node ready" in captured.err
        assert captured.out == ""
        self.spinner.clear_line.assert_called_once()

    def test_records_below_level_are_dropped(self, capsys):
        """Test the handler level filters records."""
        self.logger.debug("detail")

        assert capsys.readouterr().err == ""
        self.spinner.clear_line.assert_not_called()

    def test_blank_output_is_skipped(self, capsys):
        """Test records formatting to nothing write nothing."""
        self.handler.setFormatter(MagicMock(format=MagicMock(return_value="")))

        self.logger.error("x")

        assert capsys.readouterr().err == ""
        self.spinner.clear_line.assert_not_called()
