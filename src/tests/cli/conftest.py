"""Pytest configuration and fixtures shared by all lncluster CLI tests."""

from typing import Generator

import pytest
from click.testing import CliRunner

from lncluster.shutdown import shutdown_event


@pytest.fixture(autouse=True)
def _clear_shutdown_event() -> Generator:
    """
    Clear the global shutdown_event before and after each test.

    The event is set whenever an error is handled, so a failed test
    would otherwise abort every spawn that follows it.
    """
    shutdown_event.clear()
    yield
    shutdown_event.clear()


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Click CLI test runner."""
    return CliRunner()
