"""Fixtures for tests that run real bitcoind and LND containers.

These tests need a reachable Docker daemon and network access to pull
images. They only run when LNCLUSTER_INTEGRATION=1 is set.
"""

import os
from typing import Generator

import docker
import pytest

from lncluster import settings
from lncluster.core.context import LNClusterContext
from lncluster.core.logging.levels import LogLevel
from lncluster.core.logging.utils import configure_logging


def pytest_collection_modifyitems(config, items):
    """Skip the integration suite unless explicitly enabled."""
    if os.environ.get("LNCLUSTER_INTEGRATION") == "1":
        return
    skip = pytest.mark.skip(reason="set LNCLUSTER_INTEGRATION=1 to run")
    for item in items:
        if "integration_tests" in str(item.fspath):
            item.add_marker(skip)


@pytest.fixture(scope="session")
def ctx() -> LNClusterContext:
    """An initialized context shared by the whole session."""
    configure_logging(LogLevel.INFO)
    ctx = LNClusterContext()
    ctx.initialize()
    return ctx


@pytest.fixture
def docker_client(ctx) -> docker.DockerClient:
    """Return the session's Docker client."""
    return ctx.docker_client


@pytest.fixture(autouse=True)
def _no_leftover_containers(docker_client) -> Generator:
    """Fail loudly if a test leaves lncluster containers behind."""
    yield
    leftover = docker_client.containers.list(
        all=True, filters={"label": settings.ROOT_LABEL}
    )
    for container in leftover:
        container.remove(force=True)
    assert not leftover, f"Leftover containers: {[c.name for c in leftover]}"
