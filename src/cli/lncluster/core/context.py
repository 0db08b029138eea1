"""Shared context for lncluster commands and the orchestration engine."""

from __future__ import annotations

import os

import docker

from lncluster.core.docker.socket import resolve_docker_socket
from lncluster.core.envvars import EnvironmentVariables
from lncluster.core.errors import LNClusterError, UserError
from lncluster.core.logging.logger import LNClusterLogger
from lncluster.core.logging.utils import get_logger


class LNClusterContext:
    """Expose configuration, logging and Docker access.

    Attributes
    ----------
    logger : LNClusterLogger
        Logs CLI and engine activity.
    env : EnvironmentVariables
        Configuration values, populated by `initialize()`.
    user_dir : str
        Path to the `~/.lncluster` directory.
    config_file : str
        Path to the user's `lncluster.cfg` file.

    Notes
    -----
    The Docker client is created on first access so that code paths that
    never touch Docker (e.g. engine tests with fake spawners) do not
    need a daemon.
    """

    def __init__(self, user_env_args: list[str] | None = None):
        self._user_env_args = list(user_env_args or [])
        self.logger: LNClusterLogger = get_logger()
        self.env: EnvironmentVariables | None = None
        self.user_dir = os.path.join(os.path.expanduser("~"), ".lncluster")
        self.config_file = os.path.join(self.user_dir, "lncluster.cfg")
        self._docker_client: docker.DockerClient | None = None
        self._initialized = False

    def initialize(self) -> None:
        """Load configuration. May only be called once."""
        if self._initialized:
            raise LNClusterError("Context has already been initialized.")
        self.env = EnvironmentVariables(self)
        self.env.log_env_vars()
        self._initialized = True

    @property
    def docker_client(self) -> docker.DockerClient:
        """Docker client for the configured daemon."""
        if self._docker_client is None:
            self._docker_client = self._create_docker_client()
        return self._docker_client

    @docker_client.setter
    def docker_client(self, client: docker.DockerClient) -> None:
        self._docker_client = client

    def _create_docker_client(self) -> docker.DockerClient:
        env = dict(os.environ)
        if self.env is not None:
            env.update({k: v for k, v in self.env.items() if k == "DOCKER_HOST"})
        self.logger.debug("Locating Docker socket for the current Docker context...")
        try:
            socket = resolve_docker_socket(env)
            self.logger.debug(f"Docker socket path: {socket}")
            client = docker.DockerClient(base_url=socket)
            client.ping()
        except Exception as e:
            raise UserError(
                f"Error when connecting to the Docker server. Is the Docker daemon "
                f"running?\nError from Docker: {str(e)}",
                "If Docker is already running, check whether you are using the "
                "intended Docker context. You can view existing contexts with "
                "`docker context ls` and switch with `docker context use <context>`.",
            ) from e
        return client
