"""Resolve the Docker daemon address to connect to."""

from __future__ import annotations

import json
import os
import subprocess

from lncluster.core.errors import LNClusterError


def resolve_docker_socket(env: dict | None = None) -> str:
    """Return the Docker socket to use, preferring DOCKER_HOST if set.

    Parameters
    ----------
    env : dict, optional
        Environment used for the lookup. Defaults to `os.environ`.

    Returns
    -------
    str
        The daemon address, e.g. `unix:///var/run/docker.sock`.

    Raises
    ------
    LNClusterError
        If neither DOCKER_HOST nor `docker context inspect` yields an
        address.
    """
    if env is None:
        env = dict(os.environ)
    socket_path = env.get("DOCKER_HOST")
    if socket_path:
        return socket_path
    try:
        result = subprocess.run(
            ["docker", "context", "inspect"],
            capture_output=True,
            check=True,
            text=True,
            env=env,
        )
        context = json.loads(result.stdout)[0]
        host = context["Endpoints"]["docker"].get("Host", "")
    except Exception as e:
        raise LNClusterError(f"Failed to determine Docker socket: {e}") from e
    if not host:
        raise LNClusterError("Current Docker context has no daemon address.")
    return host
