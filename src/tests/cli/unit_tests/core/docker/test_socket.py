"""Unit tests for Docker socket resolution."""

import json
import subprocess
from unittest.mock import Mock, patch

import pytest

from lncluster.core.docker.socket import resolve_docker_socket
from lncluster.core.errors import LNClusterError


def context_output(host):
    return json.dumps([{"Endpoints": {"docker": {"Host": host}}}])


class TestResolveDockerSocket:
    """Test suite for resolve_docker_socket()."""

    @patch("lncluster.core.docker.socket.subprocess.run")
    def test_docker_host_wins(self, mock_run):
        """Test DOCKER_HOST is used without consulting the context."""
        socket = resolve_docker_socket({"DOCKER_HOST": "tcp://localhost:2375"})

        assert socket == "tcp://localhost:2375"
        mock_run.assert_not_called()

    @patch("lncluster.core.docker.socket.subprocess.run")
    def test_falls_back_to_docker_context(self, mock_run):
        """Test the current context's endpoint is used otherwise."""
        mock_run.return_value = Mock(
            stdout=context_output("unix:///var/run/docker.sock")
        )

        assert resolve_docker_socket({}) == "unix:///var/run/docker.sock"
        assert mock_run.call_args.args[0] == ["docker", "context", "inspect"]

    @patch("lncluster.core.docker.socket.subprocess.run")
    def test_cli_failure(self, mock_run):
        """Test a failing docker CLI is reported."""
        mock_run.side_effect = subprocess.CalledProcessError(1, "docker")

        with pytest.raises(LNClusterError):
            resolve_docker_socket({})

    @patch("lncluster.core.docker.socket.subprocess.run")
    def test_context_without_host(self, mock_run):
        """Test a context with no endpoint address is reported."""
        mock_run.return_value = Mock(stdout=context_output(""))

        with pytest.raises(LNClusterError):
            resolve_docker_socket({})
