"""Unit tests for EnvironmentVariables.

Tests value sources and their precedence: user arguments, the OS
environment, and the user's config file.
"""

import os
from unittest.mock import Mock, patch

import pytest

from lncluster.core.envvars import EnvironmentVariables, _strip_quotes
from lncluster.core.errors import UserError


class TestEnvironmentVariables:
    """Test suite for EnvironmentVariables."""

    def create_mock_context(self, tmp_path, user_env_args=None, config=None):
        """Create a mock context whose config file lives in `tmp_path`."""
        mock_ctx = Mock()
        mock_ctx._user_env_args = user_env_args or []
        mock_ctx.logger = Mock()
        mock_ctx.config_file = str(tmp_path / "lncluster.cfg")
        if config is not None:
            (tmp_path / "lncluster.cfg").write_text(config)
        return mock_ctx

    def test_get_returns_strings(self, tmp_path):
        """Test get() always returns a string."""
        with patch.dict(os.environ, {}, clear=True):
            env = EnvironmentVariables(self.create_mock_context(tmp_path))
        env["INT"] = 123
        env["NONE"] = None

        assert env.get("INT") == "123"
        assert env.get("NONE") == ""
        assert env.get("MISSING") == ""

    def test_user_args_are_upper_cased(self, tmp_path):
        """Test -e arguments are registered under upper-case keys."""
        ctx = self.create_mock_context(tmp_path, ["lnd_image=custom/lnd:dev"])

        with patch.dict(os.environ, {}, clear=True):
            env = EnvironmentVariables(ctx)

        assert env.get("LND_IMAGE") == "custom/lnd:dev"

    def test_invalid_user_arg(self, tmp_path):
        """Test malformed -e arguments are user errors."""
        ctx = self.create_mock_context(tmp_path, ["LND_IMAGE"])

        with pytest.raises(UserError):
            EnvironmentVariables(ctx)

    def test_only_known_os_vars_are_read(self, tmp_path):
        """Test unrelated OS variables are ignored."""
        os_env = {"LND_IMAGE": "from/os", "HOME_DIRECTORY": "/nope"}

        with patch.dict(os.environ, os_env, clear=True):
            env = EnvironmentVariables(self.create_mock_context(tmp_path))

        assert env.get("LND_IMAGE") == "from/os"
        assert "HOME_DIRECTORY" not in env

    def test_precedence(self, tmp_path):
        """Test user args beat the OS environment, which beats the file."""
        config = (
            "[config]\n"
            "LND_IMAGE=from/file\n"
            "BITCOIND_IMAGE=from/file\n"
            "STARTUP_RETRIES='30'\n"
        )
        ctx = self.create_mock_context(tmp_path, ["LND_IMAGE=from/user"], config)
        os_env = {"LND_IMAGE": "from/os", "BITCOIND_IMAGE": "from/os"}

        with patch.dict(os.environ, os_env, clear=True):
            env = EnvironmentVariables(ctx)

        assert env.get("LND_IMAGE") == "from/user"
        assert env.get("BITCOIND_IMAGE") == "from/os"
        assert env.get("STARTUP_RETRIES") == "30"

    def test_empty_config_values_are_skipped(self, tmp_path):
        """Test blank entries in the file do not register keys."""
        ctx = self.create_mock_context(tmp_path, config="[config]\nDOCKER_HOST=\n")

        with patch.dict(os.environ, {}, clear=True):
            env = EnvironmentVariables(ctx)

        assert "DOCKER_HOST" not in env

    def test_malformed_config_warns(self, tmp_path):
        """Test a broken config file is reported and otherwise ignored."""
        ctx = self.create_mock_context(tmp_path, config="not an ini file")

        with patch.dict(os.environ, {}, clear=True):
            env = EnvironmentVariables(ctx)

        assert dict(env) == {}
        ctx.logger.warn.assert_called_once()
        assert "[config]" in ctx.logger.warn.call_args.args[0]

    def test_log_env_vars(self, tmp_path):
        """Test registered values are logged at debug level."""
        ctx = self.create_mock_context(tmp_path, ["CHAIN_RPC_USER=alice"])

        with patch.dict(os.environ, {}, clear=True):
            env = EnvironmentVariables(ctx)
        env.log_env_vars()

        assert "CHAIN_RPC_USER" in ctx.logger.debug.call_args.args[0]


class TestStripQuotes:
    """Test suite for _strip_quotes()."""

    @pytest.mark.parametrize(
        "value,expected",
        [
            ('"quoted"', "quoted"),
            ("'quoted'", "quoted"),
            (" padded ", "padded"),
            ("'mixed\"", "'mixed\""),
            ("'", "'"),
        ],
    )
    def test_strip_quotes(self, value, expected):
        """Test one pair of matching quotes is removed."""
        assert _strip_quotes(value) == expected
