"""Unit tests for the root CLI group."""

import logging
from unittest.mock import patch

from lncluster.cli import cli


class TestCli:
    """Test suite for the root command."""

    def test_help_lists_commands(self, cli_runner):
        """Test commands are discovered from the cmd package."""
        result = cli_runner.invoke(cli, ["--help"])

        assert result.exit_code == 0
        assert "spawn" in result.output
        assert "down" in result.output

    def test_unknown_command_suggests(self, cli_runner):
        """Test a mistyped command exits 1 with a suggestion."""
        result = cli_runner.invoke(cli, ["spwan"])

        assert result.exit_code == 1
        assert "Did you mean 'spawn'?" in result.output

    def test_unknown_command_before_logging_setup(self, cli_runner):
        """Test the suggestion is shown when no handler is installed yet."""
        logging.getLogger().handlers.clear()

        result = cli_runner.invoke(cli, ["spwan"])

        assert result.exit_code == 1
        assert "Command 'spwan' not found." in result.output
        assert "Did you mean 'spawn'?" in result.output

    def test_env_args_reach_context(self, cli_runner):
        """Test -e values are stored on the context for initialize()."""
        with patch("lncluster.cmd.down._remove_containers") as mock_remove:
            mock_remove.return_value = 0
            with patch("lncluster.core.context.EnvironmentVariables") as mock_env:
                result = cli_runner.invoke(
                    cli, ["-e", "LND_IMAGE=x", "down", "--keep-network"]
                )

        assert result.exit_code == 0, result.output
        ctx = mock_env.call_args.args[0]
        assert ctx._user_env_args == ["LND_IMAGE=x"]
