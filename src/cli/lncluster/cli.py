"""lncluster CLI entrypoint."""

import difflib
import os
import sys
from importlib import import_module
from typing import Any

import click

from lncluster import utils
from lncluster.core.context import LNClusterContext
from lncluster.core.logging.levels import LogLevel
from lncluster.core.logging.utils import configure_logging, get_logger


class CommandLineInterface(click.Group):
    """Load commands from the modules in `lncluster/cmd`."""

    def list_commands(self, ctx: click.Context) -> list[str]:
        """List available commands."""
        cmd_dir = os.path.abspath(os.path.join(os.path.dirname(__file__), "cmd"))
        return sorted(
            filename[:-3].replace("_", "-")
            for filename in os.listdir(cmd_dir)
            if filename.endswith(".py") and not filename.startswith("__")
        )

    def get_command(self, ctx: click.Context, name: str) -> Any:
        """Load and return the command module's `cli` object."""
        mod_name = name.replace("-", "_")
        try:
            mod = import_module(f"lncluster.cmd.{mod_name}")
        except ModuleNotFoundError:
            # Runs before the group callback has set up logging
            configure_logging()
            suggestion = difflib.get_close_matches(name, self.list_commands(ctx), n=1)
            suggestion_msg = f" Did you mean '{suggestion[0]}'?" if suggestion else ""
            get_logger().error(f"Command '{name}' not found.{suggestion_msg}")
            sys.exit(1)
        return getattr(mod, "cli")


@click.command(cls=CommandLineInterface)
@click.version_option(version=utils.cli_ver(), prog_name="lncluster")
@click.option(
    "-v",
    "--verbose",
    is_flag=True,
    default=False,
    help="Enable debug logging.",
)
@click.option(
    "--log-level",
    type=click.Choice(["ERROR", "WARN", "INFO", "DEBUG"], case_sensitive=False),
    default="INFO",
    help="Set the minimum log level (ERROR, WARN, INFO, DEBUG).",
)
@click.option(
    "--global-logging",
    is_flag=True,
    default=False,
    help="Show logs from third-party libraries too.",
)
@click.option(
    "-e",
    "--env",
    default=[],
    type=str,
    multiple=True,
    help="Add or override configuration values (KEY=VALUE).",
)
@utils.exception_handler
@utils.pass_environment()
def cli(
    ctx: LNClusterContext,
    verbose: bool,
    log_level: str,
    global_logging: bool,
    env: list[str],
) -> None:
    """Spin up throwaway, fully peered LND regtest clusters."""
    ctx._user_env_args = list(env)
    effective = LogLevel.from_cli(log_level, verbose)
    configure_logging(effective, global_logging=global_logging)
