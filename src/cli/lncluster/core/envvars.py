"""Environment variable configuration for lncluster."""

from __future__ import annotations

import os
from configparser import ConfigParser
from typing import TYPE_CHECKING, Any

from lncluster import utils
from lncluster.settings import CONFIG_TEMPLATE

if TYPE_CHECKING:
    from lncluster.core.context import LNClusterContext

SHELL_SOURCE = [
    "BITCOIND_IMAGE",
    "CHAIN_RPC_PASS",
    "CHAIN_RPC_USER",
    "DOCKER_HOST",
    "LND_IMAGE",
    "STARTUP_RETRIES",
]


class EnvironmentVariables(dict):
    """lncluster configuration values.

    Parameters
    ----------
    ctx : LNClusterContext
        The context holding user input and the config file location.

    Notes
    -----
    Sources, highest precedence first:

    1. `-e KEY=VALUE` arguments passed on the command line.
    2. Known keys (see `SHELL_SOURCE`) from the OS environment.
    3. The `[config]` section of `~/.lncluster/lncluster.cfg`.

    A value already set by a higher-precedence source is never
    overridden.
    """

    def __init__(self, ctx: LNClusterContext) -> None:
        super().__init__()
        self._ctx = ctx
        self._parse_user_env_args()
        self._parse_os_env()
        self._parse_config_file()

    def get(self, key: Any, default: Any = None) -> str:
        """Return the value for `key` as a string ("" when unset)."""
        val = super().get(key, default)
        return str(val) if val is not None else ""

    def _parse_user_env_args(self) -> None:
        for env_var in self._ctx._user_env_args:
            k, v = utils.parse_key_value_pair(env_var)
            self[k.upper()] = v

    def _parse_os_env(self) -> None:
        for k, v in os.environ.items():
            k = k.upper()
            if k in SHELL_SOURCE and not self.get(k):
                self[k] = str(v)

    def _parse_config_file(self) -> None:
        """Parse the user's `lncluster.cfg` file, if present.

        A malformed file is reported as a warning and otherwise ignored.
        """
        if not os.path.isfile(self._ctx.config_file):
            return
        try:
            config = ConfigParser(interpolation=None)
            config.optionxform = str  # type: ignore[method-assign,assignment]
            config.read(self._ctx.config_file)
            for k, v in config.items("config"):
                if not self.get(k.upper()) and v:
                    self[k.upper()] = _strip_quotes(v)
        except Exception as e:
            self._ctx.logger.warn(
                f"Failed to parse config file {self._ctx.config_file} with error:"
                f"\n{str(e)}\n"
                f"Variables set in the config file will not be loaded. The valid "
                f"config file structure is:\n"
                f"{CONFIG_TEMPLATE}"
            )

    def log_env_vars(self) -> None:
        """Log the registered values at debug level, aligned by key."""
        if not self:
            return
        width = max(len(k) for k in self) + 4
        lines = [f"\t{k.ljust(width)}{v}" for k, v in sorted(self.items())]
        self._ctx.logger.debug("Registered environment variables:\n" + "\n".join(lines))


def _strip_quotes(value: str) -> str:
    """Strip one pair of matching surrounding quotes.

    Examples
    --------
    >>> _strip_quotes('"hello"')
    'hello'
    >>> _strip_quotes("'mixed\\"")
    '\\'mixed"'
    """
    value = value.strip()
    if len(value) >= 2 and value[0] == value[-1] and value[0] in ("'", '"'):
        return value[1:-1]
    return value
