"""Utility functions for the lncluster CLI and core operations."""

from __future__ import annotations

import os
import sys
import traceback
from functools import wraps
from importlib.metadata import PackageNotFoundError, version
from inspect import signature
from typing import Any, Optional

from click import echo, make_pass_decorator

from lncluster.core.errors import LNClusterError, UserError
from lncluster.core.logging.utils import get_logger
from lncluster.shutdown import shutdown_event


# ----------------------------------------------------------------------
# CLI Decorators & Exception Handling
# ----------------------------------------------------------------------
def pass_environment() -> Any:
    """Return a Click pass decorator for the LNClusterContext."""
    from lncluster.core.context import LNClusterContext

    return make_pass_decorator(LNClusterContext, ensure=True)


def handle_exception(
    error: BaseException,
    ctx: Optional[Any] = None,
    skip_traceback: bool = False,
) -> None:
    """
    Log an exception and exit with the error's exit code.

    Parameters
    ----------
    error : BaseException
        The exception object.
    ctx : Optional[Any]
        Optional context object with a logger.
    skip_traceback : bool
        If True, suppresses traceback output. Always True for
        `UserError`.

    Raises
    ------
    SystemExit
        Always.
    """
    # Signal running worker threads to stop
    shutdown_event.set()

    if isinstance(error, SystemExit):
        raise error
    if isinstance(error, UserError):
        error_msg, exit_code, skip_traceback = error.msg, error.exit_code, True
    elif isinstance(error, LNClusterError):
        error_msg, exit_code = error.msg, error.exit_code
    elif isinstance(error, KeyboardInterrupt):
        error_msg, exit_code, skip_traceback = "Interrupted.", 130, True
    else:
        error_msg, exit_code = str(error), 1

    tb = error.__traceback__
    while tb and tb.tb_next:
        tb = tb.tb_next
    if tb:
        frame = tb.tb_frame
        filename = os.path.basename(frame.f_code.co_filename)
        module = frame.f_globals.get("__name__", "")
        origin = f"{module}:{filename}:{tb.tb_lineno}"
    else:
        origin = "unknown:unknown:0"

    logger = getattr(ctx, "logger", None) or get_logger()
    logger.error(f"[Origin: {origin}] {error_msg}")

    if not skip_traceback:
        echo()
        echo(
            "".join(
                traceback.format_exception(type(error), error, error.__traceback__)
            ),
            err=True,
        )

    sys.exit(exit_code)


def exception_handler(func: Any) -> Any:
    """
    Route unhandled exceptions of a CLI callback through `handle_exception`.

    Parameters
    ----------
    func : Callable
        The function to wrap.

    Returns
    -------
    Callable
        The wrapped function.
    """

    @wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        sig = signature(func)
        ctx = kwargs.get("ctx")
        if ctx is None and "ctx" in sig.parameters:
            ctx_index = list(sig.parameters).index("ctx")
            if len(args) > ctx_index:
                ctx = args[ctx_index]
        try:
            return func(*args, **kwargs)
        except BaseException as e:
            handle_exception(e, ctx)

    return wrapper


# ----------------------------------------------------------------------
# Miscellaneous
# ----------------------------------------------------------------------
def generate_identifier(identifiers: Optional[dict[str, Any]] = None) -> str:
    """
    Return an object identifier string used for creating log messages.

    Examples
    --------
    >>> generate_identifier({"node": "3f2a", "rpc": "localhost:10009"})
    '[node: 3f2a] [rpc: localhost:10009]'
    """
    return " ".join(f"[{k}: {v}]" for k, v in (identifiers or {}).items())


def parse_key_value_pair(pair: str) -> tuple[str, str]:
    """
    Parse a `KEY=VALUE` string.

    Raises
    ------
    UserError
        If the pair has no `=`, or an empty key or value.
    """
    pair = pair.strip()
    if "=" not in pair:
        raise UserError(f"Invalid key-value pair: {pair}", "Use the form KEY=VALUE.")
    key, value = pair.split("=", 1)
    if not key.strip() or not value:
        raise UserError(f"Invalid key-value pair: {pair}", "Use the form KEY=VALUE.")
    return key.strip(), value


def cli_ver() -> str:
    """Return the installed lncluster version."""
    try:
        return version("lncluster")
    except PackageNotFoundError:
        return "unknown"
