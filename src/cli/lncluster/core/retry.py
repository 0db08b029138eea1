"""Bounded fixed-interval retry."""

from __future__ import annotations

import time
from collections.abc import Callable
from typing import TypeVar

from lncluster.core.errors import RetryExhausted
from lncluster.core.logging.utils import get_logger
from lncluster.shutdown import shutdown_event

T = TypeVar("T")


def retry(
    fn: Callable[[], T],
    attempts: int,
    interval: float,
    retry_on: type[BaseException] | tuple[type[BaseException], ...] = Exception,
    desc: str = "operation",
) -> T:
    """Call `fn` until it returns or the attempts run out.

    Parameters
    ----------
    fn : Callable[[], T]
        Zero-argument callable. Raising an exception matching `retry_on`
        marks the attempt as failed; any other exception propagates
        immediately.
    attempts : int
        Maximum number of calls to `fn`. Must be at least 1.
    interval : float
        Seconds to sleep between consecutive attempts.
    retry_on : type or tuple of types, optional
        Exception types treated as retryable. Defaults to `Exception`.
    desc : str, optional
        Short description used in log and error messages.

    Returns
    -------
    T
        The first successful return value of `fn`.

    Raises
    ------
    RetryExhausted
        If every attempt failed. The last failure is chained and kept on
        `last_error`.
    """
    if attempts < 1:
        raise ValueError("attempts must be at least 1")

    last_error: BaseException | None = None
    for attempt in range(1, attempts + 1):
        try:
            return fn()
        except retry_on as e:
            last_error = e
            if attempt == attempts:
                break
            if shutdown_event.is_set():
                get_logger().debug(f"Shutdown requested, abandoning {desc} retries.")
                break
            time.sleep(interval)

    raise RetryExhausted(
        f"{desc} failed after {attempt} attempt(s): {last_error}",
        attempts=attempt,
        last_error=last_error,
    ) from last_error
