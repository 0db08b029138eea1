"""Error classes for lncluster."""

from __future__ import annotations


class LNClusterError(Exception):
    """Base exception class for all lncluster-related errors.

    Parameters
    ----------
    msg : str, optional
        Message to log and include in the exception.

    Attributes
    ----------
    msg : str
        Error message associated with the exception.
    exit_code : int
        Exit code for the error type. Defaults to 1.
    """

    exit_code = 1

    def __init__(self, msg: str = "") -> None:
        super().__init__(msg)
        self.msg = msg

    def __str__(self) -> str:
        """Return the error message as a string."""
        return self.msg


class UserError(LNClusterError):
    """User errors that lncluster can safely log and display.

    Parameters
    ----------
    msg : str, optional
        Message to log and include in the exception.
    hint_msg : str, optional
        Additional guidance for resolving the issue.
    """

    exit_code = 2

    def __init__(self, msg: str = "", hint_msg: str = "") -> None:
        if hint_msg:
            super().__init__(f"User error: {msg}\nHint: {hint_msg}")
        else:
            super().__init__(f"User error: {msg}")


class RetryExhausted(LNClusterError):
    """Raised when a bounded retry loop runs out of attempts.

    Attributes
    ----------
    attempts : int
        Number of attempts that were made.
    last_error : BaseException | None
        The error raised by the final attempt.
    """

    def __init__(
        self, msg: str = "", attempts: int = 0, last_error: BaseException | None = None
    ) -> None:
        super().__init__(msg)
        self.attempts = attempts
        self.last_error = last_error


class ResourceContention(LNClusterError):
    """No non-conflicting port set was found within the allowed attempts."""


class ProvisioningFailure(LNClusterError):
    """A node environment failed to start, authenticate, or report identity."""


class ConnectionFailure(LNClusterError):
    """A peer-add call between two provisioned nodes failed."""


class MaturityTimeout(LNClusterError):
    """No spendable output appeared after maturity-crossing block generation."""


class TeardownFailure(LNClusterError):
    """One or more node environments failed to shut down."""
