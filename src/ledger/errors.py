"""
Exception hierarchy for request handling.

Recoverable validation failures (bad session, bad form token) are reported as
booleans by the session gate. Everything here is the unrecoverable tier: it
unwinds to the top-level handler of the current run mode.
"""
from typing import Optional


class LedgerError(Exception):
    """Base exception for all request-handling errors."""


class RequestAbort(LedgerError):
    """Fatal, request-terminating error.

    The top-level handler renders ``message`` as an error page (network run
    modes) or a plain message (command line) using ``status``.
    """

    def __init__(self, message: str, status: int = 500):
        super().__init__(message)
        self.message = message
        self.status = status


class RequestFinalized(LedgerError):
    """Raised once request state is cleaned up, to stop further processing."""


class ProcedureError(LedgerError):
    """A stored procedure call failed inside the database."""

    def __init__(self, funcname: str, state: Optional[str], message: str):
        super().__init__(f"{funcname}: {state}:{message}")
        self.funcname = funcname
        self.state = state
        self.message = message


class ConfigurationError(LedgerError):
    """A required configuration value is missing or invalid."""
