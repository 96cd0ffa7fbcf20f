"""Per-request plumbing for the ledger web application.

The request object itself lives in ``ledger.request``; it is not re-exported
here so that the database, auth and session packages can import the error
types without pulling the request module in.
"""

__version__ = "1.6.0-dev"

from .errors import LedgerError, RequestAbort, RequestFinalized, ProcedureError, ConfigurationError
from .run_mode import RunMode

__all__ = [
    "__version__",
    "LedgerError",
    "RequestAbort",
    "RequestFinalized",
    "ProcedureError",
    "ConfigurationError",
    "RunMode",
]
