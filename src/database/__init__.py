"""PostgreSQL access: connections, stored procedures and error translation."""

from .procedures import call_procedure
from .errors import report_database_error, STATE_MESSAGES

__all__ = [
    "call_procedure",
    "report_database_error",
    "STATE_MESSAGES",
]
