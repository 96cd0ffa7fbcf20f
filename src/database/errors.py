"""
Translation of database error states into user-facing messages.
"""
import logging
from typing import Dict, Optional

import psycopg2

from i18n import LocaleHandle
from ledger.errors import ProcedureError, RequestAbort

logger = logging.getLogger('ledger.database.errors')

MORE_INFORMATION = "More information has been reported in the error logs"

STATE_MESSAGES: Dict[str, str] = {
    "42883": "Internal Database Error",
    "42501": "Access Denied",
    "42401": "Access Denied",
    "22008": "Invalid date/time entered",
    "22012": "Division by 0 error",
    "22004": "Required input not provided",
    "23502": "Required input not provided",
    "23505": "Conflict with Existing Data.  Perhaps you already entered this?",
}

RAISE_EXCEPTION_STATE = "P0001"


def localized_state_message(state: Optional[str], message: str, locale: LocaleHandle) -> Optional[str]:
    """Localized text for a known SQL state, ``None`` for any other state."""
    if state == RAISE_EXCEPTION_STATE:
        return locale.text("Error from Function:") + "\n" + message
    if state in STATE_MESSAGES:
        return locale.text(STATE_MESSAGES[state])
    return None


def report_database_error(error: ProcedureError, locale: LocaleHandle, conn=None) -> None:
    """
    Log a failed database call and abort the request.

    Known states roll the transaction back and abort with the localized
    message; any other state aborts with the raw ``state:message``.

    Raises:
        RequestAbort: always
    """
    logger.error(f"Logging SQL State {error.state}, procedure {error.funcname}, string {error.message}")

    localized = localized_state_message(error.state, error.message, locale)
    if localized is None:
        raise RequestAbort(f"{error.state}:{error.message}")

    if conn is not None and not conn.closed:
        try:
            conn.rollback()
        except psycopg2.Error as e:
            logger.error(f"Rollback after SQL State {error.state} failed: {e}")
    raise RequestAbort(localized + "\n" + locale.text(MORE_INFORMATION))
