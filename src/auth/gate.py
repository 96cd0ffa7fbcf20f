"""
Session and form-token validation for a request.

Checks apply to network run modes only; on the command line every check
reports valid. Failures are returned as booleans, the caller decides whether
to abort.
"""
import logging
from typing import TYPE_CHECKING, Optional

from ledger.run_mode import NO_SESSION_CHECK_FLAG, RunMode, flag_set
from session.backends import FormId, SessionStore
from session.models import SessionCookie

if TYPE_CHECKING:
    from ledger.request import LedgerRequest

logger = logging.getLogger('ledger.auth.gate')


class SessionGate:
    def __init__(self, request: "LedgerRequest", store: SessionStore):
        self.request = request
        self.store = store

    @property
    def skips_checks(self) -> bool:
        return self.request.run_mode is RunMode.CLI

    def session_check_required(self) -> bool:
        run_mode = self.request.run_mode
        if run_mode is RunMode.GATEWAY:
            return True
        if run_mode is RunMode.EMBEDDED:
            return not flag_set(self.request.environ, NO_SESSION_CHECK_FLAG)
        return False

    def verify_session(self) -> bool:
        """
        Validate the session cookie against the store.

        On success the request learns its ``session_id`` and the refreshed
        cookie value to send back to the client.
        """
        if not self.session_check_required():
            return True

        cookie = SessionCookie.parse(self.request.cookie)
        if cookie is None:
            logger.error("Session did not check: no usable session cookie")
            return False

        record = self.store.check(cookie)
        if record is None:
            logger.error(f"Session did not check: session {cookie.session_id} rejected by store")
            return False

        self.request.session_id = record.session_id
        if record.company is None:
            record = record.model_copy(update={"company": cookie.company})
        self.request.new_cookie = record.to_cookie().serialize()
        logger.debug("session_check completed OK")
        return True

    def open_form(self, commit: bool = False) -> bool:
        """Issue a form token for the session and record it as ``form_id``."""
        if self.skips_checks:
            return True
        session_id = self.request.session_id
        if session_id is None:
            logger.warning("Cannot open a form without a verified session")
            return False
        form_id = self.store.open_form(session_id)
        if commit and self.request.dbh is not None:
            self.request.dbh.commit()
        self.request.form_id = form_id
        return form_id is not None

    def check_form(self) -> bool:
        """Whether the request's ``form_id`` belongs to the session; the token stays valid."""
        if self.skips_checks:
            return True
        session_id = self.request.session_id
        form_id: Optional[FormId] = self.request.form_id
        if form_id is None or session_id is None:
            return False
        return self.store.check_form(session_id, form_id)

    def close_form(self) -> bool:
        """Like ``check_form``, but the token is consumed and ``form_id`` removed."""
        if self.skips_checks:
            return True
        session_id = self.request.session_id
        form_id: Optional[FormId] = self.request.form_id
        self.request.form_id = None
        if form_id is None or session_id is None:
            return False
        return self.store.close_form(session_id, form_id)
