import hmac
import itertools
import logging
import secrets
import time
import uuid
from typing import Dict, Optional, Set

from session.models import SessionCookie, SessionRecord
from .base import FormId, SessionStore

logger = logging.getLogger(__name__)


class InMemorySessionStore(SessionStore):
    """Process-local store for development and tests. Sessions expire after ``ttl_seconds`` of disuse."""

    def __init__(self, ttl_seconds: int = 3600):
        self.ttl_seconds = ttl_seconds
        self._sessions: Dict[str, SessionRecord] = {}
        self._expires: Dict[str, float] = {}
        self._forms: Dict[str, Set[str]] = {}
        self._form_seq = itertools.count(1)

    def _alive(self, session_id: str) -> bool:
        expires = self._expires.get(session_id)
        if expires is None:
            return False
        if expires < time.monotonic():
            logger.debug(f"Session {session_id} expired")
            self.delete(session_id)
            return False
        return True

    def _touch(self, session_id: str) -> None:
        self._expires[session_id] = time.monotonic() + self.ttl_seconds

    def _prune(self) -> None:
        now = time.monotonic()
        for session_id in [sid for sid, expires in self._expires.items() if expires < now]:
            self.delete(session_id)

    def create(self, login: Optional[str], company: Optional[str]) -> SessionRecord:
        self._prune()
        record = SessionRecord(
            session_id=uuid.uuid4().hex,
            token=secrets.token_hex(16),
            login=login,
            company=company,
        )
        self._sessions[record.session_id] = record
        self._forms[record.session_id] = set()
        self._touch(record.session_id)
        logger.debug(f"Session {record.session_id} created for {login}")
        return record

    def check(self, cookie: SessionCookie) -> Optional[SessionRecord]:
        if not self._alive(cookie.session_id):
            return None
        record = self._sessions.get(cookie.session_id)
        if record is None or not hmac.compare_digest(record.token, cookie.token):
            return None
        self._touch(cookie.session_id)
        return record

    def delete(self, session_id: str) -> None:
        self._sessions.pop(session_id, None)
        self._expires.pop(session_id, None)
        self._forms.pop(session_id, None)

    def open_form(self, session_id: str) -> Optional[FormId]:
        if not self._alive(session_id):
            return None
        forms = self._forms.get(session_id)
        if forms is None:
            return None
        form_id = next(self._form_seq)
        forms.add(str(form_id))
        return form_id

    def check_form(self, session_id: str, form_id: FormId) -> bool:
        if not self._alive(session_id):
            return False
        return str(form_id) in self._forms.get(session_id, ())

    def close_form(self, session_id: str, form_id: FormId) -> bool:
        if not self._alive(session_id):
            return False
        forms = self._forms.get(session_id)
        if forms is None or str(form_id) not in forms:
            return False
        forms.discard(str(form_id))
        return True
