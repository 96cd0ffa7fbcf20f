from abc import ABC, abstractmethod
from typing import Optional, Union

from ledger.errors import LedgerError
from session.models import SessionCookie, SessionRecord

FormId = Union[int, str]


class SessionStoreError(LedgerError):
    """The session store could not be reached or returned unusable data."""


class SessionStore(ABC):
    """
    Server-side owner of session tokens and form tokens.

    The request layer only asks questions of a store; creating, expiring and
    persisting sessions is the store's business.
    """

    @abstractmethod
    def create(self, login: Optional[str], company: Optional[str]) -> SessionRecord:
        """Start a new session for a user of a company."""

    @abstractmethod
    def check(self, cookie: SessionCookie) -> Optional[SessionRecord]:
        """Return the session when the cookie's token is valid, else ``None``."""

    @abstractmethod
    def delete(self, session_id: str) -> None:
        """End a session and every form token issued for it."""

    @abstractmethod
    def open_form(self, session_id: str) -> Optional[FormId]:
        """Issue a new form token bound to the session."""

    @abstractmethod
    def check_form(self, session_id: str, form_id: FormId) -> bool:
        """Whether the form token is valid for the session, without consuming it."""

    @abstractmethod
    def close_form(self, session_id: str, form_id: FormId) -> bool:
        """Check and consume the form token."""
