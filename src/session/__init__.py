"""Server-side session stores and session cookie models."""

from .models import SessionCookie, SessionRecord
from .backends import SessionStore, SessionStoreError

__all__ = [
    "SessionCookie",
    "SessionRecord",
    "SessionStore",
    "SessionStoreError",
]
