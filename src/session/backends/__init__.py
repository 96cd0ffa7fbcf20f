from .base import SessionStore, SessionStoreError, FormId
from .memory_backend import InMemorySessionStore
from .redis_backend import RedisSessionStore
from .database_backend import DatabaseSessionStore

__all__ = [
    "SessionStore",
    "SessionStoreError",
    "FormId",
    "InMemorySessionStore",
    "RedisSessionStore",
    "DatabaseSessionStore",
]
