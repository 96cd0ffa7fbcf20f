import hmac
import logging
import secrets
import uuid
from typing import Optional

from redis import Redis, RedisError, ConnectionError as RedisConnectionError
from pydantic import ValidationError

from session.models import SessionCookie, SessionRecord
from .base import FormId, SessionStore, SessionStoreError

logger = logging.getLogger(__name__)

KEY_PREFIX = "ledger:session"
FORM_SEQUENCE_KEY = "ledger:form_seq"


class RedisSessionStore(SessionStore):
    def __init__(self, redis_client: Redis, ttl_seconds: int = 3600):
        """
        Initialize the Redis store with a Redis client.

        Sessions are hashes under ``ledger:session:<id>``; the form tokens of a
        session are a set under ``ledger:session:<id>:forms``. Both keys expire
        ``ttl_seconds`` after the last successful check.
        """
        self.redis_client = redis_client
        self.ttl_seconds = ttl_seconds

    def _session_key(self, session_id: str) -> str:
        return f"{KEY_PREFIX}:{session_id}"

    def _forms_key(self, session_id: str) -> str:
        return f"{KEY_PREFIX}:{session_id}:forms"

    def _handle_redis_error(self, operation: str, session_id: str, error: Exception) -> None:
        """Centralized error handling for Redis operations."""
        if isinstance(error, RedisConnectionError):
            logger.error(f"Redis connection failed during {operation} for session {session_id}: {error}")
            raise SessionStoreError(f"Session store connection error during {operation}")
        elif isinstance(error, RedisError):
            logger.error(f"Redis error during {operation} for session {session_id}: {error}")
            raise SessionStoreError(f"Session store error during {operation}")
        else:
            logger.error(f"Unexpected error during {operation} for session {session_id}: {error}")
            raise SessionStoreError(f"Unexpected error during {operation}")

    def _refresh(self, session_id: str) -> None:
        self.redis_client.expire(self._session_key(session_id), self.ttl_seconds)
        self.redis_client.expire(self._forms_key(session_id), self.ttl_seconds)

    def create(self, login: Optional[str], company: Optional[str]) -> SessionRecord:
        record = SessionRecord(
            session_id=uuid.uuid4().hex,
            token=secrets.token_hex(16),
            login=login,
            company=company,
        )
        try:
            # Redis hashes hold strings only; unset fields are stored as ""
            redis_data = {
                k: "" if v is None else str(v)
                for k, v in record.model_dump(mode="json").items()
            }
            self.redis_client.hset(self._session_key(record.session_id), mapping=redis_data)
            self.redis_client.expire(self._session_key(record.session_id), self.ttl_seconds)
            logger.debug(f"Session {record.session_id} created successfully")
        except RedisError as e:
            self._handle_redis_error("session creation", record.session_id, e)
        return record

    def check(self, cookie: SessionCookie) -> Optional[SessionRecord]:
        try:
            session_data = self.redis_client.hgetall(self._session_key(cookie.session_id))
        except RedisError as e:
            self._handle_redis_error("session check", cookie.session_id, e)

        if not session_data:
            logger.debug(f"Session {cookie.session_id} not found")
            return None

        try:
            record = SessionRecord.model_validate(
                {k: (v if v != "" else None) for k, v in session_data.items()}
            )
        except ValidationError as e:
            logger.error(f"Invalid session data format for session {cookie.session_id}: {e}")
            raise SessionStoreError("Corrupted session data")

        if not hmac.compare_digest(record.token, cookie.token):
            logger.debug(f"Token mismatch for session {cookie.session_id}")
            return None

        try:
            self._refresh(cookie.session_id)
        except RedisError as e:
            self._handle_redis_error("session refresh", cookie.session_id, e)
        return record

    def delete(self, session_id: str) -> None:
        try:
            deleted_count = self.redis_client.delete(self._session_key(session_id), self._forms_key(session_id))
        except RedisError as e:
            self._handle_redis_error("session deletion", session_id, e)

        if deleted_count == 0:
            logger.warning(f"Session {session_id} was not deleted, may have been removed concurrently")
        else:
            logger.debug(f"Session {session_id} deleted successfully")

    def open_form(self, session_id: str) -> Optional[FormId]:
        try:
            if not self.redis_client.exists(self._session_key(session_id)):
                return None
            form_id = self.redis_client.incr(FORM_SEQUENCE_KEY)
            self.redis_client.sadd(self._forms_key(session_id), str(form_id))
            self.redis_client.expire(self._forms_key(session_id), self.ttl_seconds)
        except RedisError as e:
            self._handle_redis_error("form open", session_id, e)
        return form_id

    def check_form(self, session_id: str, form_id: FormId) -> bool:
        try:
            return bool(self.redis_client.sismember(self._forms_key(session_id), str(form_id)))
        except RedisError as e:
            self._handle_redis_error("form check", session_id, e)

    def close_form(self, session_id: str, form_id: FormId) -> bool:
        try:
            return self.redis_client.srem(self._forms_key(session_id), str(form_id)) == 1
        except RedisError as e:
            self._handle_redis_error("form close", session_id, e)
