import logging
from typing import Dict, Optional

from ledger.config import LedgerConfig
from service.redis_client import get_redis_client
from .backends import DatabaseSessionStore, InMemorySessionStore, RedisSessionStore, SessionStore
from .backends.database_backend import ProcedureCaller

logger = logging.getLogger('ledger.session.manager')

# redis and memory stores outlive requests; the database store is per request
shared_stores: Dict[str, SessionStore] = {}


def get_session_store(config: LedgerConfig, call: Optional[ProcedureCaller] = None) -> SessionStore:
    """
    Session store selected by ``SESSION_BACKEND``.

    Args:
        config: Application configuration
        call: Procedure invoker of the current request, required by the database store

    Returns:
        SessionStore for the configured backend
    """
    backend = config.session_backend
    if backend == "database":
        if call is None:
            raise ValueError("The database session store needs a procedure invoker")
        return DatabaseSessionStore(call)

    if backend not in shared_stores:
        if backend == "redis":
            logger.info(f"Using Redis session store at {config.redis_url}")
            shared_stores[backend] = RedisSessionStore(get_redis_client(config.redis_url), config.session_ttl_seconds)
        else:
            logger.warning("Using in-memory session store, sessions will not survive a restart")
            shared_stores[backend] = InMemorySessionStore(config.session_ttl_seconds)
    return shared_stores[backend]
