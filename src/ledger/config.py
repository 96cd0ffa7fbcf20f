"""
Configuration for the ledger request layer.

All settings come from environment variables (optionally through a ``.env``
file). ``get_config()`` is cached so the environment is read once per
process; tests build ``LedgerConfig`` directly or call
``get_config.cache_clear()``.
"""
import os
import logging
from functools import lru_cache
from typing import Literal, Optional

from dotenv import load_dotenv
from pydantic import BaseModel

from .errors import ConfigurationError

load_dotenv()

logger = logging.getLogger('ledger.config')

SessionBackendName = Literal["database", "redis", "memory"]


class LedgerConfig(BaseModel):
    default_language: str = "en"
    cookie_name: str = "LedgerSMB"
    db_namespace: str = "public"
    default_db: Optional[str] = None
    db_host: str = "localhost"
    db_port: int = 5432
    locale_dir: str = "locale"
    session_backend: SessionBackendName = "database"
    session_ttl_seconds: int = 3600
    redis_url: str = "redis://localhost:6379"
    secure_cookies: bool = True
    have_latex: bool = False


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() == "true"


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}")


def load_config() -> LedgerConfig:
    """
    Build a LedgerConfig from the current environment.

    Returns:
        LedgerConfig populated from environment variables, defaults elsewhere
    """
    session_backend = os.getenv("SESSION_BACKEND", "database").lower()
    if session_backend not in ("database", "redis", "memory"):
        raise ConfigurationError(
            f"Unsupported SESSION_BACKEND: {session_backend}. Supported backends: database, redis, memory"
        )

    config = LedgerConfig(
        default_language=os.getenv("DEFAULT_LANGUAGE", "en"),
        cookie_name=os.getenv("COOKIE_NAME", "LedgerSMB"),
        db_namespace=os.getenv("DB_NAMESPACE", "public"),
        default_db=os.getenv("DEFAULT_DB") or None,
        db_host=os.getenv("DB_HOST", "localhost"),
        db_port=_env_int("DB_PORT", 5432),
        locale_dir=os.getenv("LOCALE_DIR", "locale"),
        session_backend=session_backend,
        session_ttl_seconds=_env_int("SESSION_TTL_SECONDS", 3600),
        redis_url=os.getenv("REDIS_URL", "redis://localhost:6379"),
        secure_cookies=_env_bool("SECURE_COOKIES", "true"),
        have_latex=_env_bool("LATEX", "false"),
    )
    logger.debug(f"Loaded configuration: {config.model_dump()}")
    return config


@lru_cache
def get_config() -> LedgerConfig:
    """Process-wide configuration, read from the environment on first use."""
    return load_config()


__all__ = [
    'LedgerConfig',
    'load_config',
    'get_config',
]
