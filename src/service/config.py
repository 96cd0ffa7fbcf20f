"""
Configuration setup for the ledger service.

This module handles the HTTP-specific configuration:
- CORS settings
- Log level validation
"""
import os
import logging
from typing import Tuple

logger = logging.getLogger('ledger.service.config')

VALID_LOG_LEVELS = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']


def get_cors_config() -> Tuple[list[str], list[str], list[str]]:
    """
    Parse and return CORS configuration from environment variables.

    Returns:
        Tuple containing (origins, methods, headers) lists
    """
    cors_allowed_origins = os.getenv("CORS_ALLOWED_ORIGINS", "").split(",")
    cors_allowed_origins = [origin.strip() for origin in cors_allowed_origins if origin.strip()]

    # Development fallback
    if not cors_allowed_origins:
        logger.warning("CORS_ALLOWED_ORIGINS not set, using development defaults")
        cors_allowed_origins = [
            "http://localhost:5000",
            "http://127.0.0.1:5000",
        ]

    cors_allowed_methods = os.getenv("CORS_ALLOWED_METHODS", "GET,POST,HEAD,OPTIONS").split(",")
    cors_allowed_methods = [method.strip() for method in cors_allowed_methods if method.strip()]

    cors_allowed_headers = os.getenv("CORS_ALLOWED_HEADERS", "Content-Type,Authorization").split(",")
    cors_allowed_headers = [header.strip() for header in cors_allowed_headers if header.strip()]

    return cors_allowed_origins, cors_allowed_methods, cors_allowed_headers


def get_log_level() -> str:
    """
    LOG_LEVEL from the environment, falling back to INFO when it is not a valid level.
    """
    log_level = os.getenv("LOG_LEVEL", "INFO").upper()
    if log_level not in VALID_LOG_LEVELS:
        logger.warning(f"Invalid LOG_LEVEL '{log_level}'. Using INFO instead. Valid levels: {', '.join(VALID_LOG_LEVELS)}")
        log_level = 'INFO'
    return log_level


def configure_logging() -> str:
    """Configure root logging from LOG_LEVEL and return the level used."""
    log_level = get_log_level()
    logging.basicConfig(
        level=getattr(logging, log_level),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )
    return log_level


__all__ = [
    'get_cors_config',
    'get_log_level',
    'configure_logging',
]
