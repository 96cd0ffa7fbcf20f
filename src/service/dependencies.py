"""
FastAPI dependencies for the ledger service.

This module provides reusable dependency functions that can be injected
into route handlers throughout the application. Tests replace them through
``app.dependency_overrides``.
"""
import logging
from typing import Generator, Optional

from fastapi import Depends, Request

from database.connection import ConnectionFactory, make_connection_factory
from ledger.config import LedgerConfig, get_config
from ledger.request import LedgerRequest
from session.backends import SessionStore
from session.manager import get_session_store
from .environ import build_environ

logger = logging.getLogger('ledger.service.dependencies')


def get_ledger_config() -> LedgerConfig:
    """Application configuration, cached after the first read of the environment."""
    return get_config()


def get_shared_session_store(config: LedgerConfig = Depends(get_ledger_config)) -> Optional[SessionStore]:
    """
    Session store shared between requests.

    Returns None for the database backend, whose store is bound to the
    connection of each request.
    """
    if config.session_backend == "database":
        return None
    return get_session_store(config)


def get_connection_factory(config: LedgerConfig = Depends(get_ledger_config)) -> ConnectionFactory:
    return make_connection_factory(config)


async def get_request_body(request: Request) -> str:
    return (await request.body()).decode("utf-8", errors="replace")


def get_ledger_request(
    request: Request,
    script: str,
    body: str = Depends(get_request_body),
    config: LedgerConfig = Depends(get_ledger_config),
    session_store: Optional[SessionStore] = Depends(get_shared_session_store),
    connection_factory: ConnectionFactory = Depends(get_connection_factory),
) -> Generator[LedgerRequest, None, None]:
    """
    Build the LedgerRequest for one HTTP request and release its connection afterwards.

    A plain generator, so construction and teardown run in the threadpool.
    """
    ledger_request = LedgerRequest(
        environ=build_environ(request, script),
        config=config,
        session_store=session_store,
        connection_factory=connection_factory,
        body=body,
    )
    request.state.ledger_request = ledger_request
    try:
        yield ledger_request
    finally:
        ledger_request.close()
