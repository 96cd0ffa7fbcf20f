import sys
import os
from pathlib import Path
import logging

import pytest
import pytest_asyncio
from unittest.mock import MagicMock

# Add src to sys.path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

# Keep tests independent of a developer's .env
os.environ.setdefault("SESSION_BACKEND", "memory")
os.environ.setdefault("SECURE_COOKIES", "false")

from httpx import AsyncClient, ASGITransport
from asgi_lifespan import LifespanManager

from ledger.config import LedgerConfig
from session.backends import InMemorySessionStore
from service.service import app
from service.dependencies import get_connection_factory, get_ledger_config, get_shared_session_store


@pytest.fixture(scope="session", autouse=True)
def configure_logging():
    """Configure logging for tests."""
    logging.basicConfig(level=logging.INFO)


@pytest.fixture
def ledger_config():
    return LedgerConfig(
        default_db="acme",
        session_backend="memory",
        secure_cookies=False,
        locale_dir=str(Path(__file__).parent / "locale"),
    )


@pytest.fixture
def memory_store():
    return InMemorySessionStore(ttl_seconds=60)


@pytest.fixture
def mock_connection():
    """psycopg2-like connection whose cursor returns no rows."""
    conn = MagicMock()
    conn.closed = 0
    cursor = conn.cursor.return_value.__enter__.return_value
    cursor.description = None
    cursor.fetchall.return_value = []
    cursor.fetchone.return_value = None
    return conn


@pytest.fixture
def connection_factory(mock_connection):
    return MagicMock(return_value=mock_connection)


@pytest.fixture
def cli_environ():
    return {"SCRIPT_NAME": "/journal"}


@pytest.fixture
def gateway_environ():
    return {
        "GATEWAY_INTERFACE": "CGI/1.1",
        "REQUEST_METHOD": "GET",
        "SCRIPT_NAME": "/journal",
    }


@pytest.fixture
def embedded_environ():
    return {
        "LEDGER_EMBEDDED": "1",
        "REQUEST_METHOD": "GET",
        "SCRIPT_NAME": "/journal",
    }


@pytest_asyncio.fixture
async def client(ledger_config, memory_store, connection_factory):
    app.dependency_overrides[get_ledger_config] = lambda: ledger_config
    app.dependency_overrides[get_shared_session_store] = lambda: memory_store
    app.dependency_overrides[get_connection_factory] = lambda: connection_factory
    async with LifespanManager(app):
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://localhost:5000") as client:
            yield client
    app.dependency_overrides.clear()
