from unittest.mock import MagicMock, patch

import psycopg2

from auth.schema import Credentials
from database.connection import close_quietly, make_connection_factory
from ledger.config import LedgerConfig


def test_factory_connects_as_user():
    config = LedgerConfig(db_host="db.internal", db_port=5433)
    credentials = Credentials(login="alice", password="pw")

    with patch("database.connection.psycopg2.connect") as connect:
        conn = make_connection_factory(config)("acme", credentials)

    connect.assert_called_once_with(
        dbname="acme",
        host="db.internal",
        port=5433,
        user="alice",
        password="pw",
        application_name="ledger",
    )
    assert conn.autocommit is False


def test_close_quietly(mock_connection):
    close_quietly(mock_connection)
    mock_connection.rollback.assert_called_once()
    mock_connection.close.assert_called_once()


def test_close_quietly_after_failed_rollback(mock_connection):
    mock_connection.rollback.side_effect = psycopg2.InterfaceError("connection already closed")
    close_quietly(mock_connection)
    mock_connection.close.assert_called_once()


def test_close_quietly_skips_closed():
    conn = MagicMock()
    conn.closed = 1
    close_quietly(conn)
    conn.close.assert_not_called()
    close_quietly(None)
