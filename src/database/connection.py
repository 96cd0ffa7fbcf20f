import logging
from typing import Callable, Optional

import psycopg2
from psycopg2.extensions import connection as PgConnection

from auth.schema import Credentials
from ledger.config import LedgerConfig

logger = logging.getLogger('ledger.database.connection')

ConnectionFactory = Callable[[str, Credentials], PgConnection]


def connect(company: str, credentials: Credentials, config: LedgerConfig) -> PgConnection:
    """
    Open a connection to the company database as the requesting user.

    The database enforces the user's credentials; a failed login surfaces as
    ``psycopg2.OperationalError``.

    Args:
        company: Database name of the company
        credentials: Login and password of the requesting user
        config: Connection host and port

    Returns:
        An open psycopg2 connection with autocommit disabled
    """
    logger.debug(f"Connecting to database {company} on {config.db_host}:{config.db_port} as {credentials.login}")
    conn = psycopg2.connect(
        dbname=company,
        host=config.db_host,
        port=config.db_port,
        user=credentials.login,
        password=credentials.password,
        application_name="ledger",
    )
    conn.autocommit = False
    return conn


def make_connection_factory(config: LedgerConfig) -> ConnectionFactory:
    """Bind ``connect`` to a configuration, for injection into requests."""
    def factory(company: str, credentials: Credentials) -> PgConnection:
        return connect(company, credentials, config)
    return factory


def close_quietly(conn: Optional[PgConnection]) -> None:
    """Roll back any open transaction and close the connection."""
    if conn is None or conn.closed:
        return
    try:
        conn.rollback()
    except psycopg2.Error as e:
        logger.warning(f"Rollback on close failed: {e}")
    finally:
        conn.close()
