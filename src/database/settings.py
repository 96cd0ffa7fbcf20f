"""
Per-company settings read when a request is bound to its database.
"""
import logging
from typing import Any, Dict, List, Optional

logger = logging.getLogger('ledger.database.settings')

CUSTOM_FIELDS_QUERY = """
    SELECT t.extends,
           coalesce(t.table_name, 'custom_' || extends) || ':' || f.field_name AS field_def
      FROM custom_table_catalog t
      JOIN custom_field_catalog f USING (table_id)
"""


def _scalar(conn, query: str, params=None) -> Optional[Any]:
    with conn.cursor() as cursor:
        cursor.execute(query, params)
        row = cursor.fetchone()
    return row[0] if row else None


def fetch_role_prefix(conn) -> Optional[str]:
    return _scalar(conn, "SELECT value FROM defaults WHERE setting_key = 'role_prefix'")


def fetch_password_expiry(conn) -> Dict[str, Any]:
    """
    Whether the user's password is close to expiring, and when it expires.

    Returns:
        Mapping with ``warn_expire`` and, when warned, ``pw_expires``
    """
    expiry: Dict[str, Any] = {"warn_expire": _scalar(conn, "SELECT check_expiration()")}
    if expiry["warn_expire"]:
        expiry["pw_expires"] = _scalar(conn, "SELECT user__check_my_expiration()")
    return expiry


def fetch_custom_fields(conn) -> Dict[str, List[str]]:
    """Custom field definitions grouped by the table they extend."""
    fields: Dict[str, List[str]] = {}
    with conn.cursor() as cursor:
        cursor.execute(CUSTOM_FIELDS_QUERY)
        for extends, field_def in cursor.fetchall():
            fields.setdefault(extends, []).append(field_def)
    return fields


def fetch_company_settings(conn) -> Dict[str, Any]:
    """All ``defaults`` rows of the company as ``setting_key -> value``."""
    with conn.cursor() as cursor:
        cursor.execute("SELECT setting_key, value FROM defaults")
        settings = {key: value for key, value in cursor.fetchall()}
    logger.debug(f"Loaded {len(settings)} company settings")
    return settings
