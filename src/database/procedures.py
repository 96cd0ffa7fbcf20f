"""
Stored procedure invocation.

Procedures are called as ``SELECT * FROM schema.funcname(args...)``. Each
argument is one of:

- a plain value, bound to a ``%s`` placeholder;
- a list or tuple, which psycopg2 adapts to a PostgreSQL array;
- a mapping ``{"value": ..., "type": ...}``, bound as ``%s::type``.
  ``PG_``-prefixed driver type names (``PG_BYTEA``) are accepted too.
"""
import logging
import re
from typing import Any, Dict, List, Mapping, Sequence, Tuple

import psycopg2
from psycopg2 import sql
from psycopg2.extras import RealDictCursor

from ledger.errors import ProcedureError

logger = logging.getLogger('ledger.database.procedures')

_TYPE_NAME = re.compile(r"^[A-Za-z_][A-Za-z0-9_ ]*(\[\])*$")


def normalize_type(db_type: str) -> str:
    """Map a type name to the form used in a SQL cast, rejecting anything else."""
    name = db_type.strip()
    if name.upper().startswith("PG_"):
        name = name[3:].lower()
    if not _TYPE_NAME.match(name):
        raise ValueError(f"Invalid database type name: {db_type!r}")
    return name


def render_call(funcname: str, funcschema: str, args: Sequence[Any]) -> Tuple[sql.Composed, List[Any]]:
    """
    Build the statement and bind values for a procedure call.

    Returns:
        Tuple of (composed SQL statement, positional bind values)
    """
    placeholders = []
    values: List[Any] = []
    for arg in args:
        if isinstance(arg, Mapping):
            placeholders.append(sql.SQL("%s::" + normalize_type(arg["type"])))
            values.append(arg.get("value"))
        elif isinstance(arg, tuple):
            placeholders.append(sql.Placeholder())
            values.append(list(arg))
        else:
            placeholders.append(sql.Placeholder())
            values.append(arg)

    statement = sql.SQL("SELECT * FROM {}.{}({})").format(
        sql.Identifier(funcschema),
        sql.Identifier(funcname),
        sql.SQL(", ").join(placeholders),
    )
    return statement, values


def call_procedure(
    conn,
    funcname: str,
    args: Sequence[Any] = (),
    funcschema: str = "public",
    continue_on_error: bool = False,
) -> List[Dict[str, Any]]:
    """
    Call a stored procedure and return its rows.

    Args:
        conn: Open psycopg2 connection
        funcname: Procedure name
        args: Positional arguments, see module docstring
        funcschema: Schema the procedure lives in
        continue_on_error: Roll back and return no rows instead of raising

    Returns:
        Result rows as dictionaries keyed by column name

    Raises:
        ProcedureError: The database rejected the call
    """
    statement, values = render_call(funcname, funcschema, args)
    logger.debug(f"Calling procedure {funcschema}.{funcname} with {len(values)} argument(s)")

    try:
        with conn.cursor(cursor_factory=RealDictCursor) as cursor:
            cursor.execute(statement, values)
            rows = cursor.fetchall() if cursor.description is not None else []
    except psycopg2.Error as e:
        state = getattr(e, "pgcode", None)
        message = (getattr(e, "pgerror", None) or str(e)).strip()
        if continue_on_error:
            logger.warning(f"Procedure {funcschema}.{funcname} failed with state {state}, continuing: {message}")
            conn.rollback()
            return []
        logger.error(f"Procedure {funcschema}.{funcname} failed with state {state}: {message}")
        raise ProcedureError(funcname, state, message) from e

    return [dict(row) for row in rows]


__all__ = [
    'call_procedure',
    'render_call',
    'normalize_type',
]
