import logging
from typing import Any, Callable, Dict, List, Optional, Sequence

from session.models import SessionCookie, SessionRecord
from .base import FormId, SessionStore

logger = logging.getLogger(__name__)

ProcedureCaller = Callable[..., List[Dict[str, Any]]]


def _first_value(rows: List[Dict[str, Any]], column: str) -> Any:
    if not rows:
        return None
    return rows[0].get(column)


class DatabaseSessionStore(SessionStore):
    """
    Sessions and form tokens held by the company database.

    Every operation is a stored procedure call made through ``call``, which
    is the request's own procedure invoker so that the calls share the
    request's connection and transaction.
    """

    def __init__(self, call: ProcedureCaller):
        self.call = call

    def _call(self, funcname: str, args: Sequence[Any], **kwargs) -> List[Dict[str, Any]]:
        return self.call(funcname=funcname, args=list(args), **kwargs)

    def create(self, login: Optional[str], company: Optional[str]) -> SessionRecord:
        rows = self._call("session_create", [])
        if not rows:
            raise ValueError("session_create returned no session")
        row = rows[0]
        return SessionRecord(session_id=str(row["session_id"]), token=str(row["token"]), login=login, company=company)

    def check(self, cookie: SessionCookie) -> Optional[SessionRecord]:
        rows = self._call("session_check", [cookie.session_id, cookie.token])
        if not rows or rows[0].get("session_id") is None:
            logger.debug(f"session_check rejected session {cookie.session_id}")
            return None
        row = rows[0]
        return SessionRecord(
            session_id=str(row["session_id"]),
            token=str(row.get("token") or cookie.token),
            login=row.get("login"),
            company=cookie.company,
        )

    def delete(self, session_id: str) -> None:
        self._call("session_delete", [session_id])

    def open_form(self, session_id: str) -> Optional[FormId]:
        rows = self._call("form_open", [session_id], continue_on_error=True)
        return _first_value(rows, "form_open")

    def check_form(self, session_id: str, form_id: FormId) -> bool:
        return bool(_first_value(self._call("form_check", [session_id, form_id]), "form_check"))

    def close_form(self, session_id: str, form_id: FormId) -> bool:
        return bool(_first_value(self._call("form_close", [session_id, form_id]), "form_close"))
