"""
Built-in ``login`` script: opening and closing sessions.

Credentials are not checked here. ``authenticate`` opens a database
connection as the presented user, and the database decides whether the
login and password are valid.
"""
import logging

from ledger.request import LedgerRequest
from .dispatch import script

logger = logging.getLogger('ledger.service.login')

LOGGED_OUT_COOKIE = "Login"


def _commit(request: LedgerRequest) -> None:
    if request.dbh is not None:
        request.dbh.commit()


@script("login", public=True)
def login_page(request: LedgerRequest) -> dict:
    return {
        "script": request.script,
        "company": request.company,
        "version": request.version,
    }


@script("login", action="authenticate", public=True)
def authenticate(request: LedgerRequest) -> dict:
    if not request.login:
        request.error("Access Denied: no credentials supplied", status=401)
    if not request.db_init():
        logger.warning(f"Login refused for {request.login} on {request.company}")
        request.error("Access Denied", status=401)

    record = request.gate.store.create(request.login, request.company)
    _commit(request)
    request.session_id = record.session_id
    request.new_cookie = record.to_cookie().serialize()
    logger.info(f"Session {record.session_id} opened for {request.login} on {request.company}")
    return {"login": request.login, "company": request.company}


@script("login", action="logout", public=True)
def logout(request: LedgerRequest) -> dict:
    if request.verify_session() and request.session_id:
        request.gate.store.delete(request.session_id)
        _commit(request)
        logger.info(f"Session {request.session_id} closed")
    request.new_cookie = LOGGED_OUT_COOKIE
    return {"logged_out": True}
