"""
Gateway (CGI) run mode.

The web server spawns one process per request with the request described by
environment variables and the body on stdin. The response is written to
stdout as a ``Status:`` line, headers, a blank line and the body.
"""
import logging
import os
import sys
from http import HTTPStatus
from http.cookies import SimpleCookie
from typing import IO, Mapping, Optional

from ledger import __version__
from ledger.config import LedgerConfig, get_config
from ledger.errors import LedgerError, RequestAbort, RequestFinalized
from ledger.request import LedgerRequest
from session.backends import SessionStore
from .dispatch import dispatch, requires_session
from .rendering import HTML_CONTENT_TYPE, render_error_page, render_result

logger = logging.getLogger('ledger.service.gateway')


def _status_line(status: int) -> str:
    try:
        phrase = HTTPStatus(status).phrase
    except ValueError:
        phrase = "Unknown"
    return f"Status: {status} {phrase}"


def write_response(
    out: IO[str],
    status: int,
    body: str = "",
    content_type: str = HTML_CONTENT_TYPE,
    cookie: Optional[SimpleCookie] = None,
) -> None:
    lines = [_status_line(status), f"Content-Type: {content_type}"]
    if cookie is not None:
        lines.extend(cookie.output(sep="\r\n").split("\r\n"))
    out.write("\r\n".join(lines) + "\r\n\r\n")
    out.write(body)
    out.flush()


def read_body(environ: Mapping[str, str], stdin: IO[bytes]) -> str:
    try:
        length = int(environ.get("CONTENT_LENGTH") or 0)
    except ValueError:
        length = 0
    if length <= 0:
        return ""
    return stdin.read(length).decode("utf-8", errors="replace")


def _session_cookie(request: LedgerRequest, config: LedgerConfig) -> Optional[SimpleCookie]:
    if not request.new_cookie:
        return None
    cookie = SimpleCookie()
    cookie[config.cookie_name] = request.new_cookie
    cookie[config.cookie_name]["path"] = "/"
    cookie[config.cookie_name]["httponly"] = True
    cookie[config.cookie_name]["samesite"] = "Lax"
    if config.secure_cookies:
        cookie[config.cookie_name]["secure"] = True
    return cookie


def run_gateway(
    environ: Optional[Mapping[str, str]] = None,
    stdin: Optional[IO[bytes]] = None,
    stdout: Optional[IO[str]] = None,
    config: Optional[LedgerConfig] = None,
    session_store: Optional[SessionStore] = None,
) -> int:
    """
    Handle one gateway request.

    Returns:
        The HTTP status written
    """
    environ = dict(os.environ if environ is None else environ)
    stdin = stdin if stdin is not None else sys.stdin.buffer
    stdout = stdout if stdout is not None else sys.stdout
    config = config if config is not None else get_config()

    request: Optional[LedgerRequest] = None
    try:
        request = LedgerRequest(
            environ=environ,
            config=config,
            session_store=session_store,
            body=read_body(environ, stdin),
        )
        if requires_session(request) and not request.verify_session():
            write_response(stdout, 403, render_error_page("Session invalid or expired", request.dbversion, request.company))
            return 403
        try:
            result = dispatch(request)
        except RequestFinalized:
            write_response(stdout, 204, cookie=_session_cookie(request, config))
            return 204
        body, content_type = render_result(result)
        write_response(stdout, 200, body, content_type, cookie=_session_cookie(request, config))
        return 200
    except RequestAbort as e:
        logger.error(f"Request aborted with status {e.status}: {e.message}")
        dbversion = request.dbversion if request else __version__
        company = request.company if request else None
        write_response(stdout, e.status, render_error_page(e.message, dbversion, company))
        return e.status
    except LedgerError as e:
        logger.error(f"Request failed: {type(e).__name__}: {e}", exc_info=True)
        write_response(stdout, 500, render_error_page(str(e) or type(e).__name__))
        return 500
    except Exception as e:
        logger.error(f"Unexpected error for script {request.script if request else None}: {e}", exc_info=True)
        write_response(stdout, 500, render_error_page("Internal server error occurred"))
        return 500
    finally:
        if request is not None:
            request.close()
