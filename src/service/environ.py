import os
from typing import Dict

from fastapi import Request

from ledger.run_mode import EMBEDDED_FLAG, NO_SESSION_CHECK_FLAG


def build_environ(request: Request, script: str) -> Dict[str, str]:
    """
    CGI-style environment for a request served by the embedded server.

    Only the keys the request layer reads are filled in. The no-session-check
    override is taken from the server's own environment.
    """
    environ = {
        EMBEDDED_FLAG: "1",
        "REQUEST_METHOD": request.method,
        "SCRIPT_NAME": f"/{script}",
        "QUERY_STRING": request.url.query,
        "CONTENT_TYPE": request.headers.get("content-type", ""),
        "SERVER_SOFTWARE": "uvicorn",
    }
    if cookie := request.headers.get("cookie"):
        environ["HTTP_COOKIE"] = cookie
    if authorization := request.headers.get("authorization"):
        environ["HTTP_AUTHORIZATION"] = authorization
    if no_check := os.getenv(NO_SESSION_CHECK_FLAG):
        environ[NO_SESSION_CHECK_FLAG] = no_check
    return environ
