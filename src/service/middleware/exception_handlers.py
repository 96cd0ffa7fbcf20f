import logging
from fastapi import Request, HTTPException
from fastapi.responses import HTMLResponse, JSONResponse, Response
from fastapi.exception_handlers import http_exception_handler

from ledger import __version__
from ledger.errors import LedgerError, RequestAbort
from service.rendering import render_error_page

logger = logging.getLogger('ledger.service.middleware')


async def custom_http_exception_handler(request: Request, exc: HTTPException):
    """Custom handler for HTTPExceptions to keep session errors in one JSON shape"""
    if exc.status_code == 403:
        if isinstance(exc.detail, dict):
            error_response = exc.detail
        else:
            error_response = {
                "error": "Session required: Please log in",
                "error_code": "session_invalid",
                "message": str(exc.detail) if exc.detail else "Session invalid or expired",
                "action_required": "Please log in again to continue",
            }

        logger.error(f"AUTH_ERROR_RESPONSE: {error_response}")
        return JSONResponse(
            status_code=403,
            content=error_response,
            headers={"Content-Type": "application/json"}
        )

    # For other HTTP exceptions, use default handler but log the details
    logger.error(f"OTHER_HTTP_EXCEPTION: {exc.status_code} - {exc.detail}")
    return await http_exception_handler(request, exc)


def _request_context(request: Request) -> tuple[str, str | None]:
    ledger_request = getattr(request.state, "ledger_request", None)
    if ledger_request is None:
        return __version__, None
    return ledger_request.dbversion, ledger_request.company


async def request_abort_handler(request: Request, exc: RequestAbort) -> Response:
    """Render a fatal request error as the HTML error page"""
    logger.error(f"REQUEST_ABORT: {exc.status} - {exc.message}")
    dbversion, company = _request_context(request)
    if request.method == "HEAD":
        return Response(status_code=exc.status)
    return HTMLResponse(
        content=render_error_page(exc.message, dbversion=dbversion, company=company),
        status_code=exc.status,
    )


async def ledger_error_handler(request: Request, exc: LedgerError) -> Response:
    """Any other request-layer failure is an internal error"""
    logger.error(f"LEDGER_ERROR: {type(exc).__name__}: {exc}", exc_info=exc)
    dbversion, company = _request_context(request)
    return HTMLResponse(
        content=render_error_page(str(exc) or type(exc).__name__, dbversion=dbversion, company=company),
        status_code=500,
    )
