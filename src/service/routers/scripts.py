from typing import Annotated
import logging

from fastapi import APIRouter, Depends, HTTPException, Response

from ledger.config import LedgerConfig
from ledger.errors import RequestFinalized
from ledger.request import LedgerRequest
from service.dependencies import get_ledger_config, get_ledger_request
from service.dispatch import dispatch, requires_session
from service.rendering import render_result

logger = logging.getLogger('ledger.service.routers.scripts')

router = APIRouter(
    tags=["scripts"],
)

SESSION_INVALID_DETAIL = {
    "error": "Session required: Please log in",
    "error_code": "session_invalid",
    "message": "Your session has expired or is invalid. Please log in again.",
    "action_required": "Please log in again to continue",
}


@router.api_route("/{script}", methods=["GET", "POST", "HEAD"])
def run_script(
    ledger_request: Annotated[LedgerRequest, Depends(get_ledger_request)],
    config: Annotated[LedgerConfig, Depends(get_ledger_config)],
) -> Response:
    """
    Run a registered business script in embedded-server mode.

    The session is verified first unless the script is public. Any refreshed
    session cookie is sent back with the response.
    """
    if requires_session(ledger_request) and not ledger_request.verify_session():
        logger.info(f"Session check failed for script {ledger_request.script}")
        raise HTTPException(status_code=403, detail=SESSION_INVALID_DETAIL)

    try:
        result = dispatch(ledger_request)
    except RequestFinalized:
        logger.debug(f"Script {ledger_request.script} finalized the request")
        response = Response(status_code=204)
    else:
        body, content_type = render_result(result)
        response = Response(content=body, media_type=content_type)

    if ledger_request.new_cookie:
        response.set_cookie(
            key=config.cookie_name,
            value=ledger_request.new_cookie,
            httponly=True,
            secure=config.secure_cookies,
            samesite="lax",
            path="/",
        )
    return response
