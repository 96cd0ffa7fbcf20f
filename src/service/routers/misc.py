from fastapi import APIRouter
from typing import Any
import logging

from ledger import __version__

logger = logging.getLogger('ledger.service.routers.misc')

router = APIRouter()

@router.get("/status")
async def get_status() -> dict[str, Any]:
    """Health check endpoint."""

    status_info = {
        "status": "ok",
        "version": __version__,
    }

    return status_info
