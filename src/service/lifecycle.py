import logging
from typing import AsyncGenerator
from fastapi import FastAPI
from contextlib import asynccontextmanager

from ledger.config import get_config
from .redis_client import close_redis_clients

logger = logging.getLogger("ledger.service.lifecycle")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    config = get_config()
    logger.info(
        f"Ledger service starting: session backend={config.session_backend}, "
        f"default language={config.default_language}, namespace={config.db_namespace}"
    )
    if not config.default_db:
        logger.warning("DEFAULT_DB not set, requests must name their company")

    yield

    # Cleanup during shutdown
    close_redis_clients()
    logger.info("Ledger service stopped")
