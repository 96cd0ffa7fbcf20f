import logging

from fastapi import FastAPI

from ledger import __version__
from .config import get_cors_config
from .lifecycle import lifespan
from .middleware import setup_middleware
from .routers import misc, scripts

# Built-in scripts register themselves on import
from . import login  # noqa: F401

logger = logging.getLogger('ledger.service')

app = FastAPI(title="Ledger", version=__version__, lifespan=lifespan)

cors_allowed_origins, cors_allowed_methods, cors_allowed_headers = get_cors_config()
setup_middleware(app, cors_allowed_origins, cors_allowed_methods, cors_allowed_headers)

# misc first so /status is not taken for a script name
app.include_router(misc.router)
app.include_router(scripts.router)
