"""
Registry of business scripts and dispatch of a request to them.

A script handler is a plain function taking the LedgerRequest. It returns
either a string (HTML) or a mapping (JSON). Handlers are registered per
script name and action; the empty action is the script's default.
"""
import logging
from typing import Any, Callable, Dict, Tuple

from ledger.request import LedgerRequest

logger = logging.getLogger('ledger.service.dispatch')

ScriptHandler = Callable[[LedgerRequest], Any]

script_handlers: Dict[Tuple[str, str], ScriptHandler] = {}

# scripts reachable without a verified session
public_scripts = {"login"}


def script(name: str, action: str = "", public: bool = False) -> Callable[[ScriptHandler], ScriptHandler]:
    """
    Register a handler for ``name`` and ``action``.

    Example:
        @script("journal", action="post")
        def post_journal(request): ...
    """
    def decorator(handler: ScriptHandler) -> ScriptHandler:
        key = (name, action)
        if key in script_handlers:
            logger.warning(f"Replacing handler for script {name!r} action {action!r}")
        script_handlers[key] = handler
        if public:
            public_scripts.add(name)
        return handler
    return decorator


def requires_session(request: LedgerRequest) -> bool:
    return request.script not in public_scripts


def dispatch(request: LedgerRequest) -> Any:
    """Run the handler for the request's script and action."""
    handler = script_handlers.get((request.script, request.action)) or script_handlers.get((request.script, ""))
    if handler is None:
        logger.error(f"No handler for script {request.script!r} action {request.action!r}")
        request.error(f"Unknown action {request.action!r} for {request.script}", status=404)
    logger.debug(f"Dispatching {request.script}/{request.action or '-'} to {handler.__name__}")
    return handler(request)
