"""
Run a business script from the command line.

    python src/run_cli.py <script> [query-string]

Credentials come from LEDGER_LOGIN and LEDGER_PASSWORD. Session and form
checks do not apply on the command line.
"""
import argparse
import json
import logging
import os
import sys
from typing import List, Optional

from dotenv import load_dotenv

load_dotenv()

from ledger.errors import LedgerError, RequestAbort, RequestFinalized
from ledger.request import LedgerRequest
from ledger.run_mode import EMBEDDED_FLAG, GATEWAY_FLAG
from service.config import configure_logging
from service.dispatch import dispatch

# Built-in scripts register themselves on import
from service import login  # noqa: F401

logger = logging.getLogger('ledger.cli')


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Run a ledger script from the command line")
    parser.add_argument("script", help="Script name, e.g. login")
    parser.add_argument("query", nargs="?", default="", help="URL-encoded parameters, e.g. 'action=report&id=3'")
    parser.add_argument("--company", help="Company database, overrides DEFAULT_DB")
    return parser


def cli_environ(script: str) -> dict:
    environ = dict(os.environ)
    environ.pop(GATEWAY_FLAG, None)
    environ.pop(EMBEDDED_FLAG, None)
    environ["SCRIPT_NAME"] = f"/{script}"
    return environ


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    query = args.query
    if args.company:
        query = f"{query}&company={args.company}" if query else f"company={args.company}"

    request = None
    try:
        request = LedgerRequest(query, environ=cli_environ(args.script))
        result = dispatch(request)
    except RequestFinalized:
        return 0
    except RequestAbort as e:
        print(f"Error: {e.message}", file=sys.stderr)
        return 1
    except LedgerError as e:
        logger.error(f"Script failed: {type(e).__name__}: {e}", exc_info=True)
        return 1
    except Exception as e:
        logger.error(f"Unexpected error running {args.script}: {e}", exc_info=True)
        print(f"Error: internal error ({type(e).__name__})", file=sys.stderr)
        return 1
    finally:
        if request is not None:
            request.close()

    if result is None:
        return 0
    if isinstance(result, str):
        print(result)
    else:
        print(json.dumps(result, indent=2, default=str))
    return 0


if __name__ == "__main__":
    configure_logging()
    sys.exit(main())
