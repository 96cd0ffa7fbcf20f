import base64
import binascii
import logging
from typing import Mapping

from ledger.run_mode import RunMode
from .schema import Credentials

logger = logging.getLogger('ledger.auth.credentials')

CLI_LOGIN = "LEDGER_LOGIN"
CLI_PASSWORD = "LEDGER_PASSWORD"


def parse_basic_authorization(header: str) -> Credentials:
    """
    Decode an HTTP ``Authorization: Basic ...`` header.

    Anything that is not a well-formed basic header yields empty credentials.
    """
    scheme, _, encoded = header.strip().partition(" ")
    if scheme.lower() != "basic" or not encoded:
        return Credentials()
    try:
        decoded = base64.b64decode(encoded.strip(), validate=True).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError) as e:
        logger.warning(f"Malformed basic authorization header: {e}")
        return Credentials()
    login, sep, password = decoded.partition(":")
    return Credentials(login=login or None, password=password if sep else None)


def get_credentials(environ: Mapping[str, str], run_mode: RunMode) -> Credentials:
    """
    Credentials the request presents; verification is left to the database.

    Network run modes read the basic authorization header, the command line
    reads ``LEDGER_LOGIN`` and ``LEDGER_PASSWORD``.
    """
    if run_mode is RunMode.CLI:
        return Credentials(login=environ.get(CLI_LOGIN) or None, password=environ.get(CLI_PASSWORD))

    header = environ.get("HTTP_AUTHORIZATION")
    if not header:
        return Credentials()
    return parse_basic_authorization(header)
