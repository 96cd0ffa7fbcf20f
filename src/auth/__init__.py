from .schema import Credentials
from .credentials import get_credentials, parse_basic_authorization
from .gate import SessionGate

__all__ = [
    "Credentials",
    "get_credentials",
    "parse_basic_authorization",
    "SessionGate",
]
