"""
Parsing of raw request input: query strings, form bodies and cookie headers.
"""
import re
from typing import Any, Dict, Optional
from urllib.parse import parse_qsl

FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"

_NON_WORD = re.compile(r"\W")


def parse_query(argstr: Optional[str]) -> Dict[str, Any]:
    """
    Parse a URL-encoded query string into a parameter mapping.

    Blank values are dropped. Repeated keys collect into a list, except
    ``action`` which keeps only its first value (some clients submit it twice).

    Args:
        argstr: Raw query string, with or without a leading ``?``

    Returns:
        Mapping of parameter name to a string or a list of strings
    """
    params: Dict[str, Any] = {}
    if not argstr:
        return params

    for key, value in parse_qsl(argstr.lstrip("?"), keep_blank_values=True):
        if value == "":
            continue
        if key not in params:
            params[key] = value
        elif key == "action":
            continue
        elif isinstance(params[key], list):
            params[key].append(value)
        else:
            params[key] = [params[key], value]
    return params


def join_query(*parts: Optional[str]) -> str:
    """Concatenate query string fragments, skipping empty ones."""
    return "&".join(part.lstrip("?") for part in parts if part)


def normalize_action(action: Optional[str]) -> str:
    """Replace non-word characters with ``_`` and lowercase."""
    if action is None:
        return ""
    return _NON_WORD.sub("_", str(action)).lower()


def parse_cookies(header: Optional[str]) -> Dict[str, str]:
    """Split a ``Cookie`` header into ``name -> value`` pairs."""
    cookies: Dict[str, str] = {}
    if not header:
        return cookies
    for pair in re.sub(r";\s*", ";", header).split(";"):
        if not pair:
            continue
        name, _, value = pair.partition("=")
        cookies[name] = value
    return cookies


def company_from_cookie(cookie: Optional[str]) -> Optional[str]:
    """
    Company name embedded as the trailing colon-delimited part of a session cookie.

    The pre-login placeholder value ``Login`` names no company.
    """
    if not cookie:
        return None
    company = cookie.rsplit(":", 1)[-1]
    if company == "Login":
        return None
    return company
