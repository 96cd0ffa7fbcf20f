"""
Conversion of script results and fatal errors into response bodies.

Shared by the embedded server and the gateway runner so both render the
same error page.
"""
import html
import json
from typing import Any, Mapping, Optional, Tuple

HTML_CONTENT_TYPE = "text/html; charset=utf-8"
JSON_CONTENT_TYPE = "application/json"

ERROR_PAGE = """<html>
<body><h2 class="error">Error!</h2> <p><b>{message}</b></p>
<p>dbversion: {dbversion}, company: {company}</p>
</body>
</html>
"""


def render_error_page(message: Optional[str], dbversion: Optional[str] = None, company: Optional[str] = None) -> str:
    if message is None:
        message = "? _error"
    return ERROR_PAGE.format(
        message=html.escape(message).replace("\n", "<br />\n"),
        dbversion=html.escape(dbversion or ""),
        company=html.escape(company or ""),
    )


def render_result(result: Any) -> Tuple[str, str]:
    """
    Body and content type for a script result.

    Strings are HTML, mappings and lists are JSON, ``None`` is an empty page.
    """
    if result is None:
        return "", HTML_CONTENT_TYPE
    if isinstance(result, str):
        return result, HTML_CONTENT_TYPE
    if isinstance(result, (Mapping, list)):
        return json.dumps(result, default=str), JSON_CONTENT_TYPE
    raise TypeError(f"Script returned unsupported result type {type(result).__name__}")
