from typing import Any, Callable, Dict, List, Optional

from pydantic import BaseModel, ConfigDict

PREFERENCES_PROCEDURE = "user__get_preferences"


class UserPreferences(BaseModel):
    """Per-user configuration; unknown preference columns are kept as extra fields."""
    model_config = ConfigDict(extra="allow")

    login: Optional[str] = None
    language: str = "en"
    stylesheet: Optional[str] = None
    dateformat: Optional[str] = None
    numberformat: Optional[str] = None


def fetch_preferences(call: Callable[..., List[Dict[str, Any]]], login: Optional[str]) -> UserPreferences:
    """Load the preferences of the connected user, defaulting the language to ``en``."""
    rows = call(funcname=PREFERENCES_PROCEDURE, args=[])
    data = dict(rows[0]) if rows else {}
    if not data.get("language"):
        data["language"] = "en"
    data.setdefault("login", login)
    return UserPreferences.model_validate(data)
