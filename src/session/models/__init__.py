from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime


class SessionCookie(BaseModel):
    """Session cookie value, ``session_id:token:company``."""
    session_id: str
    token: str
    company: Optional[str] = None

    @classmethod
    def parse(cls, value: Optional[str]) -> Optional["SessionCookie"]:
        """Parse a raw cookie value; anything without an id and a token is ``None``."""
        if not value:
            return None
        parts = value.split(":", 2)
        if len(parts) < 2 or not parts[0] or not parts[1]:
            return None
        company = parts[2] if len(parts) == 3 and parts[2] else None
        return cls(session_id=parts[0], token=parts[1], company=company)

    def serialize(self) -> str:
        return f"{self.session_id}:{self.token}:{self.company or ''}"


class SessionRecord(BaseModel):
    """What a session store returns for a valid session."""
    session_id: str
    token: str
    login: Optional[str] = None
    company: Optional[str] = None
    last_used: datetime = Field(default_factory=datetime.now, description="Timestamp of the last successful check")

    def to_cookie(self) -> SessionCookie:
        return SessionCookie(session_id=self.session_id, token=self.token, company=self.company)
