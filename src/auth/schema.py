from pydantic import BaseModel
from typing import Optional

class Credentials(BaseModel):
    login: Optional[str] = None
    password: Optional[str] = None
