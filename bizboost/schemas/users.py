from __future__ import annotations

from pydantic import BaseModel


class LocalUserResponse(BaseModel):
    id: str
    name: str
    email: str
