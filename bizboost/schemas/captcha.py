from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field


class CaptchaRequest(BaseModel):
    # One session per open review form; omit to start a new one.
    session_id: str | None = Field(default=None, min_length=1, max_length=64)


class CaptchaResponse(BaseModel):
    session_id: str
    question: str
    issued_at: datetime
