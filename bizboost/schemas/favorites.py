from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel


class FavoriteResponse(BaseModel):
    user_id: str
    business_id: str
    created_at: datetime


class FavoriteStatusResponse(BaseModel):
    business_id: str
    is_favorite: bool
