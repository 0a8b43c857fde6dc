from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field


class BusinessCreate(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    category: str = Field(min_length=1, max_length=80)
    description: str = Field(default="", max_length=1000)
    address: str = Field(default="", max_length=250)
    phone: str = Field(default="", max_length=40)
    website: str | None = Field(default=None, max_length=250)


class BusinessResponse(BaseModel):
    id: str
    name: str
    category: str
    description: str
    address: str
    phone: str
    website: str | None
    # Rounded to one decimal; stored at full precision.
    average_rating: float
    review_count: int
    has_deals: bool
    created_at: datetime
    updated_at: datetime


class BusinessListResponse(BaseModel):
    items: list[BusinessResponse]
    total: int
