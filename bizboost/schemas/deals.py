from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field


class DealCreate(BaseModel):
    title: str = Field(min_length=1, max_length=200)
    description: str = Field(default="", max_length=1000)
    discount_code: str | None = Field(default=None, max_length=64)
    start_date: datetime
    end_date: datetime
    is_active: bool = True


class DealUpdate(BaseModel):
    is_active: bool


class DealResponse(BaseModel):
    id: str
    business_id: str
    title: str
    description: str
    discount_code: str | None
    start_date: datetime
    end_date: datetime
    is_active: bool
    created_at: datetime
    updated_at: datetime


class DealListResponse(BaseModel):
    items: list[DealResponse]
    total: int
