from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel

from bizboost.schemas.businesses import BusinessResponse


class ReviewCreate(BaseModel):
    # Rating, comment and answer are checked by the review service, challenge first.
    rating: int | float | str | None = None
    comment: str = ""
    session_id: str | None = None
    captcha_answer: str = ""


class ReviewResponse(BaseModel):
    id: str
    business_id: str
    user_id: str
    rating: int
    comment: str
    created_at: datetime


class ReviewListResponse(BaseModel):
    items: list[ReviewResponse]
    total: int


class ReviewSubmissionResponse(BaseModel):
    review: ReviewResponse
    business: BusinessResponse
