from __future__ import annotations

import logging

from fastapi import APIRouter, Depends

from bizboost.core.deps import get_current_user_id, get_directory
from bizboost.schemas.reviews import ReviewCreate, ReviewListResponse, ReviewSubmissionResponse
from bizboost.services.directory import Directory

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/businesses/{business_id}/reviews", tags=["reviews"])


@router.post("", response_model=ReviewSubmissionResponse, status_code=201)
def create_review(
    business_id: str,
    payload: ReviewCreate,
    user_id: str = Depends(get_current_user_id),
    directory: Directory = Depends(get_directory),
) -> ReviewSubmissionResponse:
    return directory.create_review(
        business_id,
        user_id,
        payload.rating,
        payload.comment,
        session_id=payload.session_id,
        captcha_answer=payload.captcha_answer,
    )


@router.get("", response_model=ReviewListResponse)
def list_reviews(business_id: str, directory: Directory = Depends(get_directory)) -> ReviewListResponse:
    items = directory.get_reviews_by_business(business_id)
    return ReviewListResponse(items=items, total=len(items))
