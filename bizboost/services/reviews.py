from __future__ import annotations

import logging
from datetime import datetime

from sqlalchemy.orm import Session

from bizboost.core.errors import ChallengeFailed, InvalidComment, InvalidRating
from bizboost.db import crud
from bizboost.models.businesses import Business
from bizboost.models.reviews import Review
from bizboost.services.captcha import Challenge, ChallengeService
from bizboost.services.ratings import recompute_business_rating

logger = logging.getLogger(__name__)

MIN_RATING = 1
MAX_RATING = 5
MIN_COMMENT_LENGTH = 10
MAX_COMMENT_LENGTH = 2000


def validate_rating(rating: int | float | str | None) -> int:
    # Form posts may send the star count as text.
    if isinstance(rating, str):
        text = rating.strip()
        if text.isdigit() or (text[:1] in ("+", "-") and text[1:].isdigit()):
            rating = int(text)
    if isinstance(rating, bool) or not isinstance(rating, int) or not MIN_RATING <= rating <= MAX_RATING:
        raise InvalidRating(f"Rating must be a whole number from {MIN_RATING} to {MAX_RATING}")
    return rating


def validate_comment(comment: str | None) -> str:
    text = (comment or "").strip()
    if len(text) < MIN_COMMENT_LENGTH:
        raise InvalidComment(f"Review must be at least {MIN_COMMENT_LENGTH} characters long")
    if len(text) > MAX_COMMENT_LENGTH:
        raise InvalidComment(f"Review must be at most {MAX_COMMENT_LENGTH} characters long")
    return text


def submit_review(
    db: Session,
    challenges: ChallengeService,
    *,
    business_id: str,
    user_id: str,
    rating: int | float | str | None,
    comment: str | None,
    challenge: Challenge | None,
    supplied_answer: str,
    now: datetime | None = None,
) -> tuple[Review, Business]:
    """Validate and write a review, then refresh the business aggregate.

    Check order is part of the contract: unknown business, then the challenge,
    then rating, then comment. The challenge goes before content validation so
    a client cannot learn anything from validation errors without solving it.
    Nothing is written until every check passes. The challenge is claimed
    here; the caller commits while holding the business lock, then consumes
    the challenge, or restores it if anything after the claim failed.
    """

    crud.get_business(db, business_id)

    if not challenges.claim(challenge, supplied_answer):
        logger.info("Challenge failed for review on %s by %s", business_id, user_id)
        raise ChallengeFailed("Incorrect verification answer. Request a new challenge and try again.")

    rating = validate_rating(rating)
    text = validate_comment(comment)

    now = now or datetime.utcnow()
    review = crud.insert_review(db, business_id=business_id, user_id=user_id, rating=rating, comment=text, now=now)
    business = recompute_business_rating(db, business_id=business_id, now=now)

    logger.info("Review %s stored for %s (rating=%s)", review.id, business_id, rating)
    return review, business
