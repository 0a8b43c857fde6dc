from __future__ import annotations

import logging
from datetime import datetime

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from bizboost.db import crud
from bizboost.models.businesses import Business
from bizboost.models.reviews import Review

logger = logging.getLogger(__name__)


def recompute_business_rating(db: Session, *, business_id: str, now: datetime | None = None) -> Business:
    """Recompute aggregated rating fields for a business.

    Aggregates are stored in-place on the business row (average_rating, review_count)
    at full precision; rounding happens only when rendering. Runs inside the caller's
    transaction, so the review insert and the new aggregate commit together.
    A business without reviews gets 0 / 0.0.
    """

    business = crud.get_business(db, business_id)

    stmt = select(func.count(Review.id), func.avg(Review.rating)).where(Review.business_id == business_id)
    cnt, avg = db.execute(stmt).one()

    business.review_count = int(cnt or 0)
    business.average_rating = float(avg or 0.0)
    business.updated_at = now or datetime.utcnow()
    db.flush()

    logger.debug(
        "Rating recomputed for %s: count=%s avg=%.3f", business_id, business.review_count, business.average_rating
    )
    return business
