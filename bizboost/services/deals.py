from __future__ import annotations

import logging
from datetime import datetime, timezone

from sqlalchemy import and_, exists, select
from sqlalchemy.orm import Session

from bizboost.core.errors import InvalidDeal
from bizboost.db import crud
from bizboost.models.businesses import Business
from bizboost.models.deals import Deal

logger = logging.getLogger(__name__)


def _active_at(now: datetime):
    # Both bounds inclusive; the flag and the window are independent conditions.
    return and_(Deal.is_active.is_(True), Deal.start_date <= now, Deal.end_date >= now)


def is_deal_active(deal: Deal, now: datetime) -> bool:
    return bool(deal.is_active) and deal.start_date <= now <= deal.end_date


def as_naive_utc(value: datetime) -> datetime:
    # Timestamps are stored as naive UTC.
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def validate_window(start_date: datetime, end_date: datetime) -> None:
    if end_date <= start_date:
        raise InvalidDeal("Deal end date must be after its start date")


def active_deals(db: Session, *, now: datetime, business_id: str | None = None) -> list[Deal]:
    """Deals live at ``now``, soonest-expiring first.

    Without ``business_id`` the query spans every business.
    """
    stmt = select(Deal).where(_active_at(now))
    if business_id is not None:
        stmt = stmt.where(Deal.business_id == business_id)
    stmt = stmt.order_by(Deal.end_date, Deal.start_date, Deal.id)
    return list(db.scalars(stmt).all())


def has_active_deal(db: Session, *, business_id: str, now: datetime) -> bool:
    stmt = select(exists().where(Deal.business_id == business_id, _active_at(now)))
    return bool(db.scalar(stmt))


def refresh_has_deals(db: Session, *, business_id: str, now: datetime) -> Business:
    """Bring ``Business.has_deals`` in line with the deals live at ``now``."""
    business = crud.get_business(db, business_id)
    flag = has_active_deal(db, business_id=business_id, now=now)
    if business.has_deals != flag:
        business.has_deals = flag
        business.updated_at = now
        db.flush()
        logger.info("has_deals for %s -> %s", business_id, flag)
    return business


def stale_deal_flags(db: Session, *, now: datetime) -> list[str]:
    """Ids of businesses whose stored has_deals disagrees with the clock."""
    live = exists().where(Deal.business_id == Business.id, _active_at(now))
    stmt = select(Business.id).where(
        (Business.has_deals.is_(True) & ~live) | (Business.has_deals.is_(False) & live)
    )
    return list(db.scalars(stmt).all())


def live_deal_business_ids(db: Session, *, now: datetime, business_ids: list[str]) -> set[str]:
    """Which of ``business_ids`` have a deal live at ``now``; computed, never stored."""
    if not business_ids:
        return set()
    stmt = select(Deal.business_id).where(Deal.business_id.in_(business_ids), _active_at(now)).distinct()
    return set(db.scalars(stmt).all())
