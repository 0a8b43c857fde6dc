from __future__ import annotations

import logging
from datetime import datetime

from sqlalchemy.orm import Session

from bizboost.db import crud
from bizboost.models.businesses import Business
from bizboost.models.favorites import Favorite

logger = logging.getLogger(__name__)


def is_favorite(db: Session, *, user_id: str, business_id: str) -> bool:
    return crud.get_favorite(db, user_id, business_id) is not None


def add_favorite(db: Session, *, user_id: str, business_id: str, now: datetime | None = None) -> Favorite:
    """Favorite a business. Adding an existing favorite returns the existing row."""
    crud.get_business(db, business_id)

    existing = crud.get_favorite(db, user_id, business_id)
    if existing is not None:
        return existing

    favorite = crud.insert_favorite(db, user_id=user_id, business_id=business_id, now=now)
    logger.info("Favorite added: user=%s business=%s", user_id, business_id)
    return favorite


def remove_favorite(db: Session, *, user_id: str, business_id: str) -> None:
    removed = crud.delete_favorite(db, user_id, business_id)
    if removed:
        logger.info("Favorite removed: user=%s business=%s", user_id, business_id)


def list_favorites(db: Session, *, user_id: str) -> list[Business]:
    return crud.list_favorite_businesses(db, user_id)
