from __future__ import annotations

import logging
from datetime import datetime, timedelta

from sqlalchemy.orm import Session

from bizboost.db import crud
from bizboost.services.deals import refresh_has_deals
from bizboost.services.ratings import recompute_business_rating

logger = logging.getLogger(__name__)

CATEGORIES = ["Food", "Retail", "Services", "Entertainment"]

BUSINESS_NAMES = [
    "Joe's Pizza",
    "Tech Gadgets",
    "Quick Clean",
    "Movie Theater",
    "Burger Joint",
    "Fashion Boutique",
    "Auto Repair",
    "Bowling Alley",
]

DEAL_DAYS = 30


def seed_sample_data(db: Session, *, user_id: str, now: datetime | None = None) -> int:
    """Populate an empty directory with the demo dataset. Returns businesses created.

    Seed reviews are trusted content and skip the verification challenge, but the
    aggregates still go through the same recompute path as user reviews.
    """

    now = now or datetime.utcnow()
    created = 0

    for i, name in enumerate(BUSINESS_NAMES):
        category = CATEGORIES[i % len(CATEGORIES)]
        slug = name.replace(" ", "").replace("'", "").lower()
        business = crud.create_business(
            db,
            name=name,
            category=category,
            description=f"A great {category.lower()} business in town",
            address=f"123 {name.replace(' ', '-').lower()} St",
            phone=f"555-{1000 + i:04d}",
            website=f"{slug}.com",
            now=now,
        )

        for stars in (3, 4, 5):
            crud.insert_review(
                db,
                business_id=business.id,
                user_id=user_id,
                rating=stars,
                comment=f"Great {category.lower()} business! {stars} stars!",
                now=now,
            )
        recompute_business_rating(db, business_id=business.id, now=now)

        if i % 2 == 0:
            crud.create_deal(
                db,
                business_id=business.id,
                title=f"{name} Special Deal",
                description=f"Get 20% off at {name}!",
                discount_code=f"DEAL{i}",
                start_date=now,
                end_date=now + timedelta(days=DEAL_DAYS),
                now=now,
            )
            refresh_has_deals(db, business_id=business.id, now=now)

        created += 1

    logger.info("Sample data seeded: %s businesses", created)
    return created
