from __future__ import annotations

from datetime import datetime

from sqlalchemy import delete, func, or_, select
from sqlalchemy.orm import Session

from bizboost.core.errors import ForeignKeyViolation, InvalidQuery, InvalidUpdate, NotFound
from bizboost.models.businesses import Business
from bizboost.models.deals import Deal
from bizboost.models.favorites import Favorite
from bizboost.models.reviews import Review

# Fields owned by the rating aggregator / deals filter.
DERIVED_BUSINESS_FIELDS = frozenset({"average_rating", "review_count", "has_deals"})
EDITABLE_BUSINESS_FIELDS = frozenset({"name", "category", "description", "address", "phone", "website"})
EDITABLE_DEAL_FIELDS = frozenset({"title", "description", "discount_code", "start_date", "end_date", "is_active"})

BUSINESS_SORTS = {
    "rating": (Business.average_rating.desc(), Business.review_count.desc(), Business.name),
    "reviews": (Business.review_count.desc(), Business.average_rating.desc(), Business.name),
    "name": (Business.name, Business.id),
}
# "All" is what the category picker sends for no filter.
ALL_CATEGORIES = "All"


def _require_business(db: Session, business_id: str, *, entity: str) -> None:
    if db.get(Business, business_id) is None:
        raise ForeignKeyViolation(entity, business_id)


# Businesses

def create_business(
    db: Session,
    *,
    name: str,
    category: str,
    description: str = "",
    address: str = "",
    phone: str = "",
    website: str | None = None,
    now: datetime | None = None,
) -> Business:
    now = now or datetime.utcnow()
    business = Business(
        name=name,
        category=category,
        description=description,
        address=address,
        phone=phone,
        website=website,
        average_rating=0.0,
        review_count=0,
        has_deals=False,
        created_at=now,
        updated_at=now,
    )
    db.add(business)
    db.flush()
    return business


def get_business(db: Session, business_id: str) -> Business:
    business = db.get(Business, business_id)
    if business is None:
        raise NotFound("Business", business_id)
    return business


def _filtered(stmt, *, category: str | None, sort: str):
    order = BUSINESS_SORTS.get(sort)
    if order is None:
        raise InvalidQuery(f"Unknown sort: {sort} (use one of: {', '.join(BUSINESS_SORTS)})")
    if category and category.strip() and category.strip() != ALL_CATEGORIES:
        stmt = stmt.where(Business.category == category.strip())
    return stmt.order_by(*order)


def list_businesses(db: Session, *, category: str | None = None, sort: str = "rating") -> list[Business]:
    stmt = _filtered(select(Business), category=category, sort=sort)
    return list(db.scalars(stmt).all())


def search_businesses(
    db: Session, query: str, *, category: str | None = None, sort: str = "rating"
) -> list[Business]:
    pattern = f"%{query.strip().lower()}%"
    stmt = select(Business).where(
        or_(
            func.lower(Business.name).like(pattern),
            func.lower(Business.description).like(pattern),
            func.lower(Business.category).like(pattern),
        )
    )
    return list(db.scalars(_filtered(stmt, category=category, sort=sort)).all())


def list_categories(db: Session) -> list[str]:
    return list(db.scalars(select(Business.category).distinct().order_by(Business.category)).all())


def count_businesses(db: Session) -> int:
    return int(db.scalar(select(func.count()).select_from(Business)) or 0)


def update_business(db: Session, business_id: str, *, now: datetime | None = None, **changes) -> Business:
    derived = DERIVED_BUSINESS_FIELDS.intersection(changes)
    if derived:
        raise InvalidUpdate(f"Derived fields cannot be written directly: {', '.join(sorted(derived))}")
    unknown = set(changes) - EDITABLE_BUSINESS_FIELDS
    if unknown:
        raise InvalidUpdate(f"Unknown business fields: {', '.join(sorted(unknown))}")

    business = get_business(db, business_id)
    for field, value in changes.items():
        setattr(business, field, value)
    business.updated_at = now or datetime.utcnow()
    db.flush()
    return business


def delete_business(db: Session, business_id: str) -> None:
    business = get_business(db, business_id)
    db.delete(business)
    db.flush()


# Reviews

def insert_review(
    db: Session,
    *,
    business_id: str,
    user_id: str,
    rating: int,
    comment: str,
    now: datetime | None = None,
) -> Review:
    _require_business(db, business_id, entity="Review")
    review = Review(
        business_id=business_id,
        user_id=user_id,
        rating=rating,
        comment=comment,
        created_at=now or datetime.utcnow(),
    )
    db.add(review)
    db.flush()
    return review


def get_review(db: Session, review_id: str) -> Review:
    review = db.get(Review, review_id)
    if review is None:
        raise NotFound("Review", review_id)
    return review


def list_reviews_by_business(db: Session, business_id: str) -> list[Review]:
    stmt = (
        select(Review)
        .where(Review.business_id == business_id)
        .order_by(Review.created_at.desc(), Review.id)
    )
    return list(db.scalars(stmt).all())


def count_reviews(db: Session, business_id: str) -> int:
    return int(db.scalar(select(func.count(Review.id)).where(Review.business_id == business_id)) or 0)


# Deals

def create_deal(
    db: Session,
    *,
    business_id: str,
    title: str,
    start_date: datetime,
    end_date: datetime,
    description: str = "",
    discount_code: str | None = None,
    is_active: bool = True,
    now: datetime | None = None,
) -> Deal:
    _require_business(db, business_id, entity="Deal")
    now = now or datetime.utcnow()
    deal = Deal(
        business_id=business_id,
        title=title,
        description=description,
        discount_code=discount_code,
        start_date=start_date,
        end_date=end_date,
        is_active=is_active,
        created_at=now,
        updated_at=now,
    )
    db.add(deal)
    db.flush()
    return deal


def get_deal(db: Session, deal_id: str) -> Deal:
    deal = db.get(Deal, deal_id)
    if deal is None:
        raise NotFound("Deal", deal_id)
    return deal


def update_deal(db: Session, deal_id: str, *, now: datetime | None = None, **changes) -> Deal:
    unknown = set(changes) - EDITABLE_DEAL_FIELDS
    if unknown:
        raise InvalidUpdate(f"Unknown deal fields: {', '.join(sorted(unknown))}")

    deal = get_deal(db, deal_id)
    for field, value in changes.items():
        setattr(deal, field, value)
    deal.updated_at = now or datetime.utcnow()
    db.flush()
    return deal


def delete_deal(db: Session, deal_id: str) -> Deal:
    deal = get_deal(db, deal_id)
    db.delete(deal)
    db.flush()
    return deal


def list_deals(db: Session, business_id: str | None = None) -> list[Deal]:
    stmt = select(Deal)
    if business_id is not None:
        stmt = stmt.where(Deal.business_id == business_id)
    return list(db.scalars(stmt.order_by(Deal.end_date, Deal.start_date, Deal.id)).all())


# Favorites

def get_favorite(db: Session, user_id: str, business_id: str) -> Favorite | None:
    stmt = select(Favorite).where(Favorite.user_id == user_id, Favorite.business_id == business_id)
    return db.scalar(stmt)


def insert_favorite(db: Session, *, user_id: str, business_id: str, now: datetime | None = None) -> Favorite:
    _require_business(db, business_id, entity="Favorite")
    favorite = Favorite(user_id=user_id, business_id=business_id, created_at=now or datetime.utcnow())
    db.add(favorite)
    db.flush()
    return favorite


def delete_favorite(db: Session, user_id: str, business_id: str) -> int:
    res = db.execute(delete(Favorite).where(Favorite.user_id == user_id, Favorite.business_id == business_id))
    return int(res.rowcount or 0)


def list_favorite_businesses(db: Session, user_id: str) -> list[Business]:
    # Most recently favorited first.
    stmt = (
        select(Business)
        .join(Favorite, Favorite.business_id == Business.id)
        .where(Favorite.user_id == user_id)
        .order_by(Favorite.id.desc())
    )
    return list(db.scalars(stmt).all())
