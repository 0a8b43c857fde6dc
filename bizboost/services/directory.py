from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime

from sqlalchemy.orm import Session

from bizboost.core.config import Settings, settings as default_settings
from bizboost.db import crud
from bizboost.db.locks import KeyedLock
from bizboost.db.session import EntityStore
from bizboost.models.businesses import Business
from bizboost.models.deals import Deal
from bizboost.models.favorites import Favorite
from bizboost.models.reviews import Review
from bizboost.schemas.businesses import BusinessResponse
from bizboost.schemas.captcha import CaptchaResponse
from bizboost.schemas.deals import DealResponse
from bizboost.schemas.favorites import FavoriteResponse
from bizboost.schemas.reviews import ReviewResponse, ReviewSubmissionResponse
from bizboost.schemas.users import LocalUserResponse
from bizboost.services import deals as deals_service
from bizboost.services import favorites as favorites_service
from bizboost.services.captcha import ChallengeGenerator, ChallengeService
from bizboost.services.reviews import submit_review
from bizboost.services.sample_data import seed_sample_data

logger = logging.getLogger(__name__)


def to_business_response(b: Business, *, has_deals: bool | None = None) -> BusinessResponse:
    return BusinessResponse(
        id=b.id,
        name=b.name,
        category=b.category,
        description=b.description,
        address=b.address,
        phone=b.phone,
        website=b.website,
        average_rating=round(b.average_rating, 1),
        review_count=b.review_count,
        has_deals=b.has_deals if has_deals is None else has_deals,
        created_at=b.created_at,
        updated_at=b.updated_at,
    )


def to_review_response(r: Review) -> ReviewResponse:
    return ReviewResponse(
        id=r.id,
        business_id=r.business_id,
        user_id=r.user_id,
        rating=r.rating,
        comment=r.comment,
        created_at=r.created_at,
    )


def to_deal_response(d: Deal) -> DealResponse:
    return DealResponse(
        id=d.id,
        business_id=d.business_id,
        title=d.title,
        description=d.description,
        discount_code=d.discount_code,
        start_date=d.start_date,
        end_date=d.end_date,
        is_active=d.is_active,
        created_at=d.created_at,
        updated_at=d.updated_at,
    )


def to_favorite_response(f: Favorite) -> FavoriteResponse:
    return FavoriteResponse(user_id=f.user_id, business_id=f.business_id, created_at=f.created_at)


class Directory:
    """The operations the presentation layer calls, over one explicit store.

    Each call opens its own transaction. Writes that touch a business's derived
    fields (reviews, deals) hold that business's lock until they commit; reads
    take no locks.
    """

    def __init__(
        self,
        store: EntityStore,
        challenges: ChallengeService,
        *,
        settings: Settings | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.store = store
        self.challenges = challenges
        self.settings = settings or default_settings
        self.clock = clock or datetime.utcnow
        self.locks = KeyedLock()

    @classmethod
    def open(
        cls,
        settings: Settings | None = None,
        *,
        clock: Callable[[], datetime] | None = None,
        generator: ChallengeGenerator | None = None,
    ) -> "Directory":
        cfg = settings or default_settings
        store = EntityStore(cfg.database_url, busy_timeout=cfg.sqlite_busy_timeout_seconds)
        store.create_all()
        challenges = ChallengeService(
            generator, max_sessions=cfg.captcha_max_sessions, ttl_seconds=cfg.captcha_ttl_seconds
        )
        directory = cls(store, challenges, settings=cfg, clock=clock)

        if cfg.seed_sample_data:
            directory.generate_sample_data()
        directory.refresh_deal_flags()
        logger.info("Directory ready (%s)", store.engine.url.render_as_string(hide_password=True))
        return directory

    def close(self) -> None:
        self.challenges.clear()
        self.store.dispose()
        logger.info("Directory closed")

    # Identity

    def get_local_user(self) -> LocalUserResponse:
        return LocalUserResponse(
            id=self.settings.local_user_id,
            name=self.settings.local_user_name,
            email=self.settings.local_user_email,
        )

    # Businesses

    def create_business(
        self,
        *,
        name: str,
        category: str,
        description: str = "",
        address: str = "",
        phone: str = "",
        website: str | None = None,
    ) -> BusinessResponse:
        with self.store.session() as db:
            business = crud.create_business(
                db,
                name=name.strip(),
                category=category.strip(),
                description=description,
                address=address,
                phone=phone,
                website=website,
                now=self.clock(),
            )
            logger.info("Business created: %s (%s)", business.id, business.name)
            return to_business_response(business)

    def _business_responses(self, db: Session, businesses: list[Business]) -> list[BusinessResponse]:
        # has_deals is derived from the clock here; the stored flag may lag until the next write.
        live = deals_service.live_deal_business_ids(
            db, now=self.clock(), business_ids=[b.id for b in businesses]
        )
        return [to_business_response(b, has_deals=b.id in live) for b in businesses]

    def get_business_by_id(self, business_id: str) -> BusinessResponse:
        with self.store.session() as db:
            return self._business_responses(db, [crud.get_business(db, business_id)])[0]

    def get_all_businesses(self, *, category: str | None = None, sort: str = "rating") -> list[BusinessResponse]:
        with self.store.session() as db:
            return self._business_responses(db, crud.list_businesses(db, category=category, sort=sort))

    def search_businesses(
        self, query: str, *, category: str | None = None, sort: str = "rating"
    ) -> list[BusinessResponse]:
        with self.store.session() as db:
            found = crud.search_businesses(db, query, category=category, sort=sort)
            return self._business_responses(db, found)

    def get_categories(self) -> list[str]:
        with self.store.session() as db:
            return crud.list_categories(db)

    # Reviews

    def get_reviews_by_business(self, business_id: str) -> list[ReviewResponse]:
        with self.store.session() as db:
            crud.get_business(db, business_id)
            return [to_review_response(r) for r in crud.list_reviews_by_business(db, business_id)]

    def generate_captcha(self, session_id: str | None = None) -> CaptchaResponse:
        challenge = self.challenges.issue(session_id)
        return CaptchaResponse(
            session_id=challenge.session_id, question=challenge.question, issued_at=challenge.issued_at
        )

    def create_review(
        self,
        business_id: str,
        user_id: str,
        rating: int | float | str | None,
        comment: str,
        *,
        session_id: str | None,
        captcha_answer: str,
    ) -> ReviewSubmissionResponse:
        # Unknown businesses fail here without creating a lock slot.
        with self.store.session() as db:
            crud.get_business(db, business_id)

        challenge = self.challenges.active(session_id) if session_id else None

        with self.locks.hold(business_id):
            try:
                with self.store.session() as db:
                    review, business = submit_review(
                        db,
                        self.challenges,
                        business_id=business_id,
                        user_id=user_id,
                        rating=rating,
                        comment=comment,
                        challenge=challenge,
                        supplied_answer=captcha_answer,
                        now=self.clock(),
                    )
                    result = ReviewSubmissionResponse(
                        review=to_review_response(review),
                        business=self._business_responses(db, [business])[0],
                    )
            except BaseException:
                self.challenges.restore(challenge)
                raise
            # Committed: the challenge is spent.
            self.challenges.consume(challenge)

        return result

    # Deals

    def get_active_deals(self, business_id: str | None = None) -> list[DealResponse]:
        with self.store.session() as db:
            if business_id is not None:
                crud.get_business(db, business_id)
            items = deals_service.active_deals(db, now=self.clock(), business_id=business_id)
            return [to_deal_response(d) for d in items]

    def get_deals_by_business(self, business_id: str) -> list[DealResponse]:
        """Every deal of the business, live or not, soonest-ending first."""
        with self.store.session() as db:
            crud.get_business(db, business_id)
            return [to_deal_response(d) for d in crud.list_deals(db, business_id)]

    def create_deal(
        self,
        business_id: str,
        *,
        title: str,
        start_date: datetime,
        end_date: datetime,
        description: str = "",
        discount_code: str | None = None,
        is_active: bool = True,
    ) -> DealResponse:
        start_date = deals_service.as_naive_utc(start_date)
        end_date = deals_service.as_naive_utc(end_date)
        deals_service.validate_window(start_date, end_date)

        with self.locks.hold(business_id):
            with self.store.session() as db:
                crud.get_business(db, business_id)
                now = self.clock()
                deal = crud.create_deal(
                    db,
                    business_id=business_id,
                    title=title,
                    description=description,
                    discount_code=discount_code,
                    start_date=start_date,
                    end_date=end_date,
                    is_active=is_active,
                    now=now,
                )
                deals_service.refresh_has_deals(db, business_id=business_id, now=now)
                logger.info("Deal %s created for %s", deal.id, business_id)
                return to_deal_response(deal)

    def set_deal_active(self, deal_id: str, is_active: bool) -> DealResponse:
        with self.store.session() as db:
            business_id = crud.get_deal(db, deal_id).business_id

        with self.locks.hold(business_id):
            with self.store.session() as db:
                now = self.clock()
                deal = crud.update_deal(db, deal_id, is_active=is_active, now=now)
                deals_service.refresh_has_deals(db, business_id=business_id, now=now)
                logger.info("Deal %s is_active -> %s", deal_id, is_active)
                return to_deal_response(deal)

    def refresh_deal_flags(self) -> int:
        """Re-derive has_deals for businesses whose deals started or expired since the last write."""
        now = self.clock()
        with self.store.session() as db:
            stale = deals_service.stale_deal_flags(db, now=now)

        for business_id in stale:
            with self.locks.hold(business_id):
                with self.store.session() as db:
                    deals_service.refresh_has_deals(db, business_id=business_id, now=now)
        return len(stale)

    # Favorites

    def is_favorite(self, user_id: str, business_id: str) -> bool:
        with self.store.session() as db:
            return favorites_service.is_favorite(db, user_id=user_id, business_id=business_id)

    def add_favorite(self, user_id: str, business_id: str) -> FavoriteResponse:
        with self.locks.hold(f"favorite:{user_id}:{business_id}"):
            with self.store.session() as db:
                favorite = favorites_service.add_favorite(
                    db, user_id=user_id, business_id=business_id, now=self.clock()
                )
                return to_favorite_response(favorite)

    def remove_favorite(self, user_id: str, business_id: str) -> None:
        with self.locks.hold(f"favorite:{user_id}:{business_id}"):
            with self.store.session() as db:
                favorites_service.remove_favorite(db, user_id=user_id, business_id=business_id)

    def get_favorites_by_user(self, user_id: str) -> list[BusinessResponse]:
        with self.store.session() as db:
            return self._business_responses(db, favorites_service.list_favorites(db, user_id=user_id))

    # Demo data

    def generate_sample_data(self) -> int:
        """Seed the demo dataset into an empty store; no-op when businesses exist."""
        with self.store.session() as db:
            existing = crud.count_businesses(db)
            if existing > 0:
                logger.info("Businesses already present (%s). Seeding skipped.", existing)
                return 0
            return seed_sample_data(db, user_id=self.settings.local_user_id, now=self.clock())
