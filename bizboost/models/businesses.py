from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import Boolean, DateTime, Float, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from bizboost.db.base import Base


class Business(Base):
    __tablename__ = "businesses"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name: Mapped[str] = mapped_column(String(200), nullable=False, index=True)
    # Open set: "Food", "Retail", "Services", "Entertainment", ...
    category: Mapped[str] = mapped_column(String(80), nullable=False, index=True)
    description: Mapped[str] = mapped_column(String(1000), nullable=False, default="")
    address: Mapped[str] = mapped_column(String(250), nullable=False, default="")
    phone: Mapped[str] = mapped_column(String(40), nullable=False, default="")
    website: Mapped[str | None] = mapped_column(String(250), nullable=True)

    # Derived; written only by services.ratings / services.deals.
    average_rating: Mapped[float] = mapped_column(Float, nullable=False, default=0.0, index=True)
    review_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    has_deals: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.utcnow)

    reviews: Mapped[list["Review"]] = relationship(back_populates="business", cascade="all, delete-orphan")
    deals: Mapped[list["Deal"]] = relationship(back_populates="business", cascade="all, delete-orphan")
    favorites: Mapped[list["Favorite"]] = relationship(back_populates="business", cascade="all, delete-orphan")


Index("ix_businesses_category_name", Business.category, Business.name)
