from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from bizboost.db.base import Base


class Favorite(Base):
    __tablename__ = "favorites"

    # Surrogate key only orders favorites; identity is (user_id, business_id).
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    business_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("businesses.id", ondelete="CASCADE"), nullable=False, index=True
    )

    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.utcnow)

    business: Mapped["Business"] = relationship(back_populates="favorites")

    __table_args__ = (
        UniqueConstraint("user_id", "business_id", name="uq_favorites_user_business"),
    )
