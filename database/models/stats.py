"""
Business Stats Model

Derived per-business review statistics and reputation percentiles.
"""
from datetime import datetime
from typing import Optional

from sqlalchemy import String, Float, Integer, DateTime, JSON, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base


class BusinessStats(Base):
    """
    One row per business, rebuilt by the stats aggregator.

    Never edited by hand: every column is a function of the business's
    category and the reviews of the business and its category peers.
    """
    __tablename__ = "business_stats"

    # Primary key (one row per business)
    business_id: Mapped[str] = mapped_column(
        String(50),
        ForeignKey("businesses.id", ondelete="CASCADE"),
        primary_key=True
    )

    # Review aggregates
    total_reviews: Mapped[int] = mapped_column(Integer, default=0)
    average_rating: Mapped[float] = mapped_column(Float, default=0.0)
    rating_distribution: Mapped[dict] = mapped_column(JSON, nullable=False)  # {"1": n, ..., "5": n}

    # Reputation
    percentiles: Mapped[dict] = mapped_column(JSON, nullable=False)  # metric -> 0..100
    raw_tag_scores: Mapped[Optional[dict]] = mapped_column(JSON, nullable=True)  # metric -> % of reviews with tag

    # Timestamp
    updated_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)

    def __repr__(self) -> str:
        return f"<BusinessStats(business_id={self.business_id}, total_reviews={self.total_reviews})>"
