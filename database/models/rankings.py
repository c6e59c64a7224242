"""
Ranked Set Models

Denormalized snapshots of the four ranked sets plus the pointer table
that marks which generation of each set is live.
"""
from datetime import datetime
from typing import Optional

from sqlalchemy import String, Float, Integer, Boolean, DateTime, Text, JSON, Index, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base


class RankedEntry(Base):
    """
    One business in one generation of a ranked set.

    Rows are written once per refresh and never patched. Readers only
    see rows whose generation matches RankedSetVersion.current_generation.
    """
    __tablename__ = "ranked_entries"

    # Primary key
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    # Set membership
    set_name: Mapped[str] = mapped_column(String(30), nullable=False)
    generation: Mapped[int] = mapped_column(Integer, nullable=False)
    position: Mapped[int] = mapped_column(Integer, nullable=False)

    # Business identity / display
    business_id: Mapped[str] = mapped_column(String(50), nullable=False)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    slug: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    category: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    location: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    image_url: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    verified: Mapped[bool] = mapped_column(Boolean, default=False)
    price_range: Mapped[Optional[str]] = mapped_column(String(10), nullable=True)
    latitude: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    longitude: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    created_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)

    # Stats for display
    total_reviews: Mapped[int] = mapped_column(Integer, default=0)
    average_rating: Mapped[float] = mapped_column(Float, default=0.0)
    percentiles: Mapped[Optional[dict]] = mapped_column(JSON, nullable=True)

    # Scoring
    score: Mapped[Optional[float]] = mapped_column(Float, nullable=True)  # NULL for the new set
    recent_reviews_7d: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    recent_reviews_30d: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    recent_avg_rating: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    days_old: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

    last_refreshed: Mapped[datetime] = mapped_column(DateTime, nullable=False)

    __table_args__ = (
        # One row per slot; a second writer of the same generation fails on insert
        UniqueConstraint('set_name', 'generation', 'position', name='uq_ranked_entries_slot'),
        Index('idx_ranked_entries_category', 'set_name', 'generation', 'category'),
    )


class RankedSetVersion(Base):
    """
    Live-generation pointer for one ranked set.

    Flipping current_generation is the atomic swap: a refresh writes a
    complete new generation first, then moves the pointer.
    """
    __tablename__ = "ranked_set_versions"

    set_name: Mapped[str] = mapped_column(String(30), primary_key=True)
    current_generation: Mapped[int] = mapped_column(Integer, default=0)
    entry_count: Mapped[int] = mapped_column(Integer, default=0)
    refreshed_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)

    # Most recent failed rebuild (kept until the next success)
    last_error: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    last_error_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)


class RefreshLease(Base):
    """
    Cross-process claim on the ranking refresh.

    The API and the scheduler run separate refreshers; whoever sets
    holder first (or finds the previous claim expired) refreshes, the
    other skips.
    """
    __tablename__ = "refresh_leases"

    name: Mapped[str] = mapped_column(String(50), primary_key=True)
    holder: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    acquired_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    expires_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
