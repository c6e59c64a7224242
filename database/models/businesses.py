"""
Business and Review Models

Source tables owned by the business and review subsystems.
The ranking core only reads them.
"""
from datetime import datetime
from typing import Optional, List

from sqlalchemy import String, Float, Integer, Boolean, Text, JSON, ForeignKey, Index
from sqlalchemy.orm import Mapped, mapped_column, relationship

from constants import BusinessStatus
from .base import Base, TimestampMixin


class Business(Base, TimestampMixin):
    """
    A listed business.

    Only rows with status 'active' are ever ranked or used as
    category peers.
    """
    __tablename__ = "businesses"

    # Primary key
    id: Mapped[str] = mapped_column(String(50), primary_key=True)

    # Identity / display
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    slug: Mapped[Optional[str]] = mapped_column(String(200), nullable=True, unique=True)
    category: Mapped[Optional[str]] = mapped_column(String(100), nullable=True, index=True)
    location: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    image_url: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    price_range: Mapped[Optional[str]] = mapped_column(String(10), nullable=True)

    # Status
    verified: Mapped[bool] = mapped_column(Boolean, default=False)
    status: Mapped[str] = mapped_column(String(20), default=BusinessStatus.ACTIVE.value, index=True)

    # Geo
    lat: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    lng: Mapped[Optional[float]] = mapped_column(Float, nullable=True)

    # Relationships
    reviews: Mapped[List["Review"]] = relationship(
        "Review",
        back_populates="business",
        cascade="all, delete-orphan"
    )

    @property
    def has_description(self) -> bool:
        return bool(self.description and self.description.strip())

    @property
    def has_image(self) -> bool:
        return bool(self.image_url and self.image_url.strip())

    @property
    def is_active(self) -> bool:
        return self.status == BusinessStatus.ACTIVE.value


class Review(Base, TimestampMixin):
    """
    A customer review.

    Tags come from a small controlled vocabulary
    (see constants.REVIEW_TAG_METRICS).
    """
    __tablename__ = "reviews"

    # Primary key
    id: Mapped[str] = mapped_column(String(50), primary_key=True)

    # Foreign key
    business_id: Mapped[str] = mapped_column(
        String(50),
        ForeignKey("businesses.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    user_id: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)

    # Content
    rating: Mapped[int] = mapped_column(Integer, nullable=False)  # 1-5
    tags: Mapped[Optional[List[str]]] = mapped_column(JSON, nullable=True)
    content: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # Relationships
    business: Mapped["Business"] = relationship("Business", back_populates="reviews")

    __table_args__ = (
        Index('idx_reviews_business_created', 'business_id', 'created_at'),
    )
