"""
Review Repository

Review aggregates needed by the stats aggregator and the trending scorer.
"""
from collections import defaultdict
from datetime import datetime
from typing import Optional, List, Sequence

from sqlalchemy import select, func, case

from constants import BusinessStatus
from database.models import Business, Review
from .base import BaseRepository


class ReviewRepository(BaseRepository[Review]):
    """Repository for review operations."""

    model = Review

    async def get_ratings_and_tags(self, business_id: str) -> List[tuple[int, list]]:
        """Get (rating, tags) for every review of a business."""
        stmt = select(Review.rating, Review.tags).where(Review.business_id == business_id)
        result = await self.session.execute(stmt)
        return [(rating, tags or []) for rating, tags in result.all()]

    async def get_peer_tags(
        self,
        category: str,
        exclude_business_id: str
    ) -> dict[str, List[list]]:
        """
        Get review tags of the other active businesses in a category.

        Businesses without reviews produce no rows, so they never enter
        the comparison set.

        Returns:
            Dict mapping business_id to a list of tag lists (one per review)
        """
        stmt = (
            select(Review.business_id, Review.tags)
            .join(Business, Business.id == Review.business_id)
            .where(
                Business.category == category,
                Business.status == BusinessStatus.ACTIVE.value,
                Business.id != exclude_business_id,
            )
        )
        result = await self.session.execute(stmt)

        grouped = defaultdict(list)
        for business_id, tags in result.all():
            grouped[business_id].append(tags or [])
        return dict(grouped)

    async def get_category_reviews(self, category: Optional[str]) -> dict[str, List[tuple[int, list]]]:
        """
        Get (rating, tags) for every review of every business in a category.

        Used by the batch recompute; includes inactive businesses so their
        own stats are refreshed too.
        """
        stmt = select(Review.business_id, Review.rating, Review.tags).join(
            Business, Business.id == Review.business_id
        )
        if category is None:
            stmt = stmt.where(Business.category.is_(None))
        else:
            stmt = stmt.where(Business.category == category)
        result = await self.session.execute(stmt)

        grouped = defaultdict(list)
        for business_id, rating, tags in result.all():
            grouped[business_id].append((rating, tags or []))
        return dict(grouped)

    async def get_recent_activity(
        self,
        short_window_start: datetime,
        long_window_start: datetime
    ) -> dict[str, tuple[int, int, Optional[float]]]:
        """
        Count recent reviews per business.

        Returns:
            Dict mapping business_id to
            (reviews in short window, reviews in long window, average rating in long window)
        """
        stmt = (
            select(
                Review.business_id,
                func.sum(case((Review.created_at >= short_window_start, 1), else_=0)),
                func.count(Review.id),
                func.avg(Review.rating),
            )
            .where(Review.created_at >= long_window_start)
            .group_by(Review.business_id)
        )
        result = await self.session.execute(stmt)
        return {
            business_id: (int(short_count or 0), int(long_count or 0), float(avg) if avg is not None else None)
            for business_id, short_count, long_count, avg in result.all()
        }

    async def create_review(
        self,
        business_id: str,
        rating: int,
        tags: Sequence[str] = None,
        user_id: str = None,
        content: str = None,
        created_at: datetime = None,
    ) -> Review:
        """Create a review row (used for seeding and tests)."""
        now = self.now()
        review = Review(
            id=self.generate_id("rev"),
            business_id=business_id,
            user_id=user_id,
            rating=rating,
            tags=list(tags or []),
            content=content,
            created_at=created_at or now,
            updated_at=now,
        )
        return await self.add(review)
