"""
Business Stats Repository

Upserts and reads the derived per-business stats row.
"""
from datetime import datetime
from typing import Optional

from sqlalchemy.dialects.sqlite import insert

from database.models import BusinessStats
from .base import BaseRepository


class BusinessStatsRepository(BaseRepository[BusinessStats]):
    """Repository for business stats operations."""

    model = BusinessStats

    async def upsert_stats(
        self,
        business_id: str,
        total_reviews: int,
        average_rating: float,
        rating_distribution: dict,
        percentiles: dict,
        raw_tag_scores: dict,
        updated_at: datetime = None,
    ) -> None:
        """
        Insert or replace the stats row for a business.

        A single INSERT ... ON CONFLICT statement, so the row is written
        atomically and concurrent writers resolve to last-write-wins.
        """
        values = dict(
            business_id=business_id,
            total_reviews=total_reviews,
            average_rating=average_rating,
            rating_distribution=rating_distribution,
            percentiles=percentiles,
            raw_tag_scores=raw_tag_scores,
            updated_at=updated_at or self.now(),
        )
        stmt = insert(BusinessStats).values(**values)
        stmt = stmt.on_conflict_do_update(
            index_elements=[BusinessStats.business_id],
            set_={key: stmt.excluded[key] for key in values if key != "business_id"},
        )
        await self.session.execute(stmt)

    async def get_for_business(self, business_id: str) -> Optional[BusinessStats]:
        """Get the stats row for a business, if it has been computed."""
        return await self.session.get(BusinessStats, business_id, populate_existing=True)
