"""
Business Repository

Read access to business rows for stats recomputation and ranking.
"""
from datetime import datetime
from typing import Optional, Sequence

from sqlalchemy import select, distinct

from constants import BusinessStatus
from database.models import Business, BusinessStats
from .base import BaseRepository


class BusinessRepository(BaseRepository[Business]):
    """Repository for business operations."""

    model = Business

    async def get_by_category(self, category: Optional[str]) -> Sequence[Business]:
        """Get all businesses in a category (any status). None means uncategorized."""
        stmt = select(Business)
        if category is None:
            stmt = stmt.where(Business.category.is_(None))
        else:
            stmt = stmt.where(Business.category == category)
        result = await self.session.execute(stmt.order_by(Business.id))
        return result.scalars().all()

    async def get_categories(self) -> list[Optional[str]]:
        """Get every distinct category, including None for uncategorized rows."""
        stmt = select(distinct(Business.category))
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def get_ranking_candidates(self) -> Sequence[tuple[Business, Optional[BusinessStats]]]:
        """
        Get all active businesses with their stats row (if any).

        One statement, so every business is paired with exactly one
        stats row as it stood when the query ran.
        """
        stmt = (
            select(Business, BusinessStats)
            .outerjoin(BusinessStats, BusinessStats.business_id == Business.id)
            .where(Business.status == BusinessStatus.ACTIVE.value)
            .order_by(Business.id)
        )
        result = await self.session.execute(stmt)
        return [(row[0], row[1]) for row in result.all()]

    async def create_business(
        self,
        name: str,
        category: str = None,
        business_id: str = None,
        slug: str = None,
        location: str = None,
        description: str = None,
        image_url: str = None,
        price_range: str = None,
        verified: bool = False,
        status: str = BusinessStatus.ACTIVE.value,
        lat: float = None,
        lng: float = None,
        created_at: datetime = None,
    ) -> Business:
        """Create a business row (used for seeding and tests)."""
        now = self.now()
        business = Business(
            id=business_id or self.generate_id("biz"),
            name=name,
            slug=slug,
            category=category,
            location=location,
            description=description,
            image_url=image_url,
            price_range=price_range,
            verified=verified,
            status=status,
            lat=lat,
            lng=lng,
            created_at=created_at or now,
            updated_at=now,
        )
        return await self.add(business)
