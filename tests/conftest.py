from datetime import datetime, timedelta

import pytest

from database import init_engine, close_engine, create_tables, get_session
from repositories import BusinessRepository, ReviewRepository


NOW = datetime(2026, 6, 1, 12, 0, 0)


@pytest.fixture
def now():
    return NOW


@pytest.fixture
async def db(tmp_path):
    """Fresh file-backed SQLite database per test."""
    await close_engine()
    await init_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    await create_tables()
    yield
    await close_engine()


class Seeder:
    """Writes source rows the way the business and review subsystems would."""

    def __init__(self, now: datetime):
        self.now = now
        self._counter = 0

    async def business(self, business_id: str = None, category: str = "cafe", age_days: int = 60, **kwargs):
        self._counter += 1
        business_id = business_id or f"biz-{self._counter}"
        async with get_session() as session:
            await BusinessRepository(session).create_business(
                name=kwargs.pop("name", f"Business {business_id}"),
                category=category,
                business_id=business_id,
                created_at=self.now - timedelta(days=age_days),
                **kwargs,
            )
        return business_id

    async def review(self, business_id: str, rating: int = 5, tags=(), age_days: float = 40):
        async with get_session() as session:
            await ReviewRepository(session).create_review(
                business_id=business_id,
                rating=rating,
                tags=list(tags),
                created_at=self.now - timedelta(days=age_days),
            )

    async def reviews(self, business_id: str, ratings, tags_per_review=None, age_days: float = 40):
        tags_per_review = tags_per_review or [()] * len(ratings)
        for rating, tags in zip(ratings, tags_per_review):
            await self.review(business_id, rating, tags, age_days)


@pytest.fixture
def seed(db, now):
    return Seeder(now)
