"""
Ranking Queries

Read-only access to the live generation of each ranked set.
"""
from typing import Callable, Optional

from config import settings
from constants import RankedSetName
from database import get_session
from repositories import RankedSetRepository
from .models import RankedEntryData


class RankingQueries:
    """Query surface for the discovery feed."""

    def __init__(self, session_factory: Callable = None):
        self.session_factory = session_factory or get_session

    async def _read(self, set_name: RankedSetName, limit: int, category: Optional[str] = None) -> list[RankedEntryData]:
        if limit <= 0:
            return []
        async with self.session_factory() as session:
            rows = await RankedSetRepository(session).get_current(set_name.value, limit, category)
            return [RankedEntryData.from_model(row) for row in rows]

    async def get_top_rated(self, limit: int = settings.FEED_DEFAULT_LIMIT, category: Optional[str] = None) -> list[RankedEntryData]:
        return await self._read(RankedSetName.TOP_RATED, limit, category)

    async def get_trending(self, limit: int = settings.FEED_DEFAULT_LIMIT, category: Optional[str] = None) -> list[RankedEntryData]:
        return await self._read(RankedSetName.TRENDING, limit, category)

    async def get_new(self, limit: int = settings.FEED_DEFAULT_LIMIT, category: Optional[str] = None) -> list[RankedEntryData]:
        return await self._read(RankedSetName.NEW, limit, category)

    async def get_quality_fallback(self, limit: int = settings.FEED_DEFAULT_LIMIT) -> list[RankedEntryData]:
        return await self._read(RankedSetName.QUALITY_FALLBACK, limit)

    async def get_trending_feed(
        self,
        limit: int = settings.FEED_DEFAULT_LIMIT,
        category: Optional[str] = None
    ) -> list[RankedEntryData]:
        """
        Trending, padded so the feed is never thin.

        1. Trending (real trending always comes first)
        2. Quality fallback, unfiltered by category
        3. New & notable
        A business appears at most once.
        """
        feed = await self.get_trending(limit, category)
        used_ids = {entry.business_id for entry in feed}

        if len(feed) < limit:
            # Over-fetch so skipped duplicates still leave enough to fill the gap
            need = limit - len(feed)
            for source in (
                await self.get_quality_fallback(limit + need),
                await self.get_new(limit + need, category),
            ):
                for entry in source:
                    if len(feed) >= limit:
                        break
                    if entry.business_id not in used_ids:
                        used_ids.add(entry.business_id)
                        feed.append(entry)
                if len(feed) >= limit:
                    break

        return feed

    async def get_set_status(self) -> dict[str, dict]:
        """Live generation, size and last error of every ranked set."""
        async with self.session_factory() as session:
            versions = await RankedSetRepository(session).get_versions()
            status = {name.value: None for name in RankedSetName}
            for version in versions:
                status[version.set_name] = {
                    "generation": version.current_generation,
                    "entry_count": version.entry_count,
                    "refreshed_at": version.refreshed_at.isoformat() if version.refreshed_at else None,
                    "last_error": version.last_error,
                    "last_error_at": version.last_error_at.isoformat() if version.last_error_at else None,
                }
            return status
