"""
Stats Aggregator

Recomputes a business's review statistics and tag-based reputation
percentiles, then upserts its business_stats row.

Triggered by the review subsystem after a review is created, updated
or deleted, and lazily before the first read of a business's stats.
"""
import asyncio
import weakref
from datetime import datetime
from typing import Callable, Mapping, Optional, Sequence

from loguru import logger

from database import get_session
from exceptions import NotFound
from repositories import BusinessRepository, ReviewRepository, BusinessStatsRepository
from utils import round_half_up
from .models import BusinessStatsResult
from .percentile import (
    CategoryRanker,
    raw_tag_scores,
    category_percentiles,
    blend_percentile,
    neutral_scores,
)


STAR_VALUES = ("1", "2", "3", "4", "5")


def compute_business_stats(
    business_id: str,
    reviews: Sequence[tuple[int, list]],
    rank_in_category: Callable[[Mapping[str, float]], Mapping[str, int]],
    computed_at: datetime = None,
) -> BusinessStatsResult:
    """
    Pure stats computation for one business.

    Args:
        business_id: Business being computed
        reviews: (rating, tags) per review of this business
        rank_in_category: Maps this business's raw tag scores to category percentiles
        computed_at: Timestamp stamped on the result

    Returns:
        BusinessStatsResult; zero reviews gives average 0, an empty
        histogram and every percentile at 50
    """
    total = len(reviews)
    distribution = {star: 0 for star in STAR_VALUES}
    for rating, _ in reviews:
        key = str(rating)
        if key in distribution:
            distribution[key] += 1

    raw_scores = raw_tag_scores([tags for _, tags in reviews])

    if total == 0:
        return BusinessStatsResult(
            business_id=business_id,
            total_reviews=0,
            average_rating=0.0,
            rating_distribution=distribution,
            percentiles=neutral_scores(),
            raw_tag_scores=raw_scores,
            updated_at=computed_at,
        )

    average = round_half_up(sum(rating for rating, _ in reviews) / total, 2)
    category_pcts = rank_in_category(raw_scores)
    percentiles = {
        metric: blend_percentile(raw_scores[metric], category_pcts[metric])
        for metric in raw_scores
    }

    return BusinessStatsResult(
        business_id=business_id,
        total_reviews=total,
        average_rating=average,
        rating_distribution=distribution,
        percentiles=percentiles,
        raw_tag_scores=raw_scores,
        updated_at=computed_at,
    )


class StatsAggregator:
    """
    Maintains the business_stats table.

    Recomputations of the same business are serialized in-process; the
    upsert itself is a single statement, so any remaining overlap is
    last-write-wins over identical inputs. A business's lock lives only
    while some recompute holds or waits on it.
    """

    def __init__(self, session_factory: Callable = None):
        """
        Args:
            session_factory: Async context manager yielding a session
                             (defaults to database.get_session)
        """
        self.session_factory = session_factory or get_session
        self._locks: weakref.WeakValueDictionary[str, asyncio.Lock] = weakref.WeakValueDictionary()

    async def recompute_stats(self, business_id: str) -> BusinessStatsResult:
        """
        Recompute and upsert stats for one business.

        Raises:
            NotFound: business does not exist (nothing is written)
        """
        async with self._lock_for(business_id):
            async with self.session_factory() as session:
                business = await BusinessRepository(session).get(business_id)
                if business is None:
                    raise NotFound("Business", business_id)

                review_repo = ReviewRepository(session)
                reviews = await review_repo.get_ratings_and_tags(business_id)

                peer_scores = []
                if reviews and business.category is not None:
                    peer_tags = await review_repo.get_peer_tags(business.category, business_id)
                    peer_scores = [raw_tag_scores(tag_lists) for tag_lists in peer_tags.values()]

                result = compute_business_stats(
                    business_id,
                    reviews,
                    lambda own: category_percentiles(own, peer_scores),
                    computed_at=datetime.now(),
                )
                await self._save(session, result)

        logger.debug(
            f"Recomputed stats for {business_id}: {result.total_reviews} reviews, "
            f"avg={result.average_rating}, peers={len(peer_scores)}"
        )
        return result

    async def handle_review_changed(self, business_id: str) -> BusinessStatsResult:
        """
        Entry point for "review changed for business X" events.

        NotFound propagates to the caller, which decides whether to retry.
        """
        logger.info(f"Review changed for business {business_id}, recomputing stats")
        return await self.recompute_stats(business_id)

    async def get_stats(self, business_id: str) -> BusinessStatsResult:
        """Get stored stats, computing them first if the row does not exist yet."""
        async with self.session_factory() as session:
            row = await BusinessStatsRepository(session).get_for_business(business_id)
            if row is not None:
                return BusinessStatsResult.from_model(row)

        logger.debug(f"No stats row for {business_id}, computing lazily")
        return await self.recompute_stats(business_id)

    async def recompute_category(self, category: Optional[str]) -> list[BusinessStatsResult]:
        """
        Recompute every business in a category in one pass.

        Loads the category's reviews once, ranks all raw scores with a
        single sort per metric, then upserts each business. Yields the
        same rows as calling recompute_stats() for each business.
        """
        computed_at = datetime.now()
        results = []

        async with self.session_factory() as session:
            businesses = await BusinessRepository(session).get_by_category(category)
            reviews_by_business = await ReviewRepository(session).get_category_reviews(category)

            ranker = None
            if category is not None:
                member_scores = {
                    business.id: raw_tag_scores([tags for _, tags in reviews_by_business[business.id]])
                    for business in businesses
                    if business.is_active and reviews_by_business.get(business.id)
                }
                ranker = CategoryRanker(member_scores)

            for business in businesses:
                if ranker is None:
                    rank = lambda own: neutral_scores()
                else:
                    rank = lambda own, business_id=business.id: ranker.percentiles(own, business_id)

                result = compute_business_stats(
                    business.id,
                    reviews_by_business.get(business.id, []),
                    rank,
                    computed_at=computed_at,
                )
                await self._save(session, result)
                results.append(result)

        logger.info(f"Recomputed stats for {len(results)} businesses in category '{category}'")
        return results

    async def recompute_all(self) -> int:
        """Recompute stats for every business, category by category."""
        async with self.session_factory() as session:
            categories = await BusinessRepository(session).get_categories()

        total = 0
        for category in categories:
            total += len(await self.recompute_category(category))

        logger.info(f"Recomputed stats for {total} businesses across {len(categories)} categories")
        return total

    def _lock_for(self, business_id: str) -> asyncio.Lock:
        lock = self._locks.get(business_id)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[business_id] = lock
        return lock

    @staticmethod
    async def _save(session, result: BusinessStatsResult) -> None:
        await BusinessStatsRepository(session).upsert_stats(
            business_id=result.business_id,
            total_reviews=result.total_reviews,
            average_rating=result.average_rating,
            rating_distribution=result.rating_distribution,
            percentiles=result.percentiles,
            raw_tag_scores=result.raw_tag_scores,
            updated_at=result.updated_at,
        )
