"""
Ranking Builder

Pure functions that turn one RankingSnapshot into the four ranked sets.
None of them touch the database; the refresher persists their output.
"""
from datetime import datetime, timedelta
from typing import Callable, Optional

from constants import RankedSetName
from .models import BusinessSnapshot, RankingSnapshot, RankedEntryData
from .config import (
    RANKED_SET_SIZE,
    TOP_RATED_MIN_REVIEWS,
    TOP_RATED_MIN_RATING,
    TRENDING_MIN_AGE_DAYS,
    TRENDING_MIN_RECENT_REVIEWS,
    NEW_BUSINESS_WINDOW_DAYS,
    top_rated_score,
    trending_score,
    quality_score,
)


def _entry(business: BusinessSnapshot, score: Optional[float], **extras) -> RankedEntryData:
    return RankedEntryData(
        business_id=business.id,
        name=business.name,
        category=business.category,
        total_reviews=business.total_reviews,
        average_rating=business.average_rating,
        score=round(score, 4) if score is not None else None,
        slug=business.slug,
        location=business.location,
        image_url=business.image_url,
        verified=business.verified,
        price_range=business.price_range,
        latitude=business.latitude,
        longitude=business.longitude,
        created_at=business.created_at,
        percentiles=business.percentiles,
        **extras,
    )


def build_top_rated(
    snapshot: RankingSnapshot,
    limit: int = RANKED_SET_SIZE,
    min_reviews: int = TOP_RATED_MIN_REVIEWS,
    min_rating: float = TOP_RATED_MIN_RATING,
) -> list[RankedEntryData]:
    """
    Top Rated: enough reviews and a high enough average.

    Sorted by average_rating * ln(total_reviews + 1), then average rating,
    then review count.
    """
    scored = [
        (top_rated_score(b.average_rating, b.total_reviews), b)
        for b in snapshot.businesses
        if b.total_reviews >= min_reviews and b.average_rating >= min_rating
    ]
    scored.sort(key=lambda item: (-item[0], -item[1].average_rating, -item[1].total_reviews, item[1].id))
    return [_entry(b, score) for score, b in scored[:limit]]


def build_trending(
    snapshot: RankingSnapshot,
    limit: int = RANKED_SET_SIZE,
    min_age_days: int = TRENDING_MIN_AGE_DAYS,
    min_recent_reviews: int = TRENDING_MIN_RECENT_REVIEWS,
) -> list[RankedEntryData]:
    """
    Trending: established businesses with recent review activity.

    Businesses younger than min_age_days are skipped. Score weights the
    7-day count 3x, the 30-day count 1x and the 30-day average rating 5x.
    """
    cutoff = snapshot.taken_at - timedelta(days=min_age_days)
    scored = []
    for b in snapshot.businesses:
        if b.created_at > cutoff or b.reviews_long_window < min_recent_reviews:
            continue
        score = trending_score(b.reviews_short_window, b.reviews_long_window, b.recent_avg_rating)
        scored.append((score, b))

    scored.sort(key=lambda item: (
        -item[0],
        -(item[1].recent_avg_rating or 0.0),
        -item[1].reviews_long_window,
        item[1].id,
    ))
    return [
        _entry(
            b,
            score,
            recent_reviews_7d=b.reviews_short_window,
            recent_reviews_30d=b.reviews_long_window,
            recent_avg_rating=round(b.recent_avg_rating, 2) if b.recent_avg_rating is not None else None,
        )
        for score, b in scored[:limit]
    ]


def build_new(
    snapshot: RankingSnapshot,
    limit: int = RANKED_SET_SIZE,
    window_days: int = NEW_BUSINESS_WINDOW_DAYS,
) -> list[RankedEntryData]:
    """New & Notable: created within the window, newest first. No score."""
    cutoff = snapshot.taken_at - timedelta(days=window_days)
    recent = [b for b in snapshot.businesses if b.created_at >= cutoff]
    recent.sort(key=lambda b: (b.created_at, b.id), reverse=True)
    return [
        _entry(b, None, days_old=max((snapshot.taken_at - b.created_at).days, 0))
        for b in recent[:limit]
    ]


def build_quality_fallback(
    snapshot: RankingSnapshot,
    limit: int = RANKED_SET_SIZE,
) -> list[RankedEntryData]:
    """
    Quality Fallback: presentable businesses to pad thin feeds.

    Verification and profile completeness outweigh popularity.
    """
    scored = [
        (
            quality_score(b.verified, b.has_description, b.has_image, b.total_reviews, b.average_rating),
            b,
        )
        for b in snapshot.businesses
    ]
    scored.sort(key=lambda item: (-item[0], -item[1].total_reviews, -item[1].created_at.timestamp(), item[1].id))
    return [_entry(b, score) for score, b in scored[:limit]]


BUILDERS: dict[str, Callable[..., list[RankedEntryData]]] = {
    RankedSetName.TOP_RATED.value: build_top_rated,
    RankedSetName.TRENDING.value: build_trending,
    RankedSetName.NEW.value: build_new,
    RankedSetName.QUALITY_FALLBACK.value: build_quality_fallback,
}
