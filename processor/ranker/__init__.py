"""
Ranker Module

Builds, refreshes and serves the four ranked sets
(top rated, trending, new & notable, quality fallback).

Components:
- Builders: pure functions from a RankingSnapshot to ranked entries
- RankingRefresher: snapshot -> build -> atomic swap, per set
- RankingQueries: read surface over the live generation of each set
- Score formulas and thresholds
"""

from .models import (
    BusinessSnapshot,
    RankingSnapshot,
    RankedEntryData,
    SetRefreshResult,
    RefreshReport,
)
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
from .builder import (
    BUILDERS,
    build_top_rated,
    build_trending,
    build_new,
    build_quality_fallback,
)
from .refresher import RankingRefresher
from .queries import RankingQueries


__all__ = [
    # Main classes
    "RankingRefresher",
    "RankingQueries",
    # Models
    "BusinessSnapshot",
    "RankingSnapshot",
    "RankedEntryData",
    "SetRefreshResult",
    "RefreshReport",
    # Config
    "RANKED_SET_SIZE",
    "TOP_RATED_MIN_REVIEWS",
    "TOP_RATED_MIN_RATING",
    "TRENDING_MIN_AGE_DAYS",
    "TRENDING_MIN_RECENT_REVIEWS",
    "NEW_BUSINESS_WINDOW_DAYS",
    "top_rated_score",
    "trending_score",
    "quality_score",
    # Builders
    "BUILDERS",
    "build_top_rated",
    "build_trending",
    "build_new",
    "build_quality_fallback",
]
