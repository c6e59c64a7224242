"""
Stats Module

Per-business review statistics and category-relative reputation
percentiles.

Components:
- StatsAggregator: recompute / lazily read / batch rebuild business_stats
- compute_business_stats: pure stats computation
- Percentile ranking helpers (raw tag scores, category percentiles, blend)
"""

from .models import BusinessStatsResult
from .percentile import (
    METRICS,
    NEUTRAL_PERCENTILE,
    MIN_COMPARISON_SET_SIZE,
    CategoryRanker,
    raw_tag_scores,
    category_percentile,
    category_percentiles,
    blend_percentile,
    neutral_scores,
)
from .aggregator import StatsAggregator, compute_business_stats


__all__ = [
    # Main classes
    "StatsAggregator",
    "CategoryRanker",
    # Models
    "BusinessStatsResult",
    # Functions
    "compute_business_stats",
    "raw_tag_scores",
    "category_percentile",
    "category_percentiles",
    "blend_percentile",
    "neutral_scores",
    # Constants
    "METRICS",
    "NEUTRAL_PERCENTILE",
    "MIN_COMPARISON_SET_SIZE",
]
