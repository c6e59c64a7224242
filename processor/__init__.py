"""
Processor package for the Business Ranking Service.

Two layers:
- Stats: per-business review statistics and reputation percentiles
- Ranker: top rated / trending / new / quality fallback ranked sets

Main entry points: StatsAggregator, RankingRefresher, RankingQueries
"""

from .stats import StatsAggregator, BusinessStatsResult, compute_business_stats
from .ranker import (
    RankingRefresher,
    RankingQueries,
    RankedEntryData,
    RefreshReport,
)

__all__ = [
    # Stats
    "StatsAggregator",
    "BusinessStatsResult",
    "compute_business_stats",
    # Ranker
    "RankingRefresher",
    "RankingQueries",
    "RankedEntryData",
    "RefreshReport",
]
