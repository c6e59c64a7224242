"""
Constants package for the Business Ranking Service.

Contains shared enums and the review tag vocabulary.
"""

from .enums import (
    BusinessStatus,
    RankedSetName,
    ReputationMetric,
    REVIEW_TAG_METRICS,
)

__all__ = [
    "BusinessStatus",
    "RankedSetName",
    "ReputationMetric",
    "REVIEW_TAG_METRICS",
]
