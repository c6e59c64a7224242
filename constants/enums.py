"""
Shared Enums

Application-wide enums used across the stats and ranking layers.
"""
from enum import Enum


class BusinessStatus(str, Enum):
    """Lifecycle status of a business. Only ACTIVE businesses are ranked."""
    ACTIVE = "active"
    INACTIVE = "inactive"
    PENDING = "pending"


class RankedSetName(str, Enum):
    """The four periodically rebuilt ranked sets."""
    TOP_RATED = "top_rated"
    TRENDING = "trending"
    NEW = "new"
    QUALITY_FALLBACK = "quality_fallback"


class ReputationMetric(str, Enum):
    """Tag-derived reputation metrics stored in BusinessStats.percentiles."""
    PUNCTUALITY = "punctuality"
    FRIENDLINESS = "friendliness"
    TRUSTWORTHINESS = "trustworthiness"
    COST_EFFECTIVENESS = "cost_effectiveness"


# Review tag -> metric it feeds
REVIEW_TAG_METRICS = {
    "On Time": ReputationMetric.PUNCTUALITY,
    "Friendly": ReputationMetric.FRIENDLINESS,
    "Trustworthy": ReputationMetric.TRUSTWORTHINESS,
    "Good Value": ReputationMetric.COST_EFFECTIVENESS,
}
