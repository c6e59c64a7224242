"""
Configuration and scoring formulas for the ranked sets.

Contains:
- Eligibility thresholds (pulled from settings)
- Score weights
- Score functions for top rated, trending and quality fallback
"""
import math
from datetime import timedelta

from config import settings


# ============================================
# SET SIZE / REFRESH LEASE
# ============================================

RANKED_SET_SIZE = settings.RANKING_SET_SIZE

# Shared by every refresher (API and scheduler processes alike)
REFRESH_LEASE_NAME = "ranking_refresh"
REFRESH_LEASE_TTL = timedelta(seconds=settings.RANKING_REFRESH_LEASE_SECONDS)


# ============================================
# TOP RATED
# ============================================

TOP_RATED_MIN_REVIEWS = settings.TOP_RATED_MIN_REVIEWS
TOP_RATED_MIN_RATING = settings.TOP_RATED_MIN_RATING


# ============================================
# TRENDING
# ============================================

TRENDING_MIN_AGE_DAYS = settings.TRENDING_MIN_AGE_DAYS        # skip launch-day noise
TRENDING_MIN_RECENT_REVIEWS = settings.TRENDING_MIN_RECENT_REVIEWS
TRENDING_SHORT_WINDOW_DAYS = settings.TRENDING_SHORT_WINDOW_DAYS
TRENDING_LONG_WINDOW_DAYS = settings.TRENDING_LONG_WINDOW_DAYS

WEIGHT_SHORT_WINDOW_REVIEWS = 3
WEIGHT_LONG_WINDOW_REVIEWS = 1
WEIGHT_RECENT_RATING = 5


# ============================================
# NEW & NOTABLE
# ============================================

NEW_BUSINESS_WINDOW_DAYS = settings.NEW_BUSINESS_WINDOW_DAYS


# ============================================
# QUALITY FALLBACK
# ============================================

WEIGHT_VERIFIED = 2.0
WEIGHT_DESCRIPTION = 1.0
WEIGHT_IMAGE = 1.0
WEIGHT_AVERAGE_RATING = 0.5


# ============================================
# SCORE FUNCTIONS
# ============================================

def top_rated_score(average_rating: float, total_reviews: int) -> float:
    """
    Log-dampened quality/popularity blend.

    average_rating * ln(total_reviews + 1): strictly increasing in rating
    for a fixed review count.
    """
    return average_rating * math.log(total_reviews + 1)


def trending_score(
    reviews_short_window: int,
    reviews_long_window: int,
    recent_avg_rating: float = None
) -> float:
    """
    Recent-activity score.

    Args:
        reviews_short_window: Reviews in the last 7 days
        reviews_long_window: Reviews in the last 30 days
        recent_avg_rating: Average rating over the last 30 days (0 if None)
    """
    return (
        reviews_short_window * WEIGHT_SHORT_WINDOW_REVIEWS
        + reviews_long_window * WEIGHT_LONG_WINDOW_REVIEWS
        + (recent_avg_rating or 0.0) * WEIGHT_RECENT_RATING
    )


def quality_score(
    verified: bool,
    has_description: bool,
    has_image: bool,
    total_reviews: int,
    average_rating: float
) -> float:
    """Profile completeness and verification first, popularity second."""
    return (
        WEIGHT_VERIFIED * int(bool(verified))
        + WEIGHT_DESCRIPTION * int(bool(has_description))
        + WEIGHT_IMAGE * int(bool(has_image))
        + math.log(1 + total_reviews)
        + WEIGHT_AVERAGE_RATING * average_rating
    )
