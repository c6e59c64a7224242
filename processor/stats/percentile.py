"""
Percentile Ranker

Turns review tags into raw tag scores and ranks those scores against
the other businesses of the same category.

Comparison set: active businesses in the category with at least one
review. Ties are not "strictly lower", so a business tied with every
peer gets a category percentile of 0.
"""
from bisect import bisect_left
from decimal import Decimal
from typing import Iterable, Mapping, Optional, Sequence

from constants import ReputationMetric, REVIEW_TAG_METRICS
from utils import round_half_up, clamp


METRICS = [metric.value for metric in ReputationMetric]

NEUTRAL_PERCENTILE = 50
RAW_SCORE_WEIGHT = Decimal("0.6")
CATEGORY_WEIGHT = Decimal("0.4")

# Businesses (this one included) needed before category comparison kicks in
MIN_COMPARISON_SET_SIZE = 2


def neutral_scores() -> dict[str, int]:
    return {metric: NEUTRAL_PERCENTILE for metric in METRICS}


def raw_tag_scores(tag_lists: Sequence[Iterable[str]]) -> dict[str, float]:
    """
    Percentage of reviews carrying each metric's tag.

    Args:
        tag_lists: One iterable of tags per review

    Returns:
        Metric -> score in [0, 100]; 50 for every metric when there are no reviews
    """
    total = len(tag_lists)
    if total == 0:
        return {metric: float(NEUTRAL_PERCENTILE) for metric in METRICS}

    counts = {metric: 0 for metric in METRICS}
    for tags in tag_lists:
        # A tag repeated within one review still counts that review once
        for metric in {REVIEW_TAG_METRICS[tag].value for tag in (tags or []) if tag in REVIEW_TAG_METRICS}:
            counts[metric] += 1

    # count * 100 / total keeps equal ratios bit-identical (1/3 == 2/6)
    return {metric: clamp(counts[metric] * 100 / total) for metric in METRICS}


def category_percentile(own_score: float, peer_scores: Sequence[float]) -> int:
    """
    Share of peers whose score is strictly lower than own_score, as 0-100.

    Zero peers gives the neutral 50.
    """
    if not peer_scores:
        return NEUTRAL_PERCENTILE
    lower = sum(1 for score in peer_scores if score < own_score)
    return int(clamp(round_half_up(lower * 100 / len(peer_scores))))


def category_percentiles(
    own_scores: Mapping[str, float],
    peer_scores: Sequence[Mapping[str, float]]
) -> dict[str, int]:
    """
    Category percentile for every metric.

    Args:
        own_scores: This business's raw tag scores
        peer_scores: Raw tag scores of each other reviewed, active business in the category
    """
    if len(peer_scores) + 1 < MIN_COMPARISON_SET_SIZE:
        return neutral_scores()
    return {
        metric: category_percentile(own_scores[metric], [peer[metric] for peer in peer_scores])
        for metric in METRICS
    }


def blend_percentile(raw_score: float, category_pct: float) -> int:
    """Final stored percentile: 60% raw tag score + 40% category percentile."""
    blended = Decimal(str(raw_score)) * RAW_SCORE_WEIGHT + Decimal(str(category_pct)) * CATEGORY_WEIGHT
    return int(clamp(round_half_up(float(blended))))


class CategoryRanker:
    """
    Batch percentile ranking for one category.

    Sorts every member's raw scores once per metric, then answers each
    lookup with a binary search instead of rescanning the category.
    Produces the same numbers as category_percentiles().
    """

    def __init__(self, member_scores: Mapping[str, Mapping[str, float]]):
        """
        Args:
            member_scores: business_id -> raw tag scores, for every active
                           business in the category with at least one review
        """
        self.members = set(member_scores)
        self._sorted = {
            metric: sorted(scores[metric] for scores in member_scores.values())
            for metric in METRICS
        }

    def __len__(self) -> int:
        return len(self.members)

    def percentile(self, metric: str, own_score: float, business_id: Optional[str] = None) -> int:
        ordered = self._sorted[metric]
        is_member = business_id in self.members
        peer_count = len(ordered) - 1 if is_member else len(ordered)
        if peer_count < MIN_COMPARISON_SET_SIZE - 1:
            return NEUTRAL_PERCENTILE
        # bisect_left counts strictly lower scores, so a member never counts itself
        lower = bisect_left(ordered, own_score)
        return int(clamp(round_half_up(lower * 100 / peer_count)))

    def percentiles(self, own_scores: Mapping[str, float], business_id: Optional[str] = None) -> dict[str, int]:
        return {
            metric: self.percentile(metric, own_scores[metric], business_id)
            for metric in METRICS
        }
