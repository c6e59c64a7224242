import math
from datetime import datetime, timedelta

from constants import RankedSetName
from processor.ranker import (
    BUILDERS,
    BusinessSnapshot,
    RankingSnapshot,
    build_top_rated,
    build_trending,
    build_new,
    build_quality_fallback,
    trending_score,
)


NOW = datetime(2026, 6, 1, 12, 0, 0)


def business(business_id, age_days=60, **kwargs):
    return BusinessSnapshot(
        id=business_id,
        name=business_id.title(),
        created_at=NOW - timedelta(days=age_days),
        **kwargs,
    )


def snapshot(*businesses):
    return RankingSnapshot(taken_at=NOW, businesses=list(businesses))


def ids(entries):
    return [entry.business_id for entry in entries]


class TestTopRated:

    def test_requires_minimum_reviews_and_rating(self):
        entries = build_top_rated(snapshot(
            business("few-reviews", total_reviews=2, average_rating=5.0),
            business("low-rating", total_reviews=40, average_rating=3.4),
            business("just-enough", total_reviews=3, average_rating=3.5),
        ))
        assert ids(entries) == ["just-enough"]

    def test_score_is_rating_times_log_count(self):
        [entry] = build_top_rated(snapshot(business("a", total_reviews=9, average_rating=4.5)))
        assert entry.score == round(4.5 * math.log(10), 4)

    def test_higher_rating_wins_at_equal_review_count(self):
        entries = build_top_rated(snapshot(
            business("good", total_reviews=10, average_rating=4.0),
            business("better", total_reviews=10, average_rating=4.8),
        ))
        assert ids(entries) == ["better", "good"]

    def test_more_reviews_win_at_equal_rating(self):
        entries = build_top_rated(snapshot(
            business("small", total_reviews=4, average_rating=4.5),
            business("large", total_reviews=50, average_rating=4.5),
        ))
        assert ids(entries) == ["large", "small"]

    def test_limit_caps_the_set(self):
        businesses = [business(f"b{i:02d}", total_reviews=5 + i, average_rating=4.0) for i in range(10)]
        assert len(build_top_rated(snapshot(*businesses), limit=3)) == 3


class TestTrending:

    def test_skips_businesses_younger_than_a_week(self):
        entries = build_trending(snapshot(
            business("brand-new", age_days=6, reviews_short_window=9, reviews_long_window=9, recent_avg_rating=5.0),
            business("week-old", age_days=7, reviews_short_window=2, reviews_long_window=2, recent_avg_rating=4.0),
        ))
        assert ids(entries) == ["week-old"]

    def test_requires_two_recent_reviews(self):
        entries = build_trending(snapshot(
            business("quiet", reviews_short_window=1, reviews_long_window=1, recent_avg_rating=5.0),
        ))
        assert entries == []

    def test_score_weights_recent_activity(self):
        [entry] = build_trending(snapshot(
            business("busy", reviews_short_window=2, reviews_long_window=5, recent_avg_rating=4.0),
        ))
        assert entry.score == 31.0
        assert entry.score == trending_score(2, 5, 4.0)
        assert entry.recent_reviews_7d == 2
        assert entry.recent_reviews_30d == 5
        assert entry.recent_avg_rating == 4.0

    def test_orders_by_score(self):
        entries = build_trending(snapshot(
            business("steady", reviews_short_window=0, reviews_long_window=4, recent_avg_rating=4.0),
            business("hot", reviews_short_window=4, reviews_long_window=6, recent_avg_rating=4.5),
        ))
        assert ids(entries) == ["hot", "steady"]


class TestNew:

    def test_only_recent_businesses_newest_first(self):
        entries = build_new(snapshot(
            business("old", age_days=120),
            business("month", age_days=30),
            business("fresh", age_days=2),
        ))
        assert ids(entries) == ["fresh", "month"]
        assert entries[0].days_old == 2
        assert entries[0].score is None

    def test_includes_businesses_without_reviews(self):
        [entry] = build_new(snapshot(business("empty", age_days=1)))
        assert entry.total_reviews == 0
        assert entry.percentiles == {
            "punctuality": 50,
            "friendliness": 50,
            "trustworthiness": 50,
            "cost_effectiveness": 50,
        }


class TestQualityFallback:

    def test_complete_verified_profile_ranks_first(self):
        entries = build_quality_fallback(snapshot(
            business("bare"),
            business("popular", total_reviews=5, average_rating=4.0),
            business("polished", verified=True, has_description=True, has_image=True),
        ))
        assert ids(entries) == ["polished", "popular", "bare"]

    def test_includes_every_active_business(self):
        businesses = [business(f"b{i}") for i in range(5)]
        assert len(build_quality_fallback(snapshot(*businesses))) == 5


def test_builders_cover_every_ranked_set():
    assert set(BUILDERS) == {name.value for name in RankedSetName}


def test_builders_ignore_input_order():
    businesses = [
        business(f"b{i}", age_days=10 + i, total_reviews=3 + i % 4, average_rating=3.5 + (i % 3) * 0.5,
                 reviews_short_window=i % 3, reviews_long_window=2 + i % 5, recent_avg_rating=4.0)
        for i in range(12)
    ]
    for build in BUILDERS.values():
        forward = ids(build(snapshot(*businesses)))
        backward = ids(build(snapshot(*reversed(businesses))))
        assert forward == backward
