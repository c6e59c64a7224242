import asyncio
import gc
import random

import pytest

from constants import BusinessStatus
from database import get_session
from exceptions import NotFound
from processor.stats import StatsAggregator, METRICS
from repositories import BusinessStatsRepository


FRIENDLY_3_OF_5 = [["Friendly"]] * 3 + [[]] * 2
FRIENDLY_2_OF_5 = [["Friendly"]] * 2 + [[]] * 3


@pytest.fixture
def aggregator():
    return StatsAggregator()


async def _stored(business_id):
    async with get_session() as session:
        return await BusinessStatsRepository(session).get_for_business(business_id)


async def test_business_without_reviews_gets_neutral_stats(seed, aggregator):
    business_id = await seed.business(category="plumber")

    result = await aggregator.recompute_stats(business_id)

    assert result.total_reviews == 0
    assert result.average_rating == 0
    assert result.rating_distribution == {"1": 0, "2": 0, "3": 0, "4": 0, "5": 0}
    assert result.percentiles == {metric: 50 for metric in METRICS}

    row = await _stored(business_id)
    assert row is not None
    assert row.total_reviews == 0


async def test_friendliness_blends_raw_and_category_scores(seed, aggregator):
    cafe_a = await seed.business(category="cafe")
    cafe_b = await seed.business(category="cafe")
    await seed.reviews(cafe_a, [5, 5, 4, 4, 3], FRIENDLY_3_OF_5)
    await seed.reviews(cafe_b, [4, 4, 4, 4, 4], FRIENDLY_2_OF_5)

    result_a = await aggregator.recompute_stats(cafe_a)
    result_b = await aggregator.recompute_stats(cafe_b)

    assert result_a.raw_tag_scores["friendliness"] == 60.0
    assert result_a.percentiles["friendliness"] == 76
    # 0.6 * 40 + 0.4 * 0
    assert result_b.percentiles["friendliness"] == 24
    # Both at 0 raw: tied, so neither is strictly lower
    assert result_a.percentiles["punctuality"] == 0
    assert result_a.average_rating == 4.2
    assert result_a.rating_distribution == {"1": 0, "2": 0, "3": 1, "4": 2, "5": 2}


async def test_average_rating_rounds_to_two_decimals(seed, aggregator):
    business_id = await seed.business()
    await seed.reviews(business_id, [5, 5, 4])

    result = await aggregator.recompute_stats(business_id)

    assert result.average_rating == 4.67


async def test_inactive_peers_are_not_compared(seed, aggregator):
    cafe_a = await seed.business(category="cafe")
    cafe_b = await seed.business(category="cafe", status=BusinessStatus.INACTIVE.value)
    await seed.reviews(cafe_a, [5] * 5, FRIENDLY_3_OF_5)
    await seed.reviews(cafe_b, [5] * 5, FRIENDLY_2_OF_5)

    result = await aggregator.recompute_stats(cafe_a)

    # Alone in its comparison set: 0.6 * 60 + 0.4 * 50
    assert result.percentiles["friendliness"] == 56


async def test_peers_without_reviews_are_not_compared(seed, aggregator):
    cafe_a = await seed.business(category="cafe")
    cafe_b = await seed.business(category="cafe")
    await seed.business(category="cafe")
    await seed.reviews(cafe_a, [5] * 5, FRIENDLY_3_OF_5)
    await seed.reviews(cafe_b, [5] * 5, FRIENDLY_2_OF_5)

    result = await aggregator.recompute_stats(cafe_a)

    assert result.percentiles["friendliness"] == 76


async def test_other_categories_are_not_compared(seed, aggregator):
    cafe = await seed.business(category="cafe")
    bar = await seed.business(category="bar")
    await seed.reviews(cafe, [5] * 5, FRIENDLY_3_OF_5)
    await seed.reviews(bar, [5] * 5, FRIENDLY_2_OF_5)

    result = await aggregator.recompute_stats(cafe)

    assert result.percentiles["friendliness"] == 56


async def test_missing_business_raises_and_writes_nothing(db, aggregator):
    with pytest.raises(NotFound):
        await aggregator.recompute_stats("does-not-exist")

    assert await _stored("does-not-exist") is None


async def test_recompute_is_idempotent(seed, aggregator):
    cafe_a = await seed.business(category="cafe")
    cafe_b = await seed.business(category="cafe")
    await seed.reviews(cafe_a, [5, 3, 4], [["Friendly", "On Time"], ["Good Value"], []])
    await seed.reviews(cafe_b, [2, 4], [["On Time"], []])

    first = await aggregator.recompute_stats(cafe_a)
    second = await aggregator.recompute_stats(cafe_a)

    assert first.total_reviews == second.total_reviews
    assert first.average_rating == second.average_rating
    assert first.rating_distribution == second.rating_distribution
    assert first.percentiles == second.percentiles


async def test_review_changed_picks_up_new_reviews(seed, aggregator):
    business_id = await seed.business()
    await seed.reviews(business_id, [4, 4])
    await aggregator.recompute_stats(business_id)

    await seed.review(business_id, rating=1)
    result = await aggregator.handle_review_changed(business_id)

    assert result.total_reviews == 3
    assert result.average_rating == 3.0
    row = await _stored(business_id)
    assert row.total_reviews == 3


async def test_get_stats_computes_lazily_then_reads_stored_row(seed, aggregator):
    business_id = await seed.business()
    await seed.reviews(business_id, [5, 4])
    assert await _stored(business_id) is None

    first = await aggregator.get_stats(business_id)
    assert first.total_reviews == 2
    assert await _stored(business_id) is not None

    # Without a review-changed event the stored row is served as-is
    await seed.review(business_id, rating=1)
    second = await aggregator.get_stats(business_id)
    assert second.total_reviews == 2


async def test_get_stats_for_missing_business_raises(db, aggregator):
    with pytest.raises(NotFound):
        await aggregator.get_stats("does-not-exist")


async def test_batch_recompute_matches_single_recompute(seed, aggregator):
    rng = random.Random(7)
    tag_pool = ["On Time", "Friendly", "Trustworthy", "Good Value"]
    business_ids = []
    for index in range(8):
        status = BusinessStatus.INACTIVE.value if index == 3 else BusinessStatus.ACTIVE.value
        business_id = await seed.business(category="salon" if index < 6 else None, status=status)
        business_ids.append(business_id)
        count = 0 if index == 5 else rng.randint(1, 6)
        ratings = [rng.randint(1, 5) for _ in range(count)]
        tags = [rng.sample(tag_pool, rng.randint(0, 3)) for _ in range(count)]
        await seed.reviews(business_id, ratings, tags)

    single = {business_id: await aggregator.recompute_stats(business_id) for business_id in business_ids}
    assert await aggregator.recompute_all() == len(business_ids)

    for business_id in business_ids:
        row = await _stored(business_id)
        assert row.total_reviews == single[business_id].total_reviews
        assert row.average_rating == single[business_id].average_rating
        assert row.rating_distribution == single[business_id].rating_distribution
        assert row.percentiles == single[business_id].percentiles


async def test_percentiles_stay_in_range(seed, aggregator):
    rng = random.Random(11)
    tag_pool = ["On Time", "Friendly", "Trustworthy", "Good Value"]
    for _ in range(12):
        business_id = await seed.business(category=rng.choice(["cafe", "bar"]))
        count = rng.randint(0, 5)
        await seed.reviews(
            business_id,
            [rng.randint(1, 5) for _ in range(count)],
            [rng.sample(tag_pool, rng.randint(0, 4)) for _ in range(count)],
        )

    for result in (await aggregator.recompute_category("cafe")) + (await aggregator.recompute_category("bar")):
        for metric in METRICS:
            value = result.percentiles[metric]
            assert isinstance(value, int)
            assert 0 <= value <= 100


async def test_unknown_ids_do_not_leave_locks_behind(db, aggregator):
    for index in range(200):
        try:
            await aggregator.recompute_stats(f"ghost-{index}")
        except NotFound:
            pass

    gc.collect()
    assert len(aggregator._locks) == 0


async def test_concurrent_recomputes_of_one_business_share_a_lock(seed, aggregator):
    business_id = await seed.business()
    await seed.reviews(business_id, [5, 4, 4])

    results = await asyncio.gather(*(aggregator.recompute_stats(business_id) for _ in range(5)))

    assert {result.average_rating for result in results} == {4.33}
    gc.collect()
    assert len(aggregator._locks) == 0
