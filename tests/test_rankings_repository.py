from datetime import datetime, timedelta

import pytest
from sqlalchemy.exc import IntegrityError

from database import get_session
from exceptions import GenerationConflict
from processor.ranker import RankedEntryData, RankingQueries
from repositories import RankedSetRepository, RefreshLeaseRepository


def _row(business_id):
    return RankedEntryData(
        business_id=business_id,
        name=business_id.title(),
        category="cafe",
        total_reviews=0,
        average_rating=0.0,
    ).to_row()


async def _replace(set_name, rows, now):
    async with get_session() as session:
        return await RankedSetRepository(session).replace_set(set_name, rows, refreshed_at=now)


async def test_replace_set_advances_generation(db, now):
    assert await _replace("new", [_row("a"), _row("b")], now) == 1
    assert await _replace("new", [_row("b")], now) == 2

    entries = await RankingQueries().get_new()
    assert [entry.business_id for entry in entries] == ["b"]


async def test_stale_pointer_flip_rolls_back(db, now, monkeypatch):
    await _replace("new", [_row("a")], now)

    async def stale_generation(self, set_name):
        return 0

    monkeypatch.setattr(RankedSetRepository, "_current_generation", stale_generation)
    with pytest.raises(GenerationConflict):
        await _replace("new", [], now)
    monkeypatch.undo()

    entries = await RankingQueries().get_new()
    assert [entry.business_id for entry in entries] == ["a"]


async def test_second_writer_of_a_generation_is_rejected(db, now, monkeypatch):
    await _replace("new", [_row("a")], now)

    async def stale_generation(self, set_name):
        return 0

    monkeypatch.setattr(RankedSetRepository, "_current_generation", stale_generation)
    with pytest.raises(IntegrityError):
        await _replace("new", [_row("b"), _row("c")], now)
    monkeypatch.undo()

    entries = await RankingQueries().get_new()
    assert [entry.business_id for entry in entries] == ["a"]


async def test_record_failure_before_first_build(db, now):
    async with get_session() as session:
        await RankedSetRepository(session).record_failure("trending", "RuntimeError: boom", now)

    status = await RankingQueries().get_set_status()
    assert status["trending"]["generation"] == 0
    assert status["trending"]["last_error"] == "RuntimeError: boom"
    assert await _replace("trending", [_row("a")], now) == 1


async def _acquire(holder, ttl=timedelta(minutes=10), now=None):
    async with get_session() as session:
        return await RefreshLeaseRepository(session).acquire("ranking_refresh", holder, ttl, now=now)


async def _release(holder):
    async with get_session() as session:
        return await RefreshLeaseRepository(session).release("ranking_refresh", holder)


async def test_lease_has_one_holder_at_a_time(db):
    assert await _acquire("api")
    assert not await _acquire("scheduler")

    assert not await _release("scheduler")
    assert await _release("api")

    assert await _acquire("scheduler")


async def test_expired_lease_can_be_claimed(db):
    start = datetime(2026, 6, 1, 12, 0, 0)
    assert await _acquire("api", ttl=timedelta(minutes=10), now=start)

    assert not await _acquire("scheduler", now=start + timedelta(minutes=5))
    assert await _acquire("scheduler", now=start + timedelta(minutes=11))
    # The old holder can no longer release what it lost
    assert not await _release("api")
