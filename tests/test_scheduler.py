from datetime import datetime, timedelta

import pytest

from config import settings
from processor.ranker import RefreshReport, SetRefreshResult
from scheduler import RankingScheduler


class StubRefresher:

    def __init__(self, report=None, error=None):
        self.report = report
        self.error = error
        self.calls = 0

    async def refresh_all(self):
        self.calls += 1
        if self.error:
            raise self.error
        return self.report


def _report(**results):
    report = RefreshReport(started_at=datetime(2026, 6, 1), finished_at=datetime(2026, 6, 1))
    for name, success in results.items():
        report.results[name] = SetRefreshResult(set_name=name, success=success)
    return report


@pytest.fixture(autouse=True)
def data_dirs(tmp_path, monkeypatch):
    monkeypatch.setattr(settings, "DATA_DIR", tmp_path / "data")
    monkeypatch.setattr(settings, "LOG_DIR", tmp_path / "logs")


def test_setup_registers_single_non_overlapping_job():
    scheduler = RankingScheduler(refresher=StubRefresher())
    scheduler.setup()

    job = scheduler.scheduler.get_job("refresh_rankings")
    assert job is not None
    assert job.max_instances == 1
    assert job.coalesce is True
    assert job.trigger.interval == timedelta(minutes=settings.RANKING_REFRESH_INTERVAL_MINUTES)


async def test_run_refresh_reports_success():
    refresher = StubRefresher(_report(top_rated=True, trending=True))
    assert await RankingScheduler(refresher=refresher).run_refresh() is True
    assert refresher.calls == 1


async def test_run_refresh_reports_partial_failure():
    refresher = StubRefresher(_report(top_rated=True, trending=False))
    assert await RankingScheduler(refresher=refresher).run_refresh() is False


async def test_run_refresh_treats_skip_as_not_run():
    report = RefreshReport(started_at=datetime(2026, 6, 1), skipped=True)
    assert await RankingScheduler(refresher=StubRefresher(report)).run_refresh() is False


async def test_run_refresh_survives_errors():
    refresher = StubRefresher(error=RuntimeError("database is locked"))
    assert await RankingScheduler(refresher=refresher).run_refresh() is False
