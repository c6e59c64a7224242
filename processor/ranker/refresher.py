"""
Ranking Refresher

Rebuilds the four ranked sets from one coherent snapshot and swaps each
one in atomically. Runs on the scheduler tick and on demand.
"""
import asyncio
import uuid
from datetime import datetime, timedelta
from typing import Callable, Optional

from loguru import logger

from constants import RankedSetName
from database import get_session
from exceptions import RankedSetBuildError
from repositories import BusinessRepository, ReviewRepository, RankedSetRepository, RefreshLeaseRepository
from .builder import BUILDERS
from .config import (
    RANKED_SET_SIZE,
    REFRESH_LEASE_NAME,
    REFRESH_LEASE_TTL,
    TRENDING_SHORT_WINDOW_DAYS,
    TRENDING_LONG_WINDOW_DAYS,
)
from .models import BusinessSnapshot, RankingSnapshot, RefreshReport, SetRefreshResult


class RankingRefresher:
    """
    Refreshes ranked sets without ever exposing a half-built one.

    - One snapshot read per run, shared by all four builders
    - Each set is swapped in its own transaction; one failure leaves the
      other sets refreshing and the failed set serving its last good generation
    - A run that starts while another is in progress is skipped, not queued:
      the instance lock covers this process, the refresh lease row covers
      refreshers in other processes
    """

    def __init__(
        self,
        session_factory: Callable = None,
        builders: dict = None,
        set_size: int = RANKED_SET_SIZE,
        lease_ttl: timedelta = REFRESH_LEASE_TTL,
    ):
        """
        Args:
            session_factory: Async context manager yielding a session
                             (defaults to database.get_session)
            builders: set name -> builder function (defaults to BUILDERS)
            set_size: Maximum entries per ranked set
            lease_ttl: How long a claimed refresh lease stays valid
        """
        self.session_factory = session_factory or get_session
        self.builders = dict(builders or BUILDERS)
        self.set_size = set_size
        self.lease_ttl = lease_ttl
        self._lock = asyncio.Lock()
        self._last_report: Optional[RefreshReport] = None

    @property
    def is_running(self) -> bool:
        return self._lock.locked()

    @property
    def last_report(self) -> Optional[RefreshReport]:
        return self._last_report

    async def refresh_all(self, now: datetime = None) -> RefreshReport:
        """
        Rebuild and swap all four ranked sets.

        Args:
            now: Reference time for age windows (defaults to datetime.now())

        Returns:
            RefreshReport; skipped=True when another refresh was running
        """
        started_at = datetime.now()
        if self._lock.locked():
            logger.warning("Ranking refresh already in progress, skipping this run")
            return RefreshReport(started_at=started_at, finished_at=started_at, skipped=True)

        async with self._lock:
            report = RefreshReport(started_at=started_at)
            now = now or started_at

            try:
                holder = await self._acquire_lease()
            except Exception as e:
                logger.exception(f"Could not claim the refresh lease: {e}")
                for set_name in self.builders:
                    report.results[set_name] = await self._fail(set_name, e)
                report.finished_at = datetime.now()
                self._last_report = report
                return report

            if holder is None:
                logger.warning("Ranking refresh running in another process, skipping this run")
                return RefreshReport(started_at=started_at, finished_at=datetime.now(), skipped=True)

            try:
                try:
                    snapshot = await self.load_snapshot(now)
                except Exception as e:
                    logger.exception(f"Failed to load ranking snapshot: {e}")
                    for set_name in self.builders:
                        report.results[set_name] = await self._fail(set_name, e)
                else:
                    logger.info(f"Loaded ranking snapshot: {len(snapshot.businesses)} active businesses")
                    for set_name in self.builders:
                        report.results[set_name] = await self._refresh_set(set_name, snapshot)
            finally:
                await self._release_lease(holder)

            report.finished_at = datetime.now()
            self._last_report = report

        duration = (report.finished_at - report.started_at).total_seconds()
        counts = ", ".join(f"{name}={result.entry_count}" for name, result in report.results.items())
        if report.failed_sets:
            logger.warning(f"Ranking refresh finished in {duration:.2f}s with failures {report.failed_sets} ({counts})")
        else:
            logger.info(f"Ranking refresh finished in {duration:.2f}s ({counts})")
        return report

    async def refresh_set(self, set_name: str, now: datetime = None) -> SetRefreshResult:
        """
        Rebuild a single ranked set (admin / retry helper).

        Skipped, like refresh_all(), when any refresh is already running.
        """
        set_name = RankedSetName(set_name).value
        if self._lock.locked():
            logger.warning(f"Ranking refresh already in progress, skipping rebuild of {set_name}")
            return SetRefreshResult(set_name=set_name, success=False, skipped=True)

        async with self._lock:
            holder = await self._acquire_lease()
            if holder is None:
                logger.warning(f"Ranking refresh running in another process, skipping rebuild of {set_name}")
                return SetRefreshResult(set_name=set_name, success=False, skipped=True)
            try:
                snapshot = await self.load_snapshot(now or datetime.now())
                return await self._refresh_set(set_name, snapshot)
            finally:
                await self._release_lease(holder)

    async def load_snapshot(self, now: datetime) -> RankingSnapshot:
        """
        Read active businesses, their stats rows and recent review activity.

        Each business is paired with the one stats row the join returned,
        so no entry mixes pre- and post-write values.
        """
        async with self.session_factory() as session:
            candidates = await BusinessRepository(session).get_ranking_candidates()
            activity = await ReviewRepository(session).get_recent_activity(
                short_window_start=now - timedelta(days=TRENDING_SHORT_WINDOW_DAYS),
                long_window_start=now - timedelta(days=TRENDING_LONG_WINDOW_DAYS),
            )

        return RankingSnapshot(
            taken_at=now,
            businesses=[
                BusinessSnapshot.from_rows(business, stats, activity.get(business.id))
                for business, stats in candidates
            ],
        )

    async def _refresh_set(self, set_name: str, snapshot: RankingSnapshot) -> SetRefreshResult:
        try:
            entries = self.builders[set_name](snapshot, limit=self.set_size)
            async with self.session_factory() as session:
                generation = await RankedSetRepository(session).replace_set(
                    set_name,
                    [entry.to_row() for entry in entries],
                    refreshed_at=snapshot.taken_at,
                )
        except Exception as e:
            error = RankedSetBuildError(set_name, e)
            logger.exception(str(error))
            return await self._fail(set_name, e)

        logger.debug(f"Swapped in {set_name} generation {generation} ({len(entries)} entries)")
        return SetRefreshResult(
            set_name=set_name,
            success=True,
            entry_count=len(entries),
            generation=generation,
        )

    async def _fail(self, set_name: str, cause: Exception) -> SetRefreshResult:
        """Record a failed rebuild; the live generation is left untouched."""
        message = f"{type(cause).__name__}: {cause}"
        try:
            async with self.session_factory() as session:
                await RankedSetRepository(session).record_failure(set_name, message, datetime.now())
        except Exception as e:
            logger.error(f"Could not record failure for {set_name}: {e}")
        return SetRefreshResult(set_name=set_name, success=False, error=message)

    async def _acquire_lease(self) -> Optional[str]:
        """Claim the shared refresh lease; returns the holder token, or None if taken."""
        holder = uuid.uuid4().hex
        async with self.session_factory() as session:
            acquired = await RefreshLeaseRepository(session).acquire(
                REFRESH_LEASE_NAME, holder, self.lease_ttl
            )
        return holder if acquired else None

    async def _release_lease(self, holder: str) -> None:
        try:
            async with self.session_factory() as session:
                await RefreshLeaseRepository(session).release(REFRESH_LEASE_NAME, holder)
        except Exception as e:
            # The claim still lapses after lease_ttl
            logger.error(f"Could not release the refresh lease: {e}")
