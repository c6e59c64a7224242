"""
Scheduler - Periodic ranking refresh

Current Setup:
- Ranking refresh runs every 15 minutes (configurable via RANKING_REFRESH_INTERVAL_MINUTES)
- Refresh rebuilds top rated, trending, new & notable and quality fallback

Usage:
    python scheduler.py                    # Run scheduler daemon
    python scheduler.py --once             # Refresh once and exit
    python scheduler.py --once --rebuild-stats   # Recompute all stats, then refresh
"""
import asyncio
import sys
from datetime import datetime, timedelta

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from config import settings, ensure_directories
from utils import logger, init_logging


class RankingScheduler:
    """
    Scheduler for the ranked set refresh.

    A tick that fires while the previous refresh is still running is
    dropped (max_instances=1), and the refresher itself skips overlapping
    runs, so two refreshes never race to swap the same set.
    """

    def __init__(self, refresher=None, aggregator=None):
        from processor.ranker import RankingRefresher
        from processor.stats import StatsAggregator

        self.scheduler = AsyncIOScheduler()
        self.refresher = refresher or RankingRefresher()
        self.aggregator = aggregator or StatsAggregator()
        self._last_report = None

    def setup(self):
        """Setup scheduled jobs."""
        ensure_directories()

        self.scheduler.add_job(
            self.run_refresh,
            IntervalTrigger(minutes=settings.RANKING_REFRESH_INTERVAL_MINUTES),
            id="refresh_rankings",
            name="Ranking Refresh (Top Rated + Trending + New + Quality Fallback)",
            replace_existing=True,
            max_instances=1,
            coalesce=True,
            next_run_time=datetime.now() + timedelta(seconds=10)
        )

        logger.info("Scheduler setup complete with 1 job (ranking refresh)")
        self._log_schedule()

    def _log_schedule(self):
        """Log current job schedule."""
        jobs = self.scheduler.get_jobs()
        logger.info(f"Scheduled jobs ({len(jobs)}):")
        for job in jobs:
            logger.info(f"  - {job.name}: {job.trigger}")

    async def run_refresh(self) -> bool:
        """
        Job: rebuild all ranked sets.

        Returns:
            True when every set refreshed; False on skip or any failure
        """
        logger.info("Starting ranking refresh...")

        try:
            report = await self.refresher.refresh_all()
        except Exception as e:
            logger.exception(f"Ranking refresh failed: {e}")
            return False

        self._last_report = report
        if report.skipped:
            return False
        if report.failed_sets:
            logger.warning(f"Refresh had failures, will retry next tick: {report.failed_sets}")
            return False
        return True

    async def rebuild_stats(self) -> int:
        """Recompute business_stats for every business."""
        logger.info("Rebuilding stats for all businesses...")
        return await self.aggregator.recompute_all()

    def start(self):
        """Start the scheduler."""
        self.setup()
        self.scheduler.start()
        logger.info("Scheduler started - Press Ctrl+C to stop")

    def stop(self):
        """Stop the scheduler."""
        self.scheduler.shutdown()
        logger.info("Scheduler stopped")

    def run_once(self, rebuild_stats: bool = False) -> bool:
        """Run the refresh once and exit."""
        ensure_directories()

        async def _run():
            from database import create_tables, close_engine

            await create_tables()
            try:
                if rebuild_stats:
                    await self.rebuild_stats()
                return await self.run_refresh()
            finally:
                await close_engine()

        logger.info("Running ranking refresh once...")
        result = asyncio.run(_run())

        if result:
            logger.info("Ranking refresh completed successfully")
        else:
            logger.error("Ranking refresh failed")

        return result


def run_scheduler():
    """Run the scheduler as main process."""
    import signal

    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)

    scheduler = RankingScheduler()
    scheduler.start()

    def shutdown(signum, frame):
        logger.info("Received shutdown signal")
        scheduler.stop()
        sys.exit(0)

    signal.signal(signal.SIGINT, shutdown)
    signal.signal(signal.SIGTERM, shutdown)

    try:
        loop.run_forever()
    except (KeyboardInterrupt, SystemExit):
        scheduler.stop()


def main():
    """Main entry point with CLI arguments."""
    import argparse

    parser = argparse.ArgumentParser(description="Business Ranking Scheduler")
    parser.add_argument("--once", action="store_true", help="Refresh rankings once and exit")
    parser.add_argument("--rebuild-stats", action="store_true", help="Recompute all business stats before refreshing")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable verbose logging")

    args = parser.parse_args()

    if args.verbose:
        settings.LOG_LEVEL = "DEBUG"
    init_logging(app_name="scheduler")

    scheduler = RankingScheduler()

    if args.once:
        result = scheduler.run_once(rebuild_stats=args.rebuild_stats)
        sys.exit(0 if result else 1)
    else:
        run_scheduler()


if __name__ == "__main__":
    main()
