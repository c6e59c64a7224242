"""
API Routes - Endpoint definitions for the Business Ranking Service

Endpoints organized by:
- Health Check
- Rankings (top rated, trending, new, quality fallback, backfilled feed)
- Business Stats (lazy read, review-changed hook)
- System (manual refresh, ranked set status)
"""
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, HTTPException, Query

from config import settings
from exceptions import NotFound
from processor.stats import StatsAggregator
from processor.ranker import RankingRefresher, RankingQueries, RankedEntryData
from utils import logger

router = APIRouter()

# Shared per process so the refresher's overlap guard covers every caller
aggregator = StatsAggregator()
refresher = RankingRefresher()
queries = RankingQueries()

LimitParam = Query(default=settings.FEED_DEFAULT_LIMIT, ge=1, description="Number of businesses to return")


def _clamp_limit(limit: int) -> int:
    return max(1, min(limit, settings.FEED_MAX_LIMIT))


def _listing(entries: list[RankedEntryData], category: Optional[str] = None) -> dict:
    return {
        "businesses": [entry.to_dict() for entry in entries],
        "meta": {
            "count": len(entries),
            # Every entry of a generation shares the same timestamp
            "refreshed_at": entries[0].last_refreshed.isoformat() if entries and entries[0].last_refreshed else None,
            "category": category,
        },
    }


# ============================================================
# Health Check
# ============================================================
@router.get("/health")
async def health_check():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "timestamp": datetime.now().isoformat(),
        "refresh_running": refresher.is_running,
    }


# ============================================================
# Rankings
# ============================================================
@router.get("/rankings/top-rated")
async def get_top_rated(limit: int = LimitParam, category: Optional[str] = None):
    """Top rated businesses, optionally within one category."""
    entries = await queries.get_top_rated(_clamp_limit(limit), category)
    return _listing(entries, category)


@router.get("/rankings/trending")
async def get_trending(limit: int = LimitParam, category: Optional[str] = None):
    """Trending businesses (recent review activity)."""
    entries = await queries.get_trending(_clamp_limit(limit), category)
    return _listing(entries, category)


@router.get("/rankings/new")
async def get_new(limit: int = LimitParam, category: Optional[str] = None):
    """New & notable businesses, newest first."""
    entries = await queries.get_new(_clamp_limit(limit), category)
    return _listing(entries, category)


@router.get("/rankings/quality-fallback")
async def get_quality_fallback(limit: int = LimitParam):
    """Quality fallback pool used to pad thin feeds."""
    entries = await queries.get_quality_fallback(_clamp_limit(limit))
    return _listing(entries)


@router.get("/rankings/feed")
async def get_trending_feed(limit: int = LimitParam, category: Optional[str] = None):
    """
    Home feed: trending first, padded with quality fallback then new businesses.
    """
    entries = await queries.get_trending_feed(_clamp_limit(limit), category)
    return _listing(entries, category)


# ============================================================
# Business Stats
# ============================================================
@router.get("/businesses/{business_id}/stats")
async def get_business_stats(business_id: str):
    """Get review stats for a business, computing them on first read."""
    try:
        stats = await aggregator.get_stats(business_id)
    except NotFound:
        raise HTTPException(status_code=404, detail="Business not found")
    return stats.to_dict()


@router.post("/businesses/{business_id}/stats/recompute")
async def recompute_business_stats(business_id: str):
    """Review-changed hook: recompute stats for a business."""
    try:
        stats = await aggregator.handle_review_changed(business_id)
    except NotFound:
        raise HTTPException(status_code=404, detail="Business not found")
    return stats.to_dict()


# ============================================================
# System
# ============================================================
@router.post("/rankings/refresh")
async def trigger_ranking_refresh():
    """Manually rebuild all ranked sets (admin operation)."""
    logger.info("Manual ranking refresh requested")
    report = await refresher.refresh_all()
    return {
        "status": "skipped" if report.skipped else ("success" if report.success else "partial"),
        "report": report.to_dict(),
    }


@router.get("/rankings/status")
async def get_ranking_status():
    """Live generation, size and last error of every ranked set."""
    return {
        "running": refresher.is_running,
        "sets": await queries.get_set_status(),
    }
