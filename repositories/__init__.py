"""
SQLAlchemy-based Repositories

This package provides async repository pattern using SQLAlchemy ORM.

Usage:
    from repositories import BusinessRepository
    from database import get_session

    async with get_session() as session:
        repo = BusinessRepository(session)
        business = await repo.get("biz_123")
"""

from .base import BaseRepository
from .businesses import BusinessRepository
from .reviews import ReviewRepository
from .stats import BusinessStatsRepository
from .rankings import RankedSetRepository
from .leases import RefreshLeaseRepository

__all__ = [
    "BaseRepository",
    "BusinessRepository",
    "ReviewRepository",
    "BusinessStatsRepository",
    "RankedSetRepository",
    "RefreshLeaseRepository",
]
