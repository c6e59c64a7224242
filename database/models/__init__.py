"""
SQLAlchemy ORM Models

Models are organized by domain:
- Businesses: source business and review rows (read-only for the core)
- Stats: derived per-business review statistics
- Rankings: ranked set snapshots and their live-generation pointers
"""

from .base import Base, TimestampMixin
from .businesses import Business, Review
from .stats import BusinessStats
from .rankings import RankedEntry, RankedSetVersion, RefreshLease

__all__ = [
    # Base
    "Base",
    "TimestampMixin",
    # Source tables
    "Business",
    "Review",
    # Derived
    "BusinessStats",
    "RankedEntry",
    "RankedSetVersion",
    "RefreshLease",
]
