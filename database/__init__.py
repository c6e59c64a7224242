"""
Database Module - Business Ranking Service

Structure:
    database/
    ├── __init__.py      # This file - public API
    ├── session.py       # SQLAlchemy async session management
    ├── init.py          # Database initialization utilities
    └── models/          # SQLAlchemy ORM models
        ├── base.py
        ├── businesses.py
        ├── stats.py
        └── rankings.py

Usage:
    from database import get_session
    from database.models import Business, BusinessStats

    async with get_session() as session:
        result = await session.execute(select(Business))
        businesses = result.scalars().all()
"""

# SQLAlchemy Models
from .models import (
    Base,
    TimestampMixin,
    Business,
    Review,
    BusinessStats,
    RankedEntry,
    RankedSetVersion,
    RefreshLease,
)

# Session Management
from .session import (
    init_engine,
    close_engine,
    create_tables,
    get_session,
)

# Initialization utilities
from .init import (
    get_table_counts_async,
    check_database_exists,
    run_migrations,
)

__all__ = [
    # SQLAlchemy Models
    "Base",
    "TimestampMixin",
    "Business",
    "Review",
    "BusinessStats",
    "RankedEntry",
    "RankedSetVersion",
    "RefreshLease",
    # Session Management
    "init_engine",
    "close_engine",
    "create_tables",
    "get_session",
    # Init utilities
    "get_table_counts_async",
    "check_database_exists",
    "run_migrations",
]
