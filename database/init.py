"""
Database Initialization and Utilities

Functions for initializing and managing the SQLite database with SQLAlchemy.
"""
from pathlib import Path

from loguru import logger


def check_database_exists(db_path: Path) -> bool:
    """Check if database file exists."""
    return db_path.exists()


async def get_table_counts_async() -> dict:
    """
    Get row counts for all tables.

    Returns:
        Dict with table names and row counts
    """
    from sqlalchemy import select, func
    from .models import Base
    from .session import get_session

    counts = {}
    async with get_session() as session:
        for table in Base.metadata.sorted_tables:
            result = await session.execute(select(func.count()).select_from(table))
            counts[table.name] = result.scalar_one()

    return counts


def run_migrations() -> None:
    """
    Run pending Alembic migrations.

    This is a convenience wrapper around Alembic upgrade command.
    """
    from alembic.config import Config
    from alembic import command
    from config import settings

    alembic_cfg = Config(str(settings.BASE_DIR / "alembic.ini"))
    command.upgrade(alembic_cfg, "head")
    logger.info("Database migrations completed")
