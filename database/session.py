"""
Engine and session lifecycle.

One async engine per process. Stats upserts and ranked-set swaps come
from different tasks at the same time, so every SQLite connection waits
on a busy database instead of failing straight away, and enforces the
foreign keys the stats rows hang off.
"""
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    AsyncEngine,
    create_async_engine,
    async_sessionmaker,
)
from sqlalchemy.pool import StaticPool
from loguru import logger

from config import settings
from .models import Base


_engine: AsyncEngine | None = None
_session_factory: async_sessionmaker[AsyncSession] | None = None


def get_database_url() -> str:
    """DATABASE_URL when set, otherwise the SQLite file under DATA_DIR."""
    if settings.DATABASE_URL:
        return settings.DATABASE_URL
    return f"sqlite+aiosqlite:///{settings.DATABASE_PATH}"


def _enable_foreign_keys(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


async def init_engine(database_url: Optional[str] = None) -> AsyncEngine:
    """
    Create the process-wide engine (no-op when it already exists).

    Args:
        database_url: Override for get_database_url(); tests point this at a temp file
    """
    global _engine, _session_factory

    if _engine is not None:
        return _engine

    database_url = database_url or get_database_url()
    logger.info(f"Initializing database engine: {database_url}")

    engine_kwargs = {
        "echo": settings.LOG_LEVEL == "DEBUG",
        "connect_args": {
            "check_same_thread": False,
            "timeout": settings.DATABASE_BUSY_TIMEOUT_SECONDS,
        },
    }
    if ":memory:" in database_url:
        # Every session must share the one connection that holds the data
        engine_kwargs["poolclass"] = StaticPool

    _engine = create_async_engine(database_url, **engine_kwargs)
    event.listen(_engine.sync_engine, "connect", _enable_foreign_keys)

    _session_factory = async_sessionmaker(
        bind=_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )
    return _engine


async def close_engine() -> None:
    """Dispose the engine; the next init_engine() starts fresh."""
    global _engine, _session_factory

    if _engine is not None:
        await _engine.dispose()
        _engine = None
        _session_factory = None
        logger.info("Database engine closed")


async def create_tables() -> None:
    """
    create_all() over the model metadata.

    Used by tests, `scheduler.py --once` and as the API's fallback when
    Alembic cannot run. Alembic stays the source of truth for real databases.
    """
    engine = await init_engine()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database tables created")


@asynccontextmanager
async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """
    Unit of work.

    Usage:
        async with get_session() as session:
            await BusinessStatsRepository(session).upsert_stats(...)

    Commits when the block exits cleanly, rolls back and re-raises otherwise.
    """
    if _session_factory is None:
        await init_engine()

    session = _session_factory()
    try:
        yield session
        await session.commit()
    except Exception:
        await session.rollback()
        raise
    finally:
        await session.close()
