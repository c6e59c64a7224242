from config import settings
from database import check_database_exists, get_table_counts_async, get_session
from repositories import BusinessRepository


async def test_table_counts(seed, tmp_path):
    business_id = await seed.business()
    await seed.reviews(business_id, [5, 4, 3])

    counts = await get_table_counts_async()

    assert counts["businesses"] == 1
    assert counts["reviews"] == 3
    assert counts["business_stats"] == 0
    assert check_database_exists(tmp_path / "test.db")


async def test_categories_include_uncategorized(seed):
    await seed.business(category="cafe")
    await seed.business(category="cafe")
    await seed.business(category=None)

    async with get_session() as session:
        repo = BusinessRepository(session)
        categories = await repo.get_categories()
        count = await repo.count()

    assert sorted(categories, key=lambda c: c or "") == [None, "cafe"]
    assert count == 3


def test_database_url_defaults_to_sqlite_file():
    from database.session import get_database_url

    if settings.DATABASE_URL is None:
        assert get_database_url() == f"sqlite+aiosqlite:///{settings.DATABASE_PATH}"


def test_migrations_create_every_table(tmp_path, monkeypatch):
    from sqlalchemy import create_engine, inspect

    from database import run_migrations
    from database.models import Base

    db_path = tmp_path / "migrated.db"
    monkeypatch.setattr(settings, "DATABASE_URL", f"sqlite+aiosqlite:///{db_path}")
    monkeypatch.setattr(settings, "DATA_DIR", tmp_path)

    run_migrations()

    engine = create_engine(f"sqlite:///{db_path}")
    try:
        tables = set(inspect(engine).get_table_names())
    finally:
        engine.dispose()
    assert set(Base.metadata.tables) <= tables
