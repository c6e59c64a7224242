"""
Alembic environment.

Runs migrations with a synchronous SQLite driver against the same
database the async engine uses.
"""
from alembic import context
from sqlalchemy import engine_from_config, pool

from config import settings
from database.models import Base
from database.session import get_database_url


config = context.config
config.set_main_option(
    "sqlalchemy.url",
    get_database_url().replace("sqlite+aiosqlite", "sqlite"),
)

target_metadata = Base.metadata


def run_migrations_offline() -> None:
    context.configure(
        url=config.get_main_option("sqlalchemy.url"),
        target_metadata=target_metadata,
        literal_binds=True,
        render_as_batch=True,
    )
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    settings.DATA_DIR.mkdir(parents=True, exist_ok=True)
    connectable = engine_from_config(
        config.get_section(config.config_ini_section, {}),
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )
    with connectable.connect() as connection:
        context.configure(
            connection=connection,
            target_metadata=target_metadata,
            render_as_batch=True,
        )
        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
