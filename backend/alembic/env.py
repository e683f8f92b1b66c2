"""
ScanPlant Backend — Migration Runner
======================================

Alembic entry point. The target URL is always settings.database_url, so
migrations hit the same database as the app. SQLite runs in batch mode
because it cannot ALTER most constraints in place.

    alembic upgrade head          apply against the live database
    alembic upgrade head --sql    print the SQL instead
"""

import asyncio
from logging.config import fileConfig

from alembic import context
from sqlalchemy import pool
from sqlalchemy.engine import Connection
from sqlalchemy.ext.asyncio import create_async_engine

from app.config import settings
from app.database import Base
from app.models import comment, notification, plant, reminder, user  # noqa: F401

if context.config.config_file_name is not None:
    fileConfig(context.config.config_file_name)

metadata = Base.metadata


def emit_sql() -> None:
    context.configure(
        url=settings.database_url,
        target_metadata=metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        render_as_batch=settings.is_sqlite,
    )
    with context.begin_transaction():
        context.run_migrations()


def _migrate(connection: Connection) -> None:
    context.configure(
        connection=connection,
        target_metadata=metadata,
        render_as_batch=connection.dialect.name == "sqlite",
    )
    with context.begin_transaction():
        context.run_migrations()


async def migrate_database() -> None:
    # NullPool: one short-lived connection per migration run
    engine = create_async_engine(settings.database_url, poolclass=pool.NullPool)
    try:
        async with engine.connect() as connection:
            await connection.run_sync(_migrate)
    finally:
        await engine.dispose()


if context.is_offline_mode():
    emit_sql()
else:
    asyncio.run(migrate_database())
