"""Alembic environment for InvenTrack.

Migrations run through the asyncpg driver, like the application. The URL is
read from ``DATABASE_URL_DIRECT`` when set, falling back to ``DATABASE_URL``.
Settings are not imported, so migrations run without the JWT secrets.
"""

import asyncio
import os
from logging.config import fileConfig

from sqlalchemy import pool
from sqlalchemy.engine import Connection
from sqlalchemy.ext.asyncio import create_async_engine

from alembic import context
from inventrack.models import Base
from inventrack.utils.db_url import asyncpg_engine_args, with_async_driver, without_async_driver

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata


def _database_url() -> str:
    # DDL cannot run through a transaction-mode pooler, hence the direct URL.
    url = os.environ.get("DATABASE_URL_DIRECT") or os.environ.get("DATABASE_URL")
    if not url:
        raise RuntimeError("Set DATABASE_URL (or DATABASE_URL_DIRECT) to run migrations")
    return with_async_driver(url)


def run_migrations_offline() -> None:
    """Render the migration SQL to stdout without connecting."""
    url, _ = asyncpg_engine_args(_database_url())
    context.configure(
        url=without_async_driver(url),
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )
    with context.begin_transaction():
        context.run_migrations()


def _migrate(connection: Connection) -> None:
    context.configure(connection=connection, target_metadata=target_metadata)
    with context.begin_transaction():
        context.run_migrations()


async def run_migrations_online() -> None:
    url, connect_args = asyncpg_engine_args(_database_url())
    engine = create_async_engine(url, poolclass=pool.NullPool, connect_args=connect_args)
    try:
        async with engine.connect() as connection:
            await connection.run_sync(_migrate)
    finally:
        await engine.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    asyncio.run(run_migrations_online())
