"""Alembic environment for smsgate.

The database URL comes from ``SMSGATE_DATABASE_URL`` unless alembic.ini (or
``-x``/``config.set_main_option``) provides one. Online migrations run on the
application's async driver.
"""

import asyncio
from logging.config import fileConfig

from sqlalchemy import pool
from sqlalchemy.engine import Connection
from sqlalchemy.ext.asyncio import create_async_engine

from alembic import context

from smsgate.core.config import get_settings
from smsgate.infrastructure.persistence import models  # noqa: F401
from smsgate.infrastructure.persistence.database import Base

alembic_config = context.config

if alembic_config.config_file_name is not None:
    fileConfig(alembic_config.config_file_name)


def _database_url() -> str:
    return alembic_config.get_main_option("sqlalchemy.url") or get_settings().database_url


def _configure(**options) -> None:
    url = options.get("url") or _database_url()
    context.configure(
        target_metadata=Base.metadata,
        # SQLite can only ALTER through table copies
        render_as_batch=url.startswith("sqlite"),
        compare_type=True,
        **options,
    )


def _migrate(connection: Connection) -> None:
    _configure(connection=connection)
    with context.begin_transaction():
        context.run_migrations()


async def _migrate_async() -> None:
    engine = create_async_engine(_database_url(), poolclass=pool.NullPool)
    try:
        async with engine.connect() as connection:
            await connection.run_sync(_migrate)
    finally:
        await engine.dispose()


if context.is_offline_mode():
    _configure(url=_database_url(), literal_binds=True, dialect_opts={"paramstyle": "named"})
    with context.begin_transaction():
        context.run_migrations()
elif (shared := alembic_config.attributes.get("connection")) is not None:
    _migrate(shared)
else:
    asyncio.run(_migrate_async())
