import asyncio
from logging.config import fileConfig
import sys
import os

from sqlalchemy.engine import Connection

from alembic import context

# Add the project root to path so we can import the package
sys.path.append(os.getcwd())

from hvac_research.core.config import settings
from hvac_research.core.database import Base, engine as app_engine

# Import every module that defines models so they register on Base.metadata
from hvac_research.prospects import database as prospects_db  # noqa
from hvac_research.research import database as research_db  # noqa

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata


def get_url():
    return settings.database_url


def run_migrations_offline() -> None:
    """Run migrations in 'offline' mode (emit SQL without a DBAPI connection)."""
    context.configure(
        url=get_url(),
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )

    with context.begin_transaction():
        context.run_migrations()


def do_run_migrations(connection: Connection) -> None:
    context.configure(connection=connection, target_metadata=target_metadata)

    with context.begin_transaction():
        context.run_migrations()


async def run_async_migrations() -> None:
    """Run migrations on the application's async engine."""
    async with app_engine.connect() as connection:
        await connection.run_sync(do_run_migrations)

    await app_engine.dispose()


def run_migrations_online() -> None:
    asyncio.run(run_async_migrations())


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
