# ──── Usage Guide ────
# Everything is async: services, workflows, the web app and scripts/ all use
# async_session_factory, get_db or get_async_db.
#   Pattern: async with get_async_db() as session:
#                result = await session.execute(select(Model).where(...))
#
# Services only flush. Callers (routers, workflows, scripts) own the commit.
#
# DATABASE: PostgreSQL only (asyncpg).

from contextlib import asynccontextmanager
from typing import AsyncGenerator
from sqlalchemy import MetaData
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.orm import DeclarativeBase
from hvac_research.core.config import settings


class Base(DeclarativeBase):
    metadata = MetaData()


# ──── Async Engine (PostgreSQL + asyncpg) ────
db_url = settings.database_url
if db_url.startswith("postgresql://") and "asyncpg" not in db_url:
    db_url = db_url.replace("postgresql://", "postgresql+asyncpg://")

engine = create_async_engine(db_url, echo=False, future=True)

async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autocommit=False,
    autoflush=False,
)


# ──── FastAPI Dependency ────
async def get_db() -> AsyncGenerator[AsyncSession, None]:
    async with async_session_factory() as session:
        yield session


# ──── Context Manager (scripts, scheduler, background tasks) ────
@asynccontextmanager
async def get_async_db() -> AsyncGenerator[AsyncSession, None]:
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
