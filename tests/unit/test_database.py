"""
Tests for the async session helpers in hvac_research.core.database.
"""
import pytest
from unittest.mock import patch
from sqlalchemy import func, select

from hvac_research.core.database import Base, get_async_db, get_db
from hvac_research.prospects.database import BusinessModel


async def _business_count(session_maker):
    async with session_maker() as session:
        return (await session.execute(select(func.count(BusinessModel.id)))).scalar_one()


class TestGetAsyncDb:

    @pytest.mark.asyncio
    async def test_commits_on_success(self, async_session_maker):
        with patch("hvac_research.core.database.async_session_factory", async_session_maker):
            async with get_async_db() as session:
                session.add(BusinessModel(name="Lone Star Cooling", city="Austin", county="Travis"))

        assert await _business_count(async_session_maker) == 1

    @pytest.mark.asyncio
    async def test_rolls_back_and_reraises(self, async_session_maker):
        with patch("hvac_research.core.database.async_session_factory", async_session_maker):
            with pytest.raises(RuntimeError, match="boom"):
                async with get_async_db() as session:
                    session.add(BusinessModel(name="Lone Star Cooling", city="Austin", county="Travis"))
                    await session.flush()
                    raise RuntimeError("boom")

        assert await _business_count(async_session_maker) == 0


class TestGetDb:

    @pytest.mark.asyncio
    async def test_yields_uncommitted_session(self, async_session_maker):
        with patch("hvac_research.core.database.async_session_factory", async_session_maker):
            provider = get_db()
            session = await provider.__anext__()
            session.add(BusinessModel(name="Lone Star Cooling", city="Austin", county="Travis"))
            await session.flush()
            await provider.aclose()

        # The dependency never commits; routers own the transaction
        assert await _business_count(async_session_maker) == 0


def test_models_share_one_metadata():
    assert "businesses" in Base.metadata.tables
    assert "scores" in Base.metadata.tables
    assert "research_jobs" in Base.metadata.tables
