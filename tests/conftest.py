"""
Shared pytest fixtures for the HVAC research test suite.
"""
import pytest
from datetime import date, timedelta
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.pool import StaticPool

from hvac_research.core.database import Base
from hvac_research.core.models import OwnershipType, ReviewSource, SuccessionStatus
from hvac_research.prospects import database as prospects_db  # noqa
from hvac_research.research import database as research_db  # noqa
from hvac_research.scoring.types import BusinessSnapshot, PermitSnapshot, ReviewSnapshot


# --- Database Fixtures ---

@pytest.fixture
async def async_engine():
    """Async in-memory SQLite engine with every table created."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def async_session_maker(async_engine):
    return async_sessionmaker(async_engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def async_db_session(async_session_maker):
    """Async in-memory SQLite session for testing."""
    async with async_session_maker() as session:
        yield session


# --- Scoring Fixtures ---

AS_OF = date(2026, 6, 30)


@pytest.fixture
def as_of():
    return AS_OF


@pytest.fixture
def empty_snapshot():
    """A business with nothing known about it."""
    return BusinessSnapshot()


@pytest.fixture
def full_snapshot():
    """
    A strong acquisition target, scored as of 2026-06-30:
    revenue 98, online weakness 92, acquisition fit 100, growth 60 -> 89 HIGH.
    All 150 permits fall in 2026, so there is no prior year to trend against.
    """
    return BusinessSnapshot(
        employee_count=25,
        fleet_size=10,
        service_radius_miles=50.0,
        permits=tuple(
            PermitSnapshot(issue_date=date(2026, 1, 1) + timedelta(days=i)) for i in range(150)
        ),
        reviews=(ReviewSnapshot(source=ReviewSource.GOOGLE, rating=3.6, review_count=5),),
        website=None,
        ownership_type=OwnershipType.FAMILY_OWNED,
        founded_year=2011,
        niches=("refrigeration",),
        succession_status=SuccessionStatus.OWNER_RETIRING,
        owner_age=62,
    )


# --- Mock Data Fixtures ---

@pytest.fixture
def research_output():
    """Narrative deep-research output for a region-discovery run."""
    return (
        "## HVAC Contractors in Travis County\n\n"
        "1. Lone Star Cooling & Heating - Austin, Travis County. Founded 1988 by Bob Ramirez. "
        "About 25 employees and 14 service vans. TDLR license TACLA00012345C. "
        "Google rating 4.1 from 38 reviews. Specializes in commercial rooftop units.\n"
        "2. Hill Country Air - Pflugerville, Travis County. Family owned since 2001.\n"
    )


@pytest.fixture
def extracted_payload():
    """JSON the extraction model returns for research_output."""
    return {
        "businesses": [
            {
                "name": "Lone Star Cooling & Heating",
                "city": "Austin",
                "county": "Travis",
                "ownerName": "Bob Ramirez",
                "foundedYear": 1988,
                "employeeEstimate": 25,
                "fleetEstimate": 14,
                "licenseNumber": "tacla00012345c",
                "reviewCount": 38,
                "averageRating": 4.1,
                "specializations": ["commercial rooftop units"],
                "niches": ["commercial"],
                "confidence": 0.85,
            },
            {
                "name": "Hill Country Air",
                "city": "Pflugerville",
                "county": "Travis",
                "confidence": 0.5,
            },
            {
                "name": "Nameless Location Co",
                "city": "",
                "county": "Travis",
                "confidence": 0.9,
            },
        ]
    }


@pytest.fixture
def sample_business(async_db_session):
    """Factory fixture for creating test businesses."""
    async def _create_business(
        name="Lone Star Cooling",
        city="Austin",
        county="Travis",
        **fields,
    ):
        business = prospects_db.BusinessModel(name=name, city=city, county=county, **fields)
        async_db_session.add(business)
        await async_db_session.flush()
        await async_db_session.refresh(business)
        return business

    return _create_business
