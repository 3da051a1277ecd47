"""
Tests for the prospect record store: upsert/merge, status pipeline, notes,
filtered listing and dashboard stats.
"""
import pytest
from datetime import date
from pydantic import ValidationError

from hvac_research.core.models import BusinessStatus, NoteType, OwnershipType
from hvac_research.prospects.filters import ProspectFilters
from hvac_research.prospects.service import (
    BusinessNotFoundError,
    add_employee_estimate,
    add_note,
    create_business,
    dashboard_stats,
    find_by_natural_key,
    list_businesses,
    list_businesses_for_export,
    list_notes,
    update_business,
    update_status,
    upsert_business,
)
from hvac_research.scoring.config import DEFAULT_SCORING_CONFIG
from hvac_research.scoring.service import calculate_business_score

AS_OF = date(2026, 6, 30)


class TestCreateAndUpdate:

    @pytest.mark.asyncio
    async def test_create_requires_natural_key(self, async_db_session):
        with pytest.raises(ValueError, match="county"):
            await create_business(async_db_session, {"name": "Alpha Air", "city": "Austin", "county": ""})

    @pytest.mark.asyncio
    async def test_create_stores_enum_values(self, async_db_session):
        business = await create_business(async_db_session, {
            "name": "Alpha Air",
            "city": "Austin",
            "county": "Travis",
            "ownership_type": OwnershipType.FAMILY_OWNED,
            "not_a_column": "ignored",
        })
        assert business.id is not None
        assert business.ownership_type == "FAMILY_OWNED"
        assert business.status == BusinessStatus.DISCOVERED.value
        assert business.state == "TX"

    @pytest.mark.asyncio
    async def test_update_sets_explicit_none(self, async_db_session, sample_business):
        business = await sample_business(phone="512-555-0100")
        updated = await update_business(async_db_session, business.id, {"phone": None, "founded_year": 1995})
        assert updated.phone is None
        assert updated.founded_year == 1995

    @pytest.mark.asyncio
    async def test_update_missing(self, async_db_session):
        with pytest.raises(BusinessNotFoundError):
            await update_business(async_db_session, 42, {"phone": None})


class TestUpsert:

    @pytest.mark.asyncio
    async def test_natural_key_case_insensitive(self, async_db_session, sample_business):
        business = await sample_business(name="Lone Star Cooling", city="Austin", county="Travis")
        found = await find_by_natural_key(async_db_session, " lone star cooling ", "AUSTIN", "travis")
        assert found.id == business.id

    @pytest.mark.asyncio
    async def test_upsert_creates_then_merges(self, async_db_session):
        first, created = await upsert_business(async_db_session, {
            "name": "Alpha Air", "city": "Austin", "county": "Travis",
            "phone": "512-555-0100", "website": "https://alphaair.com",
        }, job_id=7)
        assert created is True
        assert first.discovery_job_id == 7

        merged, created = await upsert_business(async_db_session, {
            "name": "alpha air", "city": "Austin", "county": "Travis",
            "phone": "", "website": None, "email": "info@alphaair.com", "niches": [],
        }, job_id=8)
        assert created is False
        assert merged.id == first.id
        # Empty incoming values never erase what is known
        assert merged.phone == "512-555-0100"
        assert merged.website == "https://alphaair.com"
        assert merged.email == "info@alphaair.com"
        # Provenance stays with the job that discovered the record
        assert merged.discovery_job_id == 7
        assert merged.name == "Alpha Air"


class TestStatusAndNotes:

    @pytest.mark.asyncio
    async def test_qualify_stamps_time(self, async_db_session, sample_business):
        business = await sample_business()
        updated = await update_status(async_db_session, business.id, BusinessStatus.QUALIFIED)
        assert updated.status == "QUALIFIED"
        assert updated.qualified_at is not None

    @pytest.mark.asyncio
    async def test_disqualify_records_reason_note(self, async_db_session, sample_business):
        business = await sample_business()
        updated = await update_status(
            async_db_session, business.id, BusinessStatus.DISQUALIFIED, reason="Owned by PE roll-up"
        )
        assert updated.disqualify_reason == "Owned by PE roll-up"
        assert updated.disqualified_at is not None

        notes = await list_notes(async_db_session, business.id)
        assert [(n.note_type, n.content) for n in notes] == [
            (NoteType.DISQUALIFICATION.value, "Owned by PE roll-up"),
        ]

    @pytest.mark.asyncio
    async def test_invalid_status(self, async_db_session, sample_business):
        business = await sample_business()
        with pytest.raises(ValueError):
            await update_status(async_db_session, business.id, "SOLD")

    @pytest.mark.asyncio
    async def test_notes_newest_first(self, async_db_session, sample_business):
        business = await sample_business()
        await add_note(async_db_session, business.id, "Left voicemail", NoteType.CONTACT_ATTEMPT)
        await add_note(async_db_session, business.id, "Owner called back")
        notes = await list_notes(async_db_session, business.id)
        assert [n.content for n in notes] == ["Owner called back", "Left voicemail"]
        assert notes[1].note_type == "CONTACT_ATTEMPT"

    @pytest.mark.asyncio
    async def test_note_on_missing_business(self, async_db_session):
        with pytest.raises(BusinessNotFoundError):
            await add_note(async_db_session, 404, "hello")


class TestListing:

    async def _seed(self, session, sample_business):
        alpha = await sample_business(name="Alpha Air", city="Austin", county="Travis", owner_name="Ann Lee")
        bravo = await sample_business(name="Bravo Heating", city="Houston", county="Harris")
        charlie = await sample_business(name="Charlie Cooling", city="Round Rock", county="Williamson")
        # Alpha: 25 employees lifts revenue proxy; Bravo stays at the empty-record 51
        await add_employee_estimate(session, alpha.id, 25)
        await calculate_business_score(session, alpha.id, DEFAULT_SCORING_CONFIG, as_of=AS_OF)
        await calculate_business_score(session, bravo.id, DEFAULT_SCORING_CONFIG, as_of=AS_OF)
        return alpha, bravo, charlie

    @pytest.mark.asyncio
    async def test_default_sort_score_desc_unscored_last(self, async_db_session, sample_business):
        alpha, bravo, charlie = await self._seed(async_db_session, sample_business)
        page, total = await list_businesses(async_db_session)
        assert total == 3
        assert [b.id for b in page] == [alpha.id, bravo.id, charlie.id]
        # Alpha: revenue 40 -> 12 + 23 + 12.5 + 12 = 59.5 -> 60
        assert page[0].score.overall_score == 60
        assert page[2].score is None

    @pytest.mark.asyncio
    async def test_filters(self, async_db_session, sample_business):
        alpha, bravo, charlie = await self._seed(async_db_session, sample_business)

        page, total = await list_businesses(async_db_session, ProspectFilters(county=["Harris", "Williamson"]))
        assert {b.id for b in page} == {bravo.id, charlie.id}

        page, total = await list_businesses(async_db_session, ProspectFilters(min_score=55))
        assert [b.id for b in page] == [alpha.id]

        page, total = await list_businesses(async_db_session, ProspectFilters(search="ann"))
        assert [b.id for b in page] == [alpha.id]

        page, total = await list_businesses(
            async_db_session, ProspectFilters(recommendation=["MEDIUM_PRIORITY"], sort_by="name", sort_dir="desc")
        )
        assert [b.id for b in page] == [bravo.id, alpha.id]

    @pytest.mark.asyncio
    async def test_pagination_total(self, async_db_session, sample_business):
        await self._seed(async_db_session, sample_business)
        page, total = await list_businesses(async_db_session, ProspectFilters(limit=1, offset=1))
        assert len(page) == 1
        assert total == 3

    @pytest.mark.asyncio
    async def test_export_has_no_pagination(self, async_db_session, sample_business):
        await self._seed(async_db_session, sample_business)
        rows = await list_businesses_for_export(async_db_session, ProspectFilters(limit=1))
        assert len(rows) == 3
        assert rows[0].employees[0].estimated_count == 25

    def test_filter_validation(self):
        with pytest.raises(ValidationError):
            ProspectFilters(sort_by="revenue")
        with pytest.raises(ValidationError):
            ProspectFilters(min_score=80, max_score=20)


class TestDashboardStats:

    @pytest.mark.asyncio
    async def test_empty(self, async_db_session):
        stats = await dashboard_stats(async_db_session)
        assert stats["total_businesses"] == 0
        assert stats["average_score"] is None
        assert stats["by_status"]["DISCOVERED"] == 0
        assert stats["by_recommendation"]["HIGH_PRIORITY"] == 0

    @pytest.mark.asyncio
    async def test_counts(self, async_db_session, sample_business):
        a = await sample_business(name="Alpha Air")
        b = await sample_business(name="Bravo Heating")
        await update_status(async_db_session, b.id, BusinessStatus.CONTACTED)
        await calculate_business_score(async_db_session, a.id, DEFAULT_SCORING_CONFIG, as_of=AS_OF)

        stats = await dashboard_stats(async_db_session)
        assert stats["total_businesses"] == 2
        assert stats["scored_businesses"] == 1
        assert stats["average_score"] == 51.0
        assert stats["by_status"]["DISCOVERED"] == 1
        assert stats["by_status"]["CONTACTED"] == 1
        assert stats["by_recommendation"]["MEDIUM_PRIORITY"] == 1
