"""
Tests for score persistence, the config registry and snapshot hydration.
"""
import pytest
from datetime import date, datetime
from unittest.mock import patch
from sqlalchemy import select

from hvac_research.core.models import (
    PermitCategory, Recommendation, ReviewSource, SocialPlatform, SuccessionStatus,
)
from hvac_research.prospects.database import (
    EmployeeEstimateModel, PermitModel, ReviewModel, ScoreModel,
)
from hvac_research.prospects.service import (
    BusinessNotFoundError, add_employee_estimate, add_fleet_estimate, add_permits, add_reviews,
    load_business_with_relations,
)
from hvac_research.scoring.config import DEFAULT_SCORING_CONFIG, ScoringConfig
from hvac_research.scoring.service import (
    ScoringConfigConflictError,
    batch_score_businesses,
    calculate_business_score,
    get_active_config,
    list_configs,
    register_config,
    rescore_all,
    save_score,
)
from hvac_research.scoring.snapshot import business_to_snapshot, latest_estimate
from hvac_research.scoring.types import ScoreBreakdown

AS_OF = date(2026, 6, 30)


class TestLatestEstimate:

    def test_empty(self):
        assert latest_estimate([]) is None
        assert latest_estimate(None) is None

    def test_latest_snapshot_wins(self):
        older = EmployeeEstimateModel(id=5, estimated_count=10, snapshot_date=datetime(2026, 1, 1))
        newer = EmployeeEstimateModel(id=2, estimated_count=30, snapshot_date=datetime(2026, 3, 1))
        assert latest_estimate([newer, older]) is newer

    def test_same_timestamp_highest_id_wins(self):
        stamp = datetime(2026, 3, 1)
        first = EmployeeEstimateModel(id=1, estimated_count=10, snapshot_date=stamp)
        second = EmployeeEstimateModel(id=2, estimated_count=12, snapshot_date=stamp)
        assert latest_estimate([second, first]) is second


class TestBusinessToSnapshot:

    @pytest.mark.asyncio
    async def test_hydration(self, async_db_session, sample_business):
        business = await sample_business(
            website="https://hillcountryair.com",
            facebook_url="https://facebook.com/hillcountryair",
            service_radius=40.0,
            niches=["restaurants"],
            succession_status=SuccessionStatus.NO_SUCCESSOR.value,
            ownership_type="NOT_A_REAL_TYPE",
            owner_age=58,
        )
        await add_employee_estimate(async_db_session, business.id, 8, snapshot_date=datetime(2025, 1, 1))
        await add_employee_estimate(async_db_session, business.id, 22, snapshot_date=datetime(2026, 1, 1))
        await add_fleet_estimate(async_db_session, business.id, 9)
        await add_permits(async_db_session, business.id, [
            {"permit_number": "M-1", "permit_type": "commercial", "issue_date": date(2026, 2, 1)},
        ])
        await add_reviews(async_db_session, business.id, [
            {"source": "GOOGLE", "rating": 4.2, "review_count": 31},
        ])

        hydrated = await load_business_with_relations(async_db_session, business.id)
        snapshot = business_to_snapshot(hydrated)

        assert snapshot.employee_count == 22
        assert snapshot.fleet_size == 9
        assert snapshot.service_radius_miles == 40.0
        assert snapshot.website == "https://hillcountryair.com"
        assert snapshot.social_links == frozenset({SocialPlatform.FACEBOOK})
        assert snapshot.permits[0].permit_type == PermitCategory.COMMERCIAL
        assert snapshot.reviews[0].source == ReviewSource.GOOGLE
        assert snapshot.reviews[0].review_count == 31
        assert snapshot.niches == ("restaurants",)
        assert snapshot.succession_status == SuccessionStatus.NO_SUCCESSOR
        # Unknown enum values are treated as unset, not an error
        assert snapshot.ownership_type is None
        assert snapshot.owner_age == 58


class TestCalculateBusinessScore:

    @pytest.mark.asyncio
    async def test_persists_score(self, async_db_session, sample_business):
        business = await sample_business()
        score = await calculate_business_score(
            async_db_session, business.id, DEFAULT_SCORING_CONFIG, as_of=AS_OF
        )

        row = await async_db_session.get(ScoreModel, 1)
        assert row.business_id == business.id
        assert row.overall_score == score.overall_score == 51
        assert row.recommendation == Recommendation.MEDIUM_PRIORITY.value
        assert row.config_version == "1.0"
        assert ScoreBreakdown.from_dict(row.breakdown) == score.breakdown

    @pytest.mark.asyncio
    async def test_rescore_overwrites_single_row(self, async_db_session, sample_business):
        business = await sample_business()
        await calculate_business_score(async_db_session, business.id, DEFAULT_SCORING_CONFIG, as_of=AS_OF)

        await add_employee_estimate(async_db_session, business.id, 25)
        v2 = DEFAULT_SCORING_CONFIG.model_copy(update={"version": "2.0"})
        await calculate_business_score(async_db_session, business.id, v2, as_of=AS_OF)

        rows = (await async_db_session.execute(
            ScoreModel.__table__.select().where(ScoreModel.business_id == business.id)
        )).all()
        assert len(rows) == 1
        row = await async_db_session.get(ScoreModel, rows[0].id)
        # Revenue: 100*0.30 + 50*0.20 = 40
        assert row.revenue_proxy_score == 40
        assert row.config_version == "2.0"

    @pytest.mark.asyncio
    async def test_missing_business(self, async_db_session):
        with pytest.raises(BusinessNotFoundError):
            await calculate_business_score(async_db_session, 999, DEFAULT_SCORING_CONFIG)

    @pytest.mark.asyncio
    async def test_batch_skips_failures(self, async_db_session, sample_business):
        a = await sample_business(name="Alpha Air")
        b = await sample_business(name="Bravo Heating")
        scores = await batch_score_businesses(
            async_db_session, [a.id, 999, b.id], DEFAULT_SCORING_CONFIG, as_of=AS_OF
        )
        assert len(scores) == 2

    @pytest.mark.asyncio
    async def test_batch_survives_flush_error(self, async_db_session, sample_business):
        a = await sample_business(name="Alpha Air")
        b = await sample_business(name="Bravo Heating")
        c = await sample_business(name="Cedar Comfort")
        ids = [a.id, b.id, c.id]
        failing_id = b.id

        async def save_or_fail(session, business_id, score):
            if business_id == failing_id:
                # Required score columns left empty fail at flush
                session.add(ScoreModel(business_id=business_id))
                await session.flush()
            return await save_score(session, business_id, score)

        with patch("hvac_research.scoring.service.save_score", side_effect=save_or_fail):
            scores = await batch_score_businesses(
                async_db_session, ids, DEFAULT_SCORING_CONFIG, as_of=AS_OF
            )

        assert len(scores) == 2
        await async_db_session.commit()
        scored_ids = (await async_db_session.execute(select(ScoreModel.business_id))).scalars().all()
        assert sorted(scored_ids) == [ids[0], ids[2]]

    @pytest.mark.asyncio
    async def test_rescore_all(self, async_db_session, sample_business):
        await sample_business(name="Alpha Air")
        await sample_business(name="Bravo Heating")
        scores = await rescore_all(async_db_session, DEFAULT_SCORING_CONFIG, as_of=AS_OF)
        assert [s.overall_score for s in scores] == [51, 51]

    @pytest.mark.asyncio
    async def test_permit_and_reviews_flow_through(self, async_db_session, sample_business):
        business = await sample_business()
        async_db_session.add_all([
            PermitModel(business_id=business.id, issue_date=date(2026, 1, 10)),
            ReviewModel(business_id=business.id, source="YELP", rating=4.8, review_count=120),
        ])
        await async_db_session.flush()

        score = await calculate_business_score(
            async_db_session, business.id, DEFAULT_SCORING_CONFIG, as_of=AS_OF
        )
        online = {f.key: f for f in score.breakdown.online_weakness.factors}
        assert online["review_volume"].score == 20
        revenue = {f.key: f for f in score.breakdown.revenue_proxy.factors}
        assert revenue["permit_volume"].score == 1.5


class TestConfigRegistry:

    @pytest.mark.asyncio
    async def test_active_config_falls_back_to_yaml(self, async_db_session):
        config = await get_active_config(async_db_session)
        assert config.version == "1.0"

    @pytest.mark.asyncio
    async def test_latest_registered_is_active(self, async_db_session):
        await register_config(async_db_session, DEFAULT_SCORING_CONFIG)
        v2 = ScoringConfig(version="2.0", thresholds={"high_priority": 80, "medium_priority": 55, "low_priority": 30})
        await register_config(async_db_session, v2)

        active = await get_active_config(async_db_session)
        assert active == v2
        assert [c.version for c in await list_configs(async_db_session)] == ["2.0", "1.0"]

    @pytest.mark.asyncio
    async def test_reregister_identical_is_noop(self, async_db_session):
        first = await register_config(async_db_session, DEFAULT_SCORING_CONFIG)
        again = await register_config(async_db_session, DEFAULT_SCORING_CONFIG)
        assert first.id == again.id

    @pytest.mark.asyncio
    async def test_changed_payload_needs_new_version(self, async_db_session):
        await register_config(async_db_session, DEFAULT_SCORING_CONFIG)
        changed = DEFAULT_SCORING_CONFIG.model_copy(update={"description": "tweaked"})
        with pytest.raises(ScoringConfigConflictError):
            await register_config(async_db_session, changed)
