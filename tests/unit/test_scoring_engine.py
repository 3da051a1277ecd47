"""
Unit tests for the acquisition scoring engine (pure functions, no database).
"""
import pytest
from datetime import date

from hvac_research.core.models import (
    OwnershipType, Recommendation, ReviewSource, SocialPlatform, SuccessionStatus,
)
from hvac_research.scoring.calculator import (
    business_age_score,
    calculate_score,
    employee_count_score,
    fleet_size_score,
    niche_score,
    permit_trend_score,
    permit_volume_score,
    recommend,
    review_trend_score,
    review_volume_score,
    round_half_up,
    service_area_score,
    succession_score,
)
from hvac_research.scoring.config import DEFAULT_SCORING_CONFIG, ComponentWeights, ScoringConfig
from hvac_research.scoring.types import (
    UNSET, BusinessSnapshot, Numeric, PermitSnapshot, ReviewSnapshot, ScoreBreakdown, Text,
)

AS_OF = date(2026, 6, 30)


def _weighted(score, config=DEFAULT_SCORING_CONFIG):
    w = config.weights
    return round_half_up(
        score.revenue_proxy_score * w.revenue_proxy
        + score.online_weakness_score * w.online_weakness
        + score.acquisition_fit_score * w.acquisition_fit
        + score.growth_signals_score * w.growth_signals
    )


class TestRounding:

    def test_half_rounds_up(self):
        assert round_half_up(50.5) == 51
        assert round_half_up(88.5) == 89
        # Python's round() would give 88 (banker's rounding)
        assert round(88.5) == 88

    def test_float_noise_absorbed(self):
        # A weighted sum meant to be 28.5 can land just below it
        assert round_half_up(28.499999999999996) == 29
        assert round_half_up(28.4) == 28


class TestFactorCurves:

    def test_employee_count_curve(self):
        assert employee_count_score(None) == 0
        assert employee_count_score(0) == 0
        assert employee_count_score(3) == 45      # 3 * 15
        assert employee_count_score(5) == 60      # 100 - 2*20
        assert employee_count_score(25) == 100
        assert employee_count_score(50) == 50     # 100 - 2*25
        assert employee_count_score(80) == 50
        assert employee_count_score(150) == 0

    def test_fleet_size_curve(self):
        assert fleet_size_score(None) == 0
        assert fleet_size_score(2) == 50          # 2 * 25
        assert fleet_size_score(3) == 65          # 100 - 5*7
        assert fleet_size_score(10) == 100
        assert fleet_size_score(20) == 50
        assert fleet_size_score(30) == 60
        assert fleet_size_score(41) == 0

    def test_permit_volume_curve(self):
        assert permit_volume_score(0) == 0
        assert permit_volume_score(10) == 15      # 10 * 1.5
        assert permit_volume_score(49) == 73.5
        assert permit_volume_score(50) == 80
        assert permit_volume_score(100) == 100
        assert permit_volume_score(300) == 100
        assert permit_volume_score(301) == 80
        assert permit_volume_score(500) == 60

    def test_service_area_curve(self):
        assert service_area_score(None) == 50
        assert service_area_score(0) == 50
        assert service_area_score(10) == 30       # 10 * 3
        assert service_area_score(20) == 90
        assert service_area_score(75) == 90
        assert service_area_score(100) == 70

    def test_review_volume_curve(self):
        assert review_volume_score(0) == 90
        assert review_volume_score(10) == 75
        assert review_volume_score(20) == 60
        assert review_volume_score(50) == 40
        assert review_volume_score(100) == 20

    def test_business_age_curve(self):
        assert business_age_score(0) == 50
        assert business_age_score(3) == 30
        assert business_age_score(5) == 70
        assert business_age_score(10) == 100
        assert business_age_score(30) == 100
        assert business_age_score(40) == 80
        assert business_age_score(60) == 60

    def test_niche_premium_substring_case_insensitive(self):
        assert niche_score(()) == 50
        assert niche_score(("Commercial Refrigeration",)) == 100
        assert niche_score(("INDUSTRIAL",)) == 100
        assert niche_score(("residential", "restaurants")) == 100
        assert niche_score(("residential",)) == 80

    def test_succession_owner_age_only_raises(self):
        assert succession_score(None, None) == 50
        assert succession_score(SuccessionStatus.OWNER_RETIRING, None) == 100
        assert succession_score(SuccessionStatus.RECENTLY_TRANSITIONED, 62) == 85
        assert succession_score(SuccessionStatus.SUCCESSION_PLANNED, 56) == 70
        assert succession_score(SuccessionStatus.NO_SUCCESSOR, 65) == 90
        assert succession_score(None, 40) == 50

    def test_permit_trend_curve(self):
        assert permit_trend_score(10, 0) == 60
        assert permit_trend_score(12, 10) == 100   # +20%
        assert permit_trend_score(11, 10) == 85    # +10%
        assert permit_trend_score(10, 10) == 70
        assert permit_trend_score(9, 10) == 50     # -10%
        assert permit_trend_score(5, 10) == 30

    def test_review_trend_curve(self):
        assert review_trend_score(0.0) == 60
        assert review_trend_score(2.0) == 40
        assert review_trend_score(3.5) == 60
        assert review_trend_score(4.0) == 75
        assert review_trend_score(4.5) == 90


class TestRecommendation:

    def test_thresholds_inclusive(self):
        assert recommend(75) == Recommendation.HIGH_PRIORITY
        assert recommend(74) == Recommendation.MEDIUM_PRIORITY
        assert recommend(50) == Recommendation.MEDIUM_PRIORITY
        assert recommend(49) == Recommendation.LOW_PRIORITY
        assert recommend(25) == Recommendation.LOW_PRIORITY
        assert recommend(24) == Recommendation.NOT_RECOMMENDED
        assert recommend(0) == Recommendation.NOT_RECOMMENDED

    def test_custom_thresholds(self):
        config = ScoringConfig(
            version="strict",
            thresholds={"high_priority": 90, "medium_priority": 70, "low_priority": 40},
        )
        assert recommend(89, config) == Recommendation.MEDIUM_PRIORITY
        assert recommend(90, config) == Recommendation.HIGH_PRIORITY


class TestCalculateScore:

    def test_empty_business(self, empty_snapshot):
        score = calculate_score(empty_snapshot, DEFAULT_SCORING_CONFIG, as_of=AS_OF)

        # Revenue: 0 + 0 + 0 + unknown radius 50*0.20 = 10
        assert score.revenue_proxy_score == 10
        # Online: 100*0.30 + 90*0.20 + 90*0.30 + 85*0.20 = 92
        assert score.online_weakness_score == 92
        # Fit: every factor neutral at 50
        assert score.acquisition_fit_score == 50
        # Growth: every factor at 60
        assert score.growth_signals_score == 60
        # Overall: 3 + 23 + 12.5 + 12 = 50.5 -> 51
        assert score.overall_score == 51
        assert score.recommendation == Recommendation.MEDIUM_PRIORITY
        assert score.config_version == "1.0"

    def test_full_business(self, full_snapshot):
        score = calculate_score(full_snapshot, DEFAULT_SCORING_CONFIG, as_of=AS_OF)

        # Revenue: 100*0.30 + 100*0.25 + 100*0.25 + 90*0.20 = 98
        assert score.revenue_proxy_score == 98
        # Online: 30 + 18 + 27 + 17 = 92
        assert score.online_weakness_score == 92
        assert score.acquisition_fit_score == 100
        # Growth: no prior-year permits (60), rating 3.6 (60), placeholders 60
        assert score.growth_signals_score == 60
        # Overall: 29.4 + 23 + 25 + 12 = 89.4 -> 89
        assert score.overall_score == 89
        assert score.recommendation == Recommendation.HIGH_PRIORITY

    def test_scores_in_range(self, empty_snapshot, full_snapshot):
        for snapshot in (empty_snapshot, full_snapshot):
            score = calculate_score(snapshot, as_of=AS_OF)
            for value in (
                score.revenue_proxy_score, score.online_weakness_score,
                score.acquisition_fit_score, score.growth_signals_score, score.overall_score,
            ):
                assert isinstance(value, int)
                assert 0 <= value <= 100

    def test_weighted_sum_identity(self, full_snapshot):
        config = ScoringConfig(
            version="growth-heavy",
            weights=ComponentWeights(
                revenue_proxy=0.10, online_weakness=0.20, acquisition_fit=0.30, growth_signals=0.40,
            ),
        )
        for cfg in (DEFAULT_SCORING_CONFIG, config):
            score = calculate_score(full_snapshot, cfg, as_of=AS_OF)
            assert score.overall_score == _weighted(score, cfg)
            assert score.config_version == cfg.version

    def test_idempotent(self, full_snapshot):
        first = calculate_score(full_snapshot, as_of=AS_OF)
        second = calculate_score(full_snapshot, as_of=AS_OF)
        assert first == second
        assert first.to_dict() == second.to_dict()

    def test_employee_count_peaks_at_25(self):
        scores = [
            calculate_score(BusinessSnapshot(employee_count=n), as_of=AS_OF).revenue_proxy_score
            for n in range(0, 51)
        ]
        rising, falling = scores[:26], scores[25:]
        assert all(a <= b for a, b in zip(rising, rising[1:]))
        assert all(a >= b for a, b in zip(falling, falling[1:]))

    def test_permit_window_is_trailing_twelve_months(self):
        permits = (
            PermitSnapshot(issue_date=date(2025, 6, 29)),  # one day too old
            PermitSnapshot(issue_date=date(2025, 6, 30)),  # window start, inclusive
            PermitSnapshot(issue_date=date(2026, 6, 30)),  # as_of, inclusive
            PermitSnapshot(issue_date=date(2026, 7, 1)),   # future
            PermitSnapshot(issue_date=None),
        )
        score = calculate_score(BusinessSnapshot(permits=permits), as_of=AS_OF)
        permit_factor = next(
            f for f in score.breakdown.revenue_proxy.factors if f.key == "permit_volume"
        )
        assert permit_factor.value == Numeric(2)
        assert permit_factor.score == 3.0  # 2 * 1.5
        assert permit_factor.explanation == "2 permits in last 12 months"

    def test_permit_trend_uses_calendar_years(self):
        permits = tuple(
            PermitSnapshot(issue_date=date(2026, 3, 1)) for _ in range(12)
        ) + tuple(
            PermitSnapshot(issue_date=date(2025, 3, 1)) for _ in range(10)
        )
        score = calculate_score(BusinessSnapshot(permits=permits), as_of=AS_OF)
        trend = score.breakdown.growth_signals.factors[0]
        assert trend.key == "permit_trend"
        assert trend.score == 100  # 12 vs 10 = +20%
        assert trend.value == Text("12 this year vs 10 last year")

    def test_web_presence_is_binary(self):
        present = BusinessSnapshot(
            website="https://lonestarcooling.com",
            social_links=frozenset({SocialPlatform.FACEBOOK}),
        )
        score = calculate_score(present, as_of=AS_OF)
        factors = {f.key: f for f in score.breakdown.online_weakness.factors}
        assert factors["website_quality"].score == 50
        assert factors["social_presence"].score == 40
        assert factors["seo_visibility"].score == 50
        # 50*0.30 + 40*0.20 + 90*0.30 + 50*0.20 = 60
        assert score.online_weakness_score == 60

    def test_review_volume_sums_across_sources(self):
        reviews = (
            ReviewSnapshot(source=ReviewSource.GOOGLE, rating=4.5, review_count=60),
            ReviewSnapshot(source=ReviewSource.YELP, rating=4.5, review_count=45),
        )
        score = calculate_score(BusinessSnapshot(reviews=reviews), as_of=AS_OF)
        online = {f.key: f for f in score.breakdown.online_weakness.factors}
        assert online["review_volume"].value == Numeric(105)
        assert online["review_volume"].score == 20
        growth = {f.key: f for f in score.breakdown.growth_signals.factors}
        # Mean rating 4.5 -> 90
        assert growth["review_trend"].score == 90

    def test_unknown_values_are_unset(self, empty_snapshot):
        score = calculate_score(empty_snapshot, as_of=AS_OF)
        fit = {f.key: f for f in score.breakdown.acquisition_fit.factors}
        assert fit["ownership_type"].value == UNSET
        assert fit["business_age"].value == UNSET
        assert fit["business_age"].explanation
        assert fit["niche_specialization"].value == UNSET

    def test_future_founded_year_is_unset(self):
        score = calculate_score(BusinessSnapshot(founded_year=2030), as_of=AS_OF)
        age = next(f for f in score.breakdown.acquisition_fit.factors if f.key == "business_age")
        assert age.value == UNSET
        assert age.score == 50
        assert age.explanation == "Age unknown"

    def test_hiring_and_fleet_growth_not_implemented(self):
        # Strong permit and review signals must not leak into the two stubs
        permits = tuple(
            PermitSnapshot(issue_date=date(2026, 3, 1)) for _ in range(12)
        ) + tuple(
            PermitSnapshot(issue_date=date(2025, 3, 1)) for _ in range(10)
        )
        reviews = (ReviewSnapshot(source=ReviewSource.GOOGLE, rating=4.9, review_count=200),)
        snapshot = BusinessSnapshot(
            permits=permits, reviews=reviews, employee_count=25, fleet_size=15,
        )
        score = calculate_score(snapshot, as_of=AS_OF)

        growth = {f.key: f for f in score.breakdown.growth_signals.factors}
        assert growth["permit_trend"].score == 100
        assert growth["review_trend"].score == 90
        for key in ("hiring_activity", "fleet_growth"):
            assert growth[key].score == 60
            assert growth[key].value == UNSET

    def test_ownership_scores(self):
        expected = {
            OwnershipType.FAMILY_OWNED: 100,
            OwnershipType.FRANCHISE: 30,
            OwnershipType.PRIVATE_EQUITY: 10,
            OwnershipType.CORPORATE: 20,
            OwnershipType.UNKNOWN: 50,
        }
        for ownership, factor_score in expected.items():
            score = calculate_score(BusinessSnapshot(ownership_type=ownership), as_of=AS_OF)
            assert score.breakdown.acquisition_fit.factors[0].score == factor_score

    def test_factor_order_and_weights(self, full_snapshot):
        score = calculate_score(full_snapshot, as_of=AS_OF)
        keys = {
            name: [f.key for f in comp.factors]
            for name, comp in score.breakdown.components().items()
        }
        assert keys == {
            "revenue_proxy": ["employee_count", "fleet_size", "permit_volume", "service_area"],
            "online_weakness": ["website_quality", "social_presence", "review_volume", "seo_visibility"],
            "acquisition_fit": ["ownership_type", "business_age", "niche_specialization", "succession_status"],
            "growth_signals": ["permit_trend", "review_trend", "hiring_activity", "fleet_growth"],
        }
        for comp in score.breakdown.components().values():
            assert sum(f.weight for f in comp.factors) == pytest.approx(1.0)


class TestBreakdownRoundTrip:

    def test_breakdown_survives_json_shape(self, full_snapshot):
        score = calculate_score(full_snapshot, as_of=AS_OF)
        restored = ScoreBreakdown.from_dict(score.breakdown.to_dict())
        assert restored == score.breakdown

        original = score.breakdown.revenue_proxy.factors[0]
        copy = restored.revenue_proxy.factors[0]
        assert (copy.name, copy.value, copy.score, copy.weight, copy.explanation) == (
            original.name, original.value, original.score, original.weight, original.explanation,
        )
