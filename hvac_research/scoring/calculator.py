"""
Acquisition Scoring Engine.

Pure function from a ``BusinessSnapshot`` plus a ``ScoringConfig`` to a
``Score``: four component scores (0-100), a weighted overall score, a
recommendation tier and a per-factor explanation trail.

Component scorers:
  - Revenue Proxy:   is revenue plausibly in the $1M-$10M range?
  - Online Weakness: how much upside in digital presence? (higher = weaker)
  - Acquisition Fit: ownership, age, specialization, succession
  - Growth Signals:  permit and review trends

Factor scores are carried as floats. Only component and overall scores are
rounded (half-up). No I/O happens here; persistence lives in
``hvac_research.scoring.service``.
"""
import math
from datetime import date
from typing import List, Optional, Tuple

from hvac_research.core.models import OwnershipType, Recommendation, SuccessionStatus
from hvac_research.core.utils import one_year_before
from hvac_research.scoring import explanations
from hvac_research.scoring.config import DEFAULT_SCORING_CONFIG, ScoringConfig
from hvac_research.scoring.types import (
    UNSET,
    BusinessSnapshot,
    ComponentScore,
    FactorValue,
    Numeric,
    Score,
    ScoreBreakdown,
    ScoreFactor,
    Text,
)

PREMIUM_NICHES = ("refrigeration", "clean_rooms", "industrial", "restaurants")

OWNERSHIP_SCORES = {
    OwnershipType.FAMILY_OWNED: 100,
    OwnershipType.FRANCHISE: 30,
    OwnershipType.PRIVATE_EQUITY: 10,
    OwnershipType.CORPORATE: 20,
}

SUCCESSION_SCORES = {
    SuccessionStatus.OWNER_RETIRING: 100,
    SuccessionStatus.NO_SUCCESSOR: 90,
    SuccessionStatus.SUCCESSION_PLANNED: 40,
    SuccessionStatus.RECENTLY_TRANSITIONED: 20,
}

# Neutral score for factors with no data source (hiring, fleet growth)
NEUTRAL_PLACEHOLDER = 60


def round_half_up(x: float) -> int:
    """Round to nearest integer, .5 rounds up. Absorbs float noise first."""
    return int(math.floor(round(x, 9) + 0.5))


def recommend(overall_score: float, config: ScoringConfig = DEFAULT_SCORING_CONFIG) -> Recommendation:
    """Threshold lookup, most restrictive first. Boundaries are inclusive."""
    t = config.thresholds
    if overall_score >= t.high_priority:
        return Recommendation.HIGH_PRIORITY
    if overall_score >= t.medium_priority:
        return Recommendation.MEDIUM_PRIORITY
    if overall_score >= t.low_priority:
        return Recommendation.LOW_PRIORITY
    return Recommendation.NOT_RECOMMENDED


# =============================================================================
# FACTOR CURVES
# =============================================================================

def employee_count_score(count: Optional[int]) -> float:
    """5-50 ideal, peak at 25."""
    n = count or 0
    if 5 <= n <= 50:
        return 100 - abs(n - 25) * 2
    if 50 < n <= 100:
        return 50  # Too large but possible
    if 0 < n < 5:
        return n * 15  # Too small
    return 0


def fleet_size_score(vehicles: Optional[int]) -> float:
    """3-20 vehicles ideal, peak at 10."""
    v = vehicles or 0
    if 3 <= v <= 20:
        return 100 - abs(v - 10) * 5
    if 20 < v <= 40:
        return 60
    if 0 < v < 3:
        return v * 25
    return 0


def permit_volume_score(recent_permits: int) -> float:
    """50-400 permits/year ideal, 100-300 best."""
    p = recent_permits
    if 50 <= p <= 400:
        return 80 + (20 if 100 <= p <= 300 else 0)
    if p > 400:
        return 60  # Very high volume
    if p > 0:
        return min(p * 1.5, 75)
    return 0


def service_area_score(radius: Optional[float]) -> float:
    if not radius or radius <= 0:
        return 50  # Unknown
    if 20 <= radius <= 75:
        return 90
    if radius > 75:
        return 70
    return radius * 3


def review_volume_score(total_reviews: int) -> float:
    """Few reviews = high weakness."""
    if total_reviews >= 100:
        return 20
    if total_reviews >= 50:
        return 40
    if total_reviews >= 20:
        return 60
    if total_reviews >= 10:
        return 75
    return 90


def business_age_score(years: int) -> float:
    """10-30 years ideal."""
    if 10 <= years <= 30:
        return 100
    if 30 < years <= 50:
        return 80
    if 5 <= years < 10:
        return 70
    if years > 50:
        return 60
    if years > 0:
        return years * 10
    return 50


def niche_score(niches: Tuple[str, ...]) -> float:
    if not niches:
        return 50
    lowered = [n.lower() for n in niches]
    if any(premium in tag for tag in lowered for premium in PREMIUM_NICHES):
        return 100
    return 80


def succession_score(status: Optional[SuccessionStatus], owner_age: Optional[int]) -> float:
    score = SUCCESSION_SCORES.get(status, 50)
    # Owner age only ever raises the status-derived score
    if owner_age:
        if owner_age >= 60:
            score = max(score, 85)
        elif owner_age >= 55:
            score = max(score, 70)
    return score


def permit_trend_score(this_year: int, last_year: int) -> float:
    if last_year == 0:
        return 60  # Insufficient history
    growth = (this_year - last_year) / last_year
    if growth >= 0.2:
        return 100
    if growth >= 0.1:
        return 85
    if growth >= 0:
        return 70
    if growth >= -0.1:
        return 50
    return 30


def review_trend_score(avg_rating: float) -> float:
    # Proxy: current average rating, no historical series is tracked
    if avg_rating >= 4.5:
        return 90
    if avg_rating >= 4.0:
        return 75
    if avg_rating >= 3.5:
        return 60
    if avg_rating > 0:
        return 40
    return 60


# =============================================================================
# COMPONENT SCORERS
# =============================================================================

def _component(factors: List[ScoreFactor]) -> ComponentScore:
    total = sum(f.score * f.weight for f in factors)
    return ComponentScore(score=round_half_up(total), factors=tuple(factors))


def _optional_number(value) -> FactorValue:
    return Numeric(value) if value is not None else UNSET


def score_revenue_proxy(business: BusinessSnapshot, config: ScoringConfig, as_of: date) -> ComponentScore:
    w = config.factors.revenue_proxy

    employee_value = _optional_number(business.employee_count)
    fleet_value = _optional_number(business.fleet_size)

    window_start = one_year_before(as_of)
    recent_permits = sum(
        1 for p in business.permits
        if p.issue_date is not None and window_start <= p.issue_date <= as_of
    )
    permit_value = Numeric(recent_permits)

    radius = business.service_radius_miles
    area_value = Numeric(radius) if radius and radius > 0 else UNSET

    factors = [
        ScoreFactor(
            key="employee_count",
            name="Employee Count",
            value=employee_value,
            score=employee_count_score(business.employee_count),
            weight=w.employee_count,
            explanation=explanations.employee_count(employee_value),
        ),
        ScoreFactor(
            key="fleet_size",
            name="Fleet Size",
            value=fleet_value,
            score=fleet_size_score(business.fleet_size),
            weight=w.fleet_size,
            explanation=explanations.fleet_size(fleet_value),
        ),
        ScoreFactor(
            key="permit_volume",
            name="Permit Volume",
            value=permit_value,
            score=permit_volume_score(recent_permits),
            weight=w.permit_volume,
            explanation=explanations.permit_volume(permit_value),
        ),
        ScoreFactor(
            key="service_area",
            name="Service Area",
            value=area_value,
            score=service_area_score(radius),
            weight=w.service_area,
            explanation=explanations.service_area(area_value),
        ),
    ]
    return _component(factors)


def score_online_weakness(business: BusinessSnapshot, config: ScoringConfig) -> ComponentScore:
    """Higher score = weaker online presence = more upside."""
    w = config.factors.online_weakness

    # Presence only; no content-quality signal is available
    website_value = Text(business.website) if business.website else UNSET
    social_value = Text("Present") if business.social_links else UNSET

    total_reviews = sum(r.review_count for r in business.reviews)
    review_value = Numeric(total_reviews)

    seo_value = Text("Estimated")

    factors = [
        ScoreFactor(
            key="website_quality",
            name="Website Quality",
            value=website_value,
            score=50 if business.website else 100,
            weight=w.website_quality,
            explanation=explanations.website_quality(website_value),
        ),
        ScoreFactor(
            key="social_presence",
            name="Social Presence",
            value=social_value,
            score=40 if business.social_links else 90,
            weight=w.social_presence,
            explanation=explanations.social_presence(social_value),
        ),
        ScoreFactor(
            key="review_volume",
            name="Review Volume",
            value=review_value,
            score=review_volume_score(total_reviews),
            weight=w.review_volume,
            explanation=explanations.review_volume(review_value),
        ),
        ScoreFactor(
            key="seo_visibility",
            name="SEO Visibility",
            value=seo_value,
            score=50 if business.website else 85,
            weight=w.seo_visibility,
            explanation=explanations.seo_visibility(seo_value),
        ),
    ]
    return _component(factors)


def score_acquisition_fit(business: BusinessSnapshot, config: ScoringConfig, as_of: date) -> ComponentScore:
    w = config.factors.acquisition_fit

    ownership = business.ownership_type
    ownership_value = Text(ownership.value) if ownership is not None else UNSET

    years = as_of.year - business.founded_year if business.founded_year else 0
    # A founding year in the future is as good as unknown
    age_value = Numeric(years) if years > 0 else UNSET

    niches = tuple(n for n in business.niches if n)
    niche_value = Text(", ".join(niches)) if niches else UNSET

    status = business.succession_status
    succession_value = Text(status.value) if status is not None else UNSET

    factors = [
        ScoreFactor(
            key="ownership_type",
            name="Ownership Type",
            value=ownership_value,
            score=OWNERSHIP_SCORES.get(ownership, 50),
            weight=w.ownership_type,
            explanation=explanations.ownership_type(ownership_value),
        ),
        ScoreFactor(
            key="business_age",
            name="Business Age",
            value=age_value,
            score=business_age_score(years),
            weight=w.business_age,
            explanation=explanations.business_age(age_value),
        ),
        ScoreFactor(
            key="niche_specialization",
            name="Niche Specialization",
            value=niche_value,
            score=niche_score(niches),
            weight=w.niche_specialization,
            explanation=explanations.niche_specialization(niche_value),
        ),
        ScoreFactor(
            key="succession_status",
            name="Succession Status",
            value=succession_value,
            score=succession_score(status, business.owner_age),
            weight=w.succession_status,
            explanation=explanations.succession_status(succession_value, business.owner_age),
        ),
    ]
    return _component(factors)


def score_growth_signals(business: BusinessSnapshot, config: ScoringConfig, as_of: date) -> ComponentScore:
    w = config.factors.growth_signals

    this_year = sum(1 for p in business.permits if p.issue_date and p.issue_date.year == as_of.year)
    last_year = sum(1 for p in business.permits if p.issue_date and p.issue_date.year == as_of.year - 1)
    trend_value = Text(f"{this_year} this year vs {last_year} last year")

    ratings = [r.rating for r in business.reviews]
    avg_rating = sum(ratings) / len(ratings) if ratings else 0.0
    rating_value = Numeric(avg_rating) if avg_rating > 0 else UNSET

    factors = [
        ScoreFactor(
            key="permit_trend",
            name="Permit Trend",
            value=trend_value,
            score=permit_trend_score(this_year, last_year),
            weight=w.permit_trend,
            explanation=explanations.permit_trend(this_year, last_year),
        ),
        ScoreFactor(
            key="review_trend",
            name="Review Trend",
            value=rating_value,
            score=review_trend_score(avg_rating),
            weight=w.review_trend,
            explanation=explanations.review_trend(rating_value),
        ),
        # Not implemented: no job-posting data source exists
        ScoreFactor(
            key="hiring_activity",
            name="Hiring Activity",
            value=UNSET,
            score=NEUTRAL_PLACEHOLDER,
            weight=w.hiring_activity,
            explanation=explanations.hiring_activity(UNSET),
        ),
        # Not implemented: no fleet history is collected
        ScoreFactor(
            key="fleet_growth",
            name="Fleet Growth",
            value=UNSET,
            score=NEUTRAL_PLACEHOLDER,
            weight=w.fleet_growth,
            explanation=explanations.fleet_growth(UNSET),
        ),
    ]
    return _component(factors)


# =============================================================================
# MAIN SCORING FUNCTION
# =============================================================================

def calculate_score(
    business: BusinessSnapshot,
    config: ScoringConfig = DEFAULT_SCORING_CONFIG,
    as_of: Optional[date] = None,
) -> Score:
    """
    Calculate the complete score for a business snapshot.

    ``as_of`` pins the current year and the trailing 12-month permit window.
    Pass it explicitly for reproducible results; None means today.
    """
    if as_of is None:
        as_of = date.today()

    revenue_proxy = score_revenue_proxy(business, config, as_of)
    online_weakness = score_online_weakness(business, config)
    acquisition_fit = score_acquisition_fit(business, config, as_of)
    growth_signals = score_growth_signals(business, config, as_of)

    weights = config.weights
    overall = round_half_up(
        revenue_proxy.score * weights.revenue_proxy
        + online_weakness.score * weights.online_weakness
        + acquisition_fit.score * weights.acquisition_fit
        + growth_signals.score * weights.growth_signals
    )

    return Score(
        revenue_proxy_score=revenue_proxy.score,
        online_weakness_score=online_weakness.score,
        acquisition_fit_score=acquisition_fit.score,
        growth_signals_score=growth_signals.score,
        overall_score=overall,
        recommendation=recommend(overall, config),
        breakdown=ScoreBreakdown(
            revenue_proxy=revenue_proxy,
            online_weakness=online_weakness,
            acquisition_fit=acquisition_fit,
            growth_signals=growth_signals,
        ),
        config_version=config.version,
    )
