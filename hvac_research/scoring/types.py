"""
Value types for the scoring engine.

Inputs (``BusinessSnapshot`` and its permit / review records) and outputs
(``Score`` with its ``ScoreBreakdown``) are frozen dataclasses so a score
can be computed from any thread and compared by value.

Factor values are a small tagged union:
    Numeric(25)          a counted or measured input
    Text("FAMILY_OWNED") a categorical or descriptive input
    Unset()              nothing known
"""
from dataclasses import dataclass
from datetime import date
from typing import Any, Dict, FrozenSet, Optional, Tuple, Union

from hvac_research.core.models import (
    OwnershipType,
    PermitCategory,
    Recommendation,
    ReviewSource,
    SocialPlatform,
    SuccessionStatus,
)


# =============================================================================
# FACTOR VALUES
# =============================================================================

@dataclass(frozen=True)
class Numeric:
    value: float

    def display(self) -> str:
        return f"{self.value:g}"


@dataclass(frozen=True)
class Text:
    value: str

    def display(self) -> str:
        return self.value


@dataclass(frozen=True)
class Unset:
    def display(self) -> str:
        return "Unknown"


FactorValue = Union[Numeric, Text, Unset]

UNSET = Unset()


def factor_value_to_dict(value: FactorValue) -> Dict[str, Any]:
    if isinstance(value, Numeric):
        return {"type": "numeric", "value": value.value}
    if isinstance(value, Text):
        return {"type": "text", "value": value.value}
    return {"type": "unset"}


def factor_value_from_dict(data: Dict[str, Any]) -> FactorValue:
    kind = data.get("type")
    if kind == "numeric":
        return Numeric(data["value"])
    if kind == "text":
        return Text(data["value"])
    if kind == "unset":
        return UNSET
    raise ValueError(f"Unknown factor value type: {kind!r}")


# =============================================================================
# INPUT SNAPSHOT
# =============================================================================

@dataclass(frozen=True)
class PermitSnapshot:
    issue_date: Optional[date] = None
    permit_type: PermitCategory = PermitCategory.OTHER


@dataclass(frozen=True)
class ReviewSnapshot:
    source: ReviewSource = ReviewSource.OTHER
    rating: float = 0.0  # [0, 5]
    review_count: int = 0


@dataclass(frozen=True)
class BusinessSnapshot:
    """
    Everything the scoring engine reads about a business.

    Every field is optional. ``employee_count`` and ``fleet_size`` are the
    values of the latest estimate only (see ``scoring.snapshot``).
    """
    employee_count: Optional[int] = None
    fleet_size: Optional[int] = None
    permits: Tuple[PermitSnapshot, ...] = ()
    service_radius_miles: Optional[float] = None
    website: Optional[str] = None
    social_links: FrozenSet[SocialPlatform] = frozenset()
    reviews: Tuple[ReviewSnapshot, ...] = ()
    ownership_type: Optional[OwnershipType] = None
    founded_year: Optional[int] = None
    niches: Tuple[str, ...] = ()
    succession_status: Optional[SuccessionStatus] = None
    owner_age: Optional[int] = None


# =============================================================================
# OUTPUT
# =============================================================================

@dataclass(frozen=True)
class ScoreFactor:
    key: str
    name: str
    value: FactorValue
    score: float
    weight: float
    explanation: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "key": self.key,
            "name": self.name,
            "value": factor_value_to_dict(self.value),
            "score": self.score,
            "weight": self.weight,
            "explanation": self.explanation,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ScoreFactor":
        return cls(
            key=data["key"],
            name=data["name"],
            value=factor_value_from_dict(data["value"]),
            score=data["score"],
            weight=data["weight"],
            explanation=data["explanation"],
        )


@dataclass(frozen=True)
class ComponentScore:
    score: int
    factors: Tuple[ScoreFactor, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {"score": self.score, "factors": [f.to_dict() for f in self.factors]}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ComponentScore":
        return cls(
            score=data["score"],
            factors=tuple(ScoreFactor.from_dict(f) for f in data.get("factors", [])),
        )


@dataclass(frozen=True)
class ScoreBreakdown:
    revenue_proxy: ComponentScore
    online_weakness: ComponentScore
    acquisition_fit: ComponentScore
    growth_signals: ComponentScore

    def components(self) -> Dict[str, ComponentScore]:
        return {
            "revenue_proxy": self.revenue_proxy,
            "online_weakness": self.online_weakness,
            "acquisition_fit": self.acquisition_fit,
            "growth_signals": self.growth_signals,
        }

    def to_dict(self) -> Dict[str, Any]:
        return {key: comp.to_dict() for key, comp in self.components().items()}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ScoreBreakdown":
        return cls(
            revenue_proxy=ComponentScore.from_dict(data["revenue_proxy"]),
            online_weakness=ComponentScore.from_dict(data["online_weakness"]),
            acquisition_fit=ComponentScore.from_dict(data["acquisition_fit"]),
            growth_signals=ComponentScore.from_dict(data["growth_signals"]),
        )


@dataclass(frozen=True)
class Score:
    revenue_proxy_score: int
    online_weakness_score: int
    acquisition_fit_score: int
    growth_signals_score: int
    overall_score: int
    recommendation: Recommendation
    breakdown: ScoreBreakdown
    config_version: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "revenue_proxy_score": self.revenue_proxy_score,
            "online_weakness_score": self.online_weakness_score,
            "acquisition_fit_score": self.acquisition_fit_score,
            "growth_signals_score": self.growth_signals_score,
            "overall_score": self.overall_score,
            "recommendation": self.recommendation.value,
            "breakdown": self.breakdown.to_dict(),
            "config_version": self.config_version,
        }
