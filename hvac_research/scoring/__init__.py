"""
Acquisition scoring engine.

    from hvac_research.scoring import calculate_score, BusinessSnapshot, DEFAULT_SCORING_CONFIG

    score = calculate_score(BusinessSnapshot(employee_count=25), DEFAULT_SCORING_CONFIG)
"""
from hvac_research.scoring.calculator import calculate_score, recommend, round_half_up
from hvac_research.scoring.config import DEFAULT_SCORING_CONFIG, ScoringConfig
from hvac_research.scoring.types import (
    BusinessSnapshot,
    ComponentScore,
    Numeric,
    PermitSnapshot,
    ReviewSnapshot,
    Score,
    ScoreBreakdown,
    ScoreFactor,
    Text,
    Unset,
)

__all__ = [
    "calculate_score",
    "recommend",
    "round_half_up",
    "DEFAULT_SCORING_CONFIG",
    "ScoringConfig",
    "BusinessSnapshot",
    "ComponentScore",
    "Numeric",
    "PermitSnapshot",
    "ReviewSnapshot",
    "Score",
    "ScoreBreakdown",
    "ScoreFactor",
    "Text",
    "Unset",
]
