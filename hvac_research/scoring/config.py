"""
Scoring Configuration System.

Loads a versioned scoring configuration from YAML that drives:
- The four top-level component weights
- The factor weight table inside each component
- Recommendation thresholds

Configurations are immutable. A change to any weight or threshold is a new
version; stored scores keep the version they were computed under.

Usage:
    from hvac_research.scoring.config import DEFAULT_SCORING_CONFIG, ScoringConfig

    DEFAULT_SCORING_CONFIG.weights.revenue_proxy          # 0.30
    DEFAULT_SCORING_CONFIG.thresholds.high_priority       # 75
    DEFAULT_SCORING_CONFIG.factor_weight("growth_signals", "permit_trend")  # 0.35

    custom = DEFAULT_SCORING_CONFIG.model_copy(update={"version": "1.1", ...})
"""
import logging
from pathlib import Path
from typing import Dict, Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field, model_validator

logger = logging.getLogger(__name__)

WEIGHT_TOLERANCE = 0.01

COMPONENTS = ("revenue_proxy", "online_weakness", "acquisition_fit", "growth_signals")


# =============================================================================
# SCHEMA
# =============================================================================

class ComponentWeights(BaseModel):
    """Top-level weights applied to the four component scores."""
    model_config = ConfigDict(frozen=True)

    revenue_proxy: float = Field(default=0.30, ge=0.0, le=1.0)
    online_weakness: float = Field(default=0.25, ge=0.0, le=1.0)
    acquisition_fit: float = Field(default=0.25, ge=0.0, le=1.0)
    growth_signals: float = Field(default=0.20, ge=0.0, le=1.0)

    @model_validator(mode="after")
    def validate_weights_sum(self):
        total = sum(self.model_dump().values())
        if abs(total - 1.0) > WEIGHT_TOLERANCE:
            raise ValueError(
                f"Component weights must sum to 1.0, got {total:.3f}. "
                f"Weights: {self.model_dump()}"
            )
        return self


class Thresholds(BaseModel):
    """Overall-score thresholds for recommendation tiers."""
    model_config = ConfigDict(frozen=True)

    high_priority: int = Field(default=75, ge=0, le=100)
    medium_priority: int = Field(default=50, ge=0, le=100)
    low_priority: int = Field(default=25, ge=0, le=100)
    # Below low_priority = NOT_RECOMMENDED

    @model_validator(mode="after")
    def validate_ascending(self):
        if not (self.low_priority < self.medium_priority < self.high_priority):
            raise ValueError(
                "Thresholds must be strictly ascending: "
                f"low={self.low_priority} medium={self.medium_priority} high={self.high_priority}"
            )
        return self


class _FactorTable(BaseModel):
    model_config = ConfigDict(frozen=True)

    @model_validator(mode="after")
    def validate_weights_sum(self):
        total = sum(self.model_dump().values())
        if abs(total - 1.0) > WEIGHT_TOLERANCE:
            raise ValueError(
                f"{type(self).__name__} factor weights must sum to 1.0, got {total:.3f}"
            )
        return self


class RevenueProxyFactors(_FactorTable):
    employee_count: float = 0.30
    fleet_size: float = 0.25
    permit_volume: float = 0.25
    service_area: float = 0.20


class OnlineWeaknessFactors(_FactorTable):
    website_quality: float = 0.30
    social_presence: float = 0.20
    review_volume: float = 0.30
    seo_visibility: float = 0.20


class AcquisitionFitFactors(_FactorTable):
    ownership_type: float = 0.30
    business_age: float = 0.25
    niche_specialization: float = 0.25
    succession_status: float = 0.20


class GrowthSignalsFactors(_FactorTable):
    permit_trend: float = 0.35
    review_trend: float = 0.25
    hiring_activity: float = 0.25
    fleet_growth: float = 0.15


class FactorWeights(BaseModel):
    """Per-component factor weight tables."""
    model_config = ConfigDict(frozen=True)

    revenue_proxy: RevenueProxyFactors = Field(default_factory=RevenueProxyFactors)
    online_weakness: OnlineWeaknessFactors = Field(default_factory=OnlineWeaknessFactors)
    acquisition_fit: AcquisitionFitFactors = Field(default_factory=AcquisitionFitFactors)
    growth_signals: GrowthSignalsFactors = Field(default_factory=GrowthSignalsFactors)


class ScoringConfig(BaseModel):
    """
    Complete scoring configuration.

    Passed explicitly into ``calculate_score``. Never mutate an instance;
    build a new one (new version string) with ``model_copy(update=...)`` or
    ``ScoringConfig(**payload)``.
    """
    model_config = ConfigDict(frozen=True)

    version: str = "1.0"
    description: str = ""
    weights: ComponentWeights = Field(default_factory=ComponentWeights)
    thresholds: Thresholds = Field(default_factory=Thresholds)
    factors: FactorWeights = Field(default_factory=FactorWeights)

    # =================================================================
    # ACCESSORS
    # =================================================================

    def component_weight(self, component: str) -> float:
        return getattr(self.weights, component)

    def factor_weight(self, component: str, factor: str) -> float:
        return getattr(getattr(self.factors, component), factor)

    def factor_table(self, component: str) -> Dict[str, float]:
        return getattr(self.factors, component).model_dump()

    # =================================================================
    # LOADERS
    # =================================================================

    @classmethod
    def from_yaml(cls, path: Path) -> "ScoringConfig":
        """Load scoring configuration from a YAML file."""
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Scoring config not found: {path}")

        with open(path, "r", encoding="utf-8") as f:
            raw = yaml.safe_load(f) or {}

        # YAML may give versions like 1.0 as floats
        if "version" in raw:
            raw["version"] = str(raw["version"])

        return cls(**raw)

    @classmethod
    def load(cls, config_dir: Optional[Path] = None) -> "ScoringConfig":
        """
        Load scoring config with fallback chain:
          1. config/scoring.yaml (private, gitignored)
          2. config/scoring.example.yaml (public, committed)
          3. Built-in defaults
        """
        if config_dir is None:
            config_dir = Path(__file__).parent.parent.parent / "config"

        private = config_dir / "scoring.yaml"
        example = config_dir / "scoring.example.yaml"

        if private.exists():
            logger.info(f"Loading scoring config from {private}")
            return cls.from_yaml(private)
        elif example.exists():
            logger.info(f"No scoring.yaml found, falling back to {example}")
            return cls.from_yaml(example)
        else:
            logger.warning("No scoring config found, using built-in defaults")
            return cls()

    # =================================================================
    # API SUMMARY
    # =================================================================

    def to_summary(self) -> dict:
        """Return a JSON-safe summary for the /api/scoring/config endpoint."""
        return {
            "version": self.version,
            "description": self.description,
            "weights": self.weights.model_dump(),
            "thresholds": self.thresholds.model_dump(),
            "factors": self.factors.model_dump(),
        }


# =============================================================================
# DEFAULTS
# =============================================================================

# Named constant for the built-in weights. Stored scores computed under
# version "1.0" depend on these exact values.
DEFAULT_SCORING_CONFIG: ScoringConfig = ScoringConfig()
