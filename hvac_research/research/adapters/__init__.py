"""Per-source research adapters: TDLR licenses, county permits, review platforms."""
from hvac_research.research.adapters.base import run_research
from hvac_research.research.adapters.permits import (
    TEXAS_COUNTIES_PERMIT_INFO,
    PermitRecord,
    PermitSearchParams,
    PermitSummary,
    RevenueEstimate,
    categorize_permit_type,
    estimate_revenue_from_permits,
    parse_permit_results,
    permit_record_to_model_kwargs,
    search_permit_records,
    summarize_permits,
)
from hvac_research.research.adapters.reviews import (
    AggregatedReviews,
    ReviewData,
    ReviewSearchParams,
    ReviewWeaknessScore,
    aggregate_reviews,
    calculate_review_weakness_score,
    get_source_reviews,
    parse_review_results,
    review_data_to_model_kwargs,
)
from hvac_research.research.adapters.tdlr import (
    TDLR_LICENSE_TYPES,
    TDLRLicenseRecord,
    TDLRSearchParams,
    parse_tdlr_results,
    search_tdlr_records,
    tdlr_record_to_license,
    verify_license,
)

__all__ = [
    "run_research",
    "TEXAS_COUNTIES_PERMIT_INFO",
    "PermitRecord",
    "PermitSearchParams",
    "PermitSummary",
    "RevenueEstimate",
    "categorize_permit_type",
    "estimate_revenue_from_permits",
    "parse_permit_results",
    "permit_record_to_model_kwargs",
    "search_permit_records",
    "summarize_permits",
    "AggregatedReviews",
    "ReviewData",
    "ReviewSearchParams",
    "ReviewWeaknessScore",
    "aggregate_reviews",
    "calculate_review_weakness_score",
    "get_source_reviews",
    "parse_review_results",
    "review_data_to_model_kwargs",
    "TDLR_LICENSE_TYPES",
    "TDLRLicenseRecord",
    "TDLRSearchParams",
    "parse_tdlr_results",
    "search_tdlr_records",
    "tdlr_record_to_license",
    "verify_license",
]
