"""Shared serialization helpers for the API routers.

Usage:
    from hvac_research.web.serializers import serialize, serialize_list

    # Single object, explicit fields
    return serialize(business, fields=["id", "name", "city"])

    # Single object, every column
    return serialize(business)

    # With extra computed fields
    return serialize(business, fields=["id", "name"], extra={"overall_score": 72})
"""

from datetime import date, datetime
from typing import Any, Dict, List, Optional, Sequence

from hvac_research.scoring.snapshot import latest_estimate


def serialize(
    obj: Any,
    fields: Optional[List[str]] = None,
    exclude: Optional[List[str]] = None,
    extra: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    """Convert an ORM model instance to a JSON-safe dict.

    Args:
        obj: SQLAlchemy model instance.
        fields: Whitelist of field names to include. If None, auto-detects from table columns.
        exclude: Blacklist of field names to skip (only used when fields is None).
        extra: Additional key-value pairs to merge into the result.
    """
    if fields is None:
        all_keys = [c.key for c in obj.__class__.__table__.columns]
        exclude_set = set(exclude or [])
        fields = [k for k in all_keys if k not in exclude_set]

    result = {}
    for field in fields:
        val = getattr(obj, field, None)
        if isinstance(val, (date, datetime)):
            val = val.isoformat()
        result[field] = val

    if extra:
        result.update(extra)

    return result


def serialize_list(
    objects: Sequence[Any],
    fields: Optional[List[str]] = None,
    exclude: Optional[List[str]] = None,
) -> List[Dict[str, Any]]:
    return [serialize(obj, fields=fields, exclude=exclude) for obj in objects]


# --- Domain shapes ---

BUSINESS_LIST_FIELDS = [
    "id", "name", "city", "county", "state", "phone", "website", "status",
    "ownership_type", "founded_year", "owner_name", "discovery_source",
    "created_at", "updated_at",
]

SCORE_FIELDS = [
    "overall_score", "revenue_proxy_score", "online_weakness_score",
    "acquisition_fit_score", "growth_signals_score", "recommendation",
    "config_version", "updated_at", "created_at",
]


def serialize_score(score, include_breakdown: bool = False) -> Optional[Dict[str, Any]]:
    if score is None:
        return None
    fields = SCORE_FIELDS + (["breakdown"] if include_breakdown else [])
    return serialize(score, fields=fields)


def serialize_business(business) -> Dict[str, Any]:
    """Row shape for the prospects table. Expects ``score`` to be loaded."""
    score = business.score
    return serialize(business, fields=BUSINESS_LIST_FIELDS, extra={
        "overall_score": score.overall_score if score else None,
        "recommendation": score.recommendation if score else None,
    })


def serialize_business_detail(business) -> Dict[str, Any]:
    """Everything on the detail page. Expects every relationship to be loaded."""
    employee = latest_estimate(business.employees)
    fleet = latest_estimate(business.fleet)
    return serialize(business, extra={
        "score": serialize_score(business.score, include_breakdown=True),
        "latest_employee_estimate": serialize(employee) if employee else None,
        "latest_fleet_estimate": serialize(fleet) if fleet else None,
        "licenses": serialize_list(business.licenses),
        "permits": serialize_list(business.permits),
        "reviews": serialize_list(business.reviews),
        "certifications": serialize_list(business.certifications),
        "associations": serialize_list(business.associations),
        "notes": serialize_list(
            sorted(business.notes, key=lambda n: (n.created_at or datetime.min, n.id), reverse=True)
        ),
    })


def serialize_job(job) -> Dict[str, Any]:
    return serialize(job)
