"""
Hydrate a ``BusinessSnapshot`` from a persisted ``BusinessModel``.

This is the only place the scoring engine's input is derived from the
database. The business must be loaded with its permits, reviews,
employees and fleet relationships (see ``prospects.service.load_business_with_relations``).
"""
import logging
from datetime import datetime
from typing import Iterable, Optional, TypeVar

from hvac_research.core.models import (
    OwnershipType, PermitCategory, ReviewSource, SocialPlatform, SuccessionStatus,
)
from hvac_research.core.utils import parse_date
from hvac_research.scoring.types import BusinessSnapshot, PermitSnapshot, ReviewSnapshot

logger = logging.getLogger(__name__)

E = TypeVar("E")


def latest_estimate(estimates: Iterable[E]) -> Optional[E]:
    """
    Pick the latest estimate: greatest (snapshot_date, id).
    Same-timestamp estimates resolve to the highest id (last inserted).
    """
    best = None
    best_key = None
    for est in estimates or []:
        key = (est.snapshot_date or datetime.min, est.id or 0)
        if best_key is None or key > best_key:
            best, best_key = est, key
    return best


def _enum_or_none(enum_cls, value):
    if value is None or value == "":
        return None
    try:
        return enum_cls(value)
    except ValueError:
        logger.warning(f"Unknown {enum_cls.__name__} value {value!r}, treating as unset")
        return None


def business_to_snapshot(business) -> BusinessSnapshot:
    """Map a hydrated BusinessModel onto the engine's input snapshot."""
    employee = latest_estimate(business.employees)
    fleet = latest_estimate(business.fleet)

    permits = tuple(
        PermitSnapshot(
            issue_date=parse_date(p.issue_date),
            permit_type=_enum_or_none(PermitCategory, p.permit_type) or PermitCategory.OTHER,
        )
        for p in business.permits or []
    )

    reviews = tuple(
        ReviewSnapshot(
            source=_enum_or_none(ReviewSource, r.source) or ReviewSource.OTHER,
            rating=r.rating or 0.0,
            review_count=r.review_count or 0,
        )
        for r in business.reviews or []
    )

    social = set()
    if business.facebook_url:
        social.add(SocialPlatform.FACEBOOK)
    if business.linkedin_url:
        social.add(SocialPlatform.LINKEDIN)
    if business.instagram_url:
        social.add(SocialPlatform.INSTAGRAM)

    return BusinessSnapshot(
        employee_count=employee.estimated_count if employee else None,
        fleet_size=fleet.vehicle_count if fleet else None,
        permits=permits,
        service_radius_miles=business.service_radius,
        website=business.website or None,
        social_links=frozenset(social),
        reviews=reviews,
        ownership_type=_enum_or_none(OwnershipType, business.ownership_type),
        founded_year=business.founded_year,
        niches=tuple(business.niches or ()),
        succession_status=_enum_or_none(SuccessionStatus, business.succession_status),
        owner_age=business.owner_age,
    )
