"""
Business record store: find, create, update, upsert and list prospects.

All functions take an AsyncSession and flush (never commit); the caller's
session context owns the transaction.
"""
import logging
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional, Tuple

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from hvac_research.core.models import BusinessStatus, NoteType, Recommendation
from hvac_research.prospects.database import (
    BusinessModel,
    EmployeeEstimateModel,
    FleetEstimateModel,
    LicenseModel,
    NoteModel,
    PermitModel,
    ReviewModel,
    ScoreModel,
)
from hvac_research.prospects.filters import ProspectFilters, apply_filters, apply_sort

logger = logging.getLogger(__name__)

# Columns an API payload or extraction record may set directly
BUSINESS_FIELDS = {
    "name", "legal_name", "dba", "address", "city", "county", "state", "zip_code",
    "latitude", "longitude", "service_radius", "phone", "email", "website",
    "facebook_url", "linkedin_url", "instagram_url", "specializations", "niches",
    "service_types", "ownership_type", "owner_name", "owner_age", "founded_year",
    "generation", "succession_status", "discovery_source", "discovery_job_id",
}

STATUS_TIMESTAMPS = {
    BusinessStatus.QUALIFIED.value: "qualified_at",
    BusinessStatus.CONTACTED.value: "contacted_at",
    BusinessStatus.DISQUALIFIED.value: "disqualified_at",
}


class BusinessNotFoundError(LookupError):
    """Raised when a business id does not exist."""

    def __init__(self, business_id: int):
        super().__init__(f"Business not found: {business_id}")
        self.business_id = business_id


def _is_empty(value: Any) -> bool:
    return value is None or value == "" or value == [] or value == {}


def _clean(data: Dict[str, Any]) -> Dict[str, Any]:
    cleaned = {}
    for key, value in data.items():
        if key not in BUSINESS_FIELDS:
            continue
        # Enums arrive from pydantic models; store their string value
        cleaned[key] = getattr(value, "value", value)
    return cleaned


# =============================================================================
# LOOKUPS
# =============================================================================

async def get_business(session: AsyncSession, business_id: int) -> BusinessModel:
    business = await session.get(BusinessModel, business_id)
    if business is None:
        raise BusinessNotFoundError(business_id)
    return business


async def find_by_natural_key(
    session: AsyncSession, name: str, city: str, county: str
) -> Optional[BusinessModel]:
    """Exact match on (name, city, county); case-insensitive."""
    result = await session.execute(
        select(BusinessModel).where(
            func.lower(BusinessModel.name) == name.strip().lower(),
            func.lower(BusinessModel.city) == city.strip().lower(),
            func.lower(BusinessModel.county) == county.strip().lower(),
        ).order_by(BusinessModel.id.asc()).limit(1)
    )
    return result.scalar_one_or_none()


async def load_business_with_relations(session: AsyncSession, business_id: int) -> BusinessModel:
    """Fetch a business with every relationship the scorer and detail view read."""
    result = await session.execute(
        select(BusinessModel)
        .where(BusinessModel.id == business_id)
        .options(
            selectinload(BusinessModel.licenses),
            selectinload(BusinessModel.permits),
            selectinload(BusinessModel.reviews),
            selectinload(BusinessModel.employees),
            selectinload(BusinessModel.fleet),
            selectinload(BusinessModel.certifications),
            selectinload(BusinessModel.associations),
            selectinload(BusinessModel.notes),
            selectinload(BusinessModel.score),
        )
        .execution_options(populate_existing=True)
    )
    business = result.scalar_one_or_none()
    if business is None:
        raise BusinessNotFoundError(business_id)
    return business


# =============================================================================
# WRITES
# =============================================================================

async def create_business(session: AsyncSession, data: Dict[str, Any]) -> BusinessModel:
    fields = _clean(data)
    for required in ("name", "city", "county"):
        if _is_empty(fields.get(required)):
            raise ValueError(f"Business {required} is required")

    business = BusinessModel(**fields)
    session.add(business)
    await session.flush()
    await session.refresh(business)
    logger.info(f"Created business {business.id}: {business.name} ({business.city}, {business.county})")
    return business


async def update_business(session: AsyncSession, business_id: int, data: Dict[str, Any]) -> BusinessModel:
    """Set every provided field, including explicit None."""
    business = await get_business(session, business_id)
    for key, value in _clean(data).items():
        setattr(business, key, value)
    await session.flush()
    await session.refresh(business)
    return business


async def upsert_business(
    session: AsyncSession,
    data: Dict[str, Any],
    job_id: Optional[int] = None,
) -> Tuple[BusinessModel, bool]:
    """
    Insert or merge on the natural key (name, city, county).

    Merge rule: a non-empty incoming value replaces the stored one; empty
    incoming values never erase what is already known.

    Returns (business, created).
    """
    fields = _clean(data)
    if job_id is not None:
        fields["discovery_job_id"] = job_id

    existing = await find_by_natural_key(
        session, fields.get("name", ""), fields.get("city", ""), fields.get("county", "")
    )
    if existing is None:
        return await create_business(session, fields), True

    for key, value in fields.items():
        if key in ("name", "city", "county", "discovery_job_id"):
            continue
        if not _is_empty(value):
            setattr(existing, key, value)
    await session.flush()
    await session.refresh(existing)
    logger.debug(f"Merged into existing business {existing.id}: {existing.name}")
    return existing, False


async def update_status(
    session: AsyncSession,
    business_id: int,
    status: BusinessStatus,
    reason: Optional[str] = None,
) -> BusinessModel:
    business = await get_business(session, business_id)
    status_value = BusinessStatus(status).value
    business.status = status_value

    stamp = STATUS_TIMESTAMPS.get(status_value)
    if stamp:
        setattr(business, stamp, datetime.utcnow())
    if status_value == BusinessStatus.DISQUALIFIED.value:
        business.disqualify_reason = reason
        if reason:
            session.add(NoteModel(
                business_id=business.id,
                content=reason,
                note_type=NoteType.DISQUALIFICATION.value,
            ))

    await session.flush()
    await session.refresh(business)
    logger.info(f"Business {business_id} status -> {status_value}")
    return business


async def add_note(
    session: AsyncSession,
    business_id: int,
    content: str,
    note_type: NoteType = NoteType.GENERAL,
) -> NoteModel:
    await get_business(session, business_id)
    note = NoteModel(business_id=business_id, content=content, note_type=NoteType(note_type).value)
    session.add(note)
    await session.flush()
    await session.refresh(note)
    return note


async def list_notes(session: AsyncSession, business_id: int) -> List[NoteModel]:
    await get_business(session, business_id)
    result = await session.execute(
        select(NoteModel)
        .where(NoteModel.business_id == business_id)
        .order_by(NoteModel.created_at.desc(), NoteModel.id.desc())
    )
    return list(result.scalars().all())


async def add_employee_estimate(
    session: AsyncSession,
    business_id: int,
    estimated_count: int,
    confidence: Optional[float] = None,
    source: Optional[str] = None,
    source_details: Optional[dict] = None,
    min_count: Optional[int] = None,
    max_count: Optional[int] = None,
    snapshot_date: Optional[datetime] = None,
) -> EmployeeEstimateModel:
    estimate = EmployeeEstimateModel(
        business_id=business_id,
        estimated_count=estimated_count,
        min_count=min_count,
        max_count=max_count,
        confidence=confidence,
        source=source,
        source_details=source_details,
    )
    if snapshot_date is not None:
        estimate.snapshot_date = snapshot_date
    session.add(estimate)
    await session.flush()
    return estimate


async def add_fleet_estimate(
    session: AsyncSession,
    business_id: int,
    vehicle_count: int,
    confidence: Optional[float] = None,
    source: Optional[str] = None,
    source_details: Optional[dict] = None,
    min_count: Optional[int] = None,
    max_count: Optional[int] = None,
    snapshot_date: Optional[datetime] = None,
) -> FleetEstimateModel:
    estimate = FleetEstimateModel(
        business_id=business_id,
        vehicle_count=vehicle_count,
        min_count=min_count,
        max_count=max_count,
        confidence=confidence,
        source=source,
        source_details=source_details,
    )
    if snapshot_date is not None:
        estimate.snapshot_date = snapshot_date
    session.add(estimate)
    await session.flush()
    return estimate


async def add_permits(session: AsyncSession, business_id: int, permits: Iterable[Dict[str, Any]]) -> int:
    count = 0
    for kwargs in permits:
        session.add(PermitModel(business_id=business_id, **kwargs))
        count += 1
    await session.flush()
    return count


async def add_reviews(session: AsyncSession, business_id: int, reviews: Iterable[Dict[str, Any]]) -> int:
    count = 0
    for kwargs in reviews:
        session.add(ReviewModel(business_id=business_id, **kwargs))
        count += 1
    await session.flush()
    return count


async def add_licenses(session: AsyncSession, business_id: int, licenses: Iterable[Dict[str, Any]]) -> int:
    count = 0
    for kwargs in licenses:
        session.add(LicenseModel(business_id=business_id, **kwargs))
        count += 1
    await session.flush()
    return count


# =============================================================================
# LISTING
# =============================================================================

async def list_businesses(
    session: AsyncSession,
    filters: Optional[ProspectFilters] = None,
) -> Tuple[List[BusinessModel], int]:
    """
    Filtered, sorted, paginated prospects with their score loaded.
    Returns (page, total matching).
    """
    filters = filters or ProspectFilters()

    base = select(BusinessModel).outerjoin(ScoreModel, ScoreModel.business_id == BusinessModel.id)
    base = apply_filters(base, filters)

    total = await session.scalar(select(func.count()).select_from(base.subquery()))

    query = apply_sort(base, filters).options(selectinload(BusinessModel.score))
    query = query.limit(filters.limit).offset(filters.offset)
    result = await session.execute(query)
    return list(result.scalars().all()), total or 0


async def list_businesses_for_export(
    session: AsyncSession,
    filters: Optional[ProspectFilters] = None,
) -> List[BusinessModel]:
    """Every business matching the filters (no pagination), fully hydrated."""
    filters = filters or ProspectFilters()
    query = select(BusinessModel).outerjoin(ScoreModel, ScoreModel.business_id == BusinessModel.id)
    query = apply_sort(apply_filters(query, filters), filters).options(
        selectinload(BusinessModel.licenses),
        selectinload(BusinessModel.permits),
        selectinload(BusinessModel.reviews),
        selectinload(BusinessModel.employees),
        selectinload(BusinessModel.fleet),
        selectinload(BusinessModel.certifications),
        selectinload(BusinessModel.associations),
        selectinload(BusinessModel.score),
    )
    result = await session.execute(query)
    return list(result.scalars().all())


async def list_business_ids(session: AsyncSession) -> List[int]:
    result = await session.execute(select(BusinessModel.id).order_by(BusinessModel.id))
    return list(result.scalars().all())


async def dashboard_stats(session: AsyncSession) -> Dict[str, Any]:
    """Counts by status and recommendation, plus the average overall score."""
    total = await session.scalar(select(func.count(BusinessModel.id))) or 0

    status_rows = await session.execute(
        select(BusinessModel.status, func.count(BusinessModel.id)).group_by(BusinessModel.status)
    )
    by_status = {s.value: 0 for s in BusinessStatus}
    for status, count in status_rows.all():
        by_status[status] = count

    rec_rows = await session.execute(
        select(ScoreModel.recommendation, func.count(ScoreModel.id)).group_by(ScoreModel.recommendation)
    )
    by_recommendation = {r.value: 0 for r in Recommendation}
    for rec, count in rec_rows.all():
        by_recommendation[rec] = count

    avg_score = await session.scalar(select(func.avg(ScoreModel.overall_score)))
    scored = sum(by_recommendation.values())

    return {
        "total_businesses": total,
        "scored_businesses": scored,
        "average_score": round(float(avg_score), 1) if avg_score is not None else None,
        "by_status": by_status,
        "by_recommendation": by_recommendation,
    }
