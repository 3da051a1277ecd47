"""Prospects router — list, detail, create/update, status changes, notes, rescoring."""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from hvac_research.core.database import get_db
from hvac_research.core.models import BusinessStatus, NoteType, OwnershipType, SuccessionStatus
from hvac_research.core.schemas import PaginatedResponse, StandardResponse
from hvac_research.prospects.filters import ProspectFilters
from hvac_research.prospects.service import (
    BusinessNotFoundError,
    add_note,
    create_business,
    list_businesses,
    list_notes,
    load_business_with_relations,
    update_business,
    update_status,
)
from hvac_research.scoring.service import calculate_business_score
from hvac_research.web.dependencies import get_prospect_filters
from hvac_research.web.serializers import (
    serialize,
    serialize_business,
    serialize_business_detail,
    serialize_list,
)

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/prospects",
    tags=["Prospects"]
)


# --- Schemas ---

class BusinessPayload(BaseModel):
    name: Optional[str] = None
    legal_name: Optional[str] = None
    dba: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    county: Optional[str] = None
    zip_code: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    service_radius: Optional[float] = Field(None, ge=0)
    phone: Optional[str] = None
    email: Optional[str] = None
    website: Optional[str] = None
    facebook_url: Optional[str] = None
    linkedin_url: Optional[str] = None
    instagram_url: Optional[str] = None
    specializations: Optional[List[str]] = None
    niches: Optional[List[str]] = None
    service_types: Optional[List[str]] = None
    ownership_type: Optional[OwnershipType] = None
    owner_name: Optional[str] = None
    owner_age: Optional[int] = Field(None, ge=0, le=120)
    founded_year: Optional[int] = None
    generation: Optional[int] = Field(None, ge=1)
    succession_status: Optional[SuccessionStatus] = None


class CreateBusinessRequest(BusinessPayload):
    name: str
    city: str
    county: str
    discovery_source: str = "manual"


class StatusUpdateRequest(BaseModel):
    status: BusinessStatus
    reason: Optional[str] = None


class AddNoteRequest(BaseModel):
    content: str = Field(..., min_length=1)
    note_type: NoteType = NoteType.GENERAL


# --- Endpoints ---

@router.get("", response_model=PaginatedResponse[dict], summary="List Prospects")
async def get_prospects(
    filters: ProspectFilters = Depends(get_prospect_filters),
    session: AsyncSession = Depends(get_db),
):
    """Filtered, sorted, paginated prospects with their latest score."""
    try:
        businesses, total = await list_businesses(session, filters)
    except Exception as e:
        logger.exception("Failed to list prospects")
        raise HTTPException(status_code=500, detail=str(e))

    return PaginatedResponse(
        data=[serialize_business(b) for b in businesses],
        total=total,
        limit=filters.limit,
        offset=filters.offset,
    )


@router.post("", response_model=StandardResponse[dict], summary="Create Prospect")
async def create_prospect(request: CreateBusinessRequest, session: AsyncSession = Depends(get_db)):
    try:
        business = await create_business(session, request.model_dump(exclude_none=True))
        await session.commit()
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return StandardResponse(data={"business_id": business.id}, message="Business created")


@router.get("/{business_id}", response_model=StandardResponse[dict], summary="Prospect Detail")
async def get_prospect(business_id: int, session: AsyncSession = Depends(get_db)):
    """Business with licenses, permits, reviews, estimates, notes and score breakdown."""
    try:
        business = await load_business_with_relations(session, business_id)
    except BusinessNotFoundError:
        raise HTTPException(status_code=404, detail=f"Business {business_id} not found")
    return StandardResponse(data=serialize_business_detail(business))


@router.patch("/{business_id}", response_model=StandardResponse[dict], summary="Update Prospect")
async def patch_prospect(
    business_id: int,
    request: BusinessPayload,
    session: AsyncSession = Depends(get_db),
):
    """Set the fields present in the body (explicit nulls clear a field)."""
    changes = request.model_dump(exclude_unset=True)
    for required in ("name", "city", "county"):
        if required in changes and not changes[required]:
            raise HTTPException(status_code=400, detail=f"Business {required} cannot be empty")

    try:
        business = await update_business(session, business_id, changes)
        await session.commit()
    except BusinessNotFoundError:
        raise HTTPException(status_code=404, detail=f"Business {business_id} not found")
    return StandardResponse(data=serialize(business))


@router.patch("/{business_id}/status", response_model=StandardResponse[dict], summary="Change Status")
async def patch_prospect_status(
    business_id: int,
    request: StatusUpdateRequest,
    session: AsyncSession = Depends(get_db),
):
    try:
        business = await update_status(session, business_id, request.status, request.reason)
        await session.commit()
    except BusinessNotFoundError:
        raise HTTPException(status_code=404, detail=f"Business {business_id} not found")
    return StandardResponse(
        data={"business_id": business.id, "status": business.status},
        message=f"Status updated to {business.status}",
    )


@router.get("/{business_id}/notes", response_model=StandardResponse[list], summary="List Notes")
async def get_prospect_notes(business_id: int, session: AsyncSession = Depends(get_db)):
    try:
        notes = await list_notes(session, business_id)
    except BusinessNotFoundError:
        raise HTTPException(status_code=404, detail=f"Business {business_id} not found")
    return StandardResponse(data=serialize_list(notes))


@router.post("/{business_id}/notes", response_model=StandardResponse[dict], summary="Add Note")
async def post_prospect_note(
    business_id: int,
    request: AddNoteRequest,
    session: AsyncSession = Depends(get_db),
):
    try:
        note = await add_note(session, business_id, request.content, request.note_type)
        await session.commit()
    except BusinessNotFoundError:
        raise HTTPException(status_code=404, detail=f"Business {business_id} not found")
    return StandardResponse(data=serialize(note), message="Note added")


@router.post("/{business_id}/score", response_model=StandardResponse[dict], summary="Rescore Prospect")
async def score_prospect(business_id: int, session: AsyncSession = Depends(get_db)):
    """Recalculate and store the score with the active scoring config."""
    try:
        score = await calculate_business_score(session, business_id)
        await session.commit()
    except BusinessNotFoundError:
        raise HTTPException(status_code=404, detail=f"Business {business_id} not found")
    except Exception as e:
        logger.exception(f"Failed to score business {business_id}")
        raise HTTPException(status_code=500, detail=str(e))
    return StandardResponse(data=score.to_dict())
