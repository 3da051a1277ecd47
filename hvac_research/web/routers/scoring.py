"""Scoring router — scoring config registry, bulk rescore and ad-hoc previews."""

import logging
from datetime import date
from typing import List, Optional

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from hvac_research.core.database import get_async_db, get_db
from hvac_research.core.models import (
    OwnershipType, PermitCategory, ReviewSource, SocialPlatform, SuccessionStatus,
)
from hvac_research.core.schemas import StandardResponse
from hvac_research.scoring.calculator import calculate_score
from hvac_research.scoring.config import DEFAULT_SCORING_CONFIG, ScoringConfig
from hvac_research.scoring.service import (
    ScoringConfigConflictError,
    get_active_config,
    list_configs,
    register_config,
    rescore_all,
)
from hvac_research.scoring.types import BusinessSnapshot, PermitSnapshot, ReviewSnapshot

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/scoring",
    tags=["Scoring"]
)


# --- Schemas ---

class PermitInput(BaseModel):
    issue_date: Optional[date] = None
    permit_type: PermitCategory = PermitCategory.OTHER


class ReviewInput(BaseModel):
    source: ReviewSource = ReviewSource.OTHER
    rating: float = Field(0.0, ge=0, le=5)
    review_count: int = Field(0, ge=0)


class PreviewRequest(BaseModel):
    """An unsaved business to score with the active config."""
    employee_count: Optional[int] = Field(None, ge=0)
    fleet_size: Optional[int] = Field(None, ge=0)
    permits: List[PermitInput] = Field(default_factory=list)
    service_radius_miles: Optional[float] = None
    website: Optional[str] = None
    social_links: List[SocialPlatform] = Field(default_factory=list)
    reviews: List[ReviewInput] = Field(default_factory=list)
    ownership_type: Optional[OwnershipType] = None
    founded_year: Optional[int] = None
    niches: List[str] = Field(default_factory=list)
    succession_status: Optional[SuccessionStatus] = None
    owner_age: Optional[int] = None
    as_of: Optional[date] = None

    def to_snapshot(self) -> BusinessSnapshot:
        return BusinessSnapshot(
            employee_count=self.employee_count,
            fleet_size=self.fleet_size,
            permits=tuple(PermitSnapshot(issue_date=p.issue_date, permit_type=p.permit_type) for p in self.permits),
            service_radius_miles=self.service_radius_miles,
            website=self.website or None,
            social_links=frozenset(self.social_links),
            reviews=tuple(
                ReviewSnapshot(source=r.source, rating=r.rating, review_count=r.review_count)
                for r in self.reviews
            ),
            ownership_type=self.ownership_type,
            founded_year=self.founded_year,
            niches=tuple(self.niches),
            succession_status=self.succession_status,
            owner_age=self.owner_age,
        )


# --- Background ---

async def rescore_in_background():
    logger.info("Starting background rescore of all businesses")
    try:
        async with get_async_db() as session:
            scores = await rescore_all(session)
        logger.info(f"Background rescore complete: {len(scores)} businesses")
    except Exception as e:
        logger.error(f"Background rescore failed: {e}", exc_info=True)


# --- Endpoints ---

@router.get("/config", response_model=StandardResponse[dict], summary="Active Scoring Config")
async def get_scoring_config(session: AsyncSession = Depends(get_db)):
    """The active config alongside the built-in defaults."""
    active = await get_active_config(session)
    return StandardResponse(data={
        "active": active.to_summary(),
        "defaults": DEFAULT_SCORING_CONFIG.to_summary(),
    })


@router.post("/config", response_model=StandardResponse[dict], summary="Register Scoring Config")
async def post_scoring_config(config: ScoringConfig, session: AsyncSession = Depends(get_db)):
    """
    Register a new config version. It becomes active immediately; existing
    scores keep their old version until the next rescore.
    """
    try:
        await register_config(session, config)
        await session.commit()
    except ScoringConfigConflictError as e:
        raise HTTPException(status_code=409, detail=str(e))
    return StandardResponse(data=config.to_summary(), message=f"Scoring config {config.version} registered")


@router.get("/configs", response_model=StandardResponse[list], summary="Scoring Config History")
async def get_scoring_configs(session: AsyncSession = Depends(get_db)):
    configs = await list_configs(session)
    return StandardResponse(data=[c.to_summary() for c in configs])


@router.post("/rescore", response_model=StandardResponse[dict], summary="Rescore All Businesses")
async def post_rescore(background_tasks: BackgroundTasks):
    background_tasks.add_task(rescore_in_background)
    return StandardResponse(status="accepted", data={}, message="Rescore started")


@router.post("/preview", response_model=StandardResponse[dict], summary="Preview Score")
async def post_preview(request: PreviewRequest, session: AsyncSession = Depends(get_db)):
    """Score an ad-hoc business without saving anything."""
    config = await get_active_config(session)
    score = calculate_score(request.to_snapshot(), config, as_of=request.as_of)
    return StandardResponse(data=score.to_dict())
