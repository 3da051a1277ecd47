"""Research router — research jobs and prompt tooling."""

import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from hvac_research.core.database import get_db
from hvac_research.core.models import ResearchJobStatus, ResearchJobType
from hvac_research.core.schemas import StandardResponse
from hvac_research.research.extraction import BusinessExtractor
from hvac_research.research.prompts import get_prompt
from hvac_research.research.workflow import (
    ResearchJobNotFoundError,
    cancel_research_job,
    create_research_job,
    get_research_job,
    list_research_jobs,
    run_research_job,
)
from hvac_research.web.serializers import serialize_job

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/research",
    tags=["Research"]
)


# --- Schemas ---

class CreateJobRequest(BaseModel):
    name: Optional[str] = None
    job_type: ResearchJobType = ResearchJobType.REGION_DISCOVERY
    county: Optional[str] = None
    city: Optional[str] = None
    parameters: Dict[str, Any] = Field(default_factory=dict)
    start: bool = True


class RewritePromptRequest(BaseModel):
    prompt: str = Field(..., min_length=1)
    context: Optional[str] = None


class RenderPromptRequest(BaseModel):
    kind: str
    params: Dict[str, Any] = Field(default_factory=dict)


# --- Endpoints ---

@router.post("/jobs", response_model=StandardResponse[dict], summary="Create Research Job")
async def post_research_job(
    request: CreateJobRequest,
    background_tasks: BackgroundTasks,
    session: AsyncSession = Depends(get_db),
):
    """Create a job and (by default) run it in the background."""
    parameters = dict(request.parameters)
    if request.county:
        region = dict(parameters.get("region") or {})
        region["county"] = request.county
        if request.city:
            region["city"] = request.city
        parameters["region"] = region

    if request.job_type == ResearchJobType.REGION_DISCOVERY and not (parameters.get("region") or {}).get("county"):
        raise HTTPException(status_code=400, detail="County is required for region discovery")

    region = parameters.get("region") or {}
    name = request.name or " - ".join(
        p for p in ["Discovery", region.get("city"), region.get("county")] if p
    )

    job = await create_research_job(session, name, request.job_type, parameters)
    if request.start:
        background_tasks.add_task(run_research_job, job.id)

    return StandardResponse(
        status="accepted" if request.start else "success",
        data=serialize_job(job),
        message=f"Research job {job.id} {'started' if request.start else 'created'}",
    )


@router.get("/jobs", response_model=StandardResponse[list], summary="List Research Jobs")
async def get_research_jobs(
    status: Optional[ResearchJobStatus] = None,
    limit: int = 50,
    offset: int = 0,
    session: AsyncSession = Depends(get_db),
):
    jobs = await list_research_jobs(session, status=status, limit=limit, offset=offset)
    return StandardResponse(data=[serialize_job(j) for j in jobs])


@router.get("/jobs/{job_id}", response_model=StandardResponse[dict], summary="Research Job Detail")
async def get_research_job_detail(job_id: int, session: AsyncSession = Depends(get_db)):
    try:
        job = await get_research_job(session, job_id)
    except ResearchJobNotFoundError:
        raise HTTPException(status_code=404, detail=f"Research job {job_id} not found")
    return StandardResponse(data=serialize_job(job))


@router.post("/jobs/{job_id}/start", response_model=StandardResponse[dict], summary="Start Research Job")
async def start_job(
    job_id: int,
    background_tasks: BackgroundTasks,
    session: AsyncSession = Depends(get_db),
):
    try:
        job = await get_research_job(session, job_id)
    except ResearchJobNotFoundError:
        raise HTTPException(status_code=404, detail=f"Research job {job_id} not found")
    if job.status != ResearchJobStatus.PENDING.value:
        raise HTTPException(status_code=409, detail=f"Research job {job_id} is already {job.status}")

    background_tasks.add_task(run_research_job, job_id)
    return StandardResponse(status="accepted", data=serialize_job(job), message=f"Research job {job_id} started")


@router.post("/jobs/{job_id}/cancel", response_model=StandardResponse[dict], summary="Cancel Research Job")
async def cancel_job(job_id: int, session: AsyncSession = Depends(get_db)):
    try:
        job = await cancel_research_job(session, job_id)
    except ResearchJobNotFoundError:
        raise HTTPException(status_code=404, detail=f"Research job {job_id} not found")
    except ValueError as e:
        raise HTTPException(status_code=409, detail=str(e))
    return StandardResponse(data=serialize_job(job), message=f"Research job {job_id} cancelled")


@router.post("/prompt/rewrite", response_model=StandardResponse[dict], summary="Rewrite Research Prompt")
async def post_rewrite_prompt(request: RewritePromptRequest):
    """Sharpen a free-form research prompt. Falls back to the original text."""
    rewritten = await BusinessExtractor().rewrite_prompt(request.prompt, request.context)
    return StandardResponse(data={"original": request.prompt, "rewritten": rewritten})


@router.post("/prompt/render", response_model=StandardResponse[dict], summary="Render Prompt Template")
async def post_render_prompt(request: RenderPromptRequest):
    try:
        prompt = get_prompt(request.kind, **request.params)
    except KeyError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except TypeError as e:
        raise HTTPException(status_code=400, detail=f"Invalid parameters for {request.kind}: {e}")
    return StandardResponse(data={"kind": request.kind, "prompt": prompt})
