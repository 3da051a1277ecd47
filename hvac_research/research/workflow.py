"""
Orchestrator for research jobs.

A region-discovery job runs:

    DISCOVERY -> EXTRACTION -> VALIDATION -> STORAGE -> SCORING -> COMPLETE

Progress milestones are persisted on the job (and pushed to an optional
callback) so the dashboard can poll them. Any stage-level exception moves
the pipeline to ERROR and fails the job; per-record storage and scoring
failures are logged and skipped.

The orchestrator owns its transactions: it commits after every milestone and
every stored record so progress is visible to other sessions while the
research task is still running.
"""
import logging
import time
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from hvac_research.core.database import get_async_db
from hvac_research.core.models import ResearchJobStatus, ResearchJobType, ReviewSource
from hvac_research.prospects.database import LicenseModel
from hvac_research.prospects.service import (
    add_employee_estimate,
    add_fleet_estimate,
    add_reviews,
    upsert_business,
)
from hvac_research.research.database import ResearchJobBusinessModel, ResearchJobModel
from hvac_research.research.deep_research import DeepResearchClient, ResearchStatus
from hvac_research.research.extraction import BusinessExtractor, ExtractedBusiness
from hvac_research.research.prompts import get_prompt
from hvac_research.scoring.service import calculate_business_score

logger = logging.getLogger(__name__)

DISCOVERY_SOURCE = "deep_research"
VALIDATION_CONFIDENCE = 0.7
DISCOVERY_MAX_TOOL_CALLS = 50
DISCOVERY_MAX_WAIT = 30 * 60

TERMINAL_STATUSES = {
    ResearchJobStatus.COMPLETED.value,
    ResearchJobStatus.FAILED.value,
    ResearchJobStatus.CANCELLED.value,
}


class PipelineStage(str, Enum):
    INIT = "INIT"
    DISCOVERY = "DISCOVERY"
    EXTRACTION = "EXTRACTION"
    VALIDATION = "VALIDATION"
    STORAGE = "STORAGE"
    SCORING = "SCORING"
    COMPLETE = "COMPLETE"
    ERROR = "ERROR"


@dataclass
class PipelineProgress:
    stage: PipelineStage = PipelineStage.INIT
    progress: int = 0
    message: str = "Initializing pipeline"
    businesses_found: int = 0
    businesses_processed: int = 0
    errors: List[str] = field(default_factory=list)


@dataclass
class PipelineStats:
    discovered: int = 0
    validated: int = 0
    stored: int = 0
    scored: int = 0
    errors: int = 0


@dataclass
class PipelineResult:
    job_id: int
    success: bool = False
    business_ids: List[int] = field(default_factory=list)
    stats: PipelineStats = field(default_factory=PipelineStats)
    duration: float = 0.0
    error: Optional[str] = None


class ResearchJobNotFoundError(LookupError):
    def __init__(self, job_id: int):
        super().__init__(f"Research job not found: {job_id}")
        self.job_id = job_id


class PipelineError(Exception):
    """A pipeline stage could not continue."""


ProgressCallback = Callable[[PipelineProgress], Any]


# =============================================================================
# JOB PERSISTENCE
# =============================================================================

async def _load_job(session: AsyncSession, job_id: int) -> ResearchJobModel:
    job = await session.get(ResearchJobModel, job_id, populate_existing=True)
    if job is None:
        raise ResearchJobNotFoundError(job_id)
    return job


async def _update_job(session: AsyncSession, job_id: int, **fields) -> ResearchJobModel:
    job = await _load_job(session, job_id)
    for key, value in fields.items():
        setattr(job, key, value)
    await session.commit()
    return job


async def _set_job_status(
    session: AsyncSession,
    job_id: int,
    status: ResearchJobStatus,
    businesses_found: Optional[int] = None,
    businesses_qualified: Optional[int] = None,
    error: Optional[str] = None,
) -> ResearchJobModel:
    job = await _load_job(session, job_id)

    # A cancel from another session wins over the pipeline's own outcome
    if job.status == ResearchJobStatus.CANCELLED.value and status != ResearchJobStatus.CANCELLED:
        logger.info(f"Job {job_id} was cancelled; not moving it to {status.value}")
        return job

    job.status = status.value
    if status == ResearchJobStatus.RUNNING:
        job.started_at = datetime.utcnow()
    if status in (ResearchJobStatus.COMPLETED, ResearchJobStatus.FAILED):
        job.completed_at = datetime.utcnow()
    if businesses_found is not None:
        job.businesses_found = businesses_found
    if businesses_qualified is not None:
        job.businesses_qualified = businesses_qualified
    if error:
        job.error = error

    await session.commit()
    logger.info(f"Research job {job_id} -> {status.value}")
    return job


# =============================================================================
# PIPELINE STAGES
# =============================================================================

async def run_discovery_stage(
    session: AsyncSession,
    job_id: int,
    params: Dict[str, Any],
    research_client: DeepResearchClient,
) -> str:
    """Run the discovery research task and return its report. Raises PipelineError."""
    region = params.get("region") or {}
    county = region.get("county")
    if not county:
        raise PipelineError("County is required for region discovery")

    prompt = get_prompt("region_discovery", county=county, city=region.get("city"), focus="all")

    started = await research_client.start(prompt, max_tool_calls=DISCOVERY_MAX_TOOL_CALLS, background=True)
    if started.status == ResearchStatus.FAILED:
        raise PipelineError(started.error or "Discovery failed")

    await _update_job(session, job_id, openai_response_id=started.id)

    final = await research_client.wait_for_completion(
        started.id,
        max_wait=DISCOVERY_MAX_WAIT,
        on_progress=lambda r: logger.info(f"Research status: {r.status.value}"),
    )
    if final.status != ResearchStatus.COMPLETED:
        raise PipelineError(final.error or "Research did not complete")
    return final.output or ""


async def validate_businesses(
    businesses: List[ExtractedBusiness],
    extractor: BusinessExtractor,
    update: Callable[..., Any],
) -> List[ExtractedBusiness]:
    """
    Drop records without name/city/county. High-confidence records get an LLM
    anomaly check; flagged issues are logged but the record is kept.
    """
    validated: List[ExtractedBusiness] = []
    total = len(businesses)

    for i, business in enumerate(businesses):
        if not business.name or not business.city or not business.county:
            logger.debug(f"Skipping incomplete record: {business.name!r}")
            continue

        if business.confidence >= VALIDATION_CONFIDENCE:
            report = await extractor.validate_business_data(business)
            if not report.is_valid and report.issues:
                logger.info(f"Validation issues for {business.name}: {report.issues}")

        validated.append(business)
        await update(
            progress=55 + round(i / total * 15),
            message=f"Validating {i + 1}/{total}",
            businesses_processed=i + 1,
        )

    return validated


def _business_fields(business: ExtractedBusiness) -> Dict[str, Any]:
    return {
        "name": business.name.strip(),
        "city": business.city.strip(),
        "county": business.county.strip(),
        "address": business.address,
        "phone": business.phone,
        "website": business.website,
        "email": business.email,
        "specializations": business.specializations,
        "niches": business.niches,
        "owner_name": business.owner_name,
        "founded_year": business.founded_year,
    }


async def _link_job(session: AsyncSession, job_id: int, business_id: int) -> None:
    existing = await session.scalar(
        select(ResearchJobBusinessModel.id).where(
            ResearchJobBusinessModel.research_job_id == job_id,
            ResearchJobBusinessModel.business_id == business_id,
        )
    )
    if existing is None:
        session.add(ResearchJobBusinessModel(research_job_id=job_id, business_id=business_id))


async def _add_license_if_new(session: AsyncSession, business_id: int, license_number: str) -> None:
    existing = await session.scalar(
        select(LicenseModel.id).where(
            LicenseModel.business_id == business_id,
            LicenseModel.license_number == license_number,
        )
    )
    if existing is None:
        session.add(LicenseModel(business_id=business_id, license_number=license_number))


async def store_business(session: AsyncSession, job_id: int, business: ExtractedBusiness) -> int:
    """Upsert one extracted record plus its estimates, review snapshot and license."""
    record, created = await upsert_business(session, _business_fields(business), job_id=job_id)
    if created:
        record.discovery_source = DISCOVERY_SOURCE

    await _link_job(session, job_id, record.id)

    if business.employee_estimate:
        await add_employee_estimate(
            session, record.id, business.employee_estimate,
            confidence=business.confidence, source=DISCOVERY_SOURCE,
        )
    if business.fleet_estimate:
        await add_fleet_estimate(
            session, record.id, business.fleet_estimate,
            confidence=business.confidence, source=DISCOVERY_SOURCE,
        )
    if business.review_count or business.average_rating:
        await add_reviews(session, record.id, [{
            "source": ReviewSource.OTHER.value,
            "rating": business.average_rating or 0.0,
            "review_count": business.review_count or 0,
            "average_rating": business.average_rating,
        }])
    if business.license_number:
        await _add_license_if_new(session, record.id, business.license_number.strip().upper())

    await session.flush()
    return record.id


async def store_businesses(
    session: AsyncSession,
    job_id: int,
    businesses: List[ExtractedBusiness],
) -> List[int]:
    stored: List[int] = []
    for business in businesses:
        try:
            business_id = await store_business(session, job_id, business)
            await session.commit()
        except Exception as e:
            await session.rollback()
            logger.error(f"Error storing business {business.name}: {e}", exc_info=True)
            continue
        if business_id not in stored:
            stored.append(business_id)
    return stored


async def score_businesses(session: AsyncSession, business_ids: List[int]) -> int:
    """Best-effort scoring of freshly stored businesses. Returns how many scored."""
    scored = 0
    for business_id in business_ids:
        try:
            await calculate_business_score(session, business_id)
            await session.commit()
            scored += 1
        except Exception as e:
            await session.rollback()
            logger.error(f"Error scoring business {business_id}: {e}", exc_info=True)
    return scored


# =============================================================================
# MAIN PIPELINE
# =============================================================================

async def run_region_discovery_pipeline(
    session: AsyncSession,
    job_id: int,
    params: Dict[str, Any],
    on_progress: Optional[ProgressCallback] = None,
    research_client: Optional[DeepResearchClient] = None,
    extractor: Optional[BusinessExtractor] = None,
) -> PipelineResult:
    """Discover, extract, validate, store and score HVAC businesses for one region."""
    research_client = research_client or DeepResearchClient()
    extractor = extractor or BusinessExtractor()

    start_time = time.monotonic()
    result = PipelineResult(job_id=job_id)
    progress = PipelineProgress()

    async def update(**changes):
        for key, value in changes.items():
            setattr(progress, key, value)
        if on_progress is not None:
            on_progress(progress)
        await _update_job(session, job_id, progress=progress.progress)

    try:
        await update(stage=PipelineStage.DISCOVERY, progress=10, message="Starting deep research discovery")
        output = await run_discovery_stage(session, job_id, params, research_client)
        await update(progress=30, message="Deep research completed")

        await update(stage=PipelineStage.EXTRACTION, progress=40, message="Extracting business data from research")
        extracted = await extractor.extract_business_data(output)
        result.stats.discovered = len(extracted)
        await update(
            progress=50,
            message=f"Extracted {len(extracted)} businesses",
            businesses_found=len(extracted),
        )

        await update(stage=PipelineStage.VALIDATION, progress=55, message="Validating business data")
        validated = await validate_businesses(extracted, extractor, update)
        result.stats.validated = len(validated)

        await update(stage=PipelineStage.STORAGE, progress=70, message="Storing businesses")
        result.business_ids = await store_businesses(session, job_id, validated)
        result.stats.stored = len(result.business_ids)
        await update(
            progress=85,
            message=f"Stored {result.stats.stored} businesses",
            businesses_processed=result.stats.stored,
        )

        await update(stage=PipelineStage.SCORING, progress=90, message="Scoring businesses")
        result.stats.scored = await score_businesses(session, result.business_ids)

        await update(
            stage=PipelineStage.COMPLETE,
            progress=100,
            message="Pipeline complete",
            businesses_processed=result.stats.stored,
        )

        await _set_job_status(
            session, job_id, ResearchJobStatus.COMPLETED,
            businesses_found=result.stats.discovered,
            businesses_qualified=result.stats.stored,
        )
        result.success = True

    except Exception as e:
        error_message = str(e) or e.__class__.__name__
        logger.error(f"Pipeline for job {job_id} failed: {error_message}", exc_info=True)
        await session.rollback()

        progress.errors.append(error_message)
        progress.stage = PipelineStage.ERROR
        progress.message = f"Pipeline failed: {error_message}"
        if on_progress is not None:
            on_progress(progress)

        try:
            await _set_job_status(session, job_id, ResearchJobStatus.FAILED, error=error_message)
        except Exception as status_error:
            logger.error(
                f"Could not mark job {job_id} as FAILED: {status_error}", exc_info=True
            )
        result.error = error_message
        result.stats.errors = len(progress.errors)

    result.duration = time.monotonic() - start_time
    logger.info(
        f"Job {job_id} pipeline finished in {result.duration:.1f}s: "
        f"discovered={result.stats.discovered} stored={result.stats.stored} scored={result.stats.scored}"
    )
    return result


# =============================================================================
# JOB MANAGEMENT
# =============================================================================

async def create_research_job(
    session: AsyncSession,
    name: str,
    job_type: ResearchJobType,
    parameters: Optional[Dict[str, Any]] = None,
) -> ResearchJobModel:
    job = ResearchJobModel(
        name=name,
        job_type=ResearchJobType(job_type).value,
        status=ResearchJobStatus.PENDING.value,
        parameters=parameters or {},
        progress=0,
    )
    session.add(job)
    await session.commit()
    await session.refresh(job)
    logger.info(f"Created research job {job.id}: {name} ({job.job_type})")
    return job


async def start_research_job(
    session: AsyncSession,
    job_id: int,
    on_progress: Optional[ProgressCallback] = None,
    research_client: Optional[DeepResearchClient] = None,
    extractor: Optional[BusinessExtractor] = None,
) -> PipelineResult:
    """
    Mark the job RUNNING and run the pipeline for its type. Only region
    discovery has a pipeline; any other type fails the job.
    """
    job = await _load_job(session, job_id)
    job_type = job.job_type
    parameters = dict(job.parameters or {})

    await _set_job_status(session, job_id, ResearchJobStatus.RUNNING)

    if job_type == ResearchJobType.REGION_DISCOVERY.value:
        return await run_region_discovery_pipeline(
            session, job_id, parameters,
            on_progress=on_progress,
            research_client=research_client,
            extractor=extractor,
        )

    error = f"Job type {job_type} not yet implemented"
    logger.warning(f"Research job {job_id}: {error}")
    await _set_job_status(session, job_id, ResearchJobStatus.FAILED, error=error)
    return PipelineResult(job_id=job_id, success=False, error=error)


async def run_research_job(job_id: int) -> Optional[PipelineResult]:
    """Run a job in its own session (for background tasks and scripts)."""
    async with get_async_db() as session:
        try:
            return await start_research_job(session, job_id)
        except ResearchJobNotFoundError:
            logger.error(f"Research job {job_id} disappeared before it could start")
            return None


async def cancel_research_job(
    session: AsyncSession,
    job_id: int,
    research_client: Optional[DeepResearchClient] = None,
) -> ResearchJobModel:
    """Cancel the backend task (if one was started) and mark the job CANCELLED."""
    job = await _load_job(session, job_id)
    if job.status in TERMINAL_STATUSES:
        raise ValueError(f"Research job {job_id} is already {job.status}")

    if job.openai_response_id:
        research_client = research_client or DeepResearchClient()
        cancelled = await research_client.cancel(job.openai_response_id)
        if not cancelled:
            logger.warning(f"Backend task {job.openai_response_id} for job {job_id} could not be cancelled")

    return await _set_job_status(session, job_id, ResearchJobStatus.CANCELLED)


async def get_research_job(session: AsyncSession, job_id: int) -> ResearchJobModel:
    return await _load_job(session, job_id)


async def list_research_jobs(
    session: AsyncSession,
    status: Optional[ResearchJobStatus] = None,
    limit: int = 50,
    offset: int = 0,
) -> List[ResearchJobModel]:
    query = select(ResearchJobModel)
    if status is not None:
        query = query.where(ResearchJobModel.status == ResearchJobStatus(status).value)
    query = query.order_by(ResearchJobModel.created_at.desc(), ResearchJobModel.id.desc())
    result = await session.execute(query.limit(limit).offset(offset))
    return list(result.scalars().all())
