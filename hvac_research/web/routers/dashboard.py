"""Dashboard router — summary stats."""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from hvac_research.core.database import get_db
from hvac_research.core.schemas import StandardResponse
from hvac_research.prospects.service import dashboard_stats
from hvac_research.research.workflow import list_research_jobs
from hvac_research.web.serializers import serialize_job

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/dashboard",
    tags=["Dashboard"]
)


@router.get("/stats", response_model=StandardResponse[dict], summary="Dashboard Stats")
async def get_dashboard_stats(recent_jobs: int = 5, session: AsyncSession = Depends(get_db)):
    """Counts by status and recommendation, average score and the latest research jobs."""
    stats = await dashboard_stats(session)
    jobs = await list_research_jobs(session, limit=recent_jobs)
    stats["recent_jobs"] = [serialize_job(j) for j in jobs]
    return StandardResponse(data=stats)
