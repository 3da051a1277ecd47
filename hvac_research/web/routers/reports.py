"""Reports router — CSV export of prospects."""

import logging
from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Response
from sqlalchemy.ext.asyncio import AsyncSession

from hvac_research.core.database import get_db
from hvac_research.prospects.filters import ProspectFilters
from hvac_research.prospects.service import list_businesses_for_export
from hvac_research.reporting.csv_export import prospects_to_csv, prospects_to_detailed_csv
from hvac_research.web.dependencies import get_prospect_filters

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/reports",
    tags=["Reporting"]
)


@router.get("/export", summary="Export Prospects")
async def export_prospects(
    format: str = "standard",
    filters: ProspectFilters = Depends(get_prospect_filters),
    session: AsyncSession = Depends(get_db),
):
    """Every prospect matching the filters as CSV (no pagination)."""
    if format not in ("standard", "detailed"):
        raise HTTPException(status_code=400, detail="format must be 'standard' or 'detailed'")

    try:
        prospects = await list_businesses_for_export(session, filters)
    except Exception as e:
        logger.exception("Failed to load prospects for export")
        raise HTTPException(status_code=500, detail=str(e))

    if format == "detailed":
        content = prospects_to_detailed_csv(prospects)
    else:
        content = prospects_to_csv(prospects)

    filename = f"hvac_prospects_{format}_{date.today().isoformat()}.csv"
    logger.info(f"Exported {len(prospects)} prospects ({format})")
    return Response(
        content=content,
        media_type="text/csv",
        headers={"Content-Disposition": f"attachment; filename={filename}"},
    )
