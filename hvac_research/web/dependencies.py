"""Shared dependencies for the API routers."""

import logging
from typing import List, Optional

from fastapi import HTTPException, Query
from pydantic import ValidationError

from hvac_research.prospects.filters import ProspectFilters

logger = logging.getLogger(__name__)


def get_prospect_filters(
    status: Optional[List[str]] = Query(None, description="Business statuses"),
    county: Optional[List[str]] = Query(None),
    city: Optional[List[str]] = Query(None),
    recommendation: Optional[List[str]] = Query(None),
    min_score: Optional[int] = None,
    max_score: Optional[int] = None,
    search: Optional[str] = None,
    sort_by: str = "overall_score",
    sort_dir: str = "desc",
    limit: int = 50,
    offset: int = 0,
) -> ProspectFilters:
    """Build ProspectFilters from query params; invalid combinations are a 400."""
    try:
        return ProspectFilters(
            status=status,
            county=county,
            city=city,
            recommendation=recommendation,
            min_score=min_score,
            max_score=max_score,
            search=search,
            sort_by=sort_by,
            sort_dir=sort_dir,
            limit=limit,
            offset=offset,
        )
    except ValidationError as e:
        messages = "; ".join(err["msg"] for err in e.errors())
        raise HTTPException(status_code=400, detail=f"Invalid filters: {messages}")
