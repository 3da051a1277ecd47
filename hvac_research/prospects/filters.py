"""Filtering and sorting for prospect lists and exports."""

from typing import List, Optional

from pydantic import BaseModel, Field, field_validator, model_validator
from sqlalchemy import Select, func, or_

from hvac_research.prospects.database import BusinessModel, ScoreModel

SORT_FIELDS = {
    "name": BusinessModel.name,
    "city": BusinessModel.city,
    "overall_score": ScoreModel.overall_score,
    "created_at": BusinessModel.created_at,
    "updated_at": BusinessModel.updated_at,
}


class ProspectFilters(BaseModel):
    """Filters for the prospects table and CSV export."""

    status: Optional[List[str]] = Field(None, description="Business statuses to include")
    county: Optional[List[str]] = Field(None, description="Counties to include")
    city: Optional[List[str]] = Field(None, description="Cities to include")
    recommendation: Optional[List[str]] = Field(None, description="Recommendation tiers to include")
    min_score: Optional[int] = Field(None, ge=0, le=100, description="Minimum overall score")
    max_score: Optional[int] = Field(None, ge=0, le=100, description="Maximum overall score")
    search: Optional[str] = Field(None, description="Substring match on name, city or owner")

    sort_by: str = Field("overall_score", description="name, city, overall_score, created_at, updated_at")
    sort_dir: str = Field("desc", description="asc or desc")
    limit: int = Field(50, ge=1, le=1000)
    offset: int = Field(0, ge=0)

    @field_validator("sort_by")
    @classmethod
    def validate_sort_by(cls, v):
        if v not in SORT_FIELDS:
            raise ValueError(f"sort_by must be one of {sorted(SORT_FIELDS)}")
        return v

    @field_validator("sort_dir")
    @classmethod
    def validate_sort_dir(cls, v):
        if v not in ("asc", "desc"):
            raise ValueError("sort_dir must be 'asc' or 'desc'")
        return v

    @model_validator(mode="after")
    def validate_score_range(self):
        if self.min_score is not None and self.max_score is not None and self.max_score < self.min_score:
            raise ValueError("max_score must be >= min_score")
        return self


def apply_filters(query: Select, filters: ProspectFilters) -> Select:
    """
    Apply WHERE clauses to a query over BusinessModel outer-joined to ScoreModel.
    Businesses without a score are excluded only when a score filter is set.
    """
    if filters.status:
        query = query.where(BusinessModel.status.in_(filters.status))
    if filters.county:
        query = query.where(BusinessModel.county.in_(filters.county))
    if filters.city:
        query = query.where(BusinessModel.city.in_(filters.city))
    if filters.recommendation:
        query = query.where(ScoreModel.recommendation.in_(filters.recommendation))
    if filters.min_score is not None:
        query = query.where(ScoreModel.overall_score >= filters.min_score)
    if filters.max_score is not None:
        query = query.where(ScoreModel.overall_score <= filters.max_score)
    if filters.search:
        pattern = f"%{filters.search.lower()}%"
        query = query.where(
            or_(
                func.lower(BusinessModel.name).like(pattern),
                func.lower(BusinessModel.city).like(pattern),
                func.lower(BusinessModel.owner_name).like(pattern),
            )
        )
    return query


def apply_sort(query: Select, filters: ProspectFilters) -> Select:
    column = SORT_FIELDS[filters.sort_by]
    ordered = column.asc() if filters.sort_dir == "asc" else column.desc()
    # Unscored businesses last, id as a stable tiebreak
    return query.order_by(ordered.nulls_last(), BusinessModel.id.asc())
