"""
County permit records adapter.

Permit volume is the strongest revenue proxy available for a private HVAC
contractor. Records are gathered by deep research against the county
portals, then summarized into counts, a trend and a rough revenue band.
"""
import logging
import re
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, Iterable, List, Optional

from hvac_research.core.models import PermitCategory
from hvac_research.core.utils import one_year_before, parse_date
from hvac_research.research.adapters.base import run_research
from hvac_research.research.deep_research import DeepResearchClient

logger = logging.getLogger(__name__)

TEXAS_COUNTIES_PERMIT_INFO = {
    "Harris": {
        "name": "Harris County",
        "city": "Houston",
        "permit_portal_url": "https://permits.harriscountytx.gov/",
        "notes": "Largest county, extensive online records",
    },
    "Dallas": {
        "name": "Dallas County",
        "city": "Dallas",
        "permit_portal_url": "https://www.dallascounty.org/",
        "notes": "Multiple cities with separate systems",
    },
    "Tarrant": {
        "name": "Tarrant County",
        "city": "Fort Worth",
        "permit_portal_url": "https://www.tarrantcounty.com/",
        "notes": "Fort Worth and Arlington have separate systems",
    },
    "Bexar": {
        "name": "Bexar County",
        "city": "San Antonio",
        "permit_portal_url": "https://www.bexar.org/",
        "notes": "San Antonio dominates",
    },
    "Travis": {
        "name": "Travis County",
        "city": "Austin",
        "permit_portal_url": "https://www.traviscountytx.gov/",
        "notes": "Austin Building Services handles most",
    },
}

# Average ticket per permit; permits cover roughly 40-70% of real revenue
RESIDENTIAL_AVG_JOB = 8_000
COMMERCIAL_AVG_JOB = 35_000
REVENUE_LOW_MULTIPLIER = 1.4
REVENUE_HIGH_MULTIPLIER = 2.5

# Permit numbers always carry a digit, which keeps "Permit Status:" from matching
PERMIT_NUMBER_PATTERN = re.compile(
    r"(?:Permit|#)\s*(?:No\.?|Number|#)?\s*:?\s*([A-Z]{0,6}-?\d[A-Z0-9-]{3,18})", re.IGNORECASE
)
VALUE_PATTERN = re.compile(r"\$\s*([\d,]+(?:\.\d+)?)")
BARE_NUMBER_PATTERN = re.compile(r"([\d,]+(?:\.\d+)?)")


@dataclass
class PermitSearchParams:
    county: str
    contractor_name: Optional[str] = None
    license_number: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    permit_type: str = "all"


@dataclass
class PermitRecord:
    permit_number: str
    county: str
    permit_type: str = "HVAC"
    description: str = ""
    status: str = "Unknown"
    issue_date: Optional[date] = None
    completed_date: Optional[date] = None
    project_address: str = ""
    project_city: str = ""
    project_value: Optional[float] = None
    contractor_name: str = ""
    contractor_license: Optional[str] = None
    source_url: Optional[str] = None


@dataclass
class PermitSummary:
    total_permits: int = 0
    last_12_months: int = 0
    by_type: Dict[str, int] = field(default_factory=dict)
    by_year: Dict[str, int] = field(default_factory=dict)
    average_value: Optional[float] = None
    trend: str = "stable"  # growing | stable | declining


@dataclass
class RevenueEstimate:
    low: int
    high: int
    mid: int
    confidence: float


def build_permit_prompt(params: PermitSearchParams) -> str:
    info = TEXAS_COUNTIES_PERMIT_INFO[params.county]
    if params.start_date and params.end_date:
        date_range = f"from {params.start_date.isoformat()} to {params.end_date.isoformat()}"
    else:
        date_range = "from the last 3 years"
    license_line = f"TDLR License: {params.license_number}" if params.license_number else ""
    focus = "all HVAC-related" if params.permit_type in ("all", "", None) else params.permit_type

    return f"""Research HVAC permit records in {info['name']}, Texas {date_range}.

Search for permits pulled by: {params.contractor_name or 'HVAC contractors'}
{license_line}
Permit type focus: {focus}

County permit portal: {info['permit_portal_url']}

For each permit found, collect:
- Permit number
- Permit type (HVAC, Mechanical, AC Replacement, etc.)
- Project description
- Status (Issued, Final, Expired)
- Issue date
- Project address and city
- Project value if available
- Contractor name as listed

Also provide summary statistics:
- Total permits found
- Permits by year
- Permits by type (residential vs commercial)
- Average project value range
- Growth trend analysis

Structure the output clearly with individual permits followed by summary."""


async def search_permit_records(
    params: PermitSearchParams,
    client: Optional[DeepResearchClient] = None,
) -> List[PermitRecord]:
    """Research permits for a contractor in a supported county. Failures return []."""
    if params.county not in TEXAS_COUNTIES_PERMIT_INFO:
        raise ValueError(
            f"Unsupported county: {params.county}. Supported: {sorted(TEXAS_COUNTIES_PERMIT_INFO)}"
        )

    output = await run_research(build_permit_prompt(params), 30, 15 * 60, client, label="Permit")
    if output is None:
        return []
    records = parse_permit_results(output, params.county)
    logger.info(f"Permit search in {params.county} found {len(records)} permits")
    return records


def _field_value(line: str) -> str:
    return line.split(":", 1)[1].strip() if ":" in line else ""


def parse_permit_results(output: str, county: str) -> List[PermitRecord]:
    """
    Line-based parse: a permit number starts a new record and the labelled
    lines after it (type, status, issued, address, city, value, contractor,
    description) fill it in.
    """
    records: List[PermitRecord] = []
    current: Optional[PermitRecord] = None

    for raw_line in (output or "").splitlines():
        line = raw_line.strip().lstrip("-*• ").replace("**", "")
        if not line:
            continue
        lower = line.lower()

        number_match = PERMIT_NUMBER_PATTERN.search(line)
        if number_match and (lower.startswith("permit") or lower.startswith("#")):
            if current is not None:
                records.append(current)
            current = PermitRecord(permit_number=number_match.group(1).upper(), county=county)
            continue

        if current is None:
            continue

        if lower.startswith("type:") or lower.startswith("permit type:"):
            current.permit_type = _field_value(line) or current.permit_type
        elif lower.startswith("status:"):
            current.status = _field_value(line) or current.status
        elif lower.startswith(("issued:", "issue date:", "date:")):
            current.issue_date = parse_date(_field_value(line))
        elif lower.startswith(("completed:", "final:", "completed date:")):
            current.completed_date = parse_date(_field_value(line))
        elif lower.startswith("address:"):
            current.project_address = _field_value(line)
        elif lower.startswith("city:"):
            current.project_city = _field_value(line)
        elif lower.startswith("contractor:"):
            current.contractor_name = _field_value(line)
        elif lower.startswith("description:"):
            current.description = _field_value(line)
        elif lower.startswith("value:") or "$" in line:
            value_match = VALUE_PATTERN.search(line) or BARE_NUMBER_PATTERN.search(_field_value(line))
            if value_match:
                try:
                    current.project_value = float(value_match.group(1).replace(",", ""))
                except ValueError:
                    logger.debug(f"Unparseable permit value: {line!r}")

    if current is not None:
        records.append(current)

    return records


def categorize_permit_type(permit_type: Optional[str]) -> PermitCategory:
    lower = (permit_type or "").lower()
    if "commercial" in lower or "business" in lower:
        return PermitCategory.COMMERCIAL
    if "residential" in lower or "home" in lower or "dwelling" in lower:
        return PermitCategory.RESIDENTIAL
    if "industrial" in lower:
        return PermitCategory.INDUSTRIAL
    return PermitCategory.OTHER


def summarize_permits(records: Iterable[PermitRecord], as_of: Optional[date] = None) -> PermitSummary:
    """
    Counts by category and year, the trailing-12-month volume and a trend
    from the two most recent years (>10% up is growing, >10% down declining).
    """
    as_of = as_of or date.today()
    window_start = one_year_before(as_of)

    summary = PermitSummary()
    total_value = 0.0
    value_count = 0

    for record in records:
        summary.total_permits += 1

        category = categorize_permit_type(record.permit_type).value
        summary.by_type[category] = summary.by_type.get(category, 0) + 1

        if record.issue_date is not None:
            year = str(record.issue_date.year)
            summary.by_year[year] = summary.by_year.get(year, 0) + 1
            if window_start <= record.issue_date <= as_of:
                summary.last_12_months += 1

        if record.project_value:
            total_value += record.project_value
            value_count += 1

    if value_count:
        summary.average_value = total_value / value_count

    years = sorted(summary.by_year)
    if len(years) >= 2:
        recent = summary.by_year[years[-1]]
        previous = summary.by_year[years[-2]]
        if recent > previous * 1.1:
            summary.trend = "growing"
        elif recent < previous * 0.9:
            summary.trend = "declining"

    return summary


def estimate_revenue_from_permits(summary: PermitSummary) -> RevenueEstimate:
    annual_permits = summary.last_12_months or summary.total_permits / 3

    residential = summary.by_type.get(PermitCategory.RESIDENTIAL.value, 0)
    commercial = summary.by_type.get(PermitCategory.COMMERCIAL.value, 0)
    categorized = (residential + commercial) or 1

    estimated = (
        annual_permits * (residential / categorized) * RESIDENTIAL_AVG_JOB
        + annual_permits * (commercial / categorized) * COMMERCIAL_AVG_JOB
    )

    low = round(estimated * REVENUE_LOW_MULTIPLIER)
    high = round(estimated * REVENUE_HIGH_MULTIPLIER)
    mid = round((low + high) / 2)

    confidence = 0.5
    if summary.total_permits >= 50:
        confidence += 0.2
    if summary.average_value:
        confidence += 0.1
    if len(summary.by_year) >= 2:
        confidence += 0.1

    return RevenueEstimate(low=low, high=high, mid=mid, confidence=round(min(confidence, 0.9), 2))


def permit_record_to_model_kwargs(record: PermitRecord) -> Dict[str, Any]:
    """Keyword arguments for a PermitModel row."""
    return {
        "permit_number": record.permit_number,
        "permit_type": categorize_permit_type(record.permit_type).value,
        "description": record.description or None,
        "status": record.status,
        "issue_date": record.issue_date,
        "completed_date": record.completed_date,
        "project_address": record.project_address or None,
        "project_city": record.project_city or None,
        "project_value": record.project_value,
        "county": record.county,
        "source_url": record.source_url,
    }
