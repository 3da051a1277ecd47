"""
TDLR (Texas Department of Licensing and Regulation) license adapter.

There is no public TDLR API, so lookups go through deep research against
the TDLR license search page and the report is parsed with regexes.
"""
import logging
import re
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from hvac_research.core.models import LicenseStatus
from hvac_research.core.utils import parse_date
from hvac_research.research.adapters.base import run_research
from hvac_research.research.deep_research import DeepResearchClient

logger = logging.getLogger(__name__)

TDLR_LICENSE_TYPES = {
    "ACR": "Air Conditioning and Refrigeration Contractor",
    "ACB": "Air Conditioning and Refrigeration Technician",
    "ACRM": "Air Conditioning and Refrigeration Maintenance",
}

TDLR_SEARCH_URL = "https://www.tdlr.texas.gov/LicenseSearch/"

LICENSE_PATTERN = re.compile(
    r"(?:License|Lic\.?)\s*(?:No\.?|Number|#)?\s*:?\s*([A-Z]{2,5}[-\s]?\d{4,10}[A-Z]?)",
    re.IGNORECASE,
)
NAME_PATTERN = re.compile(r"(?:business|company|name)\s*:\s*([^,\n]+)", re.IGNORECASE)

# Checked in order; the first hit wins
STATUS_KEYWORDS = [
    ("pending", LicenseStatus.PENDING),
    ("revoked", LicenseStatus.REVOKED),
    ("suspended", LicenseStatus.SUSPENDED),
    ("expired", LicenseStatus.EXPIRED),
]

CONTEXT_CHARS = 200


@dataclass
class TDLRSearchParams:
    license_number: Optional[str] = None
    business_name: Optional[str] = None
    city: Optional[str] = None
    county: Optional[str] = None
    license_type: Optional[str] = None


@dataclass
class TDLRLicenseRecord:
    license_number: str
    license_type: str
    status: LicenseStatus
    business_name: str
    owner_name: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    state: str = "TX"
    zip_code: Optional[str] = None
    phone: Optional[str] = None
    issue_date: Optional[str] = None
    expiration_date: Optional[str] = None


def build_tdlr_prompt(params: TDLRSearchParams) -> str:
    criteria = []
    if params.license_number:
        criteria.append(f"License number: {params.license_number}")
    if params.business_name:
        criteria.append(f"Business name: {params.business_name}")
    if params.city:
        criteria.append(f"City: {params.city}")
    if params.county:
        criteria.append(f"County: {params.county}")
    if params.license_type:
        criteria.append(f"License type: {params.license_type}")
    criteria_text = "\n".join(criteria)

    return f"""Search Texas TDLR (Department of Licensing and Regulation) records for HVAC contractor licenses.

Search criteria:
{criteria_text}

For each license found, provide:
- License number
- License type (ACR, ACB, or ACRM)
- Status (Active, Expired, Suspended, Revoked)
- Business name
- Owner name if available
- Address, city, zip
- Phone number
- Issue date and expiration date

Note: TDLR license lookup is available at {TDLR_SEARCH_URL}

Provide results in a structured format."""


async def search_tdlr_records(
    params: TDLRSearchParams,
    client: Optional[DeepResearchClient] = None,
) -> List[TDLRLicenseRecord]:
    """Research TDLR licenses matching the params. Failures return []."""
    output = await run_research(build_tdlr_prompt(params), 20, 10 * 60, client, label="TDLR")
    if output is None:
        return []
    records = parse_tdlr_results(output)
    logger.info(f"TDLR search found {len(records)} licenses")
    return records


async def verify_license(
    license_number: str,
    client: Optional[DeepResearchClient] = None,
) -> Optional[TDLRLicenseRecord]:
    results = await search_tdlr_records(TDLRSearchParams(license_number=license_number), client)
    return results[0] if results else None


def _license_type(license_number: str) -> str:
    upper = license_number.upper()
    if "ACRM" in upper:
        return "ACRM"
    if upper.startswith("ACB"):
        return "ACB"
    return "ACR"


def _status_from_context(context: str) -> LicenseStatus:
    lower = context.lower()
    for keyword, status in STATUS_KEYWORDS:
        if keyword in lower:
            return status
    return LicenseStatus.ACTIVE


def parse_tdlr_results(output: str) -> List[TDLRLicenseRecord]:
    """
    Pull license records out of a research report.

    Status and business name are read from the text within 200 characters
    of each license number. Repeated numbers are kept once.
    """
    records: List[TDLRLicenseRecord] = []
    seen = set()

    for match in LICENSE_PATTERN.finditer(output or ""):
        license_number = re.sub(r"\s+", "", match.group(1)).upper()
        if license_number in seen:
            continue
        seen.add(license_number)

        start = max(0, match.start() - CONTEXT_CHARS)
        end = min(len(output), match.end() + CONTEXT_CHARS)
        context = output[start:end]

        name_match = NAME_PATTERN.search(context)
        business_name = name_match.group(1).strip().strip("*").strip() if name_match else "Unknown"

        records.append(TDLRLicenseRecord(
            license_number=license_number,
            license_type=_license_type(license_number),
            status=_status_from_context(context),
            business_name=business_name,
        ))

    return records


def tdlr_record_to_license(record: TDLRLicenseRecord) -> Dict[str, Any]:
    """Keyword arguments for a LicenseModel row."""
    return {
        "license_number": record.license_number,
        "license_type": record.license_type,
        "status": LicenseStatus(record.status).value,
        "holder_name": record.business_name if record.business_name != "Unknown" else None,
        "issue_date": parse_date(record.issue_date),
        "expiration_date": parse_date(record.expiration_date),
        "tdlr_record_id": record.license_number,
    }
