"""
CSV export of prospects.

Two layouts: a standard 30-column sheet for quick review and a detailed
61-column sheet with contact channels, estimate ranges, per-platform reviews,
licenses, certifications and associations. Prospects must be loaded with their
relationships (see ``prospects.service.list_businesses_for_export``).
"""
import csv
import io
from datetime import date, datetime
from typing import Any, Iterable, List, Optional

from hvac_research.core.models import ReviewSource
from hvac_research.core.utils import one_year_before, parse_date
from hvac_research.scoring.snapshot import latest_estimate

STANDARD_HEADERS = [
    "Business Name",
    "City",
    "County",
    "State",
    "Address",
    "Phone",
    "Email",
    "Website",
    "Status",
    "Founded Year",
    "Owner Name",
    "Owner Age",
    "Ownership Type",
    "Specializations",
    "Niches",
    "Employee Estimate",
    "Fleet Size",
    "Overall Score",
    "Revenue Proxy Score",
    "Online Weakness Score",
    "Acquisition Fit Score",
    "Growth Signals Score",
    "Recommendation",
    "Review Count",
    "Average Rating",
    "License Number",
    "License Status",
    "Discovery Source",
    "Created Date",
    "Updated Date",
]

DETAILED_HEADERS = [
    "Business ID",
    "Business Name",
    "Legal Name",
    "DBA",
    "City",
    "County",
    "State",
    "Zip Code",
    "Full Address",
    "Latitude",
    "Longitude",
    "Service Radius (miles)",
    "Phone",
    "Email",
    "Website",
    "Facebook",
    "LinkedIn",
    "Instagram",
    "Status",
    "Founded Year",
    "Years in Business",
    "Owner Name",
    "Owner Age",
    "Ownership Type",
    "Generation",
    "Succession Status",
    "Specializations",
    "Niches",
    "Service Types",
    "Employee Estimate",
    "Employee Range Min",
    "Employee Range Max",
    "Employee Confidence",
    "Fleet Size",
    "Fleet Confidence",
    "Overall Score",
    "Revenue Proxy Score",
    "Online Weakness Score",
    "Acquisition Fit Score",
    "Growth Signals Score",
    "Recommendation",
    "Google Reviews",
    "Google Rating",
    "Yelp Reviews",
    "Yelp Rating",
    "BBB Reviews",
    "BBB Rating",
    "Total Reviews",
    "Average Rating",
    "Permit Count (12 mo)",
    "License Numbers",
    "License Types",
    "License Status",
    "Certifications",
    "Associations",
    "Discovery Source",
    "Discovery Job ID",
    "Qualified Date",
    "Contacted Date",
    "Created Date",
    "Updated Date",
]


def _text(value: Any) -> str:
    if value is None:
        return ""
    return str(getattr(value, "value", value))


def _fixed(value: Optional[float], places: int) -> str:
    return "" if value is None else f"{value:.{places}f}"


def _joined(values: Optional[Iterable[Any]]) -> str:
    return "; ".join(_text(v) for v in values or [] if v is not None)


def format_date(value: Any) -> str:
    """YYYY-MM-DD, or empty for a missing date."""
    if value is None or value == "":
        return ""
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    parsed = parse_date(value)
    return parsed.isoformat() if parsed else ""


def _review_totals(reviews) -> tuple:
    reviews = list(reviews or [])
    total = sum(r.review_count or 0 for r in reviews)
    avg = sum(r.rating or 0.0 for r in reviews) / len(reviews) if reviews else None
    return total, avg


def _latest_review(reviews, source: ReviewSource):
    return latest_estimate(r for r in reviews or [] if r.source == source.value)


def _score_columns(score) -> List[str]:
    if score is None:
        return ["", "", "", "", "", ""]
    return [
        _text(score.overall_score),
        _text(score.revenue_proxy_score),
        _text(score.online_weakness_score),
        _text(score.acquisition_fit_score),
        _text(score.growth_signals_score),
        _text(score.recommendation),
    ]


def _write(headers: List[str], rows: List[List[str]]) -> str:
    output = io.StringIO()
    writer = csv.writer(output, lineterminator="\n")
    writer.writerow(headers)
    writer.writerows(rows)
    return output.getvalue()


def prospects_to_csv(prospects: Iterable[Any]) -> str:
    """Standard export: one row per prospect, 30 columns."""
    rows = []
    for p in prospects:
        employee = latest_estimate(p.employees)
        fleet = latest_estimate(p.fleet)
        license_ = p.licenses[0] if p.licenses else None
        total_reviews, avg_rating = _review_totals(p.reviews)

        rows.append([
            _text(p.name),
            _text(p.city),
            _text(p.county),
            _text(p.state),
            _text(p.address),
            _text(p.phone),
            _text(p.email),
            _text(p.website),
            _text(p.status),
            _text(p.founded_year),
            _text(p.owner_name),
            _text(p.owner_age),
            _text(p.ownership_type),
            _joined(p.specializations),
            _joined(p.niches),
            _text(employee.estimated_count if employee else None),
            _text(fleet.vehicle_count if fleet else None),
            *_score_columns(p.score),
            str(total_reviews),
            _fixed(avg_rating, 1),
            _text(license_.license_number if license_ else None),
            _text(license_.status if license_ else None),
            _text(p.discovery_source),
            format_date(p.created_at),
            format_date(p.updated_at),
        ])
    return _write(STANDARD_HEADERS, rows)


def prospects_to_detailed_csv(prospects: Iterable[Any], as_of: Optional[date] = None) -> str:
    """Detailed export: 61 columns. ``as_of`` anchors years-in-business and the permit window."""
    as_of = as_of or date.today()
    window_start = one_year_before(as_of)

    rows = []
    for p in prospects:
        employee = latest_estimate(p.employees)
        fleet = latest_estimate(p.fleet)
        google = _latest_review(p.reviews, ReviewSource.GOOGLE)
        yelp = _latest_review(p.reviews, ReviewSource.YELP)
        bbb = _latest_review(p.reviews, ReviewSource.BBB)
        total_reviews, avg_rating = _review_totals(p.reviews)

        recent_permits = 0
        for permit in p.permits or []:
            issued = parse_date(permit.issue_date)
            if issued is not None and window_start <= issued <= as_of:
                recent_permits += 1

        rows.append([
            _text(p.id),
            _text(p.name),
            _text(p.legal_name),
            _text(p.dba),
            _text(p.city),
            _text(p.county),
            _text(p.state),
            _text(p.zip_code),
            _text(p.address),
            _text(p.latitude),
            _text(p.longitude),
            _text(p.service_radius),
            _text(p.phone),
            _text(p.email),
            _text(p.website),
            _text(p.facebook_url),
            _text(p.linkedin_url),
            _text(p.instagram_url),
            _text(p.status),
            _text(p.founded_year),
            _text(as_of.year - p.founded_year if p.founded_year else None),
            _text(p.owner_name),
            _text(p.owner_age),
            _text(p.ownership_type),
            _text(p.generation),
            _text(p.succession_status),
            _joined(p.specializations),
            _joined(p.niches),
            _joined(p.service_types),
            _text(employee.estimated_count if employee else None),
            _text(employee.min_count if employee else None),
            _text(employee.max_count if employee else None),
            _fixed(employee.confidence if employee else None, 2),
            _text(fleet.vehicle_count if fleet else None),
            _fixed(fleet.confidence if fleet else None, 2),
            *_score_columns(p.score),
            _text(google.review_count if google else None),
            _fixed(google.rating if google else None, 1),
            _text(yelp.review_count if yelp else None),
            _fixed(yelp.rating if yelp else None, 1),
            _text(bbb.review_count if bbb else None),
            _fixed(bbb.rating if bbb else None, 1),
            str(total_reviews),
            _fixed(avg_rating, 1),
            str(recent_permits),
            _joined(l.license_number for l in p.licenses or []),
            _joined(l.license_type for l in p.licenses or []),
            _joined(l.status for l in p.licenses or []),
            _joined(c.name for c in p.certifications or []),
            _joined(a.association_name for a in p.associations or []),
            _text(p.discovery_source),
            _text(p.discovery_job_id),
            format_date(p.qualified_at),
            format_date(p.contacted_at),
            format_date(p.created_at),
            format_date(p.updated_at),
        ])
    return _write(DETAILED_HEADERS, rows)
