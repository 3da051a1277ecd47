"""
Human-readable explanations for score factors.

Each formatter receives the factor's value and matches on its variant
(Numeric / Text / Unset); no formatter looks at the raw business.
"""
from typing import Optional

from hvac_research.scoring.types import FactorValue, Numeric, Text


def employee_count(value: FactorValue) -> str:
    if isinstance(value, Numeric) and value.value > 0:
        n = value.display()
        if 5 <= value.value <= 50:
            return f"{n} employees - ideal range for $1-10M revenue"
        if value.value > 50:
            return f"{n} employees - may be larger than target"
        return f"{n} employees - smaller operation"
    return "Employee count unknown"


def fleet_size(value: FactorValue) -> str:
    if isinstance(value, Numeric) and value.value > 0:
        n = value.display()
        if 3 <= value.value <= 20:
            return f"{n} vehicles - typical for target range"
        if value.value > 20:
            return f"{n} vehicles - larger operation"
        return f"{n} vehicles - smaller fleet"
    return "Fleet size unknown"


def permit_volume(value: FactorValue) -> str:
    count = value.display() if isinstance(value, Numeric) else "0"
    return f"{count} permits in last 12 months"


def service_area(value: FactorValue) -> str:
    if isinstance(value, Numeric) and value.value > 0:
        return f"{value.display()} mile service radius"
    return "Service area unknown"


def website_quality(value: FactorValue) -> str:
    if isinstance(value, Text):
        return "Website exists (quality unknown)"
    return "No website found"


def social_presence(value: FactorValue) -> str:
    if isinstance(value, Text):
        return "Some social media presence"
    return "No social media found"


def review_volume(value: FactorValue) -> str:
    total = value.display() if isinstance(value, Numeric) else "0"
    return f"{total} total reviews across platforms"


def seo_visibility(value: FactorValue) -> str:
    return "SEO visibility estimated from web presence"


_OWNERSHIP = {
    "FAMILY_OWNED": "Family-owned - ideal acquisition target",
    "FRANCHISE": "Franchise - may have transfer restrictions",
    "PRIVATE_EQUITY": "PE-owned - likely not available",
    "CORPORATE": "Corporate - may be part of larger org",
}


def ownership_type(value: FactorValue) -> str:
    if isinstance(value, Text):
        return _OWNERSHIP.get(value.value, "Ownership type unknown")
    return "Ownership type unknown"


def business_age(value: FactorValue) -> str:
    if isinstance(value, Numeric) and value.value > 0:
        return f"{value.display()} years in business"
    return "Age unknown"


def niche_specialization(value: FactorValue) -> str:
    if isinstance(value, Text):
        return f"Specializes in {value.value}"
    return "General HVAC services"


_SUCCESSION = {
    "OWNER_RETIRING": "Owner retiring - high acquisition potential",
    "NO_SUCCESSOR": "No successor identified - good opportunity",
    "SUCCESSION_PLANNED": "Succession planned - may not be available",
    "RECENTLY_TRANSITIONED": "Recently transitioned - unlikely to sell",
}


def succession_status(value: FactorValue, owner_age: Optional[int] = None) -> str:
    age_info = f" (owner age: {owner_age})" if owner_age else ""
    if isinstance(value, Text) and value.value in _SUCCESSION:
        return _SUCCESSION[value.value] + age_info
    if owner_age:
        return f"Succession unknown (owner age: {owner_age})"
    return "Succession status unknown"


def permit_trend(current: int, previous: int) -> str:
    if previous == 0:
        return "No historical permit data"

    growth = (current - previous) / previous * 100

    if growth >= 20:
        return f"Strong growth: {growth:.0f}% increase"
    if growth >= 10:
        return f"Moderate growth: {growth:.0f}% increase"
    if growth >= 0:
        return f"Stable: {growth:.0f}% change"
    if growth >= -10:
        return f"Slight decline: {growth:.0f}% change"
    return f"Declining: {growth:.0f}% decrease"


def review_trend(value: FactorValue) -> str:
    if isinstance(value, Numeric) and value.value > 0:
        return f"{value.value:.1f} average rating"
    return "No review data"


def hiring_activity(value: FactorValue) -> str:
    return "Hiring activity data not available"


def fleet_growth(value: FactorValue) -> str:
    return "Fleet growth data not available"
