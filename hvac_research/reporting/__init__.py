from hvac_research.reporting.csv_export import (
    DETAILED_HEADERS,
    STANDARD_HEADERS,
    format_date,
    prospects_to_csv,
    prospects_to_detailed_csv,
)

__all__ = [
    "DETAILED_HEADERS",
    "STANDARD_HEADERS",
    "format_date",
    "prospects_to_csv",
    "prospects_to_detailed_csv",
]
