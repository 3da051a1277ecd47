"""
Prospects Module - Business Record Store.
"""

from hvac_research.prospects.database import (
    BusinessModel,
    ScoreModel,
)
from hvac_research.prospects.service import (
    BusinessNotFoundError,
    get_business,
    find_by_natural_key,
    upsert_business,
    list_businesses,
)

__all__ = [
    "BusinessModel",
    "ScoreModel",
    "BusinessNotFoundError",
    "get_business",
    "find_by_natural_key",
    "upsert_business",
    "list_businesses",
]
