"""
Core Module - Shared Infrastructure.
"""

from hvac_research.core.config import settings, Settings
from hvac_research.core.database import Base, get_db, get_async_db
from hvac_research.core.models import BusinessStatus, Recommendation

__all__ = [
    "settings",
    "Settings",
    "Base",
    "get_db",
    "get_async_db",
    "BusinessStatus",
    "Recommendation",
]
