"""
Core enums for the HVAC research system.

NOTE: These are NOT database models. For SQLAlchemy ORM models, see each module's database.py:
  - Business/License/Permit/Review/Estimates/Score → hvac_research/prospects/database.py
  - ResearchJob → hvac_research/research/database.py

The enums below are shared by the scoring engine, the record store, the
research pipeline and the API layer, so their string values double as the
stored column values and the JSON values returned by the API.
"""
from enum import Enum


class OwnershipType(str, Enum):
    FAMILY_OWNED = "FAMILY_OWNED"
    FRANCHISE = "FRANCHISE"
    PRIVATE_EQUITY = "PRIVATE_EQUITY"
    CORPORATE = "CORPORATE"
    UNKNOWN = "UNKNOWN"


class SuccessionStatus(str, Enum):
    OWNER_RETIRING = "OWNER_RETIRING"
    SUCCESSION_PLANNED = "SUCCESSION_PLANNED"
    NO_SUCCESSOR = "NO_SUCCESSOR"
    RECENTLY_TRANSITIONED = "RECENTLY_TRANSITIONED"
    UNKNOWN = "UNKNOWN"


class BusinessStatus(str, Enum):
    DISCOVERED = "DISCOVERED"
    RESEARCHING = "RESEARCHING"
    QUALIFIED = "QUALIFIED"
    DISQUALIFIED = "DISQUALIFIED"
    CONTACTED = "CONTACTED"
    IN_CONVERSATION = "IN_CONVERSATION"
    CLOSED = "CLOSED"


class LicenseStatus(str, Enum):
    ACTIVE = "ACTIVE"
    EXPIRED = "EXPIRED"
    SUSPENDED = "SUSPENDED"
    REVOKED = "REVOKED"
    PENDING = "PENDING"


class ReviewSource(str, Enum):
    GOOGLE = "GOOGLE"
    YELP = "YELP"
    BBB = "BBB"
    FACEBOOK = "FACEBOOK"
    ANGI = "ANGI"
    OTHER = "OTHER"


class PermitCategory(str, Enum):
    RESIDENTIAL = "residential"
    COMMERCIAL = "commercial"
    INDUSTRIAL = "industrial"
    OTHER = "other"


class SocialPlatform(str, Enum):
    FACEBOOK = "facebook"
    LINKEDIN = "linkedin"
    INSTAGRAM = "instagram"


class Recommendation(str, Enum):
    HIGH_PRIORITY = "HIGH_PRIORITY"
    MEDIUM_PRIORITY = "MEDIUM_PRIORITY"
    LOW_PRIORITY = "LOW_PRIORITY"
    NOT_RECOMMENDED = "NOT_RECOMMENDED"


class ResearchJobType(str, Enum):
    REGION_DISCOVERY = "REGION_DISCOVERY"
    BUSINESS_ENRICHMENT = "BUSINESS_ENRICHMENT"
    PERMIT_SCAN = "PERMIT_SCAN"
    REVIEW_UPDATE = "REVIEW_UPDATE"


class ResearchJobStatus(str, Enum):
    PENDING = "PENDING"
    QUEUED = "QUEUED"
    RUNNING = "RUNNING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"
    CANCELLED = "CANCELLED"


class NoteType(str, Enum):
    GENERAL = "GENERAL"
    CONTACT_ATTEMPT = "CONTACT_ATTEMPT"
    RESEARCH_FINDING = "RESEARCH_FINDING"
    DISQUALIFICATION = "DISQUALIFICATION"
