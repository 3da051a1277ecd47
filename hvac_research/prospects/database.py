"""
Database models for the prospect record store.

A Business is the acquisition target. Licenses, permits, reviews and the
employee / fleet estimate history hang off it; the latest Score is stored
one row per business and overwritten on every rescore.
"""
from datetime import datetime, date
from typing import List, Optional

from sqlalchemy import (
    Integer, String, Float, DateTime, Date,
    ForeignKey, Text, JSON, Index, UniqueConstraint
)
from sqlalchemy.orm import relationship, Mapped, mapped_column
from sqlalchemy.sql import func

from hvac_research.core.database import Base
from hvac_research.core.models import (
    BusinessStatus, LicenseStatus, NoteType, PermitCategory, ReviewSource,
)


class BusinessModel(Base):
    """
    An HVAC business in Texas under consideration for acquisition.
    Natural key: (name, city, county).
    """
    __tablename__ = "businesses"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    legal_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    dba: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    # Location
    address: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    city: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    county: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    state: Mapped[str] = mapped_column(String(2), default="TX")
    zip_code: Mapped[Optional[str]] = mapped_column(String(10), nullable=True)
    latitude: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    longitude: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    service_radius: Mapped[Optional[float]] = mapped_column(Float, nullable=True)  # miles

    # Contact / web presence
    phone: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    website: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    facebook_url: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    linkedin_url: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    instagram_url: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)

    # Services
    specializations: Mapped[Optional[List[str]]] = mapped_column(JSON, nullable=True)
    niches: Mapped[Optional[List[str]]] = mapped_column(JSON, nullable=True)
    service_types: Mapped[Optional[List[str]]] = mapped_column(JSON, nullable=True)

    # Ownership
    ownership_type: Mapped[Optional[str]] = mapped_column(String(30), nullable=True)  # OwnershipType
    owner_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    owner_age: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    founded_year: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    generation: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    succession_status: Mapped[Optional[str]] = mapped_column(String(30), nullable=True)  # SuccessionStatus

    # Pipeline status
    status: Mapped[str] = mapped_column(String(30), default=BusinessStatus.DISCOVERED.value, index=True)
    qualified_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    contacted_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    disqualified_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    disqualify_reason: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # Provenance
    discovery_source: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    discovery_job_id: Mapped[Optional[int]] = mapped_column(Integer, nullable=True, index=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now())
    updated_at: Mapped[Optional[datetime]] = mapped_column(DateTime, onupdate=func.now())

    # Relationships
    licenses: Mapped[List["LicenseModel"]] = relationship(
        "LicenseModel", back_populates="business", cascade="all, delete-orphan"
    )
    permits: Mapped[List["PermitModel"]] = relationship(
        "PermitModel", back_populates="business", cascade="all, delete-orphan"
    )
    reviews: Mapped[List["ReviewModel"]] = relationship(
        "ReviewModel", back_populates="business", cascade="all, delete-orphan"
    )
    employees: Mapped[List["EmployeeEstimateModel"]] = relationship(
        "EmployeeEstimateModel", back_populates="business", cascade="all, delete-orphan"
    )
    fleet: Mapped[List["FleetEstimateModel"]] = relationship(
        "FleetEstimateModel", back_populates="business", cascade="all, delete-orphan"
    )
    certifications: Mapped[List["CertificationModel"]] = relationship(
        "CertificationModel", back_populates="business", cascade="all, delete-orphan"
    )
    associations: Mapped[List["AssociationMembershipModel"]] = relationship(
        "AssociationMembershipModel", back_populates="business", cascade="all, delete-orphan"
    )
    notes: Mapped[List["NoteModel"]] = relationship(
        "NoteModel", back_populates="business", cascade="all, delete-orphan"
    )
    score: Mapped[Optional["ScoreModel"]] = relationship(
        "ScoreModel", back_populates="business", uselist=False, cascade="all, delete-orphan"
    )

    __table_args__ = (
        Index('idx_business_natural_key', 'name', 'city', 'county'),
    )

    def __repr__(self):
        return f"<Business(id={self.id}, name='{self.name}', city='{self.city}')>"


class LicenseModel(Base):
    """TDLR air-conditioning contractor license (ACR / ACB / ACRM)."""
    __tablename__ = "licenses"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    business_id: Mapped[int] = mapped_column(ForeignKey("businesses.id"), nullable=False, index=True)

    license_number: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    license_type: Mapped[Optional[str]] = mapped_column(String(10), nullable=True)
    status: Mapped[str] = mapped_column(String(20), default=LicenseStatus.ACTIVE.value)
    holder_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    issue_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    expiration_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    tdlr_record_id: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now())

    business: Mapped["BusinessModel"] = relationship("BusinessModel", back_populates="licenses")


class PermitModel(Base):
    """Mechanical / HVAC permit pulled by the business."""
    __tablename__ = "permits"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    business_id: Mapped[int] = mapped_column(ForeignKey("businesses.id"), nullable=False, index=True)

    permit_number: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    permit_type: Mapped[str] = mapped_column(String(20), default=PermitCategory.OTHER.value)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    status: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    issue_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True, index=True)
    completed_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    project_address: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    project_city: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    project_value: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    county: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    source_url: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now())

    business: Mapped["BusinessModel"] = relationship("BusinessModel", back_populates="permits")


class ReviewModel(Base):
    """Review snapshot for one platform at one point in time."""
    __tablename__ = "reviews"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    business_id: Mapped[int] = mapped_column(ForeignKey("businesses.id"), nullable=False, index=True)

    source: Mapped[str] = mapped_column(String(20), default=ReviewSource.OTHER.value)
    rating: Mapped[float] = mapped_column(Float, default=0.0)  # 0-5
    review_count: Mapped[int] = mapped_column(Integer, default=0)
    average_rating: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    sentiment_score: Mapped[Optional[float]] = mapped_column(Float, nullable=True)  # -1..1
    common_themes: Mapped[Optional[List[str]]] = mapped_column(JSON, nullable=True)
    profile_url: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    snapshot_date: Mapped[datetime] = mapped_column(DateTime, server_default=func.now())

    business: Mapped["BusinessModel"] = relationship("BusinessModel", back_populates="reviews")


class EmployeeEstimateModel(Base):
    """
    Employee headcount estimate. History is kept; the scorer only reads the
    latest, i.e. the greatest (snapshot_date, id).
    """
    __tablename__ = "employee_estimates"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    business_id: Mapped[int] = mapped_column(ForeignKey("businesses.id"), nullable=False, index=True)

    estimated_count: Mapped[int] = mapped_column(Integer, nullable=False)
    min_count: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    max_count: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    confidence: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    source: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    source_details: Mapped[Optional[dict]] = mapped_column(JSON, nullable=True)
    snapshot_date: Mapped[datetime] = mapped_column(DateTime, server_default=func.now(), index=True)

    business: Mapped["BusinessModel"] = relationship("BusinessModel", back_populates="employees")


class FleetEstimateModel(Base):
    """Service vehicle count estimate. Same latest-wins rule as employees."""
    __tablename__ = "fleet_estimates"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    business_id: Mapped[int] = mapped_column(ForeignKey("businesses.id"), nullable=False, index=True)

    vehicle_count: Mapped[int] = mapped_column(Integer, nullable=False)
    min_count: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    max_count: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    confidence: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    source: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    source_details: Mapped[Optional[dict]] = mapped_column(JSON, nullable=True)
    snapshot_date: Mapped[datetime] = mapped_column(DateTime, server_default=func.now(), index=True)

    business: Mapped["BusinessModel"] = relationship("BusinessModel", back_populates="fleet")


class CertificationModel(Base):
    """Manufacturer / industry certification (NATE, Carrier Factory Authorized...)."""
    __tablename__ = "certifications"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    business_id: Mapped[int] = mapped_column(ForeignKey("businesses.id"), nullable=False, index=True)

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    issuer: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    issue_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    expiration_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)

    business: Mapped["BusinessModel"] = relationship("BusinessModel", back_populates="certifications")


class AssociationMembershipModel(Base):
    """Trade association membership (ACCA, TACCA...)."""
    __tablename__ = "association_memberships"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    business_id: Mapped[int] = mapped_column(ForeignKey("businesses.id"), nullable=False, index=True)

    association_name: Mapped[str] = mapped_column(String(255), nullable=False)
    member_since: Mapped[Optional[date]] = mapped_column(Date, nullable=True)

    business: Mapped["BusinessModel"] = relationship("BusinessModel", back_populates="associations")


class NoteModel(Base):
    """Operator note attached to a business."""
    __tablename__ = "business_notes"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    business_id: Mapped[int] = mapped_column(ForeignKey("businesses.id"), nullable=False, index=True)

    content: Mapped[str] = mapped_column(Text, nullable=False)
    note_type: Mapped[str] = mapped_column(String(30), default=NoteType.GENERAL.value)
    created_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now())

    business: Mapped["BusinessModel"] = relationship("BusinessModel", back_populates="notes")


class ScoreModel(Base):
    """
    Latest score for a business. Exactly one row per business; a rescore
    overwrites every column (last writer wins).
    """
    __tablename__ = "scores"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    business_id: Mapped[int] = mapped_column(ForeignKey("businesses.id"), nullable=False)

    revenue_proxy_score: Mapped[int] = mapped_column(Integer, nullable=False)
    online_weakness_score: Mapped[int] = mapped_column(Integer, nullable=False)
    acquisition_fit_score: Mapped[int] = mapped_column(Integer, nullable=False)
    growth_signals_score: Mapped[int] = mapped_column(Integer, nullable=False)
    overall_score: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    recommendation: Mapped[str] = mapped_column(String(30), nullable=False, index=True)
    breakdown: Mapped[dict] = mapped_column(JSON, nullable=False)
    config_version: Mapped[str] = mapped_column(String(50), nullable=False)

    created_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now())
    updated_at: Mapped[Optional[datetime]] = mapped_column(DateTime, onupdate=func.now())

    business: Mapped["BusinessModel"] = relationship("BusinessModel", back_populates="score")

    __table_args__ = (
        UniqueConstraint('business_id', name='uq_scores_business_id'),
    )


class ScoringConfigRecord(Base):
    """
    Registered scoring configuration. Immutable: a changed payload must use a
    new version string. The most recently registered version is active.
    """
    __tablename__ = "scoring_configs"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    version: Mapped[str] = mapped_column(String(50), nullable=False, unique=True)
    payload: Mapped[dict] = mapped_column(JSON, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now())
