"""
Database models for research jobs.
"""
from datetime import datetime
from typing import List, Optional

from sqlalchemy import Integer, String, DateTime, ForeignKey, Text, JSON, UniqueConstraint
from sqlalchemy.orm import relationship, Mapped, mapped_column
from sqlalchemy.sql import func

from hvac_research.core.database import Base
from hvac_research.core.models import ResearchJobStatus


class ResearchJobModel(Base):
    """
    One deep-research run (e.g. discover HVAC businesses in a county).
    Progress is 0-100 and tracks the pipeline milestones.
    """
    __tablename__ = "research_jobs"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    job_type: Mapped[str] = mapped_column(String(30), nullable=False)  # ResearchJobType
    status: Mapped[str] = mapped_column(String(20), default=ResearchJobStatus.PENDING.value, index=True)
    parameters: Mapped[dict] = mapped_column(JSON, default=dict)
    progress: Mapped[int] = mapped_column(Integer, default=0)

    openai_response_id: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    businesses_found: Mapped[int] = mapped_column(Integer, default=0)
    businesses_qualified: Mapped[int] = mapped_column(Integer, default=0)
    error: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    started_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    completed_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now())

    businesses: Mapped[List["ResearchJobBusinessModel"]] = relationship(
        "ResearchJobBusinessModel", back_populates="job", cascade="all, delete-orphan"
    )

    def __repr__(self):
        return f"<ResearchJob(id={self.id}, type='{self.job_type}', status='{self.status}')>"


class ResearchJobBusinessModel(Base):
    """Link between a job and every business it discovered or updated."""
    __tablename__ = "research_job_businesses"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    research_job_id: Mapped[int] = mapped_column(ForeignKey("research_jobs.id"), nullable=False, index=True)
    business_id: Mapped[int] = mapped_column(ForeignKey("businesses.id"), nullable=False, index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now())

    job: Mapped["ResearchJobModel"] = relationship("ResearchJobModel", back_populates="businesses")

    __table_args__ = (
        UniqueConstraint('research_job_id', 'business_id', name='uq_research_job_business'),
    )
