import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, String, Text, Integer, Boolean, DateTime, ForeignKey, Index
from sqlalchemy.orm import relationship

from .db import Base


def _utcnow():
    return datetime.now(timezone.utc)


class OrganizationORM(Base):
    __tablename__ = "organizations"
    id = Column(String(64), primary_key=True)     # issued by the auth provider
    name = Column(String(256), nullable=False)
    image_url = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow)

    job_listings = relationship("JobListingORM", back_populates="organization", cascade="all, delete-orphan")


class JobListingORM(Base):
    __tablename__ = "job_listings"
    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    organization_id = Column(String(64), ForeignKey("organizations.id", ondelete="CASCADE"), nullable=False)
    title = Column(String(512), nullable=False)
    description = Column(Text, nullable=False, default="")
    wage = Column(Integer, nullable=True)
    wage_interval = Column(String(16), nullable=True)             # hourly | monthly | yearly
    wage_currency_interval = Column(String(8), nullable=True)     # USD | EUR
    state_abbreviation = Column(String(8), nullable=True)
    city = Column(String(256), nullable=True)
    is_featured = Column(Boolean, nullable=False, default=False)
    location_requirement = Column(String(16), nullable=False, default="in-office")
    experience_level = Column(String(16), nullable=False, default="junior")
    type = Column(String(16), nullable=False, default="full-time")
    status = Column(String(16), nullable=False, default="draft")  # draft | published | delisted
    posted_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow)

    organization = relationship("OrganizationORM", back_populates="job_listings")

    __table_args__ = (
        Index("ix_job_listings_status_posted", "status", "posted_at"),
        Index("ix_job_listings_org_created", "organization_id", "created_at"),
    )
