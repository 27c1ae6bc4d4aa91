from math import ceil
from typing import Optional, List, Literal
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

WageInterval = Literal["hourly", "monthly", "yearly"]
WageCurrency = Literal["USD", "EUR"]
LocationRequirement = Literal["in-office", "hybrid", "remote"]
ExperienceLevel = Literal["junior", "mid-level", "senior", "c-level"]
JobListingType = Literal["internship", "part-time", "full-time", "contract"]
JobListingStatus = Literal["draft", "published", "delisted"]


class OrganizationSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True, frozen=True)

    id: str
    name: str
    image_url: Optional[str] = None


class ListingSummary(BaseModel):
    """Read-only projection of a job listing as shown in list views."""

    model_config = ConfigDict(from_attributes=True, frozen=True)

    id: str
    title: str
    state_abbreviation: Optional[str] = None
    city: Optional[str] = None
    wage: Optional[int] = None
    wage_interval: Optional[WageInterval] = None
    wage_currency_interval: Optional[WageCurrency] = None
    experience_level: Optional[ExperienceLevel] = None
    type: Optional[JobListingType] = None
    posted_at: Optional[datetime] = None
    location_requirement: Optional[LocationRequirement] = None
    is_featured: bool = False
    organization: OrganizationSummary


class PaginationDescriptor(BaseModel):
    model_config = ConfigDict(frozen=True)

    page: int = Field(..., ge=1)
    limit: int = Field(..., ge=1)
    total: int = Field(..., ge=0)
    total_pages: int = Field(..., ge=0)
    has_next_page: bool
    has_prev_page: bool

    @classmethod
    def compute(cls, page: int, limit: int, total: int) -> "PaginationDescriptor":
        total_pages = ceil(total / limit) if total else 0
        return cls(
            page=page,
            limit=limit,
            total=total,
            total_pages=total_pages,
            has_next_page=page < total_pages,
            has_prev_page=page > 1,
        )


class PageResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    data: List[ListingSummary]
    pagination: PaginationDescriptor


class JobListingCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=512)
    description: str = ""
    wage: Optional[int] = Field(None, ge=0)
    wage_interval: Optional[WageInterval] = None
    wage_currency_interval: Optional[WageCurrency] = None
    state_abbreviation: Optional[str] = Field(None, max_length=8)
    city: Optional[str] = Field(None, max_length=256)
    is_featured: bool = False
    location_requirement: LocationRequirement = "in-office"
    experience_level: ExperienceLevel = "junior"
    type: JobListingType = "full-time"


class JobListingUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=512)
    description: Optional[str] = None
    wage: Optional[int] = Field(None, ge=0)
    wage_interval: Optional[WageInterval] = None
    wage_currency_interval: Optional[WageCurrency] = None
    state_abbreviation: Optional[str] = Field(None, max_length=8)
    city: Optional[str] = Field(None, max_length=256)
    is_featured: Optional[bool] = None
    location_requirement: Optional[LocationRequirement] = None
    experience_level: Optional[ExperienceLevel] = None
    type: Optional[JobListingType] = None


class JobListingStatusChange(BaseModel):
    status: JobListingStatus


class JobListingOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    organization_id: str
    title: str
    description: str
    wage: Optional[int] = None
    wage_interval: Optional[WageInterval] = None
    wage_currency_interval: Optional[WageCurrency] = None
    state_abbreviation: Optional[str] = None
    city: Optional[str] = None
    is_featured: bool
    location_requirement: LocationRequirement
    experience_level: ExperienceLevel
    type: JobListingType
    status: JobListingStatus
    posted_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime
    organization: OrganizationSummary


class OrganizationUpsert(BaseModel):
    name: str = Field(..., min_length=1, max_length=256)
    image_url: Optional[str] = None


class AiSearchRequest(BaseModel):
    query: str = Field(..., min_length=1, max_length=2000)


class AiSearchResponse(BaseModel):
    job_ids: List[str]
    redirect: str


__all__ = [
    "OrganizationSummary",
    "ListingSummary",
    "PaginationDescriptor",
    "PageResult",
    "JobListingCreate",
    "JobListingUpdate",
    "JobListingStatusChange",
    "JobListingOut",
    "OrganizationUpsert",
    "AiSearchRequest",
    "AiSearchResponse",
]
