from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic_core import PydanticCustomError
from typing import Optional, List
from datetime import datetime
from uuid import UUID

from ..models.startup import OperatingStatus, EmployeeRange
from .submission import (
    SocialLinks,
    SubmissionResponse,
    blank_to_none,
    check_name,
    check_url,
    check_email,
    check_phone,
    check_founded_year,
    check_tags,
)


class StartupSummary(BaseModel):
    """Public listing row. Premium contact fields are never part of it."""
    id: UUID
    name: str
    slug: str
    short_description: str
    logo_url: Optional[str] = None
    founded_year: int
    operating_status: str
    location: str
    tags: List[str]
    employee_range: Optional[str] = None
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class StartupDetail(StartupSummary):
    long_description: str
    website: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    social_links: dict = {}
    funding_received: Optional[str] = None
    pitch_deck_url: Optional[str] = None
    is_approved: bool
    created_by: Optional[UUID] = None
    updated_at: Optional[datetime] = None


class StartupListResponse(BaseModel):
    startups: List[StartupSummary]
    total: int
    page: int
    page_size: int
    total_pages: int


class StartupApprovalResponse(BaseModel):
    message: str
    startup: StartupDetail


class StartupOwnerUpdate(BaseModel):
    """Fields an approved owner may change. Omitted fields stay as they are."""
    name: Optional[str] = Field(None, min_length=2, max_length=100)
    short_description: Optional[str] = Field(None, min_length=20, max_length=200)
    long_description: Optional[str] = Field(None, min_length=100, max_length=2000)
    logo_url: Optional[str] = None
    founded_year: Optional[int] = None
    operating_status: Optional[OperatingStatus] = None
    location: Optional[str] = Field(None, min_length=2, max_length=100)
    tags: Optional[List[str]] = None
    employee_range: Optional[EmployeeRange] = None
    website: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    social_links: Optional[SocialLinks] = None
    funding_received: Optional[str] = None
    pitch_deck_url: Optional[str] = None

    @field_validator("website", "email", "phone", "employee_range", "funding_received", "logo_url", "pitch_deck_url", mode="before")
    @classmethod
    def empty_optional_fields(cls, v):
        return blank_to_none(v)

    @field_validator("name")
    @classmethod
    def validate_name(cls, v):
        return check_name(v)

    @field_validator("website")
    @classmethod
    def validate_website(cls, v):
        return check_url(v)

    @field_validator("email")
    @classmethod
    def validate_email(cls, v):
        return check_email(v)

    @field_validator("phone")
    @classmethod
    def validate_phone(cls, v):
        return check_phone(v)

    @field_validator("founded_year")
    @classmethod
    def validate_founded_year(cls, v):
        return check_founded_year(v)

    @field_validator("tags")
    @classmethod
    def validate_tags(cls, v):
        return check_tags(v)

    @model_validator(mode="after")
    def validate_required_fields(self):
        required = ["name", "short_description", "long_description", "founded_year",
                    "operating_status", "location", "tags", "social_links"]
        for field in required:
            if field in self.model_fields_set and getattr(self, field) is None:
                raise PydanticCustomError(
                    "required_field",
                    "{field} is required",
                    {"field": field},
                )
        return self


class ClaimResponse(BaseModel):
    id: UUID
    user_id: UUID
    startup_id: UUID
    approved: bool
    status: str = Field(validation_alias="claim_status")
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)


class ClaimListItem(ClaimResponse):
    startup_name: str
    startup_slug: str


class ClaimList(BaseModel):
    claims: List[ClaimListItem]
    total: int


class OwnedStartupResponse(BaseModel):
    claim: Optional[ClaimResponse] = None
    startup: Optional[StartupDetail] = None


class FilterOptions(BaseModel):
    locations: List[str]
    tags: List[str]
    year_min: int
    year_max: int


class StartupStats(BaseModel):
    total_startups: int
    total_cities: int
    total_industries: int


class AdminStats(BaseModel):
    pending_submissions: int
    total_startups: int
    total_users: int
    recent_submissions: List[SubmissionResponse]
