from pydantic import BaseModel, ConfigDict, EmailStr, Field, TypeAdapter, AnyHttpUrl, field_validator, ValidationError
from typing import Optional, List
from datetime import datetime
from uuid import UUID
import re

from ..models.startup import OperatingStatus, EmployeeRange
from ..models.submission import SubmissionStatus
from ..utils.constants import AVAILABLE_SECTORS, MIN_TAGS, MAX_TAGS, MIN_FOUNDED_YEAR
from ..utils.slug import slugify

_url_adapter = TypeAdapter(AnyHttpUrl)
_email_adapter = TypeAdapter(EmailStr)
_PHONE_PATTERN = re.compile(r"^\+?[\d\s\-()]+$")


def blank_to_none(value):
    if isinstance(value, str) and not value.strip():
        return None
    return value


def check_name(value: Optional[str]) -> Optional[str]:
    """A name must yield a usable URL slug"""
    if value is not None and not slugify(value):
        raise ValueError("Name must contain at least one Latin letter or digit")
    return value


def check_url(value: Optional[str]) -> Optional[str]:
    """URLs are optional but must be valid when present"""
    if value is None:
        return value
    try:
        _url_adapter.validate_python(value)
    except ValidationError:
        raise ValueError("Must be a valid URL")
    return value


def check_email(value: Optional[str]) -> Optional[str]:
    if value is None:
        return value
    try:
        _email_adapter.validate_python(value)
    except ValidationError:
        raise ValueError("Must be a valid email")
    return value


def check_phone(value: Optional[str]) -> Optional[str]:
    if value is not None and not _PHONE_PATTERN.match(value):
        raise ValueError("Invalid phone format")
    return value


def check_founded_year(value: Optional[int]) -> Optional[int]:
    if value is None:
        return value
    current_year = datetime.now().year
    if value < MIN_FOUNDED_YEAR:
        raise ValueError(f"Founding year must be {MIN_FOUNDED_YEAR} or later")
    if value > current_year:
        raise ValueError("Founding year cannot be in the future")
    return value


def check_tags(value: Optional[List[str]]) -> Optional[List[str]]:
    if value is None:
        return value
    if len(value) < MIN_TAGS:
        raise ValueError("Select at least one sector")
    if len(value) > MAX_TAGS:
        raise ValueError(f"Select at most {MAX_TAGS} sectors")
    unknown = [tag for tag in value if tag not in AVAILABLE_SECTORS]
    if unknown:
        raise ValueError(f"Unknown sector(s): {', '.join(unknown)}")
    return value


class SocialLinks(BaseModel):
    linkedin: Optional[str] = None
    twitter: Optional[str] = None
    facebook: Optional[str] = None
    instagram: Optional[str] = None

    @field_validator("linkedin", "twitter", "facebook", "instagram", mode="before")
    @classmethod
    def empty_social_links(cls, v):
        return blank_to_none(v)

    @field_validator("linkedin", "twitter", "facebook", "instagram")
    @classmethod
    def validate_url(cls, v):
        return check_url(v)


# Wizard steps, in order. Each validates only its own fields.

class SubmissionIdentity(BaseModel):
    """Step 1: basic info"""
    name: str = Field(min_length=2, max_length=100)
    short_description: str = Field(min_length=20, max_length=200)
    long_description: str = Field(min_length=100, max_length=2000)

    @field_validator("name")
    @classmethod
    def validate_name(cls, v):
        return check_name(v)


class SubmissionCompanyDetails(BaseModel):
    """Step 2: company details"""
    founded_year: int
    location: str = Field(min_length=2, max_length=100)
    tags: List[str]
    employee_range: Optional[EmployeeRange] = None
    operating_status: OperatingStatus

    @field_validator("employee_range", mode="before")
    @classmethod
    def empty_employee_range(cls, v):
        return blank_to_none(v)

    @field_validator("founded_year")
    @classmethod
    def validate_founded_year(cls, v):
        return check_founded_year(v)

    @field_validator("tags")
    @classmethod
    def validate_tags(cls, v):
        return check_tags(v)


class SubmissionContact(BaseModel):
    """Step 3: contact & links"""
    website: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    social_links: SocialLinks = Field(default_factory=SocialLinks)

    @field_validator("website", "email", "phone", mode="before")
    @classmethod
    def empty_contact_fields(cls, v):
        return blank_to_none(v)

    @field_validator("social_links", mode="before")
    @classmethod
    def missing_social_links(cls, v):
        return {} if v is None else v

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


class SubmissionFunding(BaseModel):
    """Step 4: funding & files (files travel separately as uploads)"""
    funding_received: Optional[str] = None

    @field_validator("funding_received", mode="before")
    @classmethod
    def empty_funding(cls, v):
        return blank_to_none(v)


class SubmissionSubmitter(BaseModel):
    """Step 5: who to notify"""
    submitter_email: EmailStr


SUBMISSION_STEPS = [
    SubmissionIdentity,
    SubmissionCompanyDetails,
    SubmissionContact,
    SubmissionFunding,
    SubmissionSubmitter,
]


class StartupProfile(SubmissionIdentity, SubmissionCompanyDetails, SubmissionContact, SubmissionFunding):
    """Every descriptive field of a startup, used for admin creation"""
    pass


class SubmissionCreate(StartupProfile, SubmissionSubmitter):
    pass


class SubmissionDecision(BaseModel):
    admin_notes: Optional[str] = None


class SubmissionResponse(BaseModel):
    id: UUID
    name: str
    slug: str
    short_description: str
    long_description: str
    logo_url: Optional[str] = None
    founded_year: int
    operating_status: str
    location: str
    tags: List[str]
    employee_range: Optional[str] = None
    website: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    social_links: dict = {}
    funding_received: Optional[str] = None
    pitch_deck_url: Optional[str] = None
    submitter_email: str
    status: SubmissionStatus
    admin_notes: Optional[str] = None
    reviewed_by: Optional[UUID] = None
    reviewed_at: Optional[datetime] = None
    approved_startup_id: Optional[UUID] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class SubmissionList(BaseModel):
    submissions: List[SubmissionResponse]
    total: int


class SubmissionCounts(BaseModel):
    pending: int
    approved: int
    rejected: int
