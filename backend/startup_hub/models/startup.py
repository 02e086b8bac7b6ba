from sqlalchemy import Column, String, Integer, Boolean, Text, DateTime, JSON, Uuid, func
from sqlalchemy.dialects.postgresql import ARRAY, JSONB
from sqlalchemy.orm import relationship
from ..database.base import Base
import uuid
from datetime import datetime
import enum

# Postgres keeps tags as a text[] (overlap queries); SQLite falls back to JSON
TagList = ARRAY(String).with_variant(JSON(), "sqlite")
SocialLinks = JSONB().with_variant(JSON(), "sqlite")


class OperatingStatus(str, enum.Enum):
    ACTIVE = "active"
    ACQUIRED = "acquired"
    CLOSED = "closed"


class EmployeeRange(str, enum.Enum):
    MICRO = "1-10"
    SMALL = "11-50"
    MEDIUM = "51-200"
    LARGE = "201-500"
    ENTERPRISE = "500+"


class StartupProfileMixin:
    """Descriptive columns shared by published startups and pending submissions"""

    name = Column(String(100), nullable=False)
    short_description = Column(String(200), nullable=False)
    long_description = Column(Text, nullable=False)
    logo_url = Column(String(500), nullable=True)
    founded_year = Column(Integer, nullable=False)
    operating_status = Column(String(20), nullable=False, default=OperatingStatus.ACTIVE.value)
    location = Column(String(100), nullable=False)
    tags = Column(TagList, nullable=False, default=list)
    employee_range = Column(String(20), nullable=True)
    website = Column(String(500), nullable=True)
    email = Column(String(255), nullable=True)  # premium
    phone = Column(String(50), nullable=True)  # premium
    social_links = Column(SocialLinks, nullable=False, default=dict)
    funding_received = Column(Text, nullable=True)
    pitch_deck_url = Column(String(500), nullable=True)  # premium, storage key in the private bucket


class Startup(StartupProfileMixin, Base):
    __tablename__ = "startups"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    slug = Column(String(120), nullable=False, unique=True, index=True)
    is_approved = Column(Boolean, nullable=False, default=False)
    created_by = Column(Uuid, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=datetime.now)

    # Relationships
    owners = relationship(
        "OwnershipClaim",
        back_populates="startup",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        if not self.id:
            self.id = uuid.uuid4()
