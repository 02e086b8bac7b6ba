from sqlalchemy import Column, String, Text, DateTime, ForeignKey, Uuid, CheckConstraint, func
from sqlalchemy.orm import relationship
from ..database.base import Base
from .startup import StartupProfileMixin
import uuid
from datetime import datetime
import enum


class SubmissionStatus(str, enum.Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class Submission(StartupProfileMixin, Base):
    __tablename__ = "submissions"
    __table_args__ = (
        CheckConstraint(
            "status IN ('pending', 'approved', 'rejected')",
            name="valid_submission_status"
        ),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    slug = Column(String(120), nullable=False, index=True)
    submitter_email = Column(String(255), nullable=False)
    status = Column(String(20), nullable=False, default=SubmissionStatus.PENDING.value, index=True)
    admin_notes = Column(Text, nullable=True)
    reviewed_by = Column(Uuid, nullable=True)
    reviewed_at = Column(DateTime(timezone=True), nullable=True)
    approved_startup_id = Column(Uuid, ForeignKey("startups.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=datetime.now)

    # Relationships
    approved_startup = relationship("Startup")

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        if not self.id:
            self.id = uuid.uuid4()

    @property
    def submission_status(self) -> SubmissionStatus:
        return SubmissionStatus(self.status)

    @submission_status.setter
    def submission_status(self, value: SubmissionStatus):
        self.status = value.value

    @property
    def is_pending(self) -> bool:
        return self.status == SubmissionStatus.PENDING.value
