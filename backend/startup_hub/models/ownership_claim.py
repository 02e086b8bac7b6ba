from sqlalchemy import Column, Boolean, DateTime, ForeignKey, Index, UniqueConstraint, Uuid, func, text, false
from sqlalchemy.orm import relationship
from ..database.base import Base
import uuid


class OwnershipClaim(Base):
    __tablename__ = "startup_owners"
    __table_args__ = (
        UniqueConstraint("user_id", "startup_id", name="uq_startup_owners_user_startup"),
        # At most one approved owner per startup
        Index(
            "uq_startup_owners_one_approved",
            "startup_id",
            unique=True,
            postgresql_where=text("approved"),
            sqlite_where=text("approved = 1"),
        ),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid, nullable=False, index=True)
    startup_id = Column(Uuid, ForeignKey("startups.id", ondelete="CASCADE"), nullable=False)
    approved = Column(Boolean, nullable=False, default=False, server_default=false())
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    # Relationships
    startup = relationship("Startup", back_populates="owners")

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        if not self.id:
            self.id = uuid.uuid4()

    @property
    def claim_status(self) -> str:
        return "approved" if self.approved else "pending"
