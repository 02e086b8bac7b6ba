"""
Admin moderation of submissions.

A submission starts pending and is resolved exactly once, either approved
(a published Startup is created from it) or rejected with a note.
"""
import logging
import uuid
from datetime import datetime, timezone
from typing import Dict, List, Optional, Tuple

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from ..auth.security import AuthContext, UserRole
from ..models.startup import Startup
from ..models.submission import Submission, SubmissionStatus
from ..utils.constants import PROFILE_FIELDS
from .exceptions import (
    AlreadyProcessedError,
    ConflictError,
    NotFoundError,
    UpstreamError,
    ValidationFailed,
)

logger = logging.getLogger(__name__)


def slug_conflict(db: Session, slug: str, exclude_id: Optional[uuid.UUID] = None) -> None:
    """Raise ConflictError naming the startup that already uses slug"""
    query = db.query(Startup).filter(Startup.slug == slug)
    if exclude_id is not None:
        query = query.filter(Startup.id != exclude_id)
    existing = query.first()
    if existing:
        raise ConflictError(
            "A startup with this name already exists",
            {"existing_startup": {"id": str(existing.id), "name": existing.name, "slug": existing.slug}},
        )


def _pending_submission(db: Session, submission_id: uuid.UUID) -> Submission:
    submission = db.query(Submission).filter(Submission.id == submission_id).first()
    if not submission:
        raise NotFoundError("Submission not found")
    if not submission.is_pending:
        raise AlreadyProcessedError()
    return submission


def approve_submission(db: Session, auth: AuthContext, submission_id: uuid.UUID,
                       admin_notes: Optional[str] = None) -> Startup:
    """
    Publish a pending submission as an approved startup.

    The startup is committed first; if recording the decision on the
    submission then fails, the error is logged and the startup is still
    returned.
    """
    auth.require_role(UserRole.ADMIN)
    submission = _pending_submission(db, submission_id)
    slug_conflict(db, submission.slug)

    startup = Startup(
        **{field: getattr(submission, field) for field in PROFILE_FIELDS},
        slug=submission.slug,
        is_approved=True,
        created_by=auth.user_id,
    )
    try:
        db.add(startup)
        db.commit()
        db.refresh(startup)
    except IntegrityError as e:
        db.rollback()
        logger.warning(f"Slug '{submission.slug}' taken concurrently while approving {submission_id}: {e}")
        raise ConflictError("A startup with this name already exists")
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Error creating startup from submission {submission_id}: {e}")
        raise UpstreamError("Error creating startup")

    logger.info(f"Submission {submission_id} approved by {auth.user_id}; startup {startup.id} ({startup.slug}) published")

    try:
        submission.submission_status = SubmissionStatus.APPROVED
        submission.admin_notes = admin_notes or None
        submission.reviewed_by = auth.user_id
        submission.reviewed_at = datetime.now(timezone.utc)
        submission.approved_startup_id = startup.id
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Startup {startup.id} published but submission {submission_id} could not be updated: {e}")

    return startup


def reject_submission(db: Session, auth: AuthContext, submission_id: uuid.UUID,
                      admin_notes: Optional[str]) -> Submission:
    auth.require_role(UserRole.ADMIN)
    if not admin_notes or not admin_notes.strip():
        raise ValidationFailed("A rejection reason is required", {"admin_notes": ["Required when rejecting"]})
    submission = _pending_submission(db, submission_id)

    submission.submission_status = SubmissionStatus.REJECTED
    submission.admin_notes = admin_notes.strip()
    submission.reviewed_by = auth.user_id
    submission.reviewed_at = datetime.now(timezone.utc)
    try:
        db.commit()
        db.refresh(submission)
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Error rejecting submission {submission_id}: {e}")
        raise UpstreamError("Error rejecting submission")

    logger.info(f"Submission {submission_id} rejected by {auth.user_id}")
    return submission


def list_submissions(db: Session, auth: AuthContext,
                     status: Optional[SubmissionStatus] = None,
                     limit: Optional[int] = None) -> Tuple[List[Submission], int]:
    """Submissions newest first, optionally filtered by status"""
    auth.require_role(UserRole.ADMIN)
    query = db.query(Submission)
    if status is not None:
        query = query.filter(Submission.status == status.value)
    total = query.count()
    query = query.order_by(Submission.created_at.desc())
    if limit:
        query = query.limit(limit)
    return query.all(), total


def get_submission(db: Session, auth: AuthContext, submission_id: uuid.UUID) -> Submission:
    auth.require_role(UserRole.ADMIN)
    submission = db.query(Submission).filter(Submission.id == submission_id).first()
    if not submission:
        raise NotFoundError("Submission not found")
    return submission


def submission_counts(db: Session, auth: AuthContext) -> Dict[str, int]:
    auth.require_role(UserRole.ADMIN)
    counts = {status.value: 0 for status in SubmissionStatus}
    rows = db.query(Submission.status, func.count(Submission.id)).group_by(Submission.status).all()
    for status, count in rows:
        counts[status] = count
    return counts
