from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from typing import Any, Dict, Optional
from uuid import UUID
import logging

from ..auth.security import AuthContext, get_auth_context
from ..database.base import get_db
from ..models.submission import SubmissionStatus
from ..schemas.startup import StartupApprovalResponse, StartupDetail
from ..schemas.submission import SubmissionCounts, SubmissionDecision, SubmissionList, SubmissionResponse
from ..services import moderation
from ..services.submission_intake import Attachment, create_submission
from ..utils.s3_storage import StorageFactory, logo_storage_factory, pitch_deck_storage_factory
from .forms import logo_file, pitch_deck_file, profile_form

router = APIRouter()

# Get logger for this module
logger = logging.getLogger(__name__)


@router.post("", response_model=SubmissionResponse, status_code=status.HTTP_201_CREATED)
def submit_startup(
    form: Dict[str, Any] = Depends(profile_form),
    logo: Optional[Attachment] = Depends(logo_file),
    pitch_deck: Optional[Attachment] = Depends(pitch_deck_file),
    db: Session = Depends(get_db),
    logo_storage: StorageFactory = Depends(logo_storage_factory),
    pitch_deck_storage: StorageFactory = Depends(pitch_deck_storage_factory),
):
    """
    Public intake of a new startup. No session required; the submission waits
    for admin review.
    """
    return create_submission(db, form, logo, pitch_deck, logo_storage, pitch_deck_storage)


@router.get("", response_model=SubmissionList)
def list_submissions(
    status_filter: Optional[SubmissionStatus] = Query(None, alias="status"),
    db: Session = Depends(get_db),
    auth: AuthContext = Depends(get_auth_context),
):
    submissions, total = moderation.list_submissions(db, auth, status_filter)
    return {"submissions": submissions, "total": total}


@router.get("/counts", response_model=SubmissionCounts)
def submission_counts(
    db: Session = Depends(get_db),
    auth: AuthContext = Depends(get_auth_context),
):
    return moderation.submission_counts(db, auth)


@router.get("/{submission_id}", response_model=SubmissionResponse)
def get_submission(
    submission_id: UUID,
    db: Session = Depends(get_db),
    auth: AuthContext = Depends(get_auth_context),
):
    return moderation.get_submission(db, auth, submission_id)


@router.post("/{submission_id}/approve", response_model=StartupApprovalResponse)
def approve_submission(
    submission_id: UUID,
    decision: Optional[SubmissionDecision] = None,
    db: Session = Depends(get_db),
    auth: AuthContext = Depends(get_auth_context),
):
    startup = moderation.approve_submission(
        db, auth, submission_id, decision.admin_notes if decision else None
    )
    return {"message": "Startup approved and published", "startup": StartupDetail.model_validate(startup)}


@router.post("/{submission_id}/reject", response_model=SubmissionResponse)
def reject_submission(
    submission_id: UUID,
    decision: Optional[SubmissionDecision] = None,
    db: Session = Depends(get_db),
    auth: AuthContext = Depends(get_auth_context),
):
    return moderation.reject_submission(
        db, auth, submission_id, decision.admin_notes if decision else None
    )
