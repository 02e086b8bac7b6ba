from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session
from typing import Any, Dict, List, Optional
from uuid import UUID
import logging

from ..auth.security import AuthContext, get_auth_context
from ..database.base import get_db
from ..schemas.startup import AdminStats, ClaimList, ClaimListItem, ClaimResponse, StartupDetail
from ..schemas.user import UserList, UserSummary, UserUpdate
from ..services import ownership, startups as startup_service, users as user_service
from ..services.export import export_filename, export_startups_csv
from ..services.submission_intake import Attachment
from ..utils.identity_admin import IdentityAdminClient, get_identity_admin
from ..utils.s3_storage import StorageFactory, logo_storage_factory, pitch_deck_storage_factory
from .forms import logo_file, pitch_deck_file, profile_form

router = APIRouter()

# Get logger for this module
logger = logging.getLogger(__name__)


# Ownership claims

@router.get("/claims", response_model=ClaimList)
def list_claims(
    approved: Optional[bool] = Query(None),
    db: Session = Depends(get_db),
    auth: AuthContext = Depends(get_auth_context),
):
    rows = ownership.list_claims(db, auth, approved)
    claims = [
        ClaimListItem(
            **ClaimResponse.model_validate(claim).model_dump(),
            startup_name=startup.name,
            startup_slug=startup.slug,
        )
        for claim, startup in rows
    ]
    return {"claims": claims, "total": len(claims)}


@router.post("/claims/{claim_id}/approve", response_model=ClaimResponse)
def approve_claim(
    claim_id: UUID,
    db: Session = Depends(get_db),
    auth: AuthContext = Depends(get_auth_context),
):
    return ownership.approve_claim(db, auth, claim_id)


@router.delete("/claims/{claim_id}")
def reject_claim(
    claim_id: UUID,
    db: Session = Depends(get_db),
    auth: AuthContext = Depends(get_auth_context),
):
    ownership.reject_claim(db, auth, claim_id)
    return {"message": "Claim rejected"}


# Startups

@router.get("/startups", response_model=List[StartupDetail])
def list_all_startups(
    db: Session = Depends(get_db),
    auth: AuthContext = Depends(get_auth_context),
):
    return startup_service.list_all_startups(db, auth)


@router.post("/startups", response_model=StartupDetail, status_code=status.HTTP_201_CREATED)
def create_startup(
    form: Dict[str, Any] = Depends(profile_form),
    logo: Optional[Attachment] = Depends(logo_file),
    pitch_deck: Optional[Attachment] = Depends(pitch_deck_file),
    db: Session = Depends(get_db),
    auth: AuthContext = Depends(get_auth_context),
    logo_storage: StorageFactory = Depends(logo_storage_factory),
    pitch_deck_storage: StorageFactory = Depends(pitch_deck_storage_factory),
):
    """Publish a startup directly, without going through the submission queue"""
    return startup_service.create_startup(db, auth, form, logo, pitch_deck, logo_storage, pitch_deck_storage)


@router.get("/startups/export")
def export_startups(
    db: Session = Depends(get_db),
    auth: AuthContext = Depends(get_auth_context),
):
    content = export_startups_csv(db, auth)
    return Response(
        content=content,
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{export_filename()}"'},
    )


@router.delete("/startups/{startup_id}")
def delete_startup(
    startup_id: UUID,
    db: Session = Depends(get_db),
    auth: AuthContext = Depends(get_auth_context),
):
    startup_service.delete_startup(db, auth, startup_id)
    return {"message": "Startup deleted"}


@router.get("/stats", response_model=AdminStats)
def admin_stats(
    db: Session = Depends(get_db),
    auth: AuthContext = Depends(get_auth_context),
    identity: IdentityAdminClient = Depends(get_identity_admin),
):
    return startup_service.admin_stats(db, auth, identity)


# Users

@router.get("/users", response_model=UserList)
def list_users(
    auth: AuthContext = Depends(get_auth_context),
    identity: IdentityAdminClient = Depends(get_identity_admin),
):
    users = user_service.list_users(auth, identity)
    return {"users": users, "total": len(users)}


@router.patch("/users/{user_id}", response_model=UserSummary)
def update_user(
    user_id: UUID,
    user_update: UserUpdate,
    auth: AuthContext = Depends(get_auth_context),
    identity: IdentityAdminClient = Depends(get_identity_admin),
):
    return user_service.update_user(auth, identity, user_id, user_update.role, user_update.full_name)


@router.delete("/users/{user_id}")
def delete_user(
    user_id: UUID,
    db: Session = Depends(get_db),
    auth: AuthContext = Depends(get_auth_context),
    identity: IdentityAdminClient = Depends(get_identity_admin),
):
    user_service.delete_user(db, auth, identity, user_id)
    return {"message": "User deleted"}
