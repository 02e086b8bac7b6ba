"""
Startup reads and writes outside the moderation queue: public detail,
pitch deck access, owner self-edit and admin management.
"""
import logging
import uuid
from typing import Any, Dict, List, Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

import config
from ..auth.security import AuthContext, UserRole
from ..models.startup import Startup
from ..models.submission import Submission, SubmissionStatus
from ..schemas.startup import StartupOwnerUpdate
from ..schemas.submission import StartupProfile
from ..schemas.validation import validate
from ..utils.constants import ADMIN_STARTUP_PREFIX, OWNER_EDITABLE_FIELDS
from ..utils.identity_admin import IdentityAdminClient
from ..utils.s3_storage import StorageFactory, open_storage
from ..utils.slug import slugify
from .exceptions import ConflictError, NotFoundError, UpstreamError, ValidationFailed
from .moderation import slug_conflict
from .ownership import require_owner
from .submission_intake import (
    Attachment,
    check_attachments,
    parse_profile_form,
    profile_values,
    upload_attachments,
)

logger = logging.getLogger(__name__)

RECENT_SUBMISSIONS_LIMIT = 5


def get_startup(db: Session, startup_id: uuid.UUID) -> Startup:
    startup = db.query(Startup).filter(Startup.id == startup_id).first()
    if not startup:
        raise NotFoundError("Startup not found")
    return startup


def get_published_by_slug(db: Session, slug: str) -> Startup:
    startup = db.query(Startup).filter(Startup.slug == slug, Startup.is_approved.is_(True)).first()
    if not startup:
        raise NotFoundError("Startup not found")
    return startup


def pitch_deck_url(db: Session, auth: AuthContext, startup_id: uuid.UUID,
                   storage: StorageFactory) -> str:
    """Short-lived signed URL for an approved startup's pitch deck (investors only)"""
    auth.require_role(UserRole.INVESTOR, message="Pitch decks are available to investors only")
    startup = get_startup(db, startup_id)
    if not startup.is_approved or not startup.pitch_deck_url:
        raise NotFoundError("Pitch deck not found")

    url = open_storage(storage, "Error generating pitch deck link").generate_presigned_url(
        startup.pitch_deck_url, expiration=config.PITCH_DECK_URL_EXPIRATION
    )
    if not url:
        raise UpstreamError("Error generating pitch deck link")
    logger.info(f"Investor {auth.user_id} opened pitch deck of {startup.slug}")
    return url


def update_owned_startup(db: Session, auth: AuthContext, startup_id: uuid.UUID,
                         changes: Dict[str, Any]) -> Startup:
    """
    Apply an owner's edits. Only allow-listed descriptive fields are taken;
    approval and authorship never change. A new name means a new slug.
    """
    auth.require_authenticated()
    startup = get_startup(db, startup_id)
    require_owner(db, auth, startup_id)

    result = validate(StartupOwnerUpdate, changes)
    if not result.ok:
        raise ValidationFailed("Validation failed", result.errors)
    updates = profile_values(result.value, exclude_unset=True)
    updates = {field: value for field, value in updates.items() if field in OWNER_EDITABLE_FIELDS}

    if "name" in updates and updates["name"] != startup.name:
        new_slug = slugify(updates["name"])
        if new_slug != startup.slug:
            slug_conflict(db, new_slug, exclude_id=startup.id)
            startup.slug = new_slug

    for field, value in updates.items():
        setattr(startup, field, value)

    try:
        db.commit()
        db.refresh(startup)
    except IntegrityError as e:
        db.rollback()
        logger.warning(f"Slug conflict while owner {auth.user_id} renamed {startup_id}: {e}")
        raise ConflictError("A startup with this name already exists")
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Error updating startup {startup_id}: {e}")
        raise UpstreamError("Error updating startup")

    logger.info(f"Owner {auth.user_id} updated startup {startup_id}: {sorted(updates)}")
    return startup


def create_startup(db: Session, auth: AuthContext, form: Dict[str, Any],
                   logo: Optional[Attachment] = None,
                   pitch_deck: Optional[Attachment] = None,
                   logo_storage: Optional[StorageFactory] = None,
                   pitch_deck_storage: Optional[StorageFactory] = None) -> Startup:
    """Admin creation of a published startup, bypassing the submission queue"""
    auth.require_role(UserRole.ADMIN)
    profile = parse_profile_form(form, StartupProfile)
    check_attachments(logo, pitch_deck)

    slug = slugify(profile.name)
    slug_conflict(db, slug)

    logo_url, pitch_deck_key = upload_attachments(
        slug, ADMIN_STARTUP_PREFIX, logo, pitch_deck, logo_storage, pitch_deck_storage
    )

    startup = Startup(
        **profile_values(profile),
        slug=slug,
        logo_url=logo_url,
        pitch_deck_url=pitch_deck_key,
        is_approved=True,
        created_by=auth.user_id,
    )
    try:
        db.add(startup)
        db.commit()
        db.refresh(startup)
    except IntegrityError as e:
        db.rollback()
        logger.warning(f"Slug '{slug}' taken concurrently during admin creation: {e}")
        raise ConflictError("A startup with this name already exists")
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Error creating startup {slug}: {e}")
        raise UpstreamError("Error creating startup")

    logger.info(f"Admin {auth.user_id} created startup {startup.id} ({slug})")
    return startup


def delete_startup(db: Session, auth: AuthContext, startup_id: uuid.UUID) -> None:
    auth.require_role(UserRole.ADMIN)
    startup = get_startup(db, startup_id)
    try:
        db.delete(startup)
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Error deleting startup {startup_id}: {e}")
        raise UpstreamError("Error deleting startup")
    logger.info(f"Admin {auth.user_id} deleted startup {startup_id} ({startup.slug})")


def list_all_startups(db: Session, auth: AuthContext) -> List[Startup]:
    """Every startup, approved or not, newest first"""
    auth.require_role(UserRole.ADMIN)
    return db.query(Startup).order_by(Startup.created_at.desc(), Startup.name).all()


def admin_stats(db: Session, auth: AuthContext, identity: IdentityAdminClient) -> Dict[str, Any]:
    auth.require_role(UserRole.ADMIN)
    pending = db.query(Submission).filter(Submission.status == SubmissionStatus.PENDING.value)
    return {
        "pending_submissions": pending.count(),
        "total_startups": db.query(Startup).count(),
        "total_users": len(identity.list_users()),
        "recent_submissions": pending.order_by(Submission.created_at.desc()).limit(RECENT_SUBMISSIONS_LIMIT).all(),
    }
