"""
Ownership claims: an entrepreneur claims a published startup, an admin
approves or deletes the claim. A startup has at most one approved owner,
enforced by the partial unique index on startup_owners.
"""
import logging
import uuid
from typing import List, Optional, Tuple

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from ..auth.security import AuthContext, UserRole
from ..models.ownership_claim import OwnershipClaim
from ..models.startup import Startup
from .exceptions import (
    AuthorizationError,
    ConflictError,
    NotFoundError,
    UpstreamError,
    ValidationFailed,
)

logger = logging.getLogger(__name__)

APPROVED_OWNER_MESSAGE = "This startup already has an approved owner"


def _claim_payload(claim: OwnershipClaim) -> dict:
    return {
        "existing_claim": {
            "id": str(claim.id),
            "startup_id": str(claim.startup_id),
            "status": claim.claim_status,
        }
    }


def approved_owner(db: Session, startup_id: uuid.UUID) -> Optional[OwnershipClaim]:
    return db.query(OwnershipClaim).filter(
        OwnershipClaim.startup_id == startup_id,
        OwnershipClaim.approved.is_(True),
    ).first()


def create_claim(db: Session, auth: AuthContext, startup_id: uuid.UUID) -> OwnershipClaim:
    auth.require_role(UserRole.ENTREPRENEUR, message="Only entrepreneurs can claim startups")

    startup = db.query(Startup).filter(Startup.id == startup_id).first()
    if not startup:
        raise NotFoundError("Startup not found")
    if not startup.is_approved:
        raise ValidationFailed("Only published startups can be claimed")

    if approved_owner(db, startup_id):
        raise ConflictError(APPROVED_OWNER_MESSAGE)

    existing = db.query(OwnershipClaim).filter(
        OwnershipClaim.user_id == auth.user_id,
        OwnershipClaim.startup_id == startup_id,
    ).first()
    if existing:
        raise ConflictError("You have already claimed this startup", _claim_payload(existing))

    claim = OwnershipClaim(user_id=auth.user_id, startup_id=startup_id, approved=False)
    try:
        db.add(claim)
        db.commit()
        db.refresh(claim)
    except IntegrityError as e:
        db.rollback()
        logger.warning(f"Duplicate claim by {auth.user_id} on {startup_id}: {e}")
        raise ConflictError("You have already claimed this startup")
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Error creating claim on {startup_id}: {e}")
        raise UpstreamError("Error creating claim")

    logger.info(f"User {auth.user_id} claimed startup {startup_id} (claim {claim.id})")
    return claim


def approve_claim(db: Session, auth: AuthContext, claim_id: uuid.UUID) -> OwnershipClaim:
    auth.require_role(UserRole.ADMIN)

    claim = db.query(OwnershipClaim).filter(OwnershipClaim.id == claim_id).first()
    if not claim:
        raise NotFoundError("Claim not found")
    if claim.approved:
        raise ConflictError("This claim is already approved")

    # Re-read right before the write; the unique index settles any race left
    other = approved_owner(db, claim.startup_id)
    if other and other.id != claim.id:
        raise ConflictError(APPROVED_OWNER_MESSAGE, {"approved_claim_id": str(other.id)})

    claim.approved = True
    try:
        db.commit()
        db.refresh(claim)
    except IntegrityError as e:
        db.rollback()
        logger.warning(f"Concurrent approval on startup {claim.startup_id} rejected for claim {claim_id}: {e}")
        raise ConflictError(APPROVED_OWNER_MESSAGE)
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Error approving claim {claim_id}: {e}")
        raise UpstreamError("Error approving claim")

    logger.info(f"Claim {claim_id} approved by {auth.user_id}; {claim.user_id} now owns {claim.startup_id}")
    return claim


def reject_claim(db: Session, auth: AuthContext, claim_id: uuid.UUID) -> None:
    """Rejecting a claim deletes it"""
    auth.require_role(UserRole.ADMIN)

    claim = db.query(OwnershipClaim).filter(OwnershipClaim.id == claim_id).first()
    if not claim:
        raise NotFoundError("Claim not found")
    try:
        db.delete(claim)
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Error deleting claim {claim_id}: {e}")
        raise UpstreamError("Error deleting claim")

    logger.info(f"Claim {claim_id} on {claim.startup_id} removed by {auth.user_id}")


def list_claims(db: Session, auth: AuthContext,
                approved: Optional[bool] = None) -> List[Tuple[OwnershipClaim, Startup]]:
    """Claims with their startup, newest first"""
    auth.require_role(UserRole.ADMIN)
    query = db.query(OwnershipClaim, Startup).join(Startup, OwnershipClaim.startup_id == Startup.id)
    if approved is not None:
        query = query.filter(OwnershipClaim.approved.is_(approved))
    return query.order_by(OwnershipClaim.created_at.desc()).all()


def get_owned_startup(db: Session, auth: AuthContext) -> Tuple[Optional[OwnershipClaim], Optional[Startup]]:
    """
    The caller's ownership state: the approved claim and its startup, or the
    most recent pending claim without a startup, or (None, None).
    """
    auth.require_authenticated()
    claims = db.query(OwnershipClaim).filter(
        OwnershipClaim.user_id == auth.user_id
    ).order_by(OwnershipClaim.created_at.desc()).all()

    for claim in claims:
        if claim.approved:
            return claim, claim.startup
    return (claims[0], None) if claims else (None, None)


def require_owner(db: Session, auth: AuthContext, startup_id: uuid.UUID) -> OwnershipClaim:
    auth.require_authenticated()
    claim = db.query(OwnershipClaim).filter(
        OwnershipClaim.user_id == auth.user_id,
        OwnershipClaim.startup_id == startup_id,
        OwnershipClaim.approved.is_(True),
    ).first()
    if not claim:
        logger.warning(f"User {auth.user_id} tried to edit startup {startup_id} without an approved claim")
        raise AuthorizationError("You are not the approved owner of this startup")
    return claim


def remove_user_claims(db: Session, user_id: uuid.UUID) -> int:
    """Delete every claim held by user_id (account removal). Caller commits."""
    return db.query(OwnershipClaim).filter(OwnershipClaim.user_id == user_id).delete(synchronize_session=False)
