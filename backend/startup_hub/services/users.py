"""
User administration through the identity provider's admin API
"""
import logging
import uuid
from typing import Any, Dict, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..auth.security import AuthContext, UserRole, parse_role
from ..utils.identity_admin import IdentityAdminClient
from .exceptions import NotFoundError, UpstreamError, ValidationFailed
from .ownership import remove_user_claims

logger = logging.getLogger(__name__)


def user_summary(user: Dict[str, Any]) -> Dict[str, Any]:
    """Flatten a provider user into the fields the admin screens use"""
    metadata = user.get("user_metadata") or {}
    return {
        "id": user["id"],
        "email": user.get("email"),
        "role": parse_role(metadata.get("role")).value,
        "full_name": metadata.get("full_name"),
        "company": metadata.get("company"),
        "created_at": user.get("created_at"),
    }


def list_users(auth: AuthContext, identity: IdentityAdminClient) -> List[Dict[str, Any]]:
    auth.require_role(UserRole.ADMIN)
    users = [user_summary(user) for user in identity.list_users()]
    return sorted(users, key=lambda user: user["created_at"] or "", reverse=True)


def update_user(auth: AuthContext, identity: IdentityAdminClient, user_id: uuid.UUID,
                role: Optional[str] = None, full_name: Optional[str] = None) -> Dict[str, Any]:
    auth.require_role(UserRole.ADMIN, message="Only admins can manage users")

    valid_roles = [r.value for r in UserRole]
    if role and role not in valid_roles:
        raise ValidationFailed(f"Invalid role. Must be one of: {', '.join(valid_roles)}")

    if identity.get_user(str(user_id)) is None:
        raise NotFoundError("User not found")

    if user_id == auth.user_id and role and role != UserRole.ADMIN.value:
        raise ValidationFailed("You cannot change your own admin role")

    metadata = {}
    if role:
        metadata["role"] = role
    if full_name:
        metadata["full_name"] = full_name

    updated = identity.update_user_metadata(str(user_id), metadata)
    if updated is None:
        raise NotFoundError("User not found")
    logger.info(f"Admin {auth.user_id} updated user {user_id}: {metadata}")
    return user_summary(updated)


def delete_user(db: Session, auth: AuthContext, identity: IdentityAdminClient, user_id: uuid.UUID) -> None:
    """Delete the account and the ownership claims it held"""
    auth.require_role(UserRole.ADMIN, message="Only admins can delete users")

    if user_id == auth.user_id:
        raise ValidationFailed("You cannot delete your own admin account")

    if identity.get_user(str(user_id)) is None:
        raise NotFoundError("User not found")

    if not identity.delete_user(str(user_id)):
        raise NotFoundError("User not found")

    try:
        removed = remove_user_claims(db, user_id)
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"User {user_id} deleted but their claims could not be removed: {e}")
        raise UpstreamError("Error removing the user's claims")

    logger.info(f"Admin {auth.user_id} deleted user {user_id} and {removed} claim(s)")
