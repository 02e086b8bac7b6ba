"""
Verification of identity-provider access tokens and the per-request
authorization context handed to every workflow function.
"""
import enum
import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt

import config
from ..services.exceptions import AuthenticationError, AuthorizationError

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


class UserRole(str, enum.Enum):
    ENTREPRENEUR = "entrepreneur"
    INVESTOR = "investor"
    ADMIN = "admin"


DEFAULT_ROLE = UserRole.ENTREPRENEUR


def parse_role(value: Optional[str]) -> UserRole:
    """Role from user metadata; accounts without one are entrepreneurs"""
    try:
        return UserRole(value)
    except ValueError:
        return DEFAULT_ROLE


@dataclass(frozen=True)
class AuthContext:
    """Who is calling, built once per request from the verified session"""
    user_id: Optional[uuid.UUID] = None
    email: Optional[str] = None
    role: Optional[UserRole] = None
    full_name: Optional[str] = None

    @property
    def is_authenticated(self) -> bool:
        return self.user_id is not None

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN

    @property
    def is_investor(self) -> bool:
        return self.role == UserRole.INVESTOR

    def require_authenticated(self) -> "AuthContext":
        if not self.is_authenticated:
            raise AuthenticationError()
        return self

    def require_role(self, *roles: UserRole, message: Optional[str] = None) -> "AuthContext":
        self.require_authenticated()
        if self.role not in roles:
            logger.warning(f"User {self.user_id} with role {self.role} denied; requires {[r.value for r in roles]}")
            raise AuthorizationError(message or "Insufficient permissions")
        return self


ANONYMOUS = AuthContext()


def create_access_token(
    user_id: uuid.UUID,
    email: Optional[str] = None,
    role: Optional[str] = None,
    full_name: Optional[str] = None,
    expires_delta: Optional[timedelta] = None,
) -> str:
    """
    Mint a token shaped like the identity provider's access tokens.
    Used by local tooling and tests; production tokens come from the provider.
    """
    now = datetime.now(timezone.utc)
    expire = now + (expires_delta or timedelta(hours=1))
    user_metadata: Dict[str, Any] = {}
    if role:
        user_metadata["role"] = role
    if full_name:
        user_metadata["full_name"] = full_name
    payload = {
        "sub": str(user_id),
        "email": email,
        "aud": config.JWT_AUDIENCE,
        "role": "authenticated",
        "user_metadata": user_metadata,
        "iat": int(now.timestamp()),
        "exp": int(expire.timestamp()),
    }
    return jwt.encode(payload, config.SUPABASE_JWT_SECRET, algorithm=config.JWT_ALGORITHM)


def decode_access_token(token: str) -> AuthContext:
    try:
        payload = jwt.decode(
            token,
            config.SUPABASE_JWT_SECRET,
            algorithms=[config.JWT_ALGORITHM],
            audience=config.JWT_AUDIENCE,
        )
        user_id = uuid.UUID(payload["sub"])
    except (JWTError, KeyError, ValueError, TypeError) as e:
        logger.warning(f"Rejected access token: {e}")
        raise AuthenticationError("Invalid or expired session")

    metadata = payload.get("user_metadata") or {}
    return AuthContext(
        user_id=user_id,
        email=payload.get("email"),
        role=parse_role(metadata.get("role")),
        full_name=metadata.get("full_name"),
    )


async def get_auth_context(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> AuthContext:
    """
    Anonymous callers get ANONYMOUS; a present but invalid token is a 401.
    Workflow functions decide which roles they accept.
    """
    if credentials is None:
        return ANONYMOUS
    return decode_access_token(credentials.credentials)
