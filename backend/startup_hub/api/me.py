from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..auth.security import AuthContext, get_auth_context
from ..database.base import get_db
from ..schemas.startup import OwnedStartupResponse
from ..schemas.user import CurrentUserResponse
from ..services import ownership

router = APIRouter()


@router.get("", response_model=CurrentUserResponse)
def current_user(auth: AuthContext = Depends(get_auth_context)):
    auth.require_authenticated()
    return {
        "user_id": auth.user_id,
        "email": auth.email,
        "role": auth.role.value,
        "full_name": auth.full_name,
    }


@router.get("/startup", response_model=OwnedStartupResponse)
def my_startup(
    db: Session = Depends(get_db),
    auth: AuthContext = Depends(get_auth_context),
):
    """The caller's approved startup, or the state of their latest claim"""
    claim, startup = ownership.get_owned_startup(db, auth)
    return {"claim": claim, "startup": startup}
