from pydantic import BaseModel
from typing import Optional, List
from datetime import datetime
from uuid import UUID


class UserSummary(BaseModel):
    id: UUID
    email: Optional[str] = None
    role: str
    full_name: Optional[str] = None
    company: Optional[str] = None
    created_at: Optional[datetime] = None


class UserList(BaseModel):
    users: List[UserSummary]
    total: int


class UserUpdate(BaseModel):
    role: Optional[str] = None
    full_name: Optional[str] = None


class CurrentUserResponse(BaseModel):
    user_id: UUID
    email: Optional[str] = None
    role: str
    full_name: Optional[str] = None
