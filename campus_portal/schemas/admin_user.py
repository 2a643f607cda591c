
from datetime import datetime
from typing import Optional, List
from pydantic import BaseModel, Field

from campus_portal.models.enums import UserRole
from campus_portal.schemas.user import EMAIL_PATTERN


class AdminUserOut(BaseModel):
    id: int
    name: str
    email: str
    role: UserRole
    is_active: bool
    created_at: Optional[datetime] = None
    last_password_reset_at: Optional[datetime] = None
    section_count: int = 0
    schedule_count: int = 0

class AdminUserListOut(BaseModel):
    items: list[AdminUserOut]
    total: int
    page: int
    page_size: int


class AdminUserCreateIn(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    email: str = Field(..., pattern=EMAIL_PATTERN, max_length=255)
    password: str = Field(..., min_length=8, max_length=72)
    role: UserRole = UserRole.STUDENT


class AdminUserUpdateIn(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    email: Optional[str] = Field(None, pattern=EMAIL_PATTERN, max_length=255)
    role: Optional[UserRole] = None
    is_active: Optional[bool] = None


class RosterImportOut(BaseModel):
    inserted: int
    skipped_existing: int
    errors: List[str] = []
