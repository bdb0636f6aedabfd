from pydantic import BaseModel
from datetime import datetime
from typing import Optional

from ..models.enums import Decision, UserRole
from .auth import UserResponse


class ApplicationDecision(BaseModel):
    status: Decision  # approved, rejected


class RoleUpdate(BaseModel):
    role: UserRole


class UserDetailResponse(UserResponse):
    phone: Optional[str] = None
    age: Optional[str] = None
    address: Optional[str] = None
    motivation: Optional[str] = None
    reviewed_by: Optional[int] = None
    reviewed_at: Optional[datetime] = None
    created_at: datetime
