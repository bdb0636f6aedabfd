"""
User management routes: listings, membership applications and roles.
"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import List, Optional

from ..auth import get_required_user
from ..content_store import ContentStore, get_content_db
from ..database import get_db
from ..models.enums import ApplicationStatus, UserRole
from ..models.user import User
from ..schemas.users import ApplicationDecision, RoleUpdate, UserDetailResponse
from ..services.applications import ApplicationService

router = APIRouter(prefix="/api/users", tags=["users"])


def get_application_service(
    db: Session = Depends(get_db),
    content_db: Session = Depends(get_content_db),
) -> ApplicationService:
    return ApplicationService(db, store=ContentStore(content_db))


@router.get("", response_model=List[UserDetailResponse])
def list_users(
    role: Optional[UserRole] = None,
    service: ApplicationService = Depends(get_application_service),
    current_user: User = Depends(get_required_user),
):
    """List all users, optionally filtered by role (admin only)."""
    return service.list_users(current_user, role=role)


@router.get("/applicants", response_model=List[UserDetailResponse])
def list_applicants(
    status: Optional[ApplicationStatus] = ApplicationStatus.PENDING,
    service: ApplicationService = Depends(get_application_service),
    current_user: User = Depends(get_required_user),
):
    """List applicants, oldest application first (admin only)."""
    return service.list_applicants(current_user, status=status)


@router.patch("/{user_id}/application-status", response_model=UserDetailResponse)
def decide_application(
    user_id: int,
    decision: ApplicationDecision,
    service: ApplicationService = Depends(get_application_service),
    current_user: User = Depends(get_required_user),
):
    """Approve or reject a pending membership application."""
    return service.decide_application(user_id, decision.status, current_user)


@router.patch("/{user_id}/role", response_model=UserDetailResponse)
def change_role(
    user_id: int,
    update: RoleUpdate,
    service: ApplicationService = Depends(get_application_service),
    current_user: User = Depends(get_required_user),
):
    """Change a user's role (super admin only)."""
    return service.change_role(user_id, update.role, current_user)
