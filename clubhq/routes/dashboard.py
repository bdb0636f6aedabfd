"""
Dashboard routes for role-specific statistics.
"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import Dict, List

from .. import access
from ..access import Operation
from ..auth import get_required_user
from ..content_kinds import CONTENT_KINDS
from ..content_store import ContentStore, get_content_db
from ..database import get_db
from ..models.enums import ApplicationStatus, ContentKind, ContentStatus, UserRole
from ..models.user import User
from ..schemas.dashboard import Achievement, DashboardStats
from ..services.activity_log import recent_decisions
from .admin import activity_to_item

router = APIRouter(prefix="/api/dashboard", tags=["dashboard"])

CENTURY_POINTS = 100


def contribution_points(submissions: Dict[str, Dict[str, int]]) -> int:
    """Points for approved contributions only."""
    return sum(
        info.points * submissions.get(kind.value, {}).get(ContentStatus.APPROVED.value, 0)
        for kind, info in CONTENT_KINDS.items()
    )


def earned_achievements(submissions: Dict[str, Dict[str, int]], points: int) -> List[Achievement]:
    def approved(kind: ContentKind) -> int:
        return submissions.get(kind.value, {}).get(ContentStatus.APPROVED.value, 0)

    achievements = []
    if approved(ContentKind.PROJECT) >= 1:
        achievements.append(Achievement(
            id="first-project",
            title="Project Pioneer",
            description="Created your first project",
            icon="target",
            category="contribution",
            points=CONTENT_KINDS[ContentKind.PROJECT].points,
        ))
    if approved(ContentKind.NEWS) >= 1:
        achievements.append(Achievement(
            id="first-article",
            title="Content Creator",
            description="Published your first article",
            icon="book",
            category="contribution",
            points=CONTENT_KINDS[ContentKind.NEWS].points,
        ))
    if points >= CENTURY_POINTS:
        achievements.append(Achievement(
            id="hundred-points",
            title="Century Club",
            description="Earned 100 points",
            icon="trophy",
            category="participation",
            points=0,
        ))
    return achievements


@router.get("", response_model=DashboardStats)
def get_dashboard_stats(
    db: Session = Depends(get_db),
    content_db: Session = Depends(get_content_db),
    current_user: User = Depends(get_required_user),
):
    """Get dashboard statistics for the current user.

    Everyone gets their own submission counts, points and achievements;
    admins also get the moderation queue and recent decisions.
    """
    store = ContentStore(content_db)
    submissions = {
        kind.value: store.count_by_status(kind, created_by=current_user.id)
        for kind in ContentKind
    }
    points = contribution_points(submissions)

    stats = DashboardStats(
        role=current_user.role,
        application_status=current_user.application_status,
        submissions=submissions,
        points=points,
        achievements=earned_achievements(submissions, points),
    )

    if access.is_allowed(current_user.role, Operation.READ_ALL):
        stats.pending_by_kind = {
            kind.value: store.count_by_status(kind)[ContentStatus.PENDING.value]
            for kind in ContentKind
        }
        stats.pending_applicants = db.query(User).filter(
            User.role == UserRole.APPLICANT.value,
            User.application_status == ApplicationStatus.PENDING.value,
        ).count()
        stats.recent_activity = [activity_to_item(a) for a in recent_decisions(db, limit=10)]

    return stats
