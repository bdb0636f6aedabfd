"""
Admin moderation routes: pending queue, approval history and bulk decisions.
"""
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import Optional

from ..auth import get_moderator
from ..database import get_db
from ..models.user import User
from ..responses import paginated
from ..schemas.content import BulkModerationRequest
from ..schemas.dashboard import ActivityItem
from ..services.activity_log import count_decisions, recent_decisions
from ..services.moderation import ModerationWorkflow
from .content import documents_to_list, get_workflow

router = APIRouter(prefix="/api/admin", tags=["admin"])


def activity_to_item(activity) -> ActivityItem:
    return ActivityItem(
        id=activity.id,
        type=activity.activity_type,
        record_kind=activity.record_kind,
        record_id=activity.record_id,
        title=activity.title,
        moderator_id=activity.user_id,
        timestamp=activity.created_at,
    )


@router.get("/pending-content")
def get_pending_content(
    workflow: ModerationWorkflow = Depends(get_workflow),
    current_user: User = Depends(get_moderator),
):
    """Every pending record, grouped by kind, with totals."""
    grouped = workflow.pending_content(current_user)
    items = {kind: documents_to_list(workflow, docs, full=True) for kind, docs in grouped.items()}
    return {
        "items": items,
        "counts": {kind: len(docs) for kind, docs in items.items()},
        "total": sum(len(docs) for docs in items.values()),
    }


@router.get("/approval-history")
def get_approval_history(
    page: int = Query(1, ge=1),
    per_page: int = Query(20, ge=1, le=100),
    record_kind: Optional[str] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_moderator),
):
    """Moderation decisions, newest first."""
    activities = recent_decisions(db, limit=per_page, offset=(page - 1) * per_page, record_kind=record_kind)
    total = count_decisions(db, record_kind=record_kind)
    items = [activity_to_item(a).model_dump(mode="json") for a in activities]
    return paginated(items, total, page=page, per_page=per_page)


@router.post("/bulk-moderate")
def bulk_moderate(
    body: BulkModerationRequest,
    workflow: ModerationWorkflow = Depends(get_workflow),
    current_user: User = Depends(get_moderator),
):
    """Approve or reject many records at once. Failures are reported per item."""
    items = [{"kind": ref.kind.value, "id": ref.id} for ref in body.items]
    outcome = workflow.bulk_moderate(items, body.decision, current_user)
    return {
        "decision": body.decision.value,
        "processed": len(outcome["results"]),
        "failed": len(outcome["errors"]),
        **outcome,
    }
