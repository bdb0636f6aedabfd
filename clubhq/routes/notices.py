"""
Notice board: the announcements a visitor or member should see right now.

Notices are created and moderated through /api/content/notice like any
other kind; this router only serves the active board.
"""
from fastapi import APIRouter, Depends
from typing import List, Optional

from ..auth import get_current_user
from ..models.user import User
from ..services.moderation import ModerationWorkflow
from .content import document_to_dict, get_workflow

router = APIRouter(prefix="/api/notices", tags=["notices"])


@router.get("", response_model=List[dict])
def active_notices(
    workflow: ModerationWorkflow = Depends(get_workflow),
    current_user: Optional[User] = Depends(get_current_user),
):
    """Active notices for the caller's audience, pinned first, then by priority."""
    return [document_to_dict(doc) for doc in workflow.active_notices(current_user)]
