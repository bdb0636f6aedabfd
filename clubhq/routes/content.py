"""
Content routes: one set of endpoints serving every moderated kind
(members, projects, news, gallery, registrations, events, event
sign-ups and notices).
"""
from fastapi import APIRouter, Body, Depends, Request, status as http_status
from sqlalchemy.orm import Session
from typing import Any, Dict, Iterable, List, Optional

from ..auth import get_current_user, get_moderator, get_required_user
from ..config import get_settings
from ..content_kinds import public_view
from ..content_store import ContentDocument, ContentStore, get_content_db
from ..database import get_db
from ..limiter import limiter
from ..models.enums import ContentKind, ContentStatus
from ..models.user import User
from ..responses import deleted
from ..services.moderation import ListScope, ModerationWorkflow

settings = get_settings()

router = APIRouter(prefix="/api/content", tags=["content"])


def get_workflow(
    content_db: Session = Depends(get_content_db),
    db: Session = Depends(get_db),
) -> ModerationWorkflow:
    return ModerationWorkflow(ContentStore(content_db), identity_db=db)


def _iso(value) -> Optional[str]:
    return value.isoformat() if value else None


def document_to_dict(doc: ContentDocument, full: bool = False, names: Optional[Dict[int, str]] = None) -> dict:
    """Convert a ContentDocument to a response dict.

    The public projection drops private payload fields and authorship.
    """
    payload = doc.payload or {}
    data = {
        "id": doc.id,
        "kind": doc.kind,
        "status": doc.status,
        **(payload if full else public_view(doc.kind, payload)),
        "created_at": _iso(doc.created_at),
        "updated_at": _iso(doc.updated_at),
    }
    if full:
        names = names or {}
        data.update({
            "created_by": doc.created_by,
            "created_by_name": names.get(doc.created_by),
            "approved_by": doc.approved_by,
            "approved_by_name": names.get(doc.approved_by),
            "reviewed_at": _iso(doc.reviewed_at),
        })
    return data


def documents_to_list(workflow: ModerationWorkflow, docs: Iterable[ContentDocument], full: bool) -> List[dict]:
    docs = list(docs)
    names = workflow.author_names(docs) if full else {}
    return [document_to_dict(d, full=full, names=names) for d in docs]


@router.get("/{kind}", response_model=List[dict])
def list_content(
    kind: ContentKind,
    scope: ListScope = ListScope.PUBLIC,
    status: Optional[ContentStatus] = None,
    workflow: ModerationWorkflow = Depends(get_workflow),
    current_user: Optional[User] = Depends(get_current_user),
):
    """List records of a kind.

    scope=public returns approved records only, and only for published
    kinds; sign-up kinds need an admin. scope=all (admins) and scope=mine
    (own submissions) return every status, optionally filtered.
    """
    docs = workflow.list(kind, current_user, scope=scope, status=status)
    return documents_to_list(workflow, docs, full=scope is not ListScope.PUBLIC)


@router.get("/{kind}/{record_id}", response_model=dict)
def get_content(
    kind: ContentKind,
    record_id: int,
    workflow: ModerationWorkflow = Depends(get_workflow),
    current_user: Optional[User] = Depends(get_current_user),
):
    """Get a single record. Unapproved records are visible to admins and their submitter only."""
    doc = workflow.get(kind, record_id, current_user)
    full = workflow.can_see_full(doc, current_user)
    names = workflow.author_names([doc]) if full else {}
    return document_to_dict(doc, full=full, names=names)


@router.post("/{kind}", response_model=dict, status_code=http_status.HTTP_201_CREATED)
@limiter.limit(settings.submission_rate_limit)
def submit_content(
    request: Request,
    kind: ContentKind,
    payload: Dict[str, Any] = Body(...),
    workflow: ModerationWorkflow = Depends(get_workflow),
    current_user: Optional[User] = Depends(get_current_user),
):
    """Submit a record for review. It is stored as pending."""
    doc = workflow.submit(kind, payload, current_user)
    return document_to_dict(doc, full=True, names=workflow.author_names([doc]))


@router.patch("/{kind}/{record_id}", response_model=dict)
def update_content(
    kind: ContentKind,
    record_id: int,
    changes: Dict[str, Any] = Body(...),
    workflow: ModerationWorkflow = Depends(get_workflow),
    current_user: User = Depends(get_required_user),
):
    """Edit the payload of a record (submitter or admin)."""
    doc = workflow.update_own(kind, record_id, changes, current_user)
    return document_to_dict(doc, full=True, names=workflow.author_names([doc]))


@router.delete("/{kind}/{record_id}")
def delete_content(
    kind: ContentKind,
    record_id: int,
    workflow: ModerationWorkflow = Depends(get_workflow),
    current_user: User = Depends(get_moderator),
):
    """Delete a record (admin only)."""
    workflow.delete(kind, record_id, current_user)
    return deleted(f"{kind.value.capitalize()} deleted")


@router.post("/{kind}/{record_id}/approve", response_model=dict)
def approve_content(
    kind: ContentKind,
    record_id: int,
    workflow: ModerationWorkflow = Depends(get_workflow),
    current_user: User = Depends(get_required_user),
):
    """Approve a pending record."""
    doc = workflow.approve(kind, record_id, current_user)
    return document_to_dict(doc, full=True, names=workflow.author_names([doc]))


@router.post("/{kind}/{record_id}/reject", response_model=dict)
def reject_content(
    kind: ContentKind,
    record_id: int,
    workflow: ModerationWorkflow = Depends(get_workflow),
    current_user: User = Depends(get_required_user),
):
    """Reject a pending record."""
    doc = workflow.reject(kind, record_id, current_user)
    return document_to_dict(doc, full=True, names=workflow.author_names([doc]))


@router.get("/event/{event_id}/registrations", response_model=List[dict])
def list_event_registrations(
    event_id: int,
    workflow: ModerationWorkflow = Depends(get_workflow),
    current_user: User = Depends(get_moderator),
):
    """Every sign-up for one event, in any status (admin only)."""
    docs = workflow.event_registrations(event_id, current_user)
    return documents_to_list(workflow, docs, full=True)
