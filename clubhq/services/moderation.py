"""
Moderation workflow shared by every content kind.

Records start ``pending``; a moderator moves them once to ``approved`` or
``rejected``. Both terminal states are final: there is no re-open
transition.
"""
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy.orm import Session

from .. import access
from ..access import Operation
from ..content_kinds import NoticePayload, get_kind, validate_payload
from ..content_store import ContentDocument, ContentStore
from ..errors import (
    AuthenticationError,
    AuthorizationError,
    ClubError,
    ConflictError,
    NotFoundError,
    ValidationError,
)
from ..logging_config import moderation_logger
from ..models.enums import ContentKind, ContentStatus, Decision, UserRole
from ..models.user import User
from ..notifications import EventManager, emit_moderation_decision, event_manager
from .activity_log import record_decision

# Fields owned by the workflow, never editable through a payload update
PROTECTED_FIELDS = frozenset({
    "id", "kind", "status", "created_by", "approved_by", "reviewed_at", "created_at", "updated_at",
})

# Event states that still accept registrations
OPEN_EVENT_STATES = frozenset({"upcoming", "ongoing"})

NOTICE_PRIORITY = {"urgent": 0, "high": 1, "medium": 2, "low": 3}

# Roles that see notices addressed to each audience
NOTICE_AUDIENCES = {
    "all": None,
    "members": frozenset({UserRole.MEMBER.value, UserRole.ADMIN.value, UserRole.SUPER_ADMIN.value}),
    "admins": frozenset({UserRole.ADMIN.value, UserRole.SUPER_ADMIN.value}),
}


class ListScope(str, Enum):
    PUBLIC = "public"
    ALL = "all"
    MINE = "mine"


def _role(user: Optional[User]):
    return user.role if user is not None else None


class ModerationWorkflow:
    """Submit, read and moderate content records of any kind."""

    def __init__(
        self,
        store: ContentStore,
        identity_db: Optional[Session] = None,
        events: Optional[EventManager] = None,
    ):
        self.store = store
        self.identity_db = identity_db
        self.events = events or event_manager

    # ------------------------------------------------------------
    # Submission
    # ------------------------------------------------------------

    def submit(self, kind, data: Any, submitter: Optional[User]) -> ContentDocument:
        info = get_kind(kind)
        access.require(_role(submitter), Operation.CREATE, info.kind)
        payload = validate_payload(info.kind, data)
        if info.kind is ContentKind.EVENT_REGISTRATION:
            self._check_event_registration(payload, submitter)

        created_by = submitter.id if submitter is not None else None
        doc = self.store.insert(info.kind, payload, created_by=created_by)
        moderation_logger.info(
            "Content submitted",
            record_kind=info.kind.value,
            record_id=doc.id,
            created_by=created_by,
        )
        return doc

    def _check_event_registration(
        self,
        payload: Dict[str, Any],
        submitter: Optional[User],
        exclude_id: Optional[int] = None,
    ) -> ContentDocument:
        """Refuse sign-ups for unknown, closed or full events and duplicates."""
        event_id = payload["event_id"]
        event = self.store.get(ContentKind.EVENT, event_id)
        if event is None or event.status != ContentStatus.APPROVED.value:
            raise NotFoundError("Event", event_id)

        details = event.payload or {}
        if not details.get("registration_required"):
            raise ValidationError("This event does not take registrations", {"event_id": event_id})
        if details.get("state", "upcoming") not in OPEN_EVENT_STATES:
            raise ValidationError(
                "This event is closed for registration",
                {"event_id": event_id, "state": details.get("state")},
            )

        email = payload["email"].lower()
        taken = [
            doc for doc in self.store.list(ContentKind.EVENT_REGISTRATION)
            if doc.id != exclude_id
            and doc.status != ContentStatus.REJECTED.value
            and (doc.payload or {}).get("event_id") == event_id
        ]
        for doc in taken:
            same_user = submitter is not None and doc.created_by == submitter.id
            if same_user or str((doc.payload or {}).get("email", "")).lower() == email:
                raise ConflictError(
                    "Already registered for this event",
                    current_status=doc.status,
                )

        limit = details.get("max_participants")
        if limit is not None and len(taken) >= limit:
            raise ConflictError("This event is full")
        return event

    # ------------------------------------------------------------
    # Decisions
    # ------------------------------------------------------------

    def approve(self, kind, record_id: int, moderator: Optional[User]) -> ContentDocument:
        return self.decide(kind, record_id, Decision.APPROVED, moderator)

    def reject(self, kind, record_id: int, moderator: Optional[User]) -> ContentDocument:
        return self.decide(kind, record_id, Decision.REJECTED, moderator)

    def decide(self, kind, record_id: int, decision: Decision, moderator: Optional[User]) -> ContentDocument:
        info = get_kind(kind)
        decision = Decision(decision)
        access.require(_role(moderator), Operation.MODERATE, info.kind)

        doc = self.store.transition(info.kind, record_id, ContentStatus(decision.value), moderator.id)
        if doc is None:
            current = self.store.get(info.kind, record_id)
            if current is None:
                raise NotFoundError(info.label, record_id)
            raise ConflictError(
                f"{info.label} {record_id} was already {current.status}",
                current_status=current.status,
            )

        log = moderation_logger.bind(record_kind=info.kind.value, record_id=doc.id)
        log.info(f"Content {decision.value}", moderator_id=moderator.id)
        # Committed; the broadcast and the audit entry are best effort from here
        emit_moderation_decision(
            decision.event_type, info.kind.value, doc.id, moderator.id, manager=self.events,
        )
        record_decision(
            self.identity_db,
            moderator.id,
            decision,
            info.kind.value,
            doc.id,
            title=f"{info.label} {decision.value}: {_headline(doc)}",
        )
        return doc

    def bulk_moderate(self, items: Iterable[Dict[str, Any]], decision: Decision, moderator: Optional[User]) -> Dict[str, list]:
        """Apply one decision to many records; failures are reported per item."""
        access.require(_role(moderator), Operation.MODERATE)
        decision = Decision(decision)

        results, errors = [], []
        for item in items:
            kind, record_id = item.get("kind"), item.get("id")
            try:
                doc = self.decide(kind, record_id, decision, moderator)
                results.append({"kind": doc.kind, "id": doc.id, "status": doc.status})
            except ClubError as e:
                errors.append({
                    "kind": kind,
                    "id": record_id,
                    "error": e.message,
                    "error_code": e.error_code,
                })
        return {"results": results, "errors": errors}

    # ------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------

    def can_see_full(self, doc: ContentDocument, caller: Optional[User]) -> bool:
        """Elevated roles and the submitter see every field and status."""
        if caller is None:
            return False
        if access.is_allowed(caller.role, Operation.READ_ALL, doc.kind):
            return True
        return doc.created_by is not None and doc.created_by == caller.id

    def list(
        self,
        kind,
        caller: Optional[User],
        scope: ListScope = ListScope.PUBLIC,
        status: Optional[ContentStatus] = None,
    ) -> List[ContentDocument]:
        info = get_kind(kind)
        scope = ListScope(scope)

        if scope is ListScope.PUBLIC:
            if not info.public:
                access.require(_role(caller), Operation.READ_ALL, info.kind)
            return self.store.list(info.kind, status=ContentStatus.APPROVED)
        if scope is ListScope.ALL:
            access.require(_role(caller), Operation.READ_ALL, info.kind)
            return self.store.list(info.kind, status=status)

        if caller is None:
            raise AuthenticationError("Sign in to list your submissions")
        access.require(_role(caller), Operation.READ_OWN, info.kind)
        return self.store.list(info.kind, status=status, created_by=caller.id)

    def get(self, kind, record_id: int, caller: Optional[User]) -> ContentDocument:
        info = get_kind(kind)
        doc = self.store.get(info.kind, record_id)
        if doc is None:
            raise NotFoundError(info.label, record_id)
        if self.can_see_full(doc, caller):
            return doc
        if info.public and doc.status == ContentStatus.APPROVED.value:
            return doc
        # Unapproved and non-public records are invisible to everyone else
        raise NotFoundError(info.label, record_id)

    def event_registrations(self, event_id: int, caller: Optional[User]) -> List[ContentDocument]:
        """Every sign-up for one event, newest first (moderators only)."""
        access.require(_role(caller), Operation.READ_ALL, ContentKind.EVENT_REGISTRATION)
        if self.store.get(ContentKind.EVENT, event_id) is None:
            raise NotFoundError("Event", event_id)
        return [
            doc for doc in self.store.list(ContentKind.EVENT_REGISTRATION)
            if (doc.payload or {}).get("event_id") == event_id
        ]

    def active_notices(self, caller: Optional[User], now: Optional[datetime] = None) -> List[ContentDocument]:
        """Approved notices addressed to the caller whose display window covers ``now``.

        Pinned notices come first, then by priority, newest first within each.
        """
        now = now or datetime.now(timezone.utc)
        role = _role(caller)

        visible = []
        for doc in self.store.list(ContentKind.NOTICE, status=ContentStatus.APPROVED):
            notice = NoticePayload.model_validate(doc.payload or {})
            audience = NOTICE_AUDIENCES[notice.target_audience]
            if audience is not None and role not in audience:
                continue
            if notice.starts_at and _aware(notice.starts_at) > now:
                continue
            if notice.ends_at and _aware(notice.ends_at) <= now:
                continue
            visible.append((notice, doc))

        # store.list is newest first and sorted() is stable
        visible = sorted(visible, key=lambda pair: (not pair[0].pinned, NOTICE_PRIORITY[pair[0].priority]))
        return [doc for _, doc in visible]

    def pending_content(self, caller: Optional[User]) -> Dict[str, List[ContentDocument]]:
        access.require(_role(caller), Operation.READ_ALL)
        return {
            kind.value: self.store.list(kind, status=ContentStatus.PENDING)
            for kind in ContentKind
        }

    def author_names(self, docs: Iterable[ContentDocument]) -> Dict[int, str]:
        """Resolve created_by/approved_by ids to display names.

        Ids with no matching user are left out; callers treat them as unknown.
        """
        if self.identity_db is None:
            return {}
        ids = set()
        for doc in docs:
            ids.update(i for i in (doc.created_by, doc.approved_by) if i is not None)
        if not ids:
            return {}
        users = self.identity_db.query(User).filter(User.id.in_(ids)).all()
        return {user.id: user.full_name for user in users}

    # ------------------------------------------------------------
    # Edits
    # ------------------------------------------------------------

    def update_own(self, kind, record_id: int, changes: Any, caller: Optional[User]) -> ContentDocument:
        """Edit payload fields. Status and authorship are not editable.

        Submitters may edit their record only while it is pending; moderators
        may edit it in any status.
        """
        info = get_kind(kind)
        if caller is None:
            raise AuthenticationError("Sign in to edit content")
        if not isinstance(changes, dict):
            raise ValidationError(f"{info.label} changes must be an object")

        doc = self.store.get(info.kind, record_id)
        if doc is None:
            raise NotFoundError(info.label, record_id)
        if not self.can_see_full(doc, caller):
            raise AuthorizationError(f"Not allowed to edit this {info.label.lower()}")
        moderator = access.is_allowed(caller.role, Operation.MODERATE, info.kind)
        if not moderator and doc.status != ContentStatus.PENDING.value:
            raise ConflictError(
                f"{info.label} {record_id} was already {doc.status} and can no longer be edited",
                current_status=doc.status,
            )

        protected = sorted(PROTECTED_FIELDS.intersection(changes))
        if protected:
            raise ValidationError(
                "Read-only fields cannot be edited",
                {"errors": [{"field": name, "message": "Field is read-only"} for name in protected]},
            )

        payload = validate_payload(info.kind, {**(doc.payload or {}), **changes})
        if info.kind is ContentKind.EVENT_REGISTRATION and (
            payload["event_id"] != (doc.payload or {}).get("event_id")
            or payload["email"].lower() != str((doc.payload or {}).get("email", "")).lower()
        ):
            self._check_event_registration(payload, caller, exclude_id=doc.id)
        doc = self.store.update_payload(doc, payload)
        moderation_logger.info(
            "Content edited",
            record_kind=info.kind.value,
            record_id=doc.id,
            edited_by=caller.id,
        )
        return doc

    def delete(self, kind, record_id: int, caller: Optional[User]) -> None:
        info = get_kind(kind)
        access.require(_role(caller), Operation.MODERATE, info.kind)
        doc = self.store.get(info.kind, record_id)
        if doc is None:
            raise NotFoundError(info.label, record_id)
        self.store.delete(doc)
        moderation_logger.info(
            "Content deleted",
            record_kind=info.kind.value,
            record_id=record_id,
            deleted_by=caller.id,
        )


def _headline(doc: ContentDocument) -> str:
    payload = doc.payload or {}
    return str(payload.get("title") or payload.get("name") or f"#{doc.id}")


def _aware(value: datetime) -> datetime:
    return value if value.tzinfo is not None else value.replace(tzinfo=timezone.utc)
