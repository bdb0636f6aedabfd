"""Shared enums for models."""
from enum import Enum


class ContentStatus(str, Enum):
    """Moderation state of a content record."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class ApplicationStatus(str, Enum):
    """Admission state of a prospective member."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class UserRole(str, Enum):
    """User roles, lowest privilege first."""

    APPLICANT = "applicant"
    MEMBER = "member"
    ADMIN = "admin"
    SUPER_ADMIN = "super_admin"


class ContentKind(str, Enum):
    """Moderated content kinds held in the content store."""

    MEMBER = "member"
    PROJECT = "project"
    NEWS = "news"
    GALLERY = "gallery"
    REGISTRATION = "registration"
    EVENT = "event"
    EVENT_REGISTRATION = "event_registration"
    NOTICE = "notice"


class Decision(str, Enum):
    """Outcome of a moderation action."""

    APPROVED = "approved"
    REJECTED = "rejected"

    @property
    def event_type(self) -> str:
        return "approval" if self is Decision.APPROVED else "rejection"
