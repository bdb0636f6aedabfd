from .activity import Activity
from .contact_message import ContactMessage
from .enums import ApplicationStatus, ContentKind, ContentStatus, Decision, UserRole
from .user import User

__all__ = [
    "Activity",
    "ContactMessage",
    "User",
    "ApplicationStatus",
    "ContentKind",
    "ContentStatus",
    "Decision",
    "UserRole",
]
