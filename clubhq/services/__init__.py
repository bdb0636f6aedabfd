from .moderation import ListScope, ModerationWorkflow
from .applications import ApplicationService

__all__ = ["ListScope", "ModerationWorkflow", "ApplicationService"]
