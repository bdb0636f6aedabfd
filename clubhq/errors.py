"""
Domain error taxonomy.

Services raise these; the global handler in responses.py turns them into the
standard JSON error envelope.
"""
from typing import Any, Dict, Optional


class ClubError(Exception):
    """Base class for errors reported to the API caller."""

    status_code = 500
    error_code = "INTERNAL_ERROR"

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ValidationError(ClubError):
    """Payload is missing required fields or has invalid values."""

    status_code = 422
    error_code = "VALIDATION_ERROR"


class AuthenticationError(ClubError):
    status_code = 401
    error_code = "UNAUTHORIZED"

    def __init__(self, message: str = "Not authenticated"):
        super().__init__(message)


class AuthorizationError(ClubError):
    status_code = 403
    error_code = "FORBIDDEN"

    def __init__(self, message: str = "Access denied", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, details)


class NotFoundError(ClubError):
    status_code = 404
    error_code = "NOT_FOUND"

    def __init__(self, resource: str = "Resource", id: Any = None):
        message = f"{resource} not found" if id is None else f"{resource} '{id}' not found"
        super().__init__(message, {"resource": resource, "id": id})


class ConflictError(ClubError):
    """The record's current state does not allow the change."""

    status_code = 409
    error_code = "CONFLICT"

    def __init__(self, message: str, current_status: Optional[str] = None):
        details = {"current_status": current_status} if current_status else {}
        super().__init__(message, details)
        self.current_status = current_status


class StoreError(ClubError):
    """Underlying persistence failure. Not retried."""

    status_code = 503
    error_code = "STORE_ERROR"
