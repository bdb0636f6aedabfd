"""
Access gate: role-based allow/deny decisions.

Pure functions with no side effects. A missing session is passed as
``role=None`` and treated as the lowest privilege. Anything unrecognized is
denied for every operation beyond ``read-public``.
"""
from enum import Enum
from typing import Optional, Union

from .errors import AuthorizationError
from .models.enums import UserRole


class Operation(str, Enum):
    READ_PUBLIC = "read-public"
    READ_ALL = "read-all"
    READ_OWN = "read-own"
    CREATE = "create"
    MODERATE = "moderate"
    MANAGE_USERS = "manage-users"


MODERATOR_ROLES = frozenset({UserRole.ADMIN, UserRole.SUPER_ADMIN})

# Kinds that visitors without an account may submit
ANONYMOUS_CREATE_KINDS = frozenset({"registration", "event_registration", "contact"})

# Kinds only moderators may create
STAFF_CREATE_KINDS = frozenset({"event", "notice"})


def _coerce_role(role: Union[UserRole, str, None]) -> Optional[UserRole]:
    if role is None:
        return None
    try:
        return UserRole(role)
    except ValueError:
        return None


def _coerce_operation(operation: Union[Operation, str]) -> Optional[Operation]:
    try:
        return Operation(operation)
    except ValueError:
        return None


def _kind_value(kind) -> Optional[str]:
    if kind is None:
        return None
    return getattr(kind, "value", kind)


def is_allowed(role: Union[UserRole, str, None], operation: Union[Operation, str], kind=None) -> bool:
    """Decide whether a caller holding ``role`` may perform ``operation``."""
    op = _coerce_operation(operation)
    if op is None:
        return False
    if op is Operation.READ_PUBLIC:
        return True

    resolved = _coerce_role(role)

    if op is Operation.CREATE:
        if _kind_value(kind) in STAFF_CREATE_KINDS:
            return resolved in MODERATOR_ROLES
        if resolved is not None:
            return True
        # A session with an unknown role is not anonymous; deny it outright
        return role is None and _kind_value(kind) in ANONYMOUS_CREATE_KINDS

    if resolved is None:
        return False

    if op is Operation.READ_OWN:
        return True
    if op in (Operation.READ_ALL, Operation.MODERATE):
        return resolved in MODERATOR_ROLES
    if op is Operation.MANAGE_USERS:
        return resolved is UserRole.SUPER_ADMIN
    return False


def require(role: Union[UserRole, str, None], operation: Union[Operation, str], kind=None) -> None:
    """Raise AuthorizationError unless ``is_allowed`` grants the operation."""
    if not is_allowed(role, operation, kind):
        op = getattr(operation, "value", operation)
        details = {"operation": op, "role": getattr(role, "value", role)}
        if kind is not None:
            details["kind"] = _kind_value(kind)
        raise AuthorizationError(f"Not allowed to {op}", details)

