from .auth import UserCreate, UserLogin, UserResponse, TokenResponse, RefreshRequest
from .contact import ContactCreate, ContactResponse
from .content import BulkModerationRequest, ContentRef
from .dashboard import DashboardStats
from .users import ApplicationDecision, RoleUpdate, UserDetailResponse

__all__ = [
    "UserCreate", "UserLogin", "UserResponse", "TokenResponse", "RefreshRequest",
    "ContactCreate", "ContactResponse",
    "BulkModerationRequest", "ContentRef",
    "DashboardStats",
    "ApplicationDecision", "RoleUpdate", "UserDetailResponse",
]
