from .admin import router as admin_router
from .auth import router as auth_router
from .contact import router as contact_router
from .content import router as content_router
from .dashboard import router as dashboard_router
from .events import router as events_router, ws_router
from .health import router as health_router
from .notices import router as notices_router
from .users import router as users_router

__all__ = [
    "admin_router",
    "auth_router",
    "contact_router",
    "content_router",
    "dashboard_router",
    "events_router",
    "ws_router",
    "health_router",
    "notices_router",
    "users_router",
]
