"""
ClubHQ API - FastAPI application entry point.
"""
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from .config import get_settings
from .content_store import DocumentBase, content_engine
from .database import engine, Base
from .errors import ClubError
from .middleware import SecurityHeadersMiddleware, RequestLoggingMiddleware
from .limiter import limiter
from .responses import club_exception_handler
from . import models  # noqa: F401  registers identity tables
from .routes import (
    admin_router,
    auth_router,
    contact_router,
    content_router,
    dashboard_router,
    events_router,
    ws_router,
    health_router,
    notices_router,
    users_router,
)

settings = get_settings()

# Create tables (in production, use Alembic migrations instead)
Base.metadata.create_all(bind=engine)
DocumentBase.metadata.create_all(bind=content_engine)


app = FastAPI(
    title="ClubHQ API",
    description="Backend API for the youth club website and its moderation dashboards",
    version="1.0.0",
    docs_url="/api/docs" if settings.debug else None,
    redoc_url="/api/redoc" if settings.debug else None,
)

# Add rate limiter to app state
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

# Domain errors -> error envelope
app.add_exception_handler(ClubError, club_exception_handler)

# Security headers middleware
app.add_middleware(SecurityHeadersMiddleware)

# Request logging middleware (only in debug mode)
if settings.debug:
    app.add_middleware(RequestLoggingMiddleware)

# CORS - Properly configured with specific methods
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=[
        "Authorization",
        "Content-Type",
        "Accept",
        "Origin",
        "X-Requested-With",
    ],
    max_age=3600,  # Cache preflight requests for 1 hour
)

# Routes
app.include_router(auth_router)
app.include_router(content_router)
app.include_router(admin_router)
app.include_router(users_router)
app.include_router(contact_router)
app.include_router(notices_router)
app.include_router(dashboard_router)
app.include_router(events_router)
app.include_router(ws_router)
app.include_router(health_router)


@app.get("/")
def root():
    """Root endpoint redirects to API docs."""
    return {
        "message": "ClubHQ API",
        "docs": "/api/docs" if settings.debug else "Disabled in production",
    }
