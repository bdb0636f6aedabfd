"""
ClubHQ Health Check Routes
Reachability of both persistence stores
"""
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from datetime import datetime
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..config import get_settings
from ..content_store import ContentStore, get_content_db
from ..database import get_db

settings = get_settings()

router = APIRouter(prefix="/api/health", tags=["health"])

START_TIME = datetime.utcnow()


def get_uptime() -> str:
    """Get process uptime as human-readable string"""
    delta = datetime.utcnow() - START_TIME
    hours, remainder = divmod(delta.seconds, 3600)
    minutes, seconds = divmod(remainder, 60)

    if delta.days > 0:
        return f"{delta.days}d {hours}h {minutes}m"
    elif hours > 0:
        return f"{hours}h {minutes}m {seconds}s"
    else:
        return f"{minutes}m {seconds}s"


def check_identity_store(db: Session) -> bool:
    try:
        db.execute(text("SELECT 1"))
        return True
    except SQLAlchemyError:
        return False


@router.get("")
def health_check(db: Session = Depends(get_db), content_db: Session = Depends(get_content_db)):
    """Health check endpoint for load balancers and monitoring."""
    stores = {
        "identity": "healthy" if check_identity_store(db) else "unhealthy",
        "content": "healthy" if ContentStore(content_db).ping() else "unhealthy",
    }
    healthy = all(state == "healthy" for state in stores.values())
    return JSONResponse(
        status_code=200 if healthy else 503,
        content={
            "status": "healthy" if healthy else "degraded",
            "stores": stores,
            "environment": settings.environment,
            "version": "1.0.0",
            "uptime": get_uptime(),
        },
    )
