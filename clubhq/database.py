"""
Identity store: relational database for users, contact messages and the
moderation activity log.
"""
from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker

from .config import get_settings

settings = get_settings()


def engine_kwargs(url: str) -> dict:
    """SQLite needs cross-thread access for the FastAPI threadpool."""
    if url.startswith("sqlite"):
        return {"connect_args": {"check_same_thread": False}}
    return {"pool_pre_ping": True}


engine = create_engine(settings.database_url, **engine_kwargs(settings.database_url))
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def get_db():
    """Yield an identity store session for one request."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
