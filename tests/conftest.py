"""
Pytest configuration and fixtures for ClubHQ API tests.
"""
import os

# Keep module-level engines off the filesystem
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("CONTENT_DATABASE_URL", "sqlite:///:memory:")

import pytest
from datetime import datetime, timezone
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from clubhq.content_store import ContentStore, DocumentBase, get_content_db
from clubhq.database import Base, get_db
from clubhq.limiter import limiter
from clubhq.main import app
from clubhq.models.enums import ApplicationStatus, UserRole
from clubhq.models.user import User
from clubhq.notifications import EventManager
from clubhq.auth import get_password_hash, create_tokens
from clubhq.services.moderation import ModerationWorkflow

# Disable rate limiting for tests
limiter.enabled = False

TEST_PASSWORD = "testpassword123"


def _memory_engine():
    # In-memory SQLite with a shared connection
    return create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )


identity_engine = _memory_engine()
content_engine = _memory_engine()
IdentitySession = sessionmaker(autocommit=False, autoflush=False, bind=identity_engine)
ContentSession = sessionmaker(autocommit=False, autoflush=False, bind=content_engine)

# Global sessions for sharing across requests
_test_sessions = {}


def get_test_db():
    """Get the shared identity store session."""
    yield _test_sessions["identity"]


def get_test_content_db():
    """Get the shared content store session."""
    yield _test_sessions["content"]


@pytest.fixture(scope="function")
def db():
    """Create a fresh identity store for each test."""
    Base.metadata.create_all(bind=identity_engine)
    session = IdentitySession()
    _test_sessions["identity"] = session
    app.dependency_overrides[get_db] = get_test_db

    yield session

    app.dependency_overrides.pop(get_db, None)
    session.close()
    _test_sessions.pop("identity", None)
    Base.metadata.drop_all(bind=identity_engine)


@pytest.fixture(scope="function")
def content_db():
    """Create a fresh content store for each test."""
    DocumentBase.metadata.create_all(bind=content_engine)
    session = ContentSession()
    _test_sessions["content"] = session
    app.dependency_overrides[get_content_db] = get_test_content_db

    yield session

    app.dependency_overrides.pop(get_content_db, None)
    session.close()
    _test_sessions.pop("content", None)
    DocumentBase.metadata.drop_all(bind=content_engine)


@pytest.fixture(scope="function")
def client(db, content_db):
    """Create a test client."""
    with TestClient(app) as c:
        yield c


@pytest.fixture(scope="function")
def events():
    """A private event manager so tests never share connected clients."""
    return EventManager()


@pytest.fixture(scope="function")
def workflow(db, content_db, events):
    return ModerationWorkflow(ContentStore(content_db), identity_db=db, events=events)


@pytest.fixture(scope="function")
def make_user(db):
    """Factory creating users with a given role."""
    counter = {"n": 0}

    def _make_user(role=UserRole.MEMBER, email=None, application_status=None, **fields):
        counter["n"] += 1
        role = UserRole(role)
        if application_status is None:
            application_status = (
                ApplicationStatus.PENDING if role is UserRole.APPLICANT else ApplicationStatus.APPROVED
            )
        user = User(
            email=email or f"{role.value}{counter['n']}@example.com",
            hashed_password=get_password_hash(TEST_PASSWORD),
            display_name=fields.pop("display_name", f"{role.value.replace('_', ' ').title()} {counter['n']}"),
            role=role.value,
            application_status=ApplicationStatus(application_status).value,
            applied_at=datetime.now(timezone.utc),
            is_active=True,
            **fields,
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    return _make_user


@pytest.fixture(scope="function")
def test_user(make_user):
    """A regular member."""
    return make_user(UserRole.MEMBER, email="test@example.com", display_name="Test User")


@pytest.fixture(scope="function")
def applicant(make_user):
    return make_user(UserRole.APPLICANT, email="applicant@example.com", first_name="Ada", last_name="Lovelace")


@pytest.fixture(scope="function")
def admin_user(make_user):
    return make_user(UserRole.ADMIN, email="admin@example.com", display_name="Admin User")


@pytest.fixture(scope="function")
def super_admin(make_user):
    return make_user(UserRole.SUPER_ADMIN, email="root@example.com", display_name="Super Admin")


def token_for(user) -> str:
    access_token, _ = create_tokens(user.id)
    return access_token


def headers_for(user) -> dict:
    return {"Authorization": f"Bearer {token_for(user)}"}


@pytest.fixture(scope="function")
def auth_headers(test_user):
    """Get auth headers for the test member."""
    return headers_for(test_user)


@pytest.fixture(scope="function")
def admin_headers(admin_user):
    return headers_for(admin_user)


@pytest.fixture(scope="function")
def super_admin_headers(super_admin):
    return headers_for(super_admin)


@pytest.fixture(scope="function")
def applicant_headers(applicant):
    return headers_for(applicant)
