"""
Seed the identity and content stores with a super admin and sample content.

    CLUBHQ_ADMIN_EMAIL=admin@example.org CLUBHQ_ADMIN_PASSWORD=... python seed.py
"""
import os
from datetime import datetime, timedelta, timezone

from clubhq.auth import get_password_hash
from clubhq.content_kinds import validate_payload
from clubhq.content_store import ContentSessionLocal, ContentStore, DocumentBase, content_engine
from clubhq.database import SessionLocal, engine, Base
from clubhq.logging_config import get_logger
from clubhq.models import ApplicationStatus, ContentKind, ContentStatus, User, UserRole

logger = get_logger("seed")

# Create tables
Base.metadata.create_all(bind=engine)
DocumentBase.metadata.create_all(bind=content_engine)

admin_email = os.getenv("CLUBHQ_ADMIN_EMAIL", "admin@example.org")
admin_password = os.getenv("CLUBHQ_ADMIN_PASSWORD")
if not admin_password:
    raise SystemExit("Set CLUBHQ_ADMIN_PASSWORD to seed the super admin account")

db = SessionLocal()
content_db = ContentSessionLocal()

admin = db.query(User).filter(User.email == admin_email).first()
if admin is None:
    now = datetime.now(timezone.utc)
    admin = User(
        email=admin_email,
        hashed_password=get_password_hash(admin_password),
        display_name="Club Admin",
        role=UserRole.SUPER_ADMIN.value,
        application_status=ApplicationStatus.APPROVED.value,
        applied_at=now,
        approved_at=now,
    )
    db.add(admin)
    db.commit()
    db.refresh(admin)
    logger.info("Created super admin", user_id=admin.id, email=admin_email)
else:
    logger.info("Super admin already exists", user_id=admin.id)

# Sample content, already approved
samples = [
    (ContentKind.PROJECT, {
        "title": "Community Garden",
        "description": "Turning the empty lot behind the library into a vegetable garden.",
    }),
    (ContentKind.NEWS, {
        "title": "Summer Camp Registration Open",
        "content": "Sign-ups for this year's summer camp are now open to all members.",
        "author": "Club Admin",
        "excerpt": "Summer camp sign-ups are open.",
        "category": "announcements",
    }),
    (ContentKind.GALLERY, {
        "title": "Tree Planting Day",
        "image_url": "https://example.org/images/tree-planting.jpg",
        "description": "Members planting saplings along the river path.",
    }),
    (ContentKind.EVENT, {
        "title": "Climate Action Workshop",
        "description": "Interactive workshop on climate awareness and local action.",
        "event_date": (datetime.now(timezone.utc) + timedelta(days=7)).date().isoformat(),
        "time": "2:00 PM - 5:00 PM",
        "location": "Club office",
        "category": "workshop",
        "max_participants": 30,
        "registration_required": True,
    }),
    (ContentKind.NOTICE, {
        "title": "Climate Action Workshop - Registration Open",
        "message": "Seats are limited, sign up on the events page.",
        "type": "event",
        "priority": "high",
        "link": "/events",
        "link_text": "Register now",
    }),
]

store = ContentStore(content_db)
for kind, data in samples:
    if store.count_by_status(kind)[ContentStatus.APPROVED.value]:
        continue
    doc = store.insert(
        kind,
        validate_payload(kind, data),
        created_by=admin.id,
        status=ContentStatus.APPROVED,
        approved_by=admin.id,
    )
    logger.info("Seeded content", record_kind=kind.value, record_id=doc.id)

# One pending submission so the moderation queue is not empty
if not store.count_by_status(ContentKind.REGISTRATION)[ContentStatus.PENDING.value]:
    doc = store.insert(
        ContentKind.REGISTRATION,
        validate_payload(ContentKind.REGISTRATION, {
            "name": "Sam Rivers",
            "email": "sam.rivers@example.org",
            "phone": "+1 555 0100",
            "institution": "Riverside High",
            "reason": "I want to join the environmental projects.",
        }),
        created_by=None,
    )
    logger.info("Seeded pending registration", record_id=doc.id)

db.close()
content_db.close()
logger.info("Seed complete")
