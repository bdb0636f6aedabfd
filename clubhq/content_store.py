"""
Content store: document persistence for the moderated content kinds.

Documents live in their own database behind their own engine. Nothing here
joins against the identity tables; ``created_by`` and ``approved_by`` are
plain user ids with no enforced integrity.
"""
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from sqlalchemy import JSON, Column, DateTime, Integer, String, create_engine, func, text, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from .config import get_settings
from .database import engine_kwargs
from .errors import StoreError
from .logging_config import store_logger, timed
from .models.enums import ContentKind, ContentStatus

settings = get_settings()

content_engine = create_engine(
    settings.content_database_url, **engine_kwargs(settings.content_database_url)
)
ContentSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=content_engine)

DocumentBase = declarative_base()


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ContentDocument(DocumentBase):
    __tablename__ = "content_documents"

    id = Column(Integer, primary_key=True, index=True)
    kind = Column(String(20), nullable=False, index=True)
    status = Column(String(20), nullable=False, default=ContentStatus.PENDING.value, index=True)
    payload = Column(JSON, nullable=False, default=dict)
    created_by = Column(Integer, nullable=True, index=True)  # soft reference to users.id
    approved_by = Column(Integer, nullable=True)  # soft reference to users.id
    reviewed_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=utcnow, index=True)
    updated_at = Column(DateTime, default=utcnow)


def get_content_db():
    """Yield a content store session for one request."""
    db = ContentSessionLocal()
    try:
        yield db
    finally:
        db.close()


def _kind(kind) -> str:
    return ContentKind(kind).value


class ContentStore:
    """Data access for content documents.

    Every write commits immediately. Driver failures are rolled back and
    surfaced as StoreError.
    """

    def __init__(self, db: Session):
        self.db = db

    def _fail(self, action: str, error: SQLAlchemyError):
        self.db.rollback()
        raise StoreError(f"Content store failed to {action}", {"reason": str(error)}) from error

    @timed(store_logger)
    def insert(
        self,
        kind,
        payload: Dict[str, Any],
        created_by: Optional[int],
        status: ContentStatus = ContentStatus.PENDING,
        approved_by: Optional[int] = None,
    ) -> ContentDocument:
        now = utcnow()
        doc = ContentDocument(
            kind=_kind(kind),
            status=ContentStatus(status).value,
            payload=payload,
            created_by=created_by,
            approved_by=approved_by,
            reviewed_at=now if approved_by is not None else None,
            created_at=now,
            updated_at=now,
        )
        try:
            self.db.add(doc)
            self.db.commit()
            self.db.refresh(doc)
        except SQLAlchemyError as e:
            self._fail("store document", e)
        return doc

    def get(self, kind, record_id: int) -> Optional[ContentDocument]:
        try:
            return self.db.query(ContentDocument).filter(
                ContentDocument.id == record_id,
                ContentDocument.kind == _kind(kind),
            ).first()
        except SQLAlchemyError as e:
            self._fail("load document", e)

    def list(
        self,
        kind=None,
        status: Optional[ContentStatus] = None,
        created_by: Optional[int] = None,
    ) -> List[ContentDocument]:
        query = self.db.query(ContentDocument)
        if kind is not None:
            query = query.filter(ContentDocument.kind == _kind(kind))
        if status is not None:
            query = query.filter(ContentDocument.status == ContentStatus(status).value)
        if created_by is not None:
            query = query.filter(ContentDocument.created_by == created_by)
        try:
            return query.order_by(ContentDocument.created_at.desc(), ContentDocument.id.desc()).all()
        except SQLAlchemyError as e:
            self._fail("list documents", e)

    def count_by_status(self, kind=None, created_by: Optional[int] = None) -> Dict[str, int]:
        """Document counts keyed by status, zero-filled."""
        query = self.db.query(ContentDocument.status, func.count(ContentDocument.id))
        if kind is not None:
            query = query.filter(ContentDocument.kind == _kind(kind))
        if created_by is not None:
            query = query.filter(ContentDocument.created_by == created_by)
        counts = {status.value: 0 for status in ContentStatus}
        try:
            for status, count in query.group_by(ContentDocument.status).all():
                counts[status] = count
        except SQLAlchemyError as e:
            self._fail("count documents", e)
        return counts

    @timed(store_logger)
    def transition(self, kind, record_id: int, new_status: ContentStatus, moderator_id: int) -> Optional[ContentDocument]:
        """Move a pending document to ``new_status``.

        The update is conditioned on the stored status still being pending,
        so of two racing moderators only the first commit matches a row.
        Returns the updated document, or None when no pending row matched.
        """
        now = utcnow()
        stmt = (
            update(ContentDocument)
            .where(
                ContentDocument.id == record_id,
                ContentDocument.kind == _kind(kind),
                ContentDocument.status == ContentStatus.PENDING.value,
            )
            .values(
                status=ContentStatus(new_status).value,
                approved_by=moderator_id,
                reviewed_at=now,
                updated_at=now,
            )
            .execution_options(synchronize_session=False)
        )
        try:
            result = self.db.execute(stmt)
            if result.rowcount != 1:
                self.db.rollback()
                return None
            self.db.commit()
        except SQLAlchemyError as e:
            self._fail("update document status", e)
        return self.get(kind, record_id)

    @timed(store_logger)
    def update_payload(self, doc: ContentDocument, payload: Dict[str, Any]) -> ContentDocument:
        doc.payload = payload
        now = utcnow()
        previous = doc.updated_at
        if previous is not None and previous.tzinfo is None:
            previous = previous.replace(tzinfo=timezone.utc)
        doc.updated_at = max(now, previous) if previous else now
        try:
            self.db.commit()
            self.db.refresh(doc)
        except SQLAlchemyError as e:
            self._fail("update document", e)
        return doc

    @timed(store_logger)
    def delete(self, doc: ContentDocument) -> None:
        try:
            self.db.delete(doc)
            self.db.commit()
        except SQLAlchemyError as e:
            self._fail("delete document", e)

    def ping(self) -> bool:
        try:
            self.db.execute(text("SELECT 1"))
            return True
        except SQLAlchemyError:
            return False
