"""
Moderation audit log kept in the identity store.

Entries are written after the decision itself has committed, possibly in a
different store, so a failed write is logged and otherwise ignored.
"""
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..logging_config import moderation_logger
from ..models.activity import Activity
from ..models.enums import Decision


def record_decision(
    db: Optional[Session],
    moderator_id: int,
    decision: Decision,
    record_kind: str,
    record_id: int,
    title: str,
    extra_data: Optional[dict] = None,
) -> Optional[Activity]:
    if db is None:
        return None
    activity = Activity(
        user_id=moderator_id,
        activity_type=decision.event_type,
        record_kind=record_kind,
        record_id=record_id,
        title=title,
        extra_data=extra_data,
    )
    try:
        db.add(activity)
        db.commit()
        db.refresh(activity)
    except SQLAlchemyError as e:
        db.rollback()
        moderation_logger.warning(
            "Could not write activity log entry",
            record_kind=record_kind,
            record_id=record_id,
            error_message=str(e),
        )
        return None
    return activity


def recent_decisions(
    db: Session,
    limit: int = 20,
    offset: int = 0,
    record_kind: Optional[str] = None,
) -> List[Activity]:
    query = db.query(Activity)
    if record_kind:
        query = query.filter(Activity.record_kind == record_kind)
    return query.order_by(Activity.created_at.desc(), Activity.id.desc()).offset(offset).limit(limit).all()


def count_decisions(db: Session, record_kind: Optional[str] = None) -> int:
    query = db.query(Activity)
    if record_kind:
        query = query.filter(Activity.record_kind == record_kind)
    return query.count()
