"""
Contact form routes.
"""
from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.orm import Session
from typing import List

from ..auth import get_moderator
from ..config import get_settings
from ..database import get_db
from ..errors import NotFoundError
from ..limiter import limiter
from ..logging_config import api_logger
from ..models.contact_message import ContactMessage
from ..models.user import User
from ..schemas.contact import ContactCreate, ContactResponse

settings = get_settings()

router = APIRouter(prefix="/api/contact", tags=["contact"])


@router.post("", response_model=ContactResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit(settings.submission_rate_limit)
def send_message(request: Request, message: ContactCreate, db: Session = Depends(get_db)):
    """Send a message through the public contact form."""
    db_message = ContactMessage(**message.model_dump())
    db.add(db_message)
    db.commit()
    db.refresh(db_message)
    api_logger.info("Contact message received", message_id=db_message.id)
    return db_message


@router.get("", response_model=List[ContactResponse])
def get_messages(
    unread: bool = False,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_moderator),
):
    """Get contact messages, newest first (admin only)."""
    query = db.query(ContactMessage)
    if unread:
        query = query.filter(ContactMessage.is_read == False)  # noqa: E712
    return query.order_by(ContactMessage.created_at.desc(), ContactMessage.id.desc()).all()


@router.patch("/{message_id}/read", response_model=ContactResponse)
def mark_as_read(
    message_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_moderator),
):
    """Mark a contact message as read."""
    message = db.query(ContactMessage).filter(ContactMessage.id == message_id).first()
    if not message:
        raise NotFoundError("Contact message", message_id)

    message.is_read = True
    db.commit()
    db.refresh(message)
    return message
