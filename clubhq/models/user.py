"""
User model for authentication, roles and membership applications.
"""
from sqlalchemy import Column, Integer, String, DateTime, Text, Boolean
from sqlalchemy.orm import relationship
from datetime import datetime, timezone
from ..database import Base
from .enums import ApplicationStatus, UserRole


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(255), unique=True, index=True, nullable=False)
    hashed_password = Column(String(255), nullable=False)
    display_name = Column(String(100))
    first_name = Column(String(100), nullable=True)
    last_name = Column(String(100), nullable=True)
    phone = Column(String(30), nullable=True)
    age = Column(String(10), nullable=True)
    address = Column(String(255), nullable=True)
    motivation = Column(Text, nullable=True)
    profile_image_url = Column(String(500), nullable=True)
    role = Column(String(20), default=UserRole.APPLICANT.value, nullable=False, index=True)
    application_status = Column(String(20), default=ApplicationStatus.PENDING.value, nullable=False, index=True)
    is_active = Column(Boolean, default=True)
    applied_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))
    approved_at = Column(DateTime, nullable=True)
    reviewed_by = Column(Integer, nullable=True)
    reviewed_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))
    updated_at = Column(DateTime, default=lambda: datetime.now(timezone.utc), onupdate=lambda: datetime.now(timezone.utc))

    # Relationships
    activities = relationship("Activity", back_populates="user", cascade="all, delete-orphan")

    @property
    def full_name(self) -> str:
        name = f"{self.first_name or ''} {self.last_name or ''}".strip()
        return name or self.display_name or self.email
