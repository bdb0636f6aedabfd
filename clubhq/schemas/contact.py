from pydantic import BaseModel, EmailStr, StringConstraints
from datetime import datetime
from typing import Annotated

RequiredText = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]


class ContactCreate(BaseModel):
    name: RequiredText
    email: EmailStr
    subject: RequiredText
    message: RequiredText


class ContactResponse(BaseModel):
    id: int
    name: str
    email: str
    subject: str
    message: str
    is_read: bool
    created_at: datetime

    class Config:
        from_attributes = True
