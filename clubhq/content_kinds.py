"""
Registry of moderated content kinds.

Each kind declares the payload schema used to validate submissions, the
fields that are stripped from the public projection, and whether approved
records are published to anonymous readers at all.
"""
from dataclasses import dataclass
from datetime import date, datetime
from typing import Annotated, Any, Dict, FrozenSet, List, Literal, Optional, Type

from pydantic import BaseModel, EmailStr, Field, HttpUrl, StringConstraints, model_validator
from pydantic import ValidationError as PydanticValidationError

from .errors import ValidationError
from .models.enums import ContentKind

RequiredText = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]


class MemberPayload(BaseModel):
    name: RequiredText
    email: EmailStr
    position: RequiredText
    bio: RequiredText
    profile_image_url: Optional[HttpUrl] = None


class ProjectPayload(BaseModel):
    title: RequiredText
    description: RequiredText
    image_url: Optional[HttpUrl] = None
    completed_at: Optional[date] = None


class NewsArticlePayload(BaseModel):
    title: RequiredText
    content: RequiredText
    author: RequiredText
    excerpt: Optional[str] = None
    image_url: Optional[HttpUrl] = None
    category: Optional[str] = None
    read_count: int = 0


class GalleryImagePayload(BaseModel):
    title: RequiredText
    image_url: HttpUrl
    description: Optional[str] = None


class RegistrationPayload(BaseModel):
    name: RequiredText
    email: EmailStr
    phone: RequiredText
    institution: RequiredText
    reason: RequiredText


class EventPayload(BaseModel):
    title: RequiredText
    description: RequiredText
    event_date: date
    location: RequiredText
    time: Optional[str] = None
    category: Literal["workshop", "meeting", "training", "volunteer", "competition", "other"] = "other"
    state: Literal["upcoming", "ongoing", "completed", "cancelled"] = "upcoming"
    max_participants: Optional[int] = Field(default=None, ge=1)
    registration_required: bool = False
    contact_info: Optional[str] = None


class EventRegistrationPayload(BaseModel):
    event_id: int = Field(ge=1)
    name: RequiredText
    email: EmailStr
    phone: Optional[str] = None
    institution: Optional[str] = None
    reason: Optional[str] = None
    team_name: Optional[str] = None
    team_members: Optional[List[RequiredText]] = None


class NoticePayload(BaseModel):
    title: RequiredText
    message: RequiredText
    type: Literal["announcement", "reminder", "deadline", "event", "general"] = "general"
    priority: Literal["low", "medium", "high", "urgent"] = "medium"
    target_audience: Literal["all", "members", "admins"] = "all"
    starts_at: Optional[datetime] = None
    ends_at: Optional[datetime] = None
    link: Optional[str] = None
    link_text: Optional[str] = None
    dismissible: bool = True
    pinned: bool = False

    @model_validator(mode="after")
    def check_window(self):
        if self.starts_at and self.ends_at and self.ends_at <= self.starts_at:
            raise ValueError("ends_at must be after starts_at")
        return self


@dataclass(frozen=True)
class KindSpec:
    kind: ContentKind
    label: str
    schema: Type[BaseModel]
    private_fields: FrozenSet[str] = frozenset()
    points: int = 0
    # Approved records of a non-public kind are only readable by moderators and the submitter
    public: bool = True


CONTENT_KINDS: Dict[ContentKind, KindSpec] = {
    ContentKind.MEMBER: KindSpec(
        ContentKind.MEMBER, "Member", MemberPayload, private_fields=frozenset({"email"}),
    ),
    ContentKind.PROJECT: KindSpec(ContentKind.PROJECT, "Project", ProjectPayload, points=50),
    ContentKind.NEWS: KindSpec(ContentKind.NEWS, "News article", NewsArticlePayload, points=30),
    ContentKind.GALLERY: KindSpec(ContentKind.GALLERY, "Gallery image", GalleryImagePayload, points=20),
    ContentKind.REGISTRATION: KindSpec(
        ContentKind.REGISTRATION,
        "Registration",
        RegistrationPayload,
        private_fields=frozenset({"email", "phone"}),
        public=False,
    ),
    ContentKind.EVENT: KindSpec(ContentKind.EVENT, "Event", EventPayload),
    ContentKind.EVENT_REGISTRATION: KindSpec(
        ContentKind.EVENT_REGISTRATION,
        "Event registration",
        EventRegistrationPayload,
        private_fields=frozenset({"email", "phone"}),
        public=False,
    ),
    ContentKind.NOTICE: KindSpec(ContentKind.NOTICE, "Notice", NoticePayload),
}


def get_kind(kind) -> KindSpec:
    """Look up a kind by enum or string value."""
    try:
        return CONTENT_KINDS[ContentKind(kind)]
    except ValueError:
        raise ValidationError(f"Unknown content kind '{kind}'", {"kind": kind})


def format_errors(exc: PydanticValidationError) -> list:
    """Flatten pydantic errors into field/message pairs."""
    return [
        {
            "field": ".".join(str(part) for part in err["loc"]),
            "message": err["msg"],
            "type": err["type"],
        }
        for err in exc.errors()
    ]


def validate_payload(kind, data: Any) -> Dict[str, Any]:
    """Validate a submission and return the normalized payload.

    Optional fields that were not supplied stay absent from the result.
    """
    info = get_kind(kind)
    if not isinstance(data, dict):
        raise ValidationError(f"{info.label} payload must be an object")
    try:
        model = info.schema.model_validate(data)
    except PydanticValidationError as e:
        raise ValidationError(f"Invalid {info.label.lower()} data", {"errors": format_errors(e)})
    return model.model_dump(mode="json", exclude_none=True)


def public_view(kind, payload: Dict[str, Any]) -> Dict[str, Any]:
    """Payload with the kind's private fields removed."""
    hidden = get_kind(kind).private_fields
    return {k: v for k, v in payload.items() if k not in hidden}
