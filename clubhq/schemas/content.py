from pydantic import BaseModel
from typing import List

from ..models.enums import ContentKind, Decision


class ContentRef(BaseModel):
    kind: ContentKind
    id: int


class BulkModerationRequest(BaseModel):
    decision: Decision
    items: List[ContentRef]
