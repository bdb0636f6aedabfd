from pydantic import BaseModel
from datetime import datetime
from typing import Dict, List, Optional


class ActivityItem(BaseModel):
    id: int
    type: str
    record_kind: str
    record_id: int
    title: str
    moderator_id: int
    timestamp: datetime


class Achievement(BaseModel):
    id: str
    title: str
    description: str
    icon: str
    category: str
    points: int


class DashboardStats(BaseModel):
    role: str
    application_status: str
    submissions: Dict[str, Dict[str, int]]
    points: int
    achievements: List[Achievement]
    pending_by_kind: Optional[Dict[str, int]] = None
    pending_applicants: Optional[int] = None
    recent_activity: Optional[List[ActivityItem]] = None
