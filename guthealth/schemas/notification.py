from typing import Any, Dict, List, Optional
from pydantic import BaseModel, ConfigDict, Field
from datetime import datetime
from enum import Enum


class NotificationType(str, Enum):
    SYSTEM = "system"
    HEALTH = "health"
    REMINDER = "reminder"
    ACHIEVEMENT = "achievement"
    MESSAGE = "message"


class NotificationSettings(BaseModel):
    notifications_enabled: bool

    class Config:
        from_attributes = True


class NotificationCreate(BaseModel):
    model_config = ConfigDict(use_enum_values=True)

    title: str = Field(..., max_length=200)
    content: str
    type: NotificationType = NotificationType.SYSTEM
    related_id: Optional[int] = None
    params: Optional[Dict[str, Any]] = None


class NotificationOut(BaseModel):
    id: int
    title: str
    content: str
    type: str
    type_name: str
    related_id: Optional[int] = None
    is_read: bool
    read_at: Optional[datetime] = None
    created_at: datetime
    time_ago: str


class NotificationPage(BaseModel):
    total: int
    page: int
    limit: int
    total_pages: int
    data: List[NotificationOut]


class NotificationIds(BaseModel):
    notification_ids: List[int] = Field(..., min_length=1)


class UnreadCount(BaseModel):
    unread_count: int


class BulkResult(BaseModel):
    success: bool = True
    updated_count: Optional[int] = None
    deleted_count: Optional[int] = None
    message: str
