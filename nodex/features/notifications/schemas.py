from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field


class NotificationType(str, Enum):
    approval = "approval"
    rejection = "rejection"
    info = "info"
    warning = "warning"
    success = "success"


class NotificationCreate(BaseModel):
    user_id: str
    title: str
    message: str
    type: NotificationType = NotificationType.info
    related_entity_type: Optional[str] = None
    related_entity_id: Optional[str] = None


class Notification(NotificationCreate):
    id: str
    read: bool = Field(default=False)
    read_at: Optional[datetime] = None
    created_at: Optional[datetime] = None


class NotificationInbox(BaseModel):
    notifications: List[Notification]
    unread_count: int
