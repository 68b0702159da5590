#taskmaster/schemas/notification.py
from pydantic import BaseModel, ConfigDict
from typing import List, Optional
from datetime import datetime

from taskmaster.schemas.response import Pagination
from taskmaster.schemas.user import UserPublic

class NotificationRead(BaseModel):
    id: int
    recipient_id: int
    sender_id: Optional[int] = None
    sender: Optional[UserPublic] = None
    type: str
    title: str
    message: str
    resource_type: Optional[str] = None
    resource_id: Optional[int] = None
    is_read: bool
    read_at: Optional[datetime] = None
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

class NotificationList(BaseModel):
    """
    NotificationList — страница уведомлений + общее число непрочитанных.
    """
    notifications: List[NotificationRead]
    unread_count: int
    pagination: Pagination
