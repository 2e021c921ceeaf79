"""
Pydantic schemas for Notification entity.
"""
from pydantic import BaseModel
from typing import Optional
from datetime import datetime
from tripledger.models.notification import NotificationType


class NotificationResponse(BaseModel):
    id: int
    user_id: int
    trip_id: Optional[int] = None
    title: str
    message: str
    type: NotificationType
    read: bool
    read_at: Optional[datetime] = None
    created_at: datetime

    class Config:
        from_attributes = True
