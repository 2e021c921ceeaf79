"""
Notification routes.
"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import List
from tripledger.api.dependencies import get_current_user
from tripledger.db.session import get_db
from tripledger.models.user import User
from tripledger.schemas.notification import NotificationResponse
from tripledger.services import notification_service

router = APIRouter(prefix="/notifications", tags=["notifications"])


@router.get("", response_model=List[NotificationResponse])
async def list_notifications(
    unread_only: bool = False,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """List the current user's notifications, newest first."""
    return notification_service.list_notifications(db, current_user.id, unread_only)


@router.post("/{notification_id}/read", response_model=NotificationResponse)
async def mark_notification_read(
    notification_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Mark a notification as read."""
    return notification_service.mark_read(db, notification_id, current_user.id)
