"""
Notification service. Delivery is best-effort: a failed insert is logged and
never undoes the operation that triggered it.
"""
import logging
from typing import List, Optional
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from tripledger.core.exceptions import NotFoundError
from tripledger.core.utils import utcnow
from tripledger.models.notification import Notification, NotificationType

logger = logging.getLogger(__name__)


def notify(
    db: Session,
    user_id: int,
    title: str,
    message: str,
    notification_type: NotificationType = NotificationType.SYSTEM,
    trip_id: Optional[int] = None
) -> Optional[Notification]:
    """Create a notification in its own transaction. Returns None if it could not be stored."""
    try:
        notification = Notification(
            user_id=user_id,
            trip_id=trip_id,
            title=title,
            message=message,
            type=notification_type
        )
        db.add(notification)
        db.commit()
        return notification
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Could not notify user {user_id} ({notification_type.value}): {e}", exc_info=True)
        return None


def list_notifications(db: Session, user_id: int, unread_only: bool = False) -> List[Notification]:
    query = db.query(Notification).filter(Notification.user_id == user_id)
    if unread_only:
        query = query.filter(Notification.read.is_(False))
    return query.order_by(Notification.created_at.desc(), Notification.id.desc()).all()


def mark_read(db: Session, notification_id: int, user_id: int) -> Notification:
    """Mark one of the user's own notifications as read."""
    notification = db.query(Notification).filter(
        Notification.id == notification_id,
        Notification.user_id == user_id
    ).first()
    if not notification:
        raise NotFoundError("Notification not found")

    if not notification.read:
        notification.read = True
        notification.read_at = utcnow()
        db.commit()
        db.refresh(notification)
    return notification
