"""
Notification model for in-app messages (invitations, new expenses).
"""
from sqlalchemy import Column, String, Boolean, DateTime, Enum as SQLEnum, ForeignKey, Integer
from sqlalchemy.orm import relationship
from tripledger.db.base import BaseModel
import enum


class NotificationType(str, enum.Enum):
    """Notification type enumeration."""
    TRIP_INVITE = "trip_invite"
    EXPENSE_ADDED = "expense_added"
    BALANCE_REMINDER = "balance_reminder"
    SYSTEM = "system"


class Notification(BaseModel):
    __tablename__ = "notifications"

    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    trip_id = Column(Integer, ForeignKey("trips.id", ondelete="CASCADE"), nullable=True, index=True)
    title = Column(String(200), nullable=False)
    message = Column(String(500), nullable=False)
    type = Column(SQLEnum(NotificationType), default=NotificationType.SYSTEM, nullable=False)
    read = Column(Boolean, default=False, nullable=False)
    read_at = Column(DateTime, nullable=True)

    # Relationships
    user = relationship("User", back_populates="notifications")
    trip = relationship("Trip", back_populates="notifications")
