"""
Trip and participant models for group trip planning.
"""
from sqlalchemy import (
    Column, String, Date, DateTime, Numeric, Text, Enum as SQLEnum,
    ForeignKey, Integer, UniqueConstraint,
)
from sqlalchemy.orm import relationship
from tripledger.db.base import BaseModel
from tripledger.core.utils import utcnow
import enum


class TripStatus(str, enum.Enum):
    """Trip status enumeration. Any status may follow any other."""
    PLANNING = "planning"
    ACTIVE = "active"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class ParticipantRole(str, enum.Enum):
    """Role a member holds inside a trip."""
    ORGANIZER = "organizer"
    PARTICIPANT = "participant"
    GUEST = "guest"


class Trip(BaseModel):
    """Trip model; the owner has full rights whether or not they hold a participant row."""
    __tablename__ = "trips"

    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    destination = Column(String(200), nullable=False)
    start_date = Column(Date, nullable=False, index=True)
    end_date = Column(Date, nullable=False, index=True)
    budget = Column(Numeric(12, 2), nullable=True)
    currency = Column(String(3), nullable=False, default="USD")
    cover_image = Column(String(500), nullable=True)
    owner_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    status = Column(SQLEnum(TripStatus), default=TripStatus.PLANNING, nullable=False)

    # Relationships
    owner = relationship("User", back_populates="owned_trips")
    participants = relationship("TripParticipant", back_populates="trip", cascade="all, delete-orphan")
    invitations = relationship("Invitation", back_populates="trip", cascade="all, delete-orphan")
    expenses = relationship("Expense", back_populates="trip", cascade="all, delete-orphan")
    notifications = relationship("Notification", back_populates="trip", cascade="all, delete-orphan")


class TripParticipant(BaseModel):
    """Confirmed membership of a user in a trip."""
    __tablename__ = "trip_participants"
    __table_args__ = (
        UniqueConstraint("trip_id", "user_id", name="uq_trip_participant"),
    )

    trip_id = Column(Integer, ForeignKey("trips.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    role = Column(SQLEnum(ParticipantRole), default=ParticipantRole.PARTICIPANT, nullable=False)
    joined_at = Column(DateTime, default=utcnow, nullable=False)

    # Relationships
    trip = relationship("Trip", back_populates="participants")
    user = relationship("User", back_populates="memberships")
