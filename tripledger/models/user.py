"""
User model for authentication and invitation matching.
"""
from sqlalchemy import Column, String, Boolean
from sqlalchemy.orm import relationship
from tripledger.db.base import BaseModel


class User(BaseModel):
    """User account; email is the identity invitations are addressed to."""
    __tablename__ = "users"

    email = Column(String(255), unique=True, nullable=False, index=True)
    full_name = Column(String(200), nullable=True)
    hashed_password = Column(String(255), nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)

    # Relationships
    owned_trips = relationship("Trip", back_populates="owner")
    memberships = relationship("TripParticipant", back_populates="user")
    notifications = relationship("Notification", back_populates="user", cascade="all, delete-orphan")
