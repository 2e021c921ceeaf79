"""
Invitation model: a pending offer of trip membership addressed to an email.
"""
from sqlalchemy import Column, String, DateTime, Enum as SQLEnum, ForeignKey, Integer, UniqueConstraint
from sqlalchemy.orm import relationship
from tripledger.db.base import BaseModel
from tripledger.models.trip import ParticipantRole


class Invitation(BaseModel):
    """
    Invitation model.

    ``pending_email`` mirrors ``email`` while the invitation is unaccepted and
    is cleared on acceptance, so the unique constraint on
    ``(trip_id, pending_email)`` allows at most one pending invitation per
    trip and address.
    """
    __tablename__ = "invitations"
    __table_args__ = (
        UniqueConstraint("trip_id", "pending_email", name="uq_invitation_pending"),
    )

    trip_id = Column(Integer, ForeignKey("trips.id", ondelete="CASCADE"), nullable=False, index=True)
    email = Column(String(255), nullable=False, index=True)
    pending_email = Column(String(255), nullable=True)
    role = Column(SQLEnum(ParticipantRole), default=ParticipantRole.PARTICIPANT, nullable=False)
    invited_by = Column(Integer, ForeignKey("users.id"), nullable=False)
    expires_at = Column(DateTime, nullable=False, index=True)
    accepted_at = Column(DateTime, nullable=True)

    # Relationships
    trip = relationship("Trip", back_populates="invitations")
    inviter = relationship("User", foreign_keys=[invited_by])
