"""
Pydantic schemas for Invitation entity.
"""
from pydantic import BaseModel, EmailStr
from typing import Optional
from datetime import datetime
from tripledger.models.trip import ParticipantRole
from tripledger.schemas.user import UserSummary


class InvitationCreate(BaseModel):
    """Schema for invitation creation."""
    email: EmailStr
    role: ParticipantRole = ParticipantRole.PARTICIPANT


class InvitationTrip(BaseModel):
    """Trip fields shown alongside an invitation."""
    id: int
    title: str
    destination: str

    class Config:
        from_attributes = True


class InvitationResponse(BaseModel):
    """Schema for invitation response."""
    id: int
    trip_id: int
    email: str
    role: ParticipantRole
    invited_by: int
    expires_at: datetime
    accepted_at: Optional[datetime] = None
    created_at: datetime
    trip: Optional[InvitationTrip] = None
    inviter: Optional[UserSummary] = None

    class Config:
        from_attributes = True
