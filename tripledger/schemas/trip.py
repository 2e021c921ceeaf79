"""
Pydantic schemas for Trip and TripParticipant entities.
"""
from pydantic import BaseModel, Field, model_validator
from typing import List, Optional
from datetime import date, datetime
from decimal import Decimal
from tripledger.models.trip import TripStatus, ParticipantRole
from tripledger.schemas.user import UserSummary


class TripBase(BaseModel):
    """Base trip schema."""
    title: str
    description: Optional[str] = None
    destination: str
    start_date: date
    end_date: date
    budget: Optional[Decimal] = None
    currency: Optional[str] = Field(None, min_length=3, max_length=3)


class TripCreate(TripBase):
    """Schema for trip creation."""
    status: TripStatus = TripStatus.PLANNING

    @model_validator(mode="after")
    def check_dates(self):
        if self.end_date < self.start_date:
            raise ValueError("end_date must not be before start_date")
        return self


class TripUpdate(BaseModel):
    """Schema for trip update. Status and cover photo have their own endpoints."""
    title: Optional[str] = None
    description: Optional[str] = None
    destination: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    budget: Optional[Decimal] = None
    currency: Optional[str] = Field(None, min_length=3, max_length=3)


class TripStatusUpdate(BaseModel):
    status: TripStatus


class TripCoverUpdate(BaseModel):
    cover_image: Optional[str] = None


class TripResponse(TripBase):
    """Schema for trip response."""
    id: int
    currency: str
    cover_image: Optional[str] = None
    owner_id: int
    status: TripStatus
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class TripParticipantResponse(BaseModel):
    """Schema for trip participant response."""
    id: int
    trip_id: int
    user_id: int
    role: ParticipantRole
    joined_at: datetime
    user: UserSummary

    class Config:
        from_attributes = True


class TripDetailResponse(TripResponse):
    """Schema for detailed trip response with participants and the caller's capabilities."""
    participants: List[TripParticipantResponse] = []
    my_role: Optional[ParticipantRole] = None
    is_owner: bool = False
    can_edit: bool = False
    can_invite: bool = False


class ParticipantRoleUpdate(BaseModel):
    role: ParticipantRole
