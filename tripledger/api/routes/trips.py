"""
Trip management routes.
"""
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from typing import List
from tripledger.api.dependencies import get_current_user
from tripledger.db.session import get_db
from tripledger.models.user import User
from tripledger.schemas.stats import TripStatsResponse
from tripledger.schemas.trip import (
    TripCreate, TripUpdate, TripStatusUpdate, TripCoverUpdate, TripResponse,
    TripDetailResponse, TripParticipantResponse, ParticipantRoleUpdate,
)
from tripledger.services import membership_service, stats_service, trip_service

router = APIRouter(prefix="/trips", tags=["trips"])


@router.post("", response_model=TripResponse, status_code=status.HTTP_201_CREATED)
async def create_trip(
    trip_data: TripCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Create a new trip; the creator becomes its owner and first organizer."""
    return trip_service.create_trip(db, current_user, trip_data)


@router.get("", response_model=List[TripResponse])
async def list_trips(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """List all trips the current user owns or participates in."""
    return trip_service.list_trips(db, current_user.id)


@router.get("/stats", response_model=TripStatsResponse)
async def get_trip_stats(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Dashboard statistics; figures that cannot be computed fall back to zero."""
    return stats_service.trip_stats(db, current_user.id)


@router.get("/{trip_id}", response_model=TripDetailResponse)
async def get_trip(
    trip_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Get trip details with participants and the caller's capabilities."""
    trip, access = trip_service.get_trip_for_viewer(db, trip_id, current_user.id)
    participants = trip_service.list_participants(db, trip_id, current_user.id)

    trip_detail = TripResponse.model_validate(trip).model_dump()
    return TripDetailResponse(
        **trip_detail,
        participants=[TripParticipantResponse.model_validate(p) for p in participants],
        **trip_service.describe_access(access)
    )


@router.patch("/{trip_id}", response_model=TripResponse)
async def update_trip(
    trip_id: int,
    trip_update: TripUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Update trip details (owner only)."""
    updates = trip_update.model_dump(exclude_unset=True)
    return trip_service.update_trip(db, trip_id, current_user.id, updates)


@router.put("/{trip_id}/status", response_model=TripResponse)
async def change_trip_status(
    trip_id: int,
    status_update: TripStatusUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Change the trip status (owner only)."""
    return trip_service.change_trip_status(db, trip_id, current_user.id, status_update.status)


@router.put("/{trip_id}/cover", response_model=TripResponse)
async def set_cover_photo(
    trip_id: int,
    cover_update: TripCoverUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Set or clear the cover photo URL (owner only)."""
    return trip_service.set_cover_photo(db, trip_id, current_user.id, cover_update.cover_image)


@router.delete("/{trip_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_trip(
    trip_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Delete a trip and everything recorded against it (owner only)."""
    trip_service.delete_trip(db, trip_id, current_user.id)


@router.get("/{trip_id}/participants", response_model=List[TripParticipantResponse])
async def get_participants(
    trip_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Get participant list ordered by join time."""
    return trip_service.list_participants(db, trip_id, current_user.id)


@router.delete("/{trip_id}/participants/{participant_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_participant(
    trip_id: int,
    participant_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Remove a participant from the trip (owner or organizer)."""
    membership_service.remove_participant(db, participant_id, current_user.id, trip_id=trip_id)


@router.put("/{trip_id}/participants/{participant_id}/role", response_model=TripParticipantResponse)
async def update_participant_role(
    trip_id: int,
    participant_id: int,
    role_update: ParticipantRoleUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Change a participant's role (owner only)."""
    return membership_service.update_participant_role(
        db, participant_id, role_update.role, current_user.id, trip_id=trip_id
    )
