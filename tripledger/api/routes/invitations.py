"""
Invitation routes: inviting by email, accepting, cancelling.
"""
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from typing import List
from tripledger.api.dependencies import get_current_user
from tripledger.db.session import get_db
from tripledger.models.user import User
from tripledger.schemas.invitation import InvitationCreate, InvitationResponse
from tripledger.schemas.trip import TripParticipantResponse
from tripledger.services import membership_service

router = APIRouter(tags=["invitations"])


@router.post("/trips/{trip_id}/invitations", response_model=InvitationResponse, status_code=status.HTTP_201_CREATED)
async def create_invitation(
    trip_id: int,
    invite: InvitationCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Invite an email address to the trip (owner or organizer)."""
    return membership_service.create_invitation(db, trip_id, current_user.id, invite.email, invite.role)


@router.get("/trips/{trip_id}/invitations", response_model=List[InvitationResponse])
async def list_trip_invitations(
    trip_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Pending invitations of a trip."""
    return membership_service.list_trip_invitations(db, trip_id, current_user.id)


@router.get("/invitations/mine", response_model=List[InvitationResponse])
async def list_my_invitations(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Pending invitations addressed to the current user's email."""
    return membership_service.list_user_invitations(db, current_user)


@router.post("/invitations/{invitation_id}/accept", response_model=TripParticipantResponse)
async def accept_invitation(
    invitation_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Accept an invitation and join the trip."""
    return membership_service.accept_invitation(db, invitation_id, current_user)


@router.delete("/invitations/{invitation_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_invitation(
    invitation_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Cancel an invitation (owner or organizer)."""
    membership_service.delete_invitation(db, invitation_id, current_user.id)
