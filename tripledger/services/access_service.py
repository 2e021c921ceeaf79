"""
Resolves what the acting user may do on a trip.

Every mutating ledger operation goes through ``authorize``; the role is read
from the database on each call.
"""
from typing import Optional, Tuple
from sqlalchemy.orm import Session
from tripledger.core.exceptions import NotFoundError, UnauthorizedError
from tripledger.core.permissions import TripAccess
from tripledger.models.trip import Trip, TripParticipant, ParticipantRole


def get_trip(db: Session, trip_id: int) -> Trip:
    """Load a trip or raise NotFoundError."""
    trip = db.query(Trip).filter(Trip.id == trip_id).first()
    if not trip:
        raise NotFoundError("Trip not found")
    return trip


def role_of(db: Session, trip_id: int, user_id: int) -> Optional[ParticipantRole]:
    participant = db.query(TripParticipant).filter(
        TripParticipant.trip_id == trip_id,
        TripParticipant.user_id == user_id
    ).first()
    return participant.role if participant else None


def resolve_access(db: Session, trip: Trip, user_id: int) -> TripAccess:
    return TripAccess(
        trip_id=trip.id,
        user_id=user_id,
        is_owner=trip.owner_id == user_id,
        role=role_of(db, trip.id, user_id),
    )


def authorize(
    db: Session,
    trip_id: int,
    user_id: int,
    capability: str,
    message: str = "Access denied to this trip"
) -> Tuple[Trip, TripAccess]:
    """
    Load the trip and check one capability of ``TripAccess`` (e.g. ``"can_invite"``).

    Raises NotFoundError for a missing trip and UnauthorizedError when the
    capability is not held.
    """
    trip = get_trip(db, trip_id)
    access = resolve_access(db, trip, user_id)
    if not getattr(access, capability):
        raise UnauthorizedError(message)
    return trip, access
