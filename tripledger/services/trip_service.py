"""
Trip service: creation, listing and owner-only trip management.
"""
import logging
from typing import Any, Dict, List
from sqlalchemy import or_, select
from sqlalchemy.orm import Session
from tripledger.core.config import settings
from tripledger.core.exceptions import ValidationError
from tripledger.core.permissions import TripAccess
from tripledger.core.utils import reject_nulls
from tripledger.models.trip import Trip, TripParticipant, TripStatus, ParticipantRole
from tripledger.models.user import User
from tripledger.schemas.trip import TripCreate
from tripledger.services.access_service import authorize

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("title", "destination", "start_date", "end_date", "currency")


def _check_dates(start_date, end_date):
    if end_date < start_date:
        raise ValidationError("end_date must not be before start_date")


def create_trip(db: Session, owner: User, trip_data: TripCreate) -> Trip:
    """Create a trip and, in the same transaction, the owner's organizer row."""
    _check_dates(trip_data.start_date, trip_data.end_date)

    currency = (trip_data.currency or settings.DEFAULT_CURRENCY).upper()
    new_trip = Trip(
        title=trip_data.title,
        description=trip_data.description,
        destination=trip_data.destination,
        start_date=trip_data.start_date,
        end_date=trip_data.end_date,
        budget=trip_data.budget,
        currency=currency,
        owner_id=owner.id,
        status=trip_data.status
    )
    try:
        db.add(new_trip)
        db.flush()

        db.add(TripParticipant(
            trip_id=new_trip.id,
            user_id=owner.id,
            role=ParticipantRole.ORGANIZER
        ))
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(new_trip)

    logger.info(f"Trip {new_trip.id} created by user {owner.id}")
    return new_trip


def list_trips(db: Session, user_id: int) -> List[Trip]:
    """Trips the user owns or participates in, newest first."""
    member_trip_ids = select(TripParticipant.trip_id).where(TripParticipant.user_id == user_id)
    return db.query(Trip).filter(
        or_(Trip.owner_id == user_id, Trip.id.in_(member_trip_ids))
    ).order_by(Trip.created_at.desc(), Trip.id.desc()).all()


def get_trip_for_viewer(db: Session, trip_id: int, user_id: int):
    """Return the trip and the caller's access; non-members are refused."""
    return authorize(db, trip_id, user_id, "can_view")


def list_participants(db: Session, trip_id: int, user_id: int) -> List[TripParticipant]:
    authorize(db, trip_id, user_id, "can_view")
    return db.query(TripParticipant).filter(
        TripParticipant.trip_id == trip_id
    ).order_by(TripParticipant.joined_at, TripParticipant.id).all()


def update_trip(db: Session, trip_id: int, user_id: int, updates: Dict[str, Any]) -> Trip:
    """Apply a partial update to trip details. Owner only."""
    trip, _ = authorize(db, trip_id, user_id, "can_manage_trip", "Only the trip owner can edit trip details")

    reject_nulls(updates, REQUIRED_FIELDS)
    start_date = updates.get("start_date") or trip.start_date
    end_date = updates.get("end_date") or trip.end_date
    _check_dates(start_date, end_date)

    for field, value in updates.items():
        if field == "currency" and value:
            value = value.upper()
        setattr(trip, field, value)
    db.commit()
    db.refresh(trip)
    return trip


def change_trip_status(db: Session, trip_id: int, user_id: int, new_status: TripStatus) -> Trip:
    """Set the trip status. Any status may follow any other."""
    trip, _ = authorize(db, trip_id, user_id, "can_change_trip_status", "Only the trip owner can change the trip status")
    old_status = trip.status
    trip.status = new_status
    db.commit()
    db.refresh(trip)
    logger.info(f"Trip {trip_id} status {old_status.value} -> {new_status.value}")
    return trip


def set_cover_photo(db: Session, trip_id: int, user_id: int, cover_image) -> Trip:
    trip, _ = authorize(db, trip_id, user_id, "can_manage_cover_photo", "Only the trip owner can change the cover photo")
    trip.cover_image = cover_image
    db.commit()
    db.refresh(trip)
    return trip


def delete_trip(db: Session, trip_id: int, user_id: int) -> None:
    """Delete a trip with its participants, invitations, expenses and splits."""
    trip, _ = authorize(db, trip_id, user_id, "can_manage_trip", "Only the trip owner can delete the trip")
    db.delete(trip)
    db.commit()
    logger.info(f"Trip {trip_id} deleted by user {user_id}")


def describe_access(access: TripAccess) -> Dict[str, Any]:
    """Capability flags shown to the caller with the trip detail."""
    return {
        "my_role": access.role,
        "is_owner": access.is_owner,
        "can_edit": access.can_edit_content,
        "can_invite": access.can_invite,
    }
