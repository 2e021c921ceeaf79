"""
Membership ledger: invitations and the participant rows they turn into.

Invitation states are Pending -> Accepted, Pending -> Expired (a read-time
filter on ``expires_at``, never stored) and Pending -> Deleted. Accepted and
expired invitations never change again.
"""
import logging
from datetime import datetime, timedelta
from typing import List, Optional
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload
from tripledger.core.config import settings
from tripledger.core.exceptions import (
    ConflictError, ExpiredError, NotFoundError, ValidationError,
)
from tripledger.core.utils import normalize_email, utcnow
from tripledger.models.invitation import Invitation
from tripledger.models.notification import NotificationType
from tripledger.models.trip import TripParticipant, ParticipantRole
from tripledger.models.user import User
from tripledger.services.access_service import authorize
from tripledger.services.notification_service import notify

logger = logging.getLogger(__name__)

INVITABLE_ROLES = (ParticipantRole.PARTICIPANT, ParticipantRole.GUEST)


def _is_member_email(db: Session, trip_id: int, email: str) -> bool:
    return db.query(TripParticipant).join(User, TripParticipant.user_id == User.id).filter(
        TripParticipant.trip_id == trip_id,
        User.email == email
    ).first() is not None


def create_invitation(
    db: Session,
    trip_id: int,
    inviter_id: int,
    email: str,
    role: ParticipantRole = ParticipantRole.PARTICIPANT,
    now: Optional[datetime] = None
) -> Invitation:
    """
    Invite an email address to a trip.

    Rejects addresses that already belong to a participant and addresses with
    a pending, unexpired invitation. The unique constraint on
    ``(trip_id, pending_email)`` is the final word when two invitations race.
    """
    now = now or utcnow()
    trip, _ = authorize(db, trip_id, inviter_id, "can_invite", "Only the trip owner or an organizer can invite people")

    if role not in INVITABLE_ROLES:
        raise ValidationError("Invitations can only grant the participant or guest role")

    email = normalize_email(email)
    if _is_member_email(db, trip_id, email):
        raise ConflictError(f"{email} is already a participant in this trip")

    pending = db.query(Invitation).filter(
        Invitation.trip_id == trip_id,
        Invitation.pending_email == email
    ).first()
    if pending:
        if pending.expires_at > now:
            raise ConflictError(f"{email} already has a pending invitation")
        # An expired invitation is superseded by its replacement.
        db.delete(pending)
        db.flush()

    invitation = Invitation(
        trip_id=trip_id,
        email=email,
        pending_email=email,
        role=role,
        invited_by=inviter_id,
        expires_at=now + timedelta(hours=settings.INVITATION_EXPIRE_HOURS)
    )
    db.add(invitation)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ConflictError(f"{email} already has a pending invitation")
    db.refresh(invitation)
    logger.info(f"Invitation {invitation.id} created for trip {trip_id} by user {inviter_id}")

    invited_user = db.query(User).filter(User.email == email).first()
    if invited_user:
        notify(
            db,
            invited_user.id,
            "Trip Invitation",
            f'You\'ve been invited to join "{trip.title}"',
            NotificationType.TRIP_INVITE,
            trip_id=trip_id
        )
    return invitation


def accept_invitation(
    db: Session,
    invitation_id: int,
    user: User,
    now: Optional[datetime] = None
) -> TripParticipant:
    """
    Accept an invitation addressed to the user's email.

    Marking the invitation accepted and creating the participant row happen
    in one transaction; neither is visible without the other.
    """
    now = now or utcnow()
    invitation = db.query(Invitation).filter(
        Invitation.id == invitation_id,
        Invitation.email == normalize_email(user.email)
    ).first()
    if not invitation:
        raise NotFoundError("Invitation not found")

    if now >= invitation.expires_at:
        raise ExpiredError("Invitation has expired")

    if invitation.accepted_at is not None:
        raise ConflictError("Invitation already accepted")

    invitation.accepted_at = now
    invitation.pending_email = None
    participant = TripParticipant(
        trip_id=invitation.trip_id,
        user_id=user.id,
        role=invitation.role,
        joined_at=now
    )
    db.add(participant)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ConflictError("You are already a participant in this trip")
    db.refresh(participant)

    logger.info(f"Invitation {invitation_id} accepted by user {user.id}")
    return participant


def delete_invitation(db: Session, invitation_id: int, actor_id: int) -> None:
    """Cancel an invitation. Owner or organizer only."""
    invitation = db.query(Invitation).filter(Invitation.id == invitation_id).first()
    if not invitation:
        raise NotFoundError("Invitation not found")

    authorize(db, invitation.trip_id, actor_id, "can_invite", "Only the trip owner or an organizer can cancel invitations")
    db.delete(invitation)
    db.commit()
    logger.info(f"Invitation {invitation_id} cancelled by user {actor_id}")


def list_trip_invitations(
    db: Session,
    trip_id: int,
    user_id: int,
    now: Optional[datetime] = None
) -> List[Invitation]:
    """Pending, unexpired invitations of a trip."""
    now = now or utcnow()
    authorize(db, trip_id, user_id, "can_view")
    return db.query(Invitation).options(
        joinedload(Invitation.trip),
        joinedload(Invitation.inviter)
    ).filter(
        Invitation.trip_id == trip_id,
        Invitation.accepted_at.is_(None),
        Invitation.expires_at > now
    ).order_by(Invitation.created_at.desc(), Invitation.id.desc()).all()


def list_user_invitations(db: Session, user: User, now: Optional[datetime] = None) -> List[Invitation]:
    """Pending, unexpired invitations addressed to the user's email."""
    now = now or utcnow()
    return db.query(Invitation).options(
        joinedload(Invitation.trip),
        joinedload(Invitation.inviter)
    ).filter(
        Invitation.email == normalize_email(user.email),
        Invitation.accepted_at.is_(None),
        Invitation.expires_at > now
    ).order_by(Invitation.created_at.desc(), Invitation.id.desc()).all()


def notify_pending_invitations(db: Session, user: User, now: Optional[datetime] = None) -> int:
    """Tell a newly registered user about invitations that were waiting for their email."""
    invitations = list_user_invitations(db, user, now)
    for invitation in invitations:
        notify(
            db,
            user.id,
            "Trip Invitation",
            f'You\'ve been invited to join "{invitation.trip.title}"',
            NotificationType.TRIP_INVITE,
            trip_id=invitation.trip_id
        )
    return len(invitations)


def _get_participant(db: Session, participant_id: int, trip_id: Optional[int]) -> TripParticipant:
    query = db.query(TripParticipant).filter(TripParticipant.id == participant_id)
    if trip_id is not None:
        query = query.filter(TripParticipant.trip_id == trip_id)
    participant = query.first()
    if not participant:
        raise NotFoundError("Participant not found")
    return participant


def remove_participant(
    db: Session,
    participant_id: int,
    actor_id: int,
    trip_id: Optional[int] = None
) -> None:
    """
    Remove a member from a trip. Owner or organizer only.

    Splits of past expenses are left untouched and keep pointing at the user.
    """
    participant = _get_participant(db, participant_id, trip_id)
    authorize(db, participant.trip_id, actor_id, "can_manage_participants", "Only the trip owner or an organizer can remove participants")
    db.delete(participant)
    db.commit()
    logger.info(f"Participant {participant_id} removed from trip {participant.trip_id} by user {actor_id}")


def update_participant_role(
    db: Session,
    participant_id: int,
    new_role: ParticipantRole,
    actor_id: int,
    trip_id: Optional[int] = None
) -> TripParticipant:
    """Change a member's role. Owner only; demoting the last organizer is allowed."""
    participant = _get_participant(db, participant_id, trip_id)
    authorize(db, participant.trip_id, actor_id, "can_change_roles", "Only the trip owner can change roles")
    participant.role = new_role
    db.commit()
    db.refresh(participant)
    return participant
