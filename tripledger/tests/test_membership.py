"""
Tests for invitations and participant management.
"""
from datetime import datetime, timedelta
from decimal import Decimal

import pytest
from sqlalchemy.exc import IntegrityError

from tripledger.core.config import settings
from tripledger.core.exceptions import (
    ConflictError, ExpiredError, NotFoundError, UnauthorizedError, ValidationError,
)
from tripledger.models.expense import ExpenseSplit
from tripledger.models.invitation import Invitation
from tripledger.models.notification import Notification, NotificationType
from tripledger.models.trip import TripParticipant, ParticipantRole
from tripledger.schemas.expense import ExpenseCreate
from tripledger.services import expense_service, membership_service

T0 = datetime(2026, 6, 1, 12, 0, 0)


def test_invitation_expiry_is_policy_window(db_session, crew):
    invitation = membership_service.create_invitation(
        db_session, crew["trip"].id, crew["owner"].id, "X@Example.com", now=T0
    )
    assert invitation.email == "x@example.com"
    assert invitation.accepted_at is None
    assert invitation.expires_at == T0 + timedelta(hours=settings.INVITATION_EXPIRE_HOURS)


def test_duplicate_pending_invitation_conflicts(db_session, crew):
    trip, owner = crew["trip"], crew["owner"]
    membership_service.create_invitation(db_session, trip.id, owner.id, "x@example.com", now=T0)

    with pytest.raises(ConflictError) as exc:
        membership_service.create_invitation(db_session, trip.id, owner.id, "x@example.com", now=T0)
    assert "pending invitation" in exc.value.message


def test_new_invitation_allowed_after_cancellation(db_session, crew):
    trip, owner = crew["trip"], crew["owner"]
    first = membership_service.create_invitation(db_session, trip.id, owner.id, "x@example.com", now=T0)
    membership_service.delete_invitation(db_session, first.id, owner.id)

    second = membership_service.create_invitation(db_session, trip.id, owner.id, "x@example.com", now=T0)
    assert second.id != first.id


def test_new_invitation_supersedes_expired_one(db_session, crew):
    trip, owner = crew["trip"], crew["owner"]
    first = membership_service.create_invitation(db_session, trip.id, owner.id, "x@example.com", now=T0)
    later = first.expires_at + timedelta(minutes=1)

    second = membership_service.create_invitation(db_session, trip.id, owner.id, "x@example.com", now=later)
    assert second.expires_at > later
    assert db_session.query(Invitation).filter(Invitation.email == "x@example.com").count() == 1


def test_existing_member_cannot_be_invited(db_session, crew):
    with pytest.raises(ConflictError) as exc:
        membership_service.create_invitation(
            db_session, crew["trip"].id, crew["owner"].id, "Participant@example.com"
        )
    assert "already a participant" in exc.value.message


def test_invitation_cannot_grant_organizer(db_session, crew):
    with pytest.raises(ValidationError):
        membership_service.create_invitation(
            db_session, crew["trip"].id, crew["owner"].id, "x@example.com", ParticipantRole.ORGANIZER
        )


def test_store_rejects_second_pending_invitation(db_session, crew):
    trip, owner = crew["trip"], crew["owner"]
    membership_service.create_invitation(db_session, trip.id, owner.id, "x@example.com", now=T0)

    db_session.add(Invitation(
        trip_id=trip.id,
        email="x@example.com",
        pending_email="x@example.com",
        role=ParticipantRole.GUEST,
        invited_by=owner.id,
        expires_at=T0 + timedelta(days=1),
    ))
    with pytest.raises(IntegrityError):
        db_session.commit()
    db_session.rollback()


def test_invitation_notifies_existing_user(db_session, crew, make_user):
    invitee = make_user("x@example.com")
    membership_service.create_invitation(db_session, crew["trip"].id, crew["owner"].id, "x@example.com")

    notifications = db_session.query(Notification).filter(Notification.user_id == invitee.id).all()
    assert len(notifications) == 1
    assert notifications[0].type == NotificationType.TRIP_INVITE
    assert notifications[0].trip_id == crew["trip"].id


@pytest.mark.parametrize("offset", [timedelta(0), timedelta(seconds=1), timedelta(days=3)])
def test_accept_at_or_after_expiry_fails(db_session, crew, make_user, offset):
    invitee = make_user("x@example.com")
    invitation = membership_service.create_invitation(
        db_session, crew["trip"].id, crew["owner"].id, "x@example.com", now=T0
    )

    with pytest.raises(ExpiredError):
        membership_service.accept_invitation(db_session, invitation.id, invitee, now=invitation.expires_at + offset)

    member = db_session.query(TripParticipant).filter(TripParticipant.user_id == invitee.id).first()
    assert member is None


def test_accept_creates_participant_exactly_once(db_session, crew, make_user):
    invitee = make_user("x@example.com")
    invitation = membership_service.create_invitation(
        db_session, crew["trip"].id, crew["owner"].id, "x@example.com", ParticipantRole.GUEST, now=T0
    )
    just_before = invitation.expires_at - timedelta(seconds=1)

    participant = membership_service.accept_invitation(db_session, invitation.id, invitee, now=just_before)
    assert participant.trip_id == crew["trip"].id
    assert participant.role == ParticipantRole.GUEST

    db_session.refresh(invitation)
    assert invitation.accepted_at == just_before
    assert invitation.pending_email is None

    with pytest.raises(ConflictError):
        membership_service.accept_invitation(db_session, invitation.id, invitee, now=just_before)
    assert db_session.query(TripParticipant).filter(TripParticipant.user_id == invitee.id).count() == 1


def test_accept_requires_matching_email(db_session, crew, make_user):
    make_user("x@example.com")
    someone_else = make_user("y@example.com")
    invitation = membership_service.create_invitation(
        db_session, crew["trip"].id, crew["owner"].id, "x@example.com", now=T0
    )

    with pytest.raises(NotFoundError):
        membership_service.accept_invitation(db_session, invitation.id, someone_else, now=T0)
    with pytest.raises(NotFoundError):
        membership_service.accept_invitation(db_session, 9999, someone_else, now=T0)


def test_accepted_invitation_leaves_pending_lists(db_session, crew, make_user):
    invitee = make_user("x@example.com")
    trip, owner = crew["trip"], crew["owner"]
    invitation = membership_service.create_invitation(db_session, trip.id, owner.id, "x@example.com")
    assert [i.id for i in membership_service.list_user_invitations(db_session, invitee)] == [invitation.id]
    assert [i.id for i in membership_service.list_trip_invitations(db_session, trip.id, owner.id)] == [invitation.id]

    membership_service.accept_invitation(db_session, invitation.id, invitee)

    assert membership_service.list_user_invitations(db_session, invitee) == []
    assert membership_service.list_trip_invitations(db_session, trip.id, owner.id) == []


def test_expired_invitations_are_filtered_not_deleted(db_session, crew, make_user):
    invitee = make_user("x@example.com")
    invitation = membership_service.create_invitation(
        db_session, crew["trip"].id, crew["owner"].id, "x@example.com", now=T0
    )
    after = invitation.expires_at + timedelta(hours=1)

    assert membership_service.list_user_invitations(db_session, invitee, now=after) == []
    assert db_session.query(Invitation).count() == 1


def test_participant_cannot_cancel_invitation(db_session, crew):
    invitation = membership_service.create_invitation(
        db_session, crew["trip"].id, crew["organizer"].id, "x@example.com"
    )
    with pytest.raises(UnauthorizedError):
        membership_service.delete_invitation(db_session, invitation.id, crew["participant"].id)


def test_remove_participant_keeps_historical_splits(db_session, crew):
    trip, owner, participant = crew["trip"], crew["owner"], crew["participant"]
    expense_service.create_expense(db_session, trip.id, owner.id, ExpenseCreate(
        title="Museum tickets",
        amount=Decimal("40.00"),
        paid_by=owner.id,
        date=T0.date(),
    ))
    row = db_session.query(TripParticipant).filter(
        TripParticipant.trip_id == trip.id,
        TripParticipant.user_id == participant.id
    ).one()

    membership_service.remove_participant(db_session, row.id, crew["organizer"].id, trip_id=trip.id)

    assert db_session.query(TripParticipant).filter(TripParticipant.user_id == participant.id).count() == 0
    assert db_session.query(ExpenseSplit).filter(ExpenseSplit.user_id == participant.id).count() == 1


def test_participant_cannot_remove_others(db_session, crew):
    guest_row = db_session.query(TripParticipant).filter(TripParticipant.user_id == crew["guest"].id).one()
    with pytest.raises(UnauthorizedError):
        membership_service.remove_participant(db_session, guest_row.id, crew["participant"].id)


def test_remove_participant_from_wrong_trip_is_not_found(db_session, crew, make_trip):
    other_trip = make_trip(crew["owner"], title="Elsewhere")
    guest_row = db_session.query(TripParticipant).filter(TripParticipant.user_id == crew["guest"].id).one()
    with pytest.raises(NotFoundError):
        membership_service.remove_participant(db_session, guest_row.id, crew["owner"].id, trip_id=other_trip.id)


def test_only_owner_changes_roles_and_may_demote_last_organizer(db_session, crew):
    organizer_row = db_session.query(TripParticipant).filter(
        TripParticipant.user_id == crew["organizer"].id
    ).one()

    with pytest.raises(UnauthorizedError):
        membership_service.update_participant_role(
            db_session, organizer_row.id, ParticipantRole.GUEST, crew["organizer"].id
        )

    updated = membership_service.update_participant_role(
        db_session, organizer_row.id, ParticipantRole.GUEST, crew["owner"].id
    )
    assert updated.role == ParticipantRole.GUEST
