"""
Tests for dashboard statistics and their partial-failure behavior.
"""
from datetime import date
from decimal import Decimal, InvalidOperation

from sqlalchemy.exc import OperationalError

from tripledger.models.trip import TripStatus
from tripledger.schemas.expense import ExpenseCreate
from tripledger.services import expense_service, stats_service, trip_service


def _seed(db_session, make_user, make_trip, add_member):
    a = make_user("a@example.com")
    b = make_user("b@example.com")
    c = make_user("c@example.com")

    lisbon = make_trip(a, title="Lisbon")
    add_member(lisbon, b)
    add_member(lisbon, c)
    trip_service.change_trip_status(db_session, lisbon.id, a.id, TripStatus.ACTIVE)

    # B owns a second trip that A only joins as a member.
    porto = make_trip(b, title="Porto")
    add_member(porto, a)

    expense_service.create_expense(db_session, lisbon.id, a.id, ExpenseCreate(
        title="Hotel", amount=Decimal("90.00"), paid_by=a.id, date=date(2026, 7, 1)
    ))
    expense_service.create_expense(db_session, porto.id, b.id, ExpenseCreate(
        title="Train", amount=Decimal("25.50"), paid_by=b.id, date=date(2026, 7, 5)
    ))
    return a, b, c


def test_stats_cover_owned_and_joined_trips(db_session, make_user, make_trip, add_member):
    a, _, c = _seed(db_session, make_user, make_trip, add_member)

    stats = stats_service.trip_stats(db_session, a.id)
    assert stats["total_trips"] == 2
    assert stats["active_trips"] == 1
    assert stats["total_participants"] == 5
    assert stats["total_expenses"] == Decimal("115.50")
    assert stats["degraded"] == []

    stats = stats_service.trip_stats(db_session, c.id)
    assert stats["total_trips"] == 1
    assert stats["total_participants"] == 3
    assert stats["total_expenses"] == Decimal("90.00")


def test_stats_for_user_without_trips(db_session, make_user):
    loner = make_user("loner@example.com")
    stats = stats_service.trip_stats(db_session, loner.id)
    assert stats["total_trips"] == 0
    assert stats["total_expenses"] == Decimal(0)


def test_failed_participant_query_degrades_only_that_field(db_session, make_user, make_trip, add_member, monkeypatch):
    a, _, _ = _seed(db_session, make_user, make_trip, add_member)

    def broken(db, trip_ids):
        raise OperationalError("SELECT count(*) FROM trip_participants", {}, Exception("connection lost"))

    monkeypatch.setattr(stats_service, "_count_participants", broken)

    stats = stats_service.trip_stats(db_session, a.id)
    assert stats["total_participants"] == 0
    assert stats["total_trips"] == 2
    assert stats["active_trips"] == 1
    assert stats["total_expenses"] == Decimal("115.50")
    assert stats["degraded"] == ["total_participants"]


def test_failed_trip_lookup_still_returns_stats(db_session, make_user, make_trip, add_member, monkeypatch):
    a, _, _ = _seed(db_session, make_user, make_trip, add_member)

    def broken(db, user_id):
        raise OperationalError("SELECT trips.id FROM trips", {}, Exception("timeout"))

    monkeypatch.setattr(stats_service, "_owned_trip_ids", broken)

    # A still reaches both trips through participant rows.
    stats = stats_service.trip_stats(db_session, a.id)
    assert stats["total_trips"] == 2
    assert stats["degraded"] == ["total_trips"]


def test_failure_outside_the_database_also_degrades(db_session, make_user, make_trip, add_member, monkeypatch):
    a, _, _ = _seed(db_session, make_user, make_trip, add_member)

    def broken(db, trip_ids):
        raise InvalidOperation("bad stored amount")

    monkeypatch.setattr(stats_service, "_sum_expenses", broken)

    stats = stats_service.trip_stats(db_session, a.id)
    assert stats["total_expenses"] == Decimal(0)
    assert stats["total_participants"] == 5
    assert stats["degraded"] == ["total_expenses"]
