"""
Tests for outstanding balances and suggested transfers.
"""
from datetime import date
from decimal import Decimal

from tripledger.schemas.expense import ExpenseCreate
from tripledger.services import expense_service, settlement_service


def test_minimize_transfers_pairs_largest_first():
    transfers = settlement_service.minimize_transfers([
        (1, Decimal("60")), (2, Decimal("-40")), (3, Decimal("-20")),
    ])
    assert [(t.from_user_id, t.to_user_id, t.amount) for t in transfers] == [
        (2, 1, Decimal("40")),
        (3, 1, Decimal("20")),
    ]


def test_minimize_transfers_with_settled_balances():
    assert settlement_service.minimize_transfers([(1, Decimal(0)), (2, Decimal(0))]) == []


def test_balances_follow_unpaid_splits(db_session, make_user, make_trip, add_member):
    a = make_user("a@example.com")
    b = make_user("b@example.com")
    c = make_user("c@example.com")
    trip = make_trip(a)
    add_member(trip, b)
    add_member(trip, c)

    expense = expense_service.create_expense(db_session, trip.id, a.id, ExpenseCreate(
        title="Hotel", amount=Decimal("90.00"), paid_by=a.id, date=date(2026, 7, 1)
    ))

    result = settlement_service.outstanding_balances(db_session, trip.id, b.id)
    balances = {item["user_id"]: item["balance"] for item in result["balances"]}
    assert balances == {a.id: Decimal("60"), b.id: Decimal("-30"), c.id: Decimal("-30")}
    assert len(result["transfers"]) == 2

    for split in expense.splits:
        if split.user_id == b.id:
            expense_service.mark_split_paid(db_session, split.id, True, b.id)

    result = settlement_service.outstanding_balances(db_session, trip.id, b.id)
    balances = {item["user_id"]: item["balance"] for item in result["balances"]}
    assert balances == {a.id: Decimal("30"), c.id: Decimal("-30")}
    assert result["transfers"] == [{"from_user_id": c.id, "to_user_id": a.id, "amount": Decimal("30")}]
