"""
Expense service for expense-related business logic.
"""
import logging
from decimal import Decimal
from typing import Any, Dict, List, Optional
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, joinedload
from tripledger.core.exceptions import (
    ConflictError, NotFoundError, PayerNotParticipantError, ValidationError,
)
from tripledger.core.utils import reject_nulls
from tripledger.models.expense import Expense, ExpenseSplit
from tripledger.models.notification import NotificationType
from tripledger.models.trip import TripParticipant
from tripledger.schemas.expense import ExpenseCreate
from tripledger.services.access_service import authorize
from tripledger.services.notification_service import notify

logger = logging.getLogger(__name__)

SHARE_QUANTUM = Decimal("0.000001")
AMOUNT_QUANTUM = Decimal("0.01")
REQUIRED_FIELDS = ("title", "amount", "currency", "category", "paid_by", "date")


def compute_equal_share(amount: Decimal, participant_count: int) -> Decimal:
    """
    Equal share of ``amount`` among ``participant_count`` people.

    The remainder is not redistributed; the share keeps six decimal places.
    """
    if participant_count <= 0:
        raise ValidationError("Cannot split an expense with no participants")
    return (Decimal(amount) / Decimal(participant_count)).quantize(SHARE_QUANTUM)


def current_participant_ids(db: Session, trip_id: int) -> List[int]:
    rows = db.query(TripParticipant.user_id).filter(
        TripParticipant.trip_id == trip_id
    ).order_by(TripParticipant.joined_at, TripParticipant.id).all()
    return [row.user_id for row in rows]


def _validate_amount(amount) -> Decimal:
    amount = Decimal(str(amount))
    if amount <= 0:
        raise ValidationError("Expense amount must be greater than zero")
    if amount != amount.quantize(AMOUNT_QUANTUM):
        raise ValidationError("Expense amount cannot have more than two decimal places")
    return amount


def create_expense(
    db: Session,
    trip_id: int,
    creator_id: int,
    expense_data: ExpenseCreate,
    participant_ids: Optional[List[int]] = None
) -> Expense:
    """
    Record an expense and one split per participant in a single transaction.

    ``participant_ids`` defaults to the trip's current participants. The
    payer's split starts paid; every other split starts unpaid.
    """
    trip, _ = authorize(db, trip_id, creator_id, "can_edit_content", "Guests and non-members cannot add expenses")

    amount = _validate_amount(expense_data.amount)
    if participant_ids is None:
        participant_ids = current_participant_ids(db, trip_id)
    share = compute_equal_share(amount, len(participant_ids))
    if expense_data.paid_by not in participant_ids:
        raise PayerNotParticipantError("The payer must be a participant of this trip")

    expense = Expense(
        trip_id=trip_id,
        title=expense_data.title,
        description=expense_data.description,
        amount=amount,
        currency=(expense_data.currency or trip.currency).upper(),
        category=expense_data.category,
        paid_by=expense_data.paid_by,
        date=expense_data.date,
        created_by=creator_id
    )
    try:
        db.add(expense)
        db.flush()

        for user_id in participant_ids:
            db.add(ExpenseSplit(
                expense_id=expense.id,
                user_id=user_id,
                amount=share,
                paid=user_id == expense_data.paid_by
            ))
        db.commit()
    except IntegrityError as e:
        db.rollback()
        logger.error(f"Could not record splits for expense on trip {trip_id}: {e}")
        raise ConflictError("Could not record the splits for this expense")
    except SQLAlchemyError:
        db.rollback()
        raise
    db.refresh(expense)
    logger.info(f"Expense {expense.id} ({amount} {expense.currency}) split {len(participant_ids)} ways on trip {trip_id}")

    for user_id in participant_ids:
        if user_id != creator_id:
            notify(
                db,
                user_id,
                "New Expense",
                f'"{expense.title}" was added to "{trip.title}": your share is {share.normalize()} {expense.currency}',
                NotificationType.EXPENSE_ADDED,
                trip_id=trip_id
            )
    return expense


def get_expense(db: Session, expense_id: int) -> Expense:
    expense = db.query(Expense).options(
        joinedload(Expense.payer),
        joinedload(Expense.splits).joinedload(ExpenseSplit.user)
    ).filter(Expense.id == expense_id).first()
    if not expense:
        raise NotFoundError("Expense not found")
    return expense


def list_expenses(db: Session, trip_id: int, user_id: int) -> List[Expense]:
    """Expenses of a trip, newest date first, with payer and splits loaded."""
    authorize(db, trip_id, user_id, "can_view")
    return db.query(Expense).options(
        joinedload(Expense.payer),
        joinedload(Expense.splits).joinedload(ExpenseSplit.user)
    ).filter(
        Expense.trip_id == trip_id
    ).order_by(Expense.date.desc(), Expense.id.desc()).all()


def update_expense(db: Session, expense_id: int, actor_id: int, updates: Dict[str, Any]) -> Expense:
    """
    Apply a partial update. Owner or organizer only.

    Splits are not re-derived, even when the amount changes.
    """
    expense = get_expense(db, expense_id)
    authorize(db, expense.trip_id, actor_id, "can_manage_expenses", "Only the trip owner or an organizer can edit expenses")

    reject_nulls(updates, REQUIRED_FIELDS)
    if "amount" in updates:
        updates["amount"] = _validate_amount(updates["amount"])
    if updates.get("paid_by") is not None and updates["paid_by"] != expense.paid_by:
        if updates["paid_by"] not in current_participant_ids(db, expense.trip_id):
            raise PayerNotParticipantError("The payer must be a participant of this trip")
    if updates.get("currency"):
        updates["currency"] = updates["currency"].upper()

    for field, value in updates.items():
        setattr(expense, field, value)
    db.commit()
    db.refresh(expense)
    return expense


def delete_expense(db: Session, expense_id: int, actor_id: int) -> None:
    """Delete an expense and its splits. Owner or organizer only."""
    expense = get_expense(db, expense_id)
    authorize(db, expense.trip_id, actor_id, "can_manage_expenses", "Only the trip owner or an organizer can delete expenses")
    db.delete(expense)
    db.commit()
    logger.info(f"Expense {expense_id} deleted by user {actor_id}")


def mark_split_paid(db: Session, split_id: int, paid: bool, actor_id: int) -> ExpenseSplit:
    """
    Set the paid flag of a split, in either direction.

    Any member who can edit trip content may settle anyone's split; the last
    write wins.
    """
    split = db.query(ExpenseSplit).filter(ExpenseSplit.id == split_id).first()
    if not split:
        raise NotFoundError("Split not found")

    authorize(db, split.expense.trip_id, actor_id, "can_edit_content", "Guests and non-members cannot settle splits")
    split.paid = paid
    db.commit()
    db.refresh(split)
    logger.info(f"Split {split_id} marked {'paid' if paid else 'unpaid'} by user {actor_id}")
    return split


def expense_summary(db: Session, trip_id: int, user_id: int) -> Dict[str, Any]:
    """Totals, per-person share, outstanding amount and category breakdown of a trip."""
    trip, _ = authorize(db, trip_id, user_id, "can_view")

    expenses = db.query(Expense).options(joinedload(Expense.splits)).filter(
        Expense.trip_id == trip_id
    ).all()
    participant_count = db.query(TripParticipant).filter(
        TripParticipant.trip_id == trip_id
    ).count()

    total = sum((Decimal(str(e.amount)) for e in expenses), Decimal(0))
    outstanding = sum(
        (Decimal(str(s.amount)) for e in expenses for s in e.splits if not s.paid),
        Decimal(0)
    )
    per_person = (total / participant_count).quantize(SHARE_QUANTUM) if participant_count else Decimal(0)

    by_category = {}
    for expense in expenses:
        amount, count = by_category.get(expense.category, (Decimal(0), 0))
        by_category[expense.category] = (amount + Decimal(str(expense.amount)), count + 1)

    categories = [
        {
            "category": category,
            "total_amount": amount,
            "expense_count": count,
            "percentage": round(float(amount / total * 100), 2) if total else 0.0,
        }
        for category, (amount, count) in by_category.items()
    ]
    categories.sort(key=lambda item: item["total_amount"], reverse=True)

    return {
        "trip_id": trip_id,
        "currency": trip.currency,
        "total_expenses": total,
        "participant_count": participant_count,
        "per_person_share": per_person,
        "outstanding_amount": outstanding,
        "categories": categories,
    }
