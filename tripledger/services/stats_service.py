"""
Dashboard statistics for a user.

Each figure comes from its own query. A failing query degrades only its own
figure to zero; the dashboard is never blocked by a secondary metric.
"""
import logging
from decimal import Decimal
from typing import Any, Callable, Dict, List, Set
from sqlalchemy import func
from sqlalchemy.orm import Session
from tripledger.core.exceptions import PartialAggregationError
from tripledger.models.expense import Expense
from tripledger.models.trip import Trip, TripParticipant, TripStatus

logger = logging.getLogger(__name__)


def _owned_trip_ids(db: Session, user_id: int) -> Set[int]:
    return {row.id for row in db.query(Trip.id).filter(Trip.owner_id == user_id).all()}


def _member_trip_ids(db: Session, user_id: int) -> Set[int]:
    rows = db.query(TripParticipant.trip_id).filter(TripParticipant.user_id == user_id).all()
    return {row.trip_id for row in rows}


def _count_active_trips(db: Session, trip_ids: Set[int]) -> int:
    return db.query(Trip).filter(
        Trip.id.in_(trip_ids),
        Trip.status == TripStatus.ACTIVE
    ).count()


def _count_participants(db: Session, trip_ids: Set[int]) -> int:
    return db.query(TripParticipant).filter(TripParticipant.trip_id.in_(trip_ids)).count()


def _sum_expenses(db: Session, trip_ids: Set[int]) -> Decimal:
    total = db.query(func.sum(Expense.amount)).filter(Expense.trip_id.in_(trip_ids)).scalar()
    return Decimal(str(total)) if total is not None else Decimal(0)


def _best_effort(db: Session, field: str, query: Callable[[], Any], default: Any, degraded: List[str]) -> Any:
    try:
        return query()
    except Exception as e:
        db.rollback()
        error = PartialAggregationError(field, e)
        logger.warning(error.message, exc_info=True)
        if field not in degraded:
            degraded.append(field)
        return default


def trip_stats(db: Session, user_id: int) -> Dict[str, Any]:
    """Totals over every trip the user owns or participates in."""
    degraded: List[str] = []

    owned = _best_effort(db, "total_trips", lambda: _owned_trip_ids(db, user_id), set(), degraded)
    member = _best_effort(db, "total_trips", lambda: _member_trip_ids(db, user_id), set(), degraded)
    trip_ids = owned | member

    stats = {
        "total_trips": len(trip_ids),
        "active_trips": 0,
        "total_participants": 0,
        "total_expenses": Decimal(0),
        "degraded": degraded,
    }
    if not trip_ids:
        return stats

    stats["active_trips"] = _best_effort(
        db, "active_trips", lambda: _count_active_trips(db, trip_ids), 0, degraded
    )
    stats["total_participants"] = _best_effort(
        db, "total_participants", lambda: _count_participants(db, trip_ids), 0, degraded
    )
    stats["total_expenses"] = _best_effort(
        db, "total_expenses", lambda: _sum_expenses(db, trip_ids), Decimal(0), degraded
    )
    return stats
