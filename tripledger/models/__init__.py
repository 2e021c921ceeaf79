"""Models package - Import all models for SQLAlchemy registration."""
from tripledger.models.user import User
from tripledger.models.trip import Trip, TripParticipant, TripStatus, ParticipantRole
from tripledger.models.invitation import Invitation
from tripledger.models.expense import Expense, ExpenseSplit, ExpenseCategory
from tripledger.models.notification import Notification, NotificationType

__all__ = [
    "User",
    "Trip",
    "TripParticipant",
    "TripStatus",
    "ParticipantRole",
    "Invitation",
    "Expense",
    "ExpenseSplit",
    "ExpenseCategory",
    "Notification",
    "NotificationType",
]
