"""
Expense model for tracking trip spending and how it is shared.
"""
from sqlalchemy import (
    Column, String, Numeric, Date, Boolean, Text, Enum as SQLEnum,
    ForeignKey, Integer, UniqueConstraint,
)
from sqlalchemy.orm import relationship
from tripledger.db.base import BaseModel
import enum


class ExpenseCategory(str, enum.Enum):
    """Expense category enumeration."""
    ACCOMMODATION = "accommodation"
    TRANSPORT = "transport"
    FOOD = "food"
    ACTIVITIES = "activities"
    SHOPPING = "shopping"
    OTHER = "other"


class Expense(BaseModel):
    """Expense model representing a single spending event with one payer."""
    __tablename__ = "expenses"

    trip_id = Column(Integer, ForeignKey("trips.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    amount = Column(Numeric(12, 2), nullable=False)
    currency = Column(String(3), nullable=False, default="USD")
    category = Column(SQLEnum(ExpenseCategory), default=ExpenseCategory.OTHER, nullable=False)
    paid_by = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    date = Column(Date, nullable=False, index=True)
    created_by = Column(Integer, ForeignKey("users.id"), nullable=False)

    # Relationships
    trip = relationship("Trip", back_populates="expenses")
    payer = relationship("User", foreign_keys=[paid_by])
    creator = relationship("User", foreign_keys=[created_by])
    splits = relationship("ExpenseSplit", back_populates="expense", cascade="all, delete-orphan")


class ExpenseSplit(BaseModel):
    """One participant's share of an expense, settled through the paid flag."""
    __tablename__ = "expense_splits"
    __table_args__ = (
        UniqueConstraint("expense_id", "user_id", name="uq_expense_split_user"),
    )

    expense_id = Column(Integer, ForeignKey("expenses.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    amount = Column(Numeric(18, 6), nullable=False)  # Unrounded equal share
    paid = Column(Boolean, default=False, nullable=False)

    # Relationships
    expense = relationship("Expense", back_populates="splits")
    user = relationship("User")
