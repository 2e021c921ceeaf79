"""
Pydantic schemas for Expense and ExpenseSplit entities.
"""
from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import date, datetime
from decimal import Decimal
from tripledger.models.expense import ExpenseCategory
from tripledger.schemas.user import UserSummary


class ExpenseCreate(BaseModel):
    """Schema for expense creation. Splits are derived from the trip's participants."""
    title: str
    description: Optional[str] = None
    amount: Decimal
    currency: Optional[str] = Field(None, min_length=3, max_length=3)
    category: ExpenseCategory = ExpenseCategory.OTHER
    paid_by: int
    date: date


class ExpenseUpdate(BaseModel):
    """Schema for expense update. Never re-derives splits."""
    title: Optional[str] = None
    description: Optional[str] = None
    amount: Optional[Decimal] = None
    currency: Optional[str] = Field(None, min_length=3, max_length=3)
    category: Optional[ExpenseCategory] = None
    paid_by: Optional[int] = None
    date: Optional[date] = None


class SplitPaidUpdate(BaseModel):
    paid: bool


class ExpenseSplitResponse(BaseModel):
    """Schema for expense split response."""
    id: int
    expense_id: int
    user_id: int
    amount: Decimal
    paid: bool
    user: Optional[UserSummary] = None

    class Config:
        from_attributes = True


class ExpenseResponse(BaseModel):
    """Schema for expense response."""
    id: int
    trip_id: int
    title: str
    description: Optional[str] = None
    amount: Decimal
    currency: str
    category: ExpenseCategory
    paid_by: int
    date: date
    created_by: int
    payer: Optional[UserSummary] = None
    splits: List[ExpenseSplitResponse] = []
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class CategoryExpenseItem(BaseModel):
    """Schema for category expense item in summary."""
    category: ExpenseCategory
    total_amount: Decimal
    expense_count: int
    percentage: float  # Share of total expenses (0-100)


class ExpenseSummaryResponse(BaseModel):
    """Trip-level expense totals, recomputed on every read."""
    trip_id: int
    currency: str
    total_expenses: Decimal
    participant_count: int
    per_person_share: Decimal
    outstanding_amount: Decimal  # Sum of unpaid splits
    categories: List[CategoryExpenseItem]
