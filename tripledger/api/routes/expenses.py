"""
Expense management routes.
"""
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from typing import List
from tripledger.api.dependencies import get_current_user
from tripledger.db.session import get_db
from tripledger.models.user import User
from tripledger.schemas.expense import (
    ExpenseCreate, ExpenseUpdate, ExpenseResponse, ExpenseSplitResponse,
    ExpenseSummaryResponse, SplitPaidUpdate,
)
from tripledger.schemas.settlement import BalancesResponse
from tripledger.services import expense_service, settlement_service

router = APIRouter(prefix="/expenses", tags=["expenses"])


@router.get("/trip/{trip_id}", response_model=List[ExpenseResponse])
async def list_expenses(
    trip_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """List the trip's expenses with their splits, newest first."""
    return expense_service.list_expenses(db, trip_id, current_user.id)


@router.post("/trip/{trip_id}", response_model=ExpenseResponse, status_code=status.HTTP_201_CREATED)
async def create_expense(
    trip_id: int,
    expense_data: ExpenseCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Record an expense split equally among the trip's current participants."""
    expense = expense_service.create_expense(db, trip_id, current_user.id, expense_data)
    return expense_service.get_expense(db, expense.id)


@router.get("/trip/{trip_id}/summary", response_model=ExpenseSummaryResponse)
async def get_expense_summary(
    trip_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Totals, per-person share and category breakdown."""
    return expense_service.expense_summary(db, trip_id, current_user.id)


@router.get("/trip/{trip_id}/balances", response_model=BalancesResponse)
async def get_balances(
    trip_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Who still owes whom, from unpaid splits."""
    return settlement_service.outstanding_balances(db, trip_id, current_user.id)


@router.patch("/splits/{split_id}", response_model=ExpenseSplitResponse)
async def mark_split_paid(
    split_id: int,
    paid_update: SplitPaidUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Mark a split paid or unpaid."""
    return expense_service.mark_split_paid(db, split_id, paid_update.paid, current_user.id)


@router.patch("/{expense_id}", response_model=ExpenseResponse)
async def update_expense(
    expense_id: int,
    expense_update: ExpenseUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Update an expense (owner or organizer). Splits are kept as they are."""
    updates = expense_update.model_dump(exclude_unset=True)
    expense_service.update_expense(db, expense_id, current_user.id, updates)
    return expense_service.get_expense(db, expense_id)


@router.delete("/{expense_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_expense(
    expense_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Delete an expense and its splits (owner or organizer)."""
    expense_service.delete_expense(db, expense_id, current_user.id)
