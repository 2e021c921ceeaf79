"""
Pydantic schemas for outstanding balances between trip members.
"""
from pydantic import BaseModel
from typing import List
from decimal import Decimal


class Transfer(BaseModel):
    """Schema for a single suggested transfer."""
    from_user_id: int
    to_user_id: int
    amount: Decimal


class UserBalance(BaseModel):
    """Net position of one user: positive = is owed, negative = owes."""
    user_id: int
    balance: Decimal


class BalancesResponse(BaseModel):
    """Schema for outstanding balances of a trip, derived from unpaid splits."""
    trip_id: int
    currency: str
    balances: List[UserBalance]
    transfers: List[Transfer]
