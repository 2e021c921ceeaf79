"""
Pydantic schemas for dashboard statistics.
"""
from pydantic import BaseModel
from typing import List
from decimal import Decimal


class TripStatsResponse(BaseModel):
    """Dashboard totals across every trip the user owns or belongs to."""
    total_trips: int
    active_trips: int
    total_participants: int
    total_expenses: Decimal
    degraded: List[str] = []  # Fields that fell back to zero because their query failed
