"""
Pydantic schemas for balance views and settlement suggestions.
"""
from pydantic import BaseModel
from typing import Dict, List
from decimal import Decimal


class MemberBalance(BaseModel):
    """Running totals for one member."""
    member_id: int
    user_id: int
    username: str
    credit_amount: Decimal
    spent_amount: Decimal
    balance: Decimal


class TripTotals(BaseModel):
    """Trip-wide budget and spending aggregates."""
    total_budget: Decimal
    total_allocated: Decimal  # Sum of budget item amounts
    total_spent: Decimal  # Sum of spending entry amounts
    remaining: Decimal  # total_budget - total_spent


class Transfer(BaseModel):
    """Schema for a single suggested transfer."""
    from_member_id: int
    from_username: str
    to_member_id: int
    to_username: str
    amount: Decimal


class SettlementSummary(BaseModel):
    """Schema for settlement suggestion derived from who paid and who shared each expense."""
    net_balances: Dict[str, Decimal]  # username -> paid minus shares
    transfers: List[Transfer]
    participant_count: int


class ReconcileResult(BaseModel):
    """Members whose stored totals were repaired."""
    repaired_member_ids: List[int]
