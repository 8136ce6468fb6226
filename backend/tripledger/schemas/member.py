"""
Pydantic schemas for trip membership and balances.
"""
from pydantic import BaseModel, Field
from datetime import datetime
from decimal import Decimal
from tripledger.models.trip import MemberRole


class MemberResponse(BaseModel):
    """Schema for a trip member including running balance fields."""
    id: int
    trip_id: int
    user_id: int
    username: str
    role: MemberRole
    credit_amount: Decimal
    spent_amount: Decimal
    balance: Decimal
    joined_at: datetime
    
    class Config:
        from_attributes = True


class MemberAdd(BaseModel):
    """Schema for manually adding a user to a trip."""
    username: str = Field(min_length=1)


class RoleUpdate(BaseModel):
    """Schema for changing a member's role."""
    role: MemberRole


class BalanceOverride(BaseModel):
    """Schema for the organizer-only manual balance override."""
    credit_amount: Decimal = Field(ge=0)
    spent_amount: Decimal = Field(ge=0)
