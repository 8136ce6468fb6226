"""
Pydantic schemas for spending entries.
"""
from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import date, datetime
from decimal import Decimal
from tripledger.models.spending import SplitType


class ParticipantShare(BaseModel):
    """One member's portion of an expense.
    
    ``amount`` may be omitted for equal splits; the server then divides the
    expense evenly.
    """
    member_id: int  # TripMember.id
    amount: Optional[Decimal] = Field(default=None, ge=0)


class SpendingEntryCreate(BaseModel):
    """Schema for recording an expense."""
    description: str = Field(min_length=1, max_length=255)
    amount: Decimal = Field(ge=0)
    date: date
    split_type: SplitType = SplitType.EQUAL
    participant_shares: List[ParticipantShare] = Field(min_length=1)


class ParticipantShareResponse(BaseModel):
    """Schema for a stored share."""
    member_id: int
    amount: Decimal
    
    class Config:
        from_attributes = True


class SpendingEntryResponse(BaseModel):
    """Schema for spending entry response."""
    id: int
    trip_id: int
    user_id: int
    description: str
    amount: Decimal
    date: date
    split_type: SplitType
    participant_shares: List[ParticipantShareResponse] = []
    created_at: datetime
    
    class Config:
        from_attributes = True
