"""
Pydantic schemas for Trip entity.
"""
from pydantic import BaseModel, Field
from typing import Optional
from datetime import date, datetime
from decimal import Decimal
from tripledger.models.trip import TripStatus


class TripBase(BaseModel):
    """Base trip schema."""
    name: str = Field(min_length=1)
    description: Optional[str] = None
    location: str = Field(min_length=1)
    start_date: date
    end_date: Optional[date] = None
    number_of_members: int = Field(default=1, ge=1)
    total_budget: Decimal = Field(default=Decimal(0), ge=0)


class TripCreate(TripBase):
    """Schema for trip creation."""
    pass


class TripResponse(TripBase):
    """Schema for trip response."""
    id: int
    join_code: str
    status: TripStatus
    organizer_id: int
    created_at: datetime
    
    class Config:
        from_attributes = True


class TripJoin(BaseModel):
    """Schema for joining a trip by code."""
    join_code: str = Field(min_length=1)


class TripStatusUpdate(BaseModel):
    """Schema for moving a trip to another status."""
    status: TripStatus
