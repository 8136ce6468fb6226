"""
Pydantic schemas for budget allocation items and history.
"""
from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime
from decimal import Decimal
from tripledger.models.budget import HistoryType


class BudgetItemCreate(BaseModel):
    """Schema for budget item creation."""
    category: str = Field(min_length=1, max_length=100)
    description: str = Field(min_length=1, max_length=255)
    amount: Decimal = Field(ge=0)


class BudgetItemResponse(BudgetItemCreate):
    """Schema for budget item response."""
    id: int
    trip_id: int
    share_per_member: Decimal
    created_at: datetime
    
    class Config:
        from_attributes = True


class BudgetHistoryResponse(BaseModel):
    """Schema for a budget history row."""
    id: int
    trip_id: int
    item_id: int
    type: HistoryType
    amount: Decimal
    total_after: Decimal
    category: Optional[str] = None
    description: Optional[str] = None
    created_at: datetime
    
    class Config:
        from_attributes = True


class BudgetOverview(BaseModel):
    """Schema for the budget page: items, history and the fixed total."""
    items: List[BudgetItemResponse] = []
    history: List[BudgetHistoryResponse] = []
    total_budget: Decimal
