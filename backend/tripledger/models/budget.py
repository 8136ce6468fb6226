"""
Budget allocation models: line items, per-member allocations and history.
"""
from sqlalchemy import Column, String, Numeric, ForeignKey, Integer, Enum as SQLEnum
from sqlalchemy.orm import relationship
from tripledger.db.base import BaseModel
import enum


class HistoryType(str, enum.Enum):
    """Kind of change recorded in the budget history."""
    ADD = "add"
    REMOVE = "remove"


class BudgetItem(BaseModel):
    """A named allocation within the trip's fixed total budget."""
    __tablename__ = "budget_items"
    
    trip_id = Column(Integer, ForeignKey("trips.id"), nullable=False, index=True)
    category = Column(String(100), nullable=False)
    description = Column(String(255), nullable=False)
    amount = Column(Numeric(15, 4), nullable=False)
    share_per_member = Column(Numeric(15, 4), nullable=False)  # Credit each member received on add
    
    # Relationships
    trip = relationship("Trip", back_populates="budget_items")
    allocations = relationship("BudgetAllocation", back_populates="item", cascade="all, delete-orphan")


class BudgetAllocation(BaseModel):
    """Credit a single member received from a budget item."""
    __tablename__ = "budget_allocations"
    
    item_id = Column(Integer, ForeignKey("budget_items.id"), nullable=False, index=True)
    member_id = Column(Integer, ForeignKey("trip_members.id"), nullable=False, index=True)
    amount = Column(Numeric(15, 4), nullable=False)
    
    # Relationships
    item = relationship("BudgetItem", back_populates="allocations")
    member = relationship("TripMember", back_populates="allocations")


class BudgetHistoryEntry(BaseModel):
    """Append-only audit row for budget item additions and removals."""
    __tablename__ = "budget_history"
    
    trip_id = Column(Integer, ForeignKey("trips.id"), nullable=False, index=True)
    item_id = Column(Integer, nullable=False)  # Kept after the item itself is deleted
    type = Column(SQLEnum(HistoryType), nullable=False)
    amount = Column(Numeric(15, 4), nullable=False)
    total_after = Column(Numeric(15, 4), nullable=False)
    category = Column(String(100), nullable=True)
    description = Column(String(255), nullable=True)
    
    # Relationships
    trip = relationship("Trip", back_populates="budget_history")
