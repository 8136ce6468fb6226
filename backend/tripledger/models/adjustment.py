"""
Manual balance adjustment audit model.
"""
from sqlalchemy import Column, Numeric, ForeignKey, Integer
from sqlalchemy.orm import relationship
from tripledger.db.base import BaseModel


class BalanceAdjustment(BaseModel):
    """Deltas applied by an organizer's manual balance override."""
    __tablename__ = "balance_adjustments"
    
    trip_id = Column(Integer, ForeignKey("trips.id"), nullable=False, index=True)
    member_id = Column(Integer, ForeignKey("trip_members.id"), nullable=False, index=True)
    actor_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    credit_delta = Column(Numeric(15, 4), nullable=False)
    spent_delta = Column(Numeric(15, 4), nullable=False)
    
    # Relationships
    trip = relationship("Trip", back_populates="adjustments")
    member = relationship("TripMember")
