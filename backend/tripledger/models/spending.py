"""
Spending models for shared expenses and their per-member shares.
"""
from sqlalchemy import Column, String, Numeric, Date, ForeignKey, Integer, Enum as SQLEnum
from sqlalchemy.orm import relationship
from tripledger.db.base import BaseModel
import enum


class SplitType(str, enum.Enum):
    """How an expense was divided between participants."""
    EQUAL = "equal"
    CUSTOM = "custom"


class SpendingEntry(BaseModel):
    """Immutable record of a shared expense paid by one member."""
    __tablename__ = "spending_entries"
    
    trip_id = Column(Integer, ForeignKey("trips.id"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)  # Payer
    description = Column(String(255), nullable=False)
    amount = Column(Numeric(15, 4), nullable=False)
    date = Column(Date, nullable=False, index=True)
    split_type = Column(SQLEnum(SplitType), nullable=False, default=SplitType.EQUAL)
    
    # Relationships
    trip = relationship("Trip", back_populates="spending_entries")
    payer = relationship("User")
    participant_shares = relationship(
        "SpendingShare", back_populates="entry", cascade="all, delete-orphan",
        order_by="SpendingShare.id",
    )


class SpendingShare(BaseModel):
    """The portion of a spending entry assigned to one member."""
    __tablename__ = "spending_shares"
    
    entry_id = Column(Integer, ForeignKey("spending_entries.id"), nullable=False, index=True)
    member_id = Column(Integer, ForeignKey("trip_members.id"), nullable=False, index=True)
    amount = Column(Numeric(15, 4), nullable=False)
    
    # Relationships
    entry = relationship("SpendingEntry", back_populates="participant_shares")
    member = relationship("TripMember", back_populates="shares")
