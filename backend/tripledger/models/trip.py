"""
Trip and trip membership models.
"""
from decimal import Decimal
from sqlalchemy import (
    Column, String, Date, Text, Numeric, Enum as SQLEnum,
    ForeignKey, Integer, UniqueConstraint,
)
from sqlalchemy.orm import relationship
from tripledger.db.base import BaseModel
import enum


class TripStatus(str, enum.Enum):
    """Trip status enumeration."""
    UPCOMING = "upcoming"
    CURRENT = "current"
    PAST = "past"


class MemberRole(str, enum.Enum):
    """Roles a user can hold within a trip."""
    ORGANIZER = "organizer"
    CO_ORGANIZER = "co_organizer"
    MEMBER = "member"


MANAGER_ROLES = (MemberRole.ORGANIZER, MemberRole.CO_ORGANIZER)


class Trip(BaseModel):
    """Trip model representing a group travel event."""
    __tablename__ = "trips"
    
    name = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    location = Column(String(200), nullable=False)
    start_date = Column(Date, nullable=False, index=True)
    end_date = Column(Date, nullable=True)
    number_of_members = Column(Integer, nullable=False, default=1)  # Planned head count, informational only
    total_budget = Column(Numeric(15, 4), nullable=False, default=Decimal(0))
    join_code = Column(String(16), unique=True, nullable=False, index=True)
    status = Column(SQLEnum(TripStatus), default=TripStatus.UPCOMING, nullable=False, index=True)
    organizer_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    
    # Relationships
    organizer = relationship("User")
    members = relationship("TripMember", back_populates="trip", cascade="all, delete-orphan")
    budget_items = relationship("BudgetItem", back_populates="trip", cascade="all, delete-orphan")
    budget_history = relationship("BudgetHistoryEntry", back_populates="trip", cascade="all, delete-orphan")
    spending_entries = relationship("SpendingEntry", back_populates="trip", cascade="all, delete-orphan")
    adjustments = relationship("BalanceAdjustment", back_populates="trip", cascade="all, delete-orphan")
    notifications = relationship("Notification", back_populates="trip", cascade="all, delete-orphan")


class TripMember(BaseModel):
    """A user's membership in a trip, carrying the running balance totals.
    
    ``credit_amount``, ``spent_amount`` and ``balance`` are maintained
    incrementally by the ledger services; ``balance`` always equals
    ``credit_amount - spent_amount``.
    """
    __tablename__ = "trip_members"
    
    trip_id = Column(Integer, ForeignKey("trips.id"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    role = Column(SQLEnum(MemberRole), default=MemberRole.MEMBER, nullable=False)
    credit_amount = Column(Numeric(15, 4), nullable=False, default=Decimal(0))
    spent_amount = Column(Numeric(15, 4), nullable=False, default=Decimal(0))
    balance = Column(Numeric(15, 4), nullable=False, default=Decimal(0))
    
    # Relationships
    trip = relationship("Trip", back_populates="members")
    user = relationship("User", back_populates="memberships")
    allocations = relationship("BudgetAllocation", back_populates="member", cascade="all")
    shares = relationship("SpendingShare", back_populates="member", cascade="all")
    
    __table_args__ = (
        UniqueConstraint("trip_id", "user_id", name="uq_trip_member"),
    )
    
    @property
    def username(self) -> str:
        return self.user.username if self.user else ""
    
    @property
    def joined_at(self):
        return self.created_at
    
    @property
    def is_manager(self) -> bool:
        return self.role in MANAGER_ROLES
