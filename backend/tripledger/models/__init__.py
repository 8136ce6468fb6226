"""Models package - Import all models for SQLAlchemy registration."""
from tripledger.models.user import User
from tripledger.models.trip import Trip, TripMember, TripStatus, MemberRole, MANAGER_ROLES
from tripledger.models.budget import BudgetItem, BudgetAllocation, BudgetHistoryEntry, HistoryType
from tripledger.models.spending import SpendingEntry, SpendingShare, SplitType
from tripledger.models.adjustment import BalanceAdjustment
from tripledger.models.notification import Notification

__all__ = [
    "User",
    "Trip",
    "TripMember",
    "TripStatus",
    "MemberRole",
    "MANAGER_ROLES",
    "BudgetItem",
    "BudgetAllocation",
    "BudgetHistoryEntry",
    "HistoryType",
    "SpendingEntry",
    "SpendingShare",
    "SplitType",
    "BalanceAdjustment",
    "Notification",
]
