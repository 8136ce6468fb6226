"""
Shared expense routes. Entries are immutable, so there is no update or delete.
"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import List
from tripledger.db.session import get_db
from tripledger.models.user import User
from tripledger.schemas.spending import SpendingEntryCreate, SpendingEntryResponse
from tripledger.services import expense_ledger
from tripledger.services.notifier import TripUpdateHub
from tripledger.api.dependencies import get_current_user, get_update_hub

router = APIRouter(prefix="/trips", tags=["spending"])


@router.post("/{trip_id}/spending", response_model=SpendingEntryResponse)
async def record_spending(
    trip_id: int,
    entry_data: SpendingEntryCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    hub: TripUpdateHub = Depends(get_update_hub)
):
    """Record an expense paid by the current user."""
    return expense_ledger.record_expense(trip_id, current_user.id, entry_data, db, hub)


@router.get("/{trip_id}/spending", response_model=List[SpendingEntryResponse])
async def list_spending(
    trip_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """List the trip's expenses, latest first."""
    return expense_ledger.list_expenses(trip_id, current_user.id, db)
