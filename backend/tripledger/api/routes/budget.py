"""
Budget allocation routes.
"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from tripledger.db.session import get_db
from tripledger.models.user import User
from tripledger.schemas.budget import BudgetItemCreate, BudgetItemResponse, BudgetOverview
from tripledger.services import budget_ledger
from tripledger.services.notifier import TripUpdateHub
from tripledger.api.dependencies import get_current_user, get_update_hub

router = APIRouter(prefix="/trips", tags=["budget"])


@router.get("/{trip_id}/budget", response_model=BudgetOverview)
async def get_budget(
    trip_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Get budget items, history and the trip's total budget."""
    return budget_ledger.get_budget(trip_id, current_user.id, db)


@router.post("/{trip_id}/budget", response_model=BudgetItemResponse)
async def add_budget_item(
    trip_id: int,
    item_data: BudgetItemCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    hub: TripUpdateHub = Depends(get_update_hub)
):
    """Add a budget item and credit every member an equal share."""
    return budget_ledger.add_item(trip_id, current_user.id, item_data, db, hub)


@router.delete("/{trip_id}/budget/{item_id}")
async def remove_budget_item(
    trip_id: int,
    item_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    hub: TripUpdateHub = Depends(get_update_hub)
):
    """Remove a budget item and reverse the credit it handed out."""
    budget_ledger.remove_item(trip_id, current_user.id, item_id, db, hub)
    return {"message": "Budget item deleted successfully"}
