"""
Balance, totals and settlement routes.
"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import List
from tripledger.db.session import get_db
from tripledger.models.user import User
from tripledger.schemas.balance import MemberBalance, TripTotals, SettlementSummary, ReconcileResult
from tripledger.services import balance_projector
from tripledger.services.member_registry import assert_manager
from tripledger.services.settlement_service import suggest_settlement
from tripledger.api.dependencies import get_current_user
from tripledger.api.routes.trips import check_trip_access

router = APIRouter(prefix="/trips", tags=["balances"])


@router.get("/{trip_id}/balances", response_model=List[MemberBalance])
async def get_balances(
    trip_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Get each member's credit, spent and balance."""
    check_trip_access(trip_id, current_user.id, db)
    return balance_projector.get_balances(trip_id, db)


@router.get("/{trip_id}/totals", response_model=TripTotals)
async def get_totals(
    trip_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Get trip-wide budget and spending totals."""
    check_trip_access(trip_id, current_user.id, db)
    return balance_projector.get_trip_totals(trip_id, db)


@router.get("/{trip_id}/settlement", response_model=SettlementSummary)
async def get_settlement(
    trip_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Suggest transfers that settle member balances."""
    check_trip_access(trip_id, current_user.id, db)
    return suggest_settlement(trip_id, db)


@router.post("/{trip_id}/balances/reconcile", response_model=ReconcileResult)
async def reconcile(
    trip_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Rebuild member totals from the ledgers (organizers and co-organizers)."""
    check_trip_access(trip_id, current_user.id, db)
    assert_manager(trip_id, current_user.id, db)
    return {"repaired_member_ids": balance_projector.reconcile_balances(trip_id, db)}
