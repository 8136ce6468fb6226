"""
Trip membership routes: listing, manual invites, roles and balance overrides.
"""
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from typing import List
from tripledger.db.session import get_db
from tripledger.models.user import User
from tripledger.schemas.member import MemberResponse, MemberAdd, RoleUpdate, BalanceOverride
from tripledger.services import member_registry
from tripledger.services.balance_projector import override_balance
from tripledger.services.notifier import TripUpdateHub
from tripledger.api.dependencies import get_current_user, get_update_hub
from tripledger.api.routes.trips import check_trip_access

router = APIRouter(prefix="/trips", tags=["members"])


@router.get("/{trip_id}/members", response_model=List[MemberResponse])
async def list_members(
    trip_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Get trip members with their balances."""
    check_trip_access(trip_id, current_user.id, db)
    return member_registry.list_members(trip_id, db)


@router.post("/{trip_id}/members", response_model=MemberResponse, status_code=status.HTTP_201_CREATED)
async def add_member(
    trip_id: int,
    member_data: MemberAdd,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    hub: TripUpdateHub = Depends(get_update_hub)
):
    """Add a user to the trip by username (organizer only)."""
    return member_registry.add_member(trip_id, current_user.id, member_data.username, db, hub)


@router.put("/{trip_id}/members/{member_id}/role", response_model=MemberResponse)
async def change_role(
    trip_id: int,
    member_id: int,
    role_data: RoleUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    hub: TripUpdateHub = Depends(get_update_hub)
):
    """Change a member's role (organizers and co-organizers)."""
    return member_registry.change_role(trip_id, current_user.id, member_id, role_data.role, db, hub)


@router.put("/{trip_id}/members/{member_id}/balance", response_model=MemberResponse)
async def set_member_balance(
    trip_id: int,
    member_id: int,
    balance_data: BalanceOverride,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    hub: TripUpdateHub = Depends(get_update_hub)
):
    """Manually override a member's credit and spent totals (organizer only)."""
    return override_balance(
        trip_id, current_user.id, member_id,
        balance_data.credit_amount, balance_data.spent_amount,
        db, hub
    )
