"""
Trip management routes.
"""
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from typing import List
from tripledger.db.session import get_db
from tripledger.models.trip import Trip
from tripledger.models.user import User
from tripledger.schemas.trip import TripCreate, TripResponse, TripJoin, TripStatusUpdate
from tripledger.schemas.member import MemberResponse
from tripledger.services import member_registry
from tripledger.services.notifier import TripUpdateHub
from tripledger.api.dependencies import get_current_user, get_update_hub

router = APIRouter(prefix="/trips", tags=["trips"])


def check_trip_access(trip_id: int, user_id: int, db: Session) -> Trip:
    """Return the trip if it exists and the user is a member of it."""
    trip = member_registry.get_trip(trip_id, db)
    member_registry.assert_membership(trip_id, user_id, db)
    return trip


@router.post("", response_model=TripResponse, status_code=status.HTTP_201_CREATED)
async def create_trip(
    trip_data: TripCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Create a new trip; the creator becomes its organizer."""
    return member_registry.create_trip(trip_data, current_user.id, db)


@router.get("", response_model=List[TripResponse])
async def list_trips(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """List all trips for current user."""
    return member_registry.list_user_trips(current_user.id, db)


@router.post("/join", response_model=MemberResponse)
async def join_trip(
    join_data: TripJoin,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    hub: TripUpdateHub = Depends(get_update_hub)
):
    """Join a trip using its join code."""
    return member_registry.join(join_data.join_code, current_user.id, db, hub)


@router.get("/{trip_id}", response_model=TripResponse)
async def get_trip(
    trip_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Get trip details."""
    return check_trip_access(trip_id, current_user.id, db)


@router.put("/{trip_id}", response_model=TripResponse)
async def update_trip(
    trip_id: int,
    trip_data: TripCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Update trip details (organizer only)."""
    return member_registry.update_trip(trip_id, current_user.id, trip_data, db)


@router.put("/{trip_id}/status", response_model=TripResponse)
async def update_trip_status(
    trip_id: int,
    status_data: TripStatusUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    hub: TripUpdateHub = Depends(get_update_hub)
):
    """Move the trip to upcoming, current or past and notify its members."""
    return member_registry.update_status(trip_id, current_user.id, status_data.status, db, hub)


@router.delete("/{trip_id}")
async def delete_trip(
    trip_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Delete a trip with its members and ledgers (organizer only)."""
    member_registry.delete_trip(trip_id, current_user.id, db)
    return {"message": "Trip deleted successfully"}
