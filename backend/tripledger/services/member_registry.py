"""
Member registry: trip membership, roles and the access checks built on them.
"""
import logging
import secrets
import string
from datetime import date
from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session, joinedload

from tripledger.core.config import settings
from tripledger.core.exceptions import (
    AlreadyMember,
    InsufficientRole,
    InvalidCode,
    LastOrganizerViolation,
    NotAMember,
    NotFound,
)
from tripledger.models.trip import Trip, TripMember, TripStatus, MemberRole
from tripledger.models.user import User
from tripledger.schemas.member import MemberResponse
from tripledger.schemas.trip import TripCreate
from tripledger.services.notifier import TripUpdateHub, notify_members

logger = logging.getLogger(__name__)

JOIN_CODE_ALPHABET = string.ascii_uppercase + string.digits


def generate_join_code(length: int = None) -> str:
    """Random upper-case join code."""
    length = length or settings.JOIN_CODE_LENGTH
    return "".join(secrets.choice(JOIN_CODE_ALPHABET) for _ in range(length))


def get_trip(trip_id: int, db: Session) -> Trip:
    trip = db.query(Trip).filter(Trip.id == trip_id).first()
    if not trip:
        raise NotFound("Trip not found")
    return trip


def get_member(trip_id: int, user_id: int, db: Session) -> Optional[TripMember]:
    return db.query(TripMember).filter(
        TripMember.trip_id == trip_id,
        TripMember.user_id == user_id
    ).first()


def assert_membership(trip_id: int, user_id: int, db: Session) -> TripMember:
    """Return the caller's membership or raise NotAMember."""
    member = get_member(trip_id, user_id, db)
    if not member:
        raise NotAMember()
    return member


def assert_manager(trip_id: int, user_id: int, db: Session) -> TripMember:
    """Return the caller's membership if they are an organizer or co-organizer."""
    member = assert_membership(trip_id, user_id, db)
    if not member.is_manager:
        raise InsufficientRole()
    return member


def assert_organizer(trip_id: int, user_id: int, db: Session) -> TripMember:
    """Return the caller's membership if they are an organizer."""
    member = assert_membership(trip_id, user_id, db)
    if member.role != MemberRole.ORGANIZER:
        raise InsufficientRole("Only organizers can perform this action")
    return member


def member_count(trip_id: int, db: Session) -> int:
    return db.query(func.count(TripMember.id)).filter(
        TripMember.trip_id == trip_id
    ).scalar() or 0


def create_trip(trip_data: TripCreate, creator_id: int, db: Session) -> Trip:
    """Create a trip and seed its creator as the organizer."""
    trip = Trip(
        **trip_data.model_dump(),
        organizer_id=creator_id,
        join_code=generate_join_code(),
        status=TripStatus.UPCOMING if trip_data.start_date > date.today() else TripStatus.CURRENT,
    )
    db.add(trip)
    db.flush()
    seed_organizer(trip, creator_id, db)
    db.commit()
    db.refresh(trip)

    logger.info(f"User {creator_id} created trip {trip.id}")
    return trip


def seed_organizer(trip: Trip, user_id: int, db: Session) -> TripMember:
    """Add the trip creator as its first organizer (caller commits)."""
    member = TripMember(trip_id=trip.id, user_id=user_id, role=MemberRole.ORGANIZER)
    db.add(member)
    db.flush()
    return member


def _add_member(trip: Trip, user: User, db: Session, hub: TripUpdateHub) -> TripMember:
    if get_member(trip.id, user.id, db):
        raise AlreadyMember()

    member = TripMember(trip_id=trip.id, user_id=user.id, role=MemberRole.MEMBER)
    db.add(member)
    db.commit()
    db.refresh(member)

    logger.info(f"User {user.id} joined trip {trip.id} as member {member.id}")
    notify_members(
        trip.id, "member_joined", "New member joined",
        f'{user.username} joined "{trip.name}"', db, hub,
        personal={user.id: ("You joined the trip", f'Welcome to "{trip.name}"')},
    )
    return member


def join(join_code: str, user_id: int, db: Session, hub: TripUpdateHub) -> TripMember:
    """Join the trip matching ``join_code`` (case-insensitive)."""
    trip = db.query(Trip).filter(
        func.upper(Trip.join_code) == join_code.strip().upper()
    ).first()
    if not trip:
        raise InvalidCode()

    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise NotFound("User not found")
    return _add_member(trip, user, db, hub)


def add_member(trip_id: int, actor_id: int, username: str, db: Session, hub: TripUpdateHub) -> TripMember:
    """Manually add a user to a trip; organizers only."""
    trip = get_trip(trip_id, db)
    assert_organizer(trip_id, actor_id, db)

    user = db.query(User).filter(User.username == username).first()
    if not user:
        raise NotFound("User not found")
    return _add_member(trip, user, db, hub)


def change_role(
    trip_id: int,
    actor_id: int,
    target_member_id: int,
    new_role: MemberRole,
    db: Session,
    hub: TripUpdateHub,
) -> TripMember:
    """
    Change a member's role.

    Managers may change roles; only organizers may promote to organizer, and
    the last organizer of a trip cannot be demoted.
    """
    manager = assert_manager(trip_id, actor_id, db)

    target = db.query(TripMember).filter(
        TripMember.trip_id == trip_id,
        TripMember.id == target_member_id
    ).first()
    if not target:
        raise NotFound("Member not found")

    if target.role == MemberRole.ORGANIZER and new_role != MemberRole.ORGANIZER:
        organizer_count = db.query(func.count(TripMember.id)).filter(
            TripMember.trip_id == trip_id,
            TripMember.role == MemberRole.ORGANIZER
        ).scalar()
        if organizer_count <= 1:
            raise LastOrganizerViolation()

    if new_role == MemberRole.ORGANIZER and manager.role != MemberRole.ORGANIZER:
        raise InsufficientRole("Only organizers can promote others to organizer")

    target.role = new_role
    db.commit()
    db.refresh(target)

    logger.info(f"Member {target.id} of trip {trip_id} is now {new_role.value} (changed by user {actor_id})")
    hub.publish(trip_id, {
        "type": "member_role_updated",
        "message": f"Member role updated to {new_role.value}",
        "member": MemberResponse.model_validate(target).model_dump(mode="json"),
    })
    return target


def list_members(trip_id: int, db: Session) -> List[TripMember]:
    return db.query(TripMember).options(
        joinedload(TripMember.user)
    ).filter(
        TripMember.trip_id == trip_id
    ).order_by(TripMember.id).all()


def list_user_trips(user_id: int, db: Session) -> List[Trip]:
    return db.query(Trip).join(TripMember).filter(
        TripMember.user_id == user_id
    ).order_by(Trip.created_at.desc(), Trip.id.desc()).all()


def update_trip(trip_id: int, actor_id: int, trip_data: TripCreate, db: Session) -> Trip:
    """Replace a trip's details; organizers only. Join code and status are kept."""
    trip = get_trip(trip_id, db)
    assert_organizer(trip_id, actor_id, db)

    for field, value in trip_data.model_dump().items():
        setattr(trip, field, value)
    db.commit()
    db.refresh(trip)

    logger.info(f"Trip {trip_id} updated by user {actor_id}")
    return trip


def update_status(trip_id: int, actor_id: int, status: TripStatus, db: Session, hub: TripUpdateHub) -> Trip:
    """
    Move a trip to ``status`` and tell every member about it.

    Any member may do this; clients advance the status as the trip dates
    pass.
    """
    trip = get_trip(trip_id, db)
    assert_membership(trip_id, actor_id, db)

    trip.status = status
    db.commit()
    db.refresh(trip)

    logger.info(f"Trip {trip_id} is now {status.value} (changed by user {actor_id})")
    notify_members(
        trip_id, "trip_start", f"Trip {status.value}", f"{trip.name} is now {status.value}",
        db, hub,
        event={"type": "status_update", "status": status.value},
    )
    return trip


def delete_trip(trip_id: int, actor_id: int, db: Session) -> None:
    """Delete a trip with its members and ledgers; organizers only."""
    trip = get_trip(trip_id, db)
    assert_organizer(trip_id, actor_id, db)
    db.delete(trip)
    db.commit()
    logger.info(f"Trip {trip_id} deleted by user {actor_id}")
