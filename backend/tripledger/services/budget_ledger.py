"""
Budget allocation ledger.

Budget items partition the trip's fixed total budget. Adding an item
credits every current member an equal share of its amount; removing it
takes back exactly the allocations it recorded, so members who joined in
between are left untouched.
"""
import logging
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, List

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from tripledger.core.config import settings
from tripledger.core.exceptions import EmptyTrip, NotFound, ValidationError
from tripledger.models.budget import BudgetItem, BudgetAllocation, BudgetHistoryEntry, HistoryType
from tripledger.models.trip import Trip, TripMember
from tripledger.schemas.budget import BudgetItemCreate
from tripledger.services.member_registry import assert_membership, get_trip
from tripledger.services.notifier import TripUpdateHub, notify_members

logger = logging.getLogger(__name__)

AMOUNT_QUANTUM = Decimal("0.0001")


def _quantize(value: Decimal) -> Decimal:
    return Decimal(value).quantize(AMOUNT_QUANTUM, rounding=ROUND_HALF_UP)


def _shift_credit(member_ids: List[int], delta: Decimal, db: Session) -> int:
    """Add ``delta`` to credit and balance of the given members in one UPDATE."""
    if not member_ids:
        return 0
    return db.query(TripMember).filter(
        TripMember.id.in_(member_ids)
    ).update(
        {
            TripMember.credit_amount: TripMember.credit_amount + delta,
            TripMember.balance: TripMember.balance + delta,
        },
        synchronize_session=False,
    )


def _append_history(trip: Trip, item: BudgetItem, type: HistoryType, db: Session) -> BudgetHistoryEntry:
    # Allocations never change the trip's total budget.
    entry = BudgetHistoryEntry(
        trip_id=trip.id,
        item_id=item.id,
        type=type,
        amount=item.amount,
        total_after=trip.total_budget,
        category=item.category,
        description=item.description,
    )
    db.add(entry)
    return entry


def add_item(
    trip_id: int,
    actor_id: int,
    item_data: BudgetItemCreate,
    db: Session,
    hub: TripUpdateHub,
) -> BudgetItem:
    """
    Record a budget item and credit every current member an equal share.

    The item row, the per-member credit increment, the allocation rows and
    the history row are committed together. Notifications follow the
    commit and never undo it.

    Raises:
        NotFound: If the trip doesn't exist
        NotAMember: If the actor is not a trip member
        ValidationError: If the amount is negative
        EmptyTrip: If the trip has no members
    """
    trip = get_trip(trip_id, db)
    assert_membership(trip_id, actor_id, db)
    if item_data.amount < 0:
        raise ValidationError("Amount cannot be negative")

    members = db.query(TripMember).filter(TripMember.trip_id == trip_id).all()
    if not members:
        raise EmptyTrip()
    member_ids = [m.id for m in members]
    share = _quantize(Decimal(item_data.amount) / len(member_ids))

    try:
        item = BudgetItem(
            trip_id=trip_id,
            category=item_data.category,
            description=item_data.description,
            amount=item_data.amount,
            share_per_member=share,
        )
        db.add(item)
        db.flush()

        _shift_credit(member_ids, share, db)
        db.add_all([
            BudgetAllocation(item_id=item.id, member_id=member_id, amount=share)
            for member_id in member_ids
        ])
        _append_history(trip, item, HistoryType.ADD, db)
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.error(f"Failed to add budget item to trip {trip_id}", exc_info=True)
        raise
    db.refresh(item)

    logger.info(
        f"Budget item {item.id} ({item.category}: {item.amount}) added to trip {trip_id}, "
        f"{share} credited to {len(member_ids)} members"
    )
    symbol = settings.CURRENCY_SYMBOL
    notify_members(
        trip_id, "budget_alert", "Budget updated",
        f"{item.category}: {item.amount:.2f} added ({symbol}{share:.2f} for you)",
        db, hub,
        event={"type": "budget_updated", "message": f"Budget updated: {item.category} ({symbol}{item.amount:.2f})"},
    )
    return item


def remove_item(trip_id: int, actor_id: int, item_id: int, db: Session, hub: TripUpdateHub) -> None:
    """
    Delete a budget item and take back the credit it handed out.

    Raises:
        NotFound: If the trip or item doesn't exist
        NotAMember: If the actor is not a trip member
    """
    trip = get_trip(trip_id, db)
    assert_membership(trip_id, actor_id, db)

    item = db.query(BudgetItem).filter(
        BudgetItem.id == item_id,
        BudgetItem.trip_id == trip_id
    ).first()
    if not item:
        raise NotFound("Budget item not found")

    # Group recipients by amount so each distinct share is one UPDATE.
    by_share: Dict[Decimal, List[int]] = {}
    taken_back: Dict[int, Decimal] = {}  # user id -> credit reversed
    for allocation in item.allocations:
        by_share.setdefault(allocation.amount, []).append(allocation.member_id)
        taken_back[allocation.member.user_id] = allocation.amount

    category, amount = item.category, item.amount

    try:
        for share, member_ids in by_share.items():
            _shift_credit(member_ids, -share, db)
        _append_history(trip, item, HistoryType.REMOVE, db)
        db.delete(item)
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.error(f"Failed to remove budget item {item_id} from trip {trip_id}", exc_info=True)
        raise

    logger.info(f"Budget item {item_id} removed from trip {trip_id}")
    symbol = settings.CURRENCY_SYMBOL
    removed = f"{category}: {amount:.2f} removed"
    notify_members(
        trip_id, "budget_alert", "Budget updated", removed,
        db, hub,
        event={"type": "budget_updated", "message": f"Budget updated: {category} removed"},
        personal={
            user_id: ("Budget updated", f"{removed} ({symbol}{share:.2f} from you)")
            for user_id, share in taken_back.items()
        },
    )


def get_budget(trip_id: int, actor_id: int, db: Session) -> dict:
    """Items, history (newest first) and the fixed total budget of a trip."""
    trip = get_trip(trip_id, db)
    assert_membership(trip_id, actor_id, db)

    items = db.query(BudgetItem).filter(
        BudgetItem.trip_id == trip_id
    ).order_by(BudgetItem.id).all()
    history = db.query(BudgetHistoryEntry).filter(
        BudgetHistoryEntry.trip_id == trip_id
    ).order_by(BudgetHistoryEntry.created_at.desc(), BudgetHistoryEntry.id.desc()).all()

    return {"items": items, "history": history, "total_budget": trip.total_budget}
