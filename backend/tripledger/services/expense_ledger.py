"""
Expense split ledger.

Spending entries are append-only: once recorded they are never updated or
deleted. Each participant's share is added to their ``spent_amount`` and
taken off their ``balance``; the payer is debited for their own share like
anyone else and is not credited for fronting the rest.
"""
import logging
from decimal import Decimal, ROUND_DOWN
from typing import List

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from tripledger.core.config import settings
from tripledger.core.exceptions import InvalidParticipant, SplitMismatch, ValidationError
from tripledger.models.spending import SpendingEntry, SpendingShare, SplitType
from tripledger.models.trip import TripMember
from tripledger.schemas.spending import SpendingEntryCreate
from tripledger.services.member_registry import assert_membership, get_trip
from tripledger.services.notifier import TripUpdateHub, notify_members

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")


def equal_shares(amount: Decimal, count: int) -> List[Decimal]:
    """
    Split ``amount`` into ``count`` cent-rounded shares that sum exactly to it.

    Leftover cents go to the first participants, e.g. 100 / 3 gives
    [33.34, 33.33, 33.33].
    """
    if count <= 0:
        raise ValidationError("At least one participant is required")
    amount = Decimal(amount)
    base = (amount / count).quantize(CENT, rounding=ROUND_DOWN)
    remainder_cents = int(((amount - base * count) / CENT).to_integral_value())
    return [base + CENT if i < remainder_cents else base for i in range(count)]


def _resolve_shares(entry_data: SpendingEntryCreate) -> List[Decimal]:
    amounts = [share.amount for share in entry_data.participant_shares]
    if entry_data.split_type == SplitType.EQUAL and all(a is None for a in amounts):
        return equal_shares(entry_data.amount, len(amounts))
    if any(a is None for a in amounts):
        raise ValidationError("Every participant share needs an amount")
    return [Decimal(a) for a in amounts]


def record_expense(
    trip_id: int,
    payer_id: int,
    entry_data: SpendingEntryCreate,
    db: Session,
    hub: TripUpdateHub,
) -> SpendingEntry:
    """
    Record an expense paid by ``payer_id`` and debit each participant's share.

    Raises:
        NotFound: If the trip doesn't exist
        NotAMember: If the payer is not a trip member
        InvalidParticipant: If a share references a non-member
        SplitMismatch: If the shares miss the amount by more than the tolerance
    """
    get_trip(trip_id, db)
    payer = assert_membership(trip_id, payer_id, db)

    member_ids = {
        member_id for (member_id,) in db.query(TripMember.id).filter(TripMember.trip_id == trip_id)
    }
    shares = entry_data.participant_shares
    if any(share.member_id not in member_ids for share in shares):
        raise InvalidParticipant()

    amounts = _resolve_shares(entry_data)
    total_shares = sum(amounts, Decimal(0))
    if abs(total_shares - Decimal(entry_data.amount)) > settings.SPLIT_TOLERANCE:
        raise SplitMismatch(
            f"Participant splits must sum to total amount "
            f"(shares {total_shares:.2f}, amount {entry_data.amount:.2f})"
        )

    try:
        entry = SpendingEntry(
            trip_id=trip_id,
            user_id=payer_id,
            description=entry_data.description,
            amount=entry_data.amount,
            date=entry_data.date,
            split_type=entry_data.split_type,
        )
        db.add(entry)
        db.flush()

        for share, amount in zip(shares, amounts):
            db.add(SpendingShare(entry_id=entry.id, member_id=share.member_id, amount=amount))
            db.query(TripMember).filter(
                TripMember.id == share.member_id
            ).update(
                {
                    TripMember.spent_amount: TripMember.spent_amount + amount,
                    TripMember.balance: TripMember.balance - amount,
                },
                synchronize_session=False,
            )
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.error(f"Failed to record expense for trip {trip_id}", exc_info=True)
        raise
    db.refresh(entry)

    logger.info(
        f"Expense {entry.id} ({entry.amount}) recorded for trip {trip_id} by user {payer_id}, "
        f"split across {len(shares)} participants"
    )
    symbol = settings.CURRENCY_SYMBOL
    notify_members(
        trip_id, "spending_added", "New expense",
        f"{payer.username} paid {symbol}{entry.amount:.2f} for {entry.description}",
        db, hub,
        event={
            "type": "spending_updated",
            "message": f"Spending recorded: {entry.description} ({symbol}{entry.amount:.2f})",
        },
    )
    return entry


def list_expenses(trip_id: int, actor_id: int, db: Session) -> List[SpendingEntry]:
    """Spending entries of a trip, latest date first."""
    get_trip(trip_id, db)
    assert_membership(trip_id, actor_id, db)
    return db.query(SpendingEntry).options(
        selectinload(SpendingEntry.participant_shares)
    ).filter(
        SpendingEntry.trip_id == trip_id
    ).order_by(SpendingEntry.date.desc(), SpendingEntry.id.desc()).all()
