"""
Balance projector: read views over the running member totals, the
organizer's manual override, and drift repair.

Member rows hold ``credit_amount``, ``spent_amount`` and ``balance`` as
running totals maintained by the ledgers, so reads never replay history.
``reconcile_balances`` is the one place that does: it rebuilds the totals
from allocations, shares and adjustments and repairs rows that drifted.
"""
import logging
from decimal import Decimal
from typing import Dict, List

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from tripledger.core.exceptions import NotFound, ValidationError
from tripledger.models.adjustment import BalanceAdjustment
from tripledger.models.budget import BudgetAllocation, BudgetItem
from tripledger.models.spending import SpendingEntry, SpendingShare
from tripledger.models.trip import TripMember
from tripledger.schemas.balance import MemberBalance, TripTotals
from tripledger.schemas.member import MemberResponse
from tripledger.services.member_registry import assert_organizer, get_trip, list_members
from tripledger.services.notifier import TripUpdateHub

logger = logging.getLogger(__name__)

DRIFT_THRESHOLD = Decimal("0.0001")


def get_balances(trip_id: int, db: Session) -> List[MemberBalance]:
    return [
        MemberBalance(
            member_id=member.id,
            user_id=member.user_id,
            username=member.username,
            credit_amount=member.credit_amount,
            spent_amount=member.spent_amount,
            balance=member.balance,
        )
        for member in list_members(trip_id, db)
    ]


def get_trip_totals(trip_id: int, db: Session) -> TripTotals:
    trip = get_trip(trip_id, db)
    total_allocated = db.query(func.sum(BudgetItem.amount)).filter(
        BudgetItem.trip_id == trip_id
    ).scalar() or Decimal(0)
    total_spent = db.query(func.sum(SpendingEntry.amount)).filter(
        SpendingEntry.trip_id == trip_id
    ).scalar() or Decimal(0)
    total_budget = Decimal(trip.total_budget)

    return TripTotals(
        total_budget=total_budget,
        total_allocated=Decimal(total_allocated),
        total_spent=Decimal(total_spent),
        remaining=total_budget - Decimal(total_spent),
    )


def override_balance(
    trip_id: int,
    actor_id: int,
    member_id: int,
    credit_amount: Decimal,
    spent_amount: Decimal,
    db: Session,
    hub: TripUpdateHub,
) -> TripMember:
    """
    Set a member's credit and spent totals by hand (organizers only).

    The difference to the previous totals is kept as a BalanceAdjustment so
    reconciliation reproduces the override.
    """
    assert_organizer(trip_id, actor_id, db)
    if credit_amount < 0 or spent_amount < 0:
        raise ValidationError("Amounts cannot be negative")

    member = db.query(TripMember).filter(
        TripMember.trip_id == trip_id,
        TripMember.id == member_id
    ).first()
    if not member:
        raise NotFound("Member not found")

    try:
        db.add(BalanceAdjustment(
            trip_id=trip_id,
            member_id=member.id,
            actor_id=actor_id,
            credit_delta=Decimal(credit_amount) - member.credit_amount,
            spent_delta=Decimal(spent_amount) - member.spent_amount,
        ))
        member.credit_amount = credit_amount
        member.spent_amount = spent_amount
        member.balance = Decimal(credit_amount) - Decimal(spent_amount)
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.error(f"Failed to override balance of member {member_id} in trip {trip_id}", exc_info=True)
        raise
    db.refresh(member)

    logger.info(
        f"Balance of member {member.id} in trip {trip_id} set to "
        f"credit={member.credit_amount} spent={member.spent_amount} by user {actor_id}"
    )
    hub.publish(trip_id, {
        "type": "member_balance_updated",
        "message": f"{member.username}'s balance updated",
        "member": MemberResponse.model_validate(member).model_dump(mode="json"),
    })
    return member


def _sum_by_member(query) -> Dict[int, Decimal]:
    return {member_id: Decimal(total or 0) for member_id, total in query}


def reconcile_balances(trip_id: int, db: Session) -> List[int]:
    """
    Rebuild each member's totals from the ledgers and repair drifted rows.

    credit = budget allocations + credit adjustments,
    spent = spending shares + spent adjustments.

    Returns the ids of members whose stored totals were corrected.
    """
    get_trip(trip_id, db)
    members = db.query(TripMember).filter(TripMember.trip_id == trip_id).all()
    member_ids = [m.id for m in members]
    if not member_ids:
        return []

    allocated = _sum_by_member(
        db.query(BudgetAllocation.member_id, func.sum(BudgetAllocation.amount))
        .filter(BudgetAllocation.member_id.in_(member_ids))
        .group_by(BudgetAllocation.member_id)
    )
    shared = _sum_by_member(
        db.query(SpendingShare.member_id, func.sum(SpendingShare.amount))
        .filter(SpendingShare.member_id.in_(member_ids))
        .group_by(SpendingShare.member_id)
    )
    adjustments = {
        member_id: (Decimal(credit or 0), Decimal(spent or 0))
        for member_id, credit, spent in db.query(
            BalanceAdjustment.member_id,
            func.sum(BalanceAdjustment.credit_delta),
            func.sum(BalanceAdjustment.spent_delta),
        ).filter(BalanceAdjustment.member_id.in_(member_ids)).group_by(BalanceAdjustment.member_id)
    }

    repaired = []
    for member in members:
        credit_adj, spent_adj = adjustments.get(member.id, (Decimal(0), Decimal(0)))
        credit = allocated.get(member.id, Decimal(0)) + credit_adj
        spent = shared.get(member.id, Decimal(0)) + spent_adj
        balance = credit - spent

        drifted = (
            abs(member.credit_amount - credit) > DRIFT_THRESHOLD
            or abs(member.spent_amount - spent) > DRIFT_THRESHOLD
            or abs(member.balance - balance) > DRIFT_THRESHOLD
        )
        if not drifted:
            continue

        logger.warning(
            f"Member {member.id} of trip {trip_id} drifted: stored "
            f"credit={member.credit_amount} spent={member.spent_amount} balance={member.balance}, "
            f"ledger credit={credit} spent={spent} balance={balance}"
        )
        member.credit_amount = credit
        member.spent_amount = spent
        member.balance = balance
        repaired.append(member.id)

    if repaired:
        try:
            db.commit()
        except SQLAlchemyError:
            db.rollback()
            logger.error(f"Failed to store reconciled balances for trip {trip_id}", exc_info=True)
            raise
    return repaired
