"""
Settlement service: suggests who should pay whom for the trip's shared expenses.
"""
from sqlalchemy.orm import Session
from typing import Dict, List, Tuple
from decimal import Decimal
from tripledger.models.spending import SpendingEntry, SpendingShare
from tripledger.schemas.balance import SettlementSummary, Transfer
from tripledger.services.member_registry import get_trip, list_members


def calculate_net_balances(trip_id: int, db: Session) -> Dict[int, Decimal]:
    """
    Net position per member id from spending alone
    (positive = should receive, negative = should pay).

    The payer of an entry is credited its full amount and every participant
    is debited their share. Budget credit and manual overrides are not part
    of it: they describe the shared budget, not debts between members.
    """
    members = list_members(trip_id, db)
    member_by_user = {m.user_id: m.id for m in members}
    net_balances: Dict[int, Decimal] = {m.id: Decimal(0) for m in members}

    entries = db.query(SpendingEntry).filter(SpendingEntry.trip_id == trip_id).all()
    for entry in entries:
        # Add what payer paid
        payer_member_id = member_by_user.get(entry.user_id)
        if payer_member_id is not None:
            net_balances[payer_member_id] += Decimal(entry.amount)

    shares = db.query(SpendingShare).join(SpendingEntry).filter(SpendingEntry.trip_id == trip_id).all()
    for share in shares:
        # Subtract what each participant owes
        if share.member_id in net_balances:
            net_balances[share.member_id] -= Decimal(share.amount)

    return net_balances


def suggest_settlement(trip_id: int, db: Session) -> SettlementSummary:
    """
    Suggest transfers that settle the trip's shared expenses.

    Members who owe (negative net) pay members who fronted more than their
    share (positive net).
    """
    get_trip(trip_id, db)
    members = list_members(trip_id, db)
    names = {m.id: m.username for m in members}
    net_balances = calculate_net_balances(trip_id, db)

    transfers = [
        Transfer(
            from_member_id=debtor_id,
            from_username=names[debtor_id],
            to_member_id=creditor_id,
            to_username=names[creditor_id],
            amount=amount,
        )
        for debtor_id, creditor_id, amount in minimize_transfers(list(net_balances.items()))
    ]

    return SettlementSummary(
        net_balances={names[mid]: balance for mid, balance in net_balances.items()},
        transfers=transfers,
        participant_count=len(members),
    )


def minimize_transfers(balances: List[Tuple[int, Decimal]]) -> List[Tuple[int, int, Decimal]]:
    """
    Minimize the number of transfers needed to settle debts.
    Uses a greedy algorithm; returns (from_id, to_id, amount) tuples.
    """
    # Separate creditors (positive balance) and debtors (negative balance)
    creditors = [(mid, bal) for mid, bal in balances if bal > 0]
    debtors = [(mid, -bal) for mid, bal in balances if bal < 0]  # Store as positive for easier calculation

    # Largest first
    creditors.sort(key=lambda x: x[1], reverse=True)
    debtors.sort(key=lambda x: x[1], reverse=True)

    transfers = []
    cred_idx = 0
    debt_idx = 0

    while cred_idx < len(creditors) and debt_idx < len(debtors):
        creditor_id, cred_amount = creditors[cred_idx]
        debtor_id, debt_amount = debtors[debt_idx]

        transfer_amount = min(cred_amount, debt_amount)
        transfers.append((debtor_id, creditor_id, transfer_amount))

        creditors[cred_idx] = (creditor_id, cred_amount - transfer_amount)
        debtors[debt_idx] = (debtor_id, debt_amount - transfer_amount)

        if creditors[cred_idx][1] == 0:
            cred_idx += 1
        if debtors[debt_idx][1] == 0:
            debt_idx += 1

    return transfers
