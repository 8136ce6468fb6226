"""
Small helpers shared by test modules.
"""
from decimal import Decimal
from tripledger.core.security import create_access_token
from tripledger.models.user import User


def auth_headers(user: User) -> dict:
    return {"Authorization": f"Bearer {create_access_token(user.id, user.username)}"}


def drain(subscription) -> list:
    """Everything queued for a subscription so far."""
    events = []
    while not subscription.queue.empty():
        events.append(subscription.queue.get_nowait())
    return events


def assert_balanced(member):
    """Running totals must satisfy balance == credit - spent."""
    assert Decimal(member.balance) == Decimal(member.credit_amount) - Decimal(member.spent_amount)
