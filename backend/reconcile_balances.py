"""
Rebuild member balance totals from the ledgers for every trip.

Run periodically to repair drift left by interrupted or racing updates.
"""
import sys
import os
import logging

# Add the backend directory to Python path
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from tripledger.core.logging import configure_logging
from tripledger.db.session import SessionLocal
from tripledger.models.trip import Trip
from tripledger.services.balance_projector import reconcile_balances

logger = logging.getLogger("reconcile_balances")


def reconcile_all() -> int:
    """Reconcile every trip; returns the number of repaired member rows."""
    db = SessionLocal()
    try:
        repaired_total = 0
        trip_ids = [trip_id for (trip_id,) in db.query(Trip.id).order_by(Trip.id)]
        for trip_id in trip_ids:
            repaired = reconcile_balances(trip_id, db)
            if repaired:
                logger.info(f"Trip {trip_id}: repaired members {repaired}")
            repaired_total += len(repaired)
        logger.info(f"Reconciled {len(trip_ids)} trips, repaired {repaired_total} member rows")
        return repaired_total
    finally:
        db.close()


if __name__ == "__main__":
    configure_logging()
    reconcile_all()
