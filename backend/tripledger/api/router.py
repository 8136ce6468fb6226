"""
Main API router that includes all route modules.
"""
from fastapi import APIRouter
from tripledger.api.routes import (
    auth, users, trips, members, budget, spending,
    balances, notifications, live
)

api_router = APIRouter()

# Include all route modules
api_router.include_router(auth.router)
api_router.include_router(users.router)
api_router.include_router(trips.router)
api_router.include_router(members.router)
api_router.include_router(budget.router)
api_router.include_router(spending.router)
api_router.include_router(balances.router)
api_router.include_router(notifications.router)
api_router.include_router(live.router)
