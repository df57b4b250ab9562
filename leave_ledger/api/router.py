"""
Main API router
"""
from fastapi import APIRouter

from leave_ledger.api.v1 import (
    health,
    holidays,
    leave_balances,
    leaves,
)

api_router = APIRouter()

api_router.include_router(health.router, tags=["health"])
api_router.include_router(holidays.router, prefix="/holidays", tags=["holidays"])
api_router.include_router(leave_balances.router, prefix="/leave-balances", tags=["leave-balances"])
api_router.include_router(leaves.router, prefix="/leaves", tags=["leaves"])
