"""
Dependencies for FastAPI endpoints
"""
from typing import Generator, Optional

from fastapi import Header

from leave_ledger.db.session import SessionLocal
from leave_ledger.services.holiday_calendar import HolidayCalendar, get_holiday_calendar


def get_db() -> Generator:
    """Dependency for getting database session"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_calendar() -> HolidayCalendar:
    """Process-wide holiday calendar (loaded once)"""
    return get_holiday_calendar()


def get_acting_user(x_user_email: Optional[str] = Header(None)) -> str:
    """
    Identity of the caller as forwarded by the upstream gateway.

    Authentication lives outside this service; the gateway passes the
    authenticated email in X-User-Email. Falls back to 'system'.
    """
    return x_user_email or "system"
