"""
Public holiday calendar endpoints (read-only)
"""
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from leave_ledger.core.deps import get_calendar
from leave_ledger.schemas.holiday import HolidayListOut, WorkingDaysOut
from leave_ledger.services.holiday_calendar import HolidayCalendar
from leave_ledger.services.leave_days_service import count_calendar_days, count_working_days
from leave_ledger.utils import datetime_utils

router = APIRouter()


@router.get("", response_model=HolidayListOut)
async def list_holidays_endpoint(
    year: Optional[int] = Query(None, ge=1900, le=9999, description="Calendar year (defaults to the current year)"),
    calendar: HolidayCalendar = Depends(get_calendar),
):
    """Public holidays for a year, fixed and movable"""
    year = year or datetime_utils.today().year
    holidays = calendar.holidays_for_year(year)
    return {
        "year": year,
        "holidays": [{"date": h.date, "name": h.name} for h in holidays],
        "total": len(holidays),
    }


@router.get("/working-days", response_model=WorkingDaysOut)
async def working_days_endpoint(
    start_date: date = Query(..., description="First day (inclusive)"),
    end_date: date = Query(..., description="Last day (inclusive)"),
    calendar: HolidayCalendar = Depends(get_calendar),
):
    """Count working days and calendar days in a range"""
    if (end_date - start_date).days > 366:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Range must not exceed one year",
        )
    return {
        "start_date": start_date,
        "end_date": end_date,
        "working_days": count_working_days(start_date, end_date, calendar),
        "calendar_days": count_calendar_days(start_date, end_date),
    }
