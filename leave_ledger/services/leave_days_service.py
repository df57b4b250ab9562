"""
Leave day counting.

Two counters exist side by side:
- count_working_days: weekdays that are not public holidays.
- count_calendar_days: the raw inclusive span.
size_leave_request picks one according to settings.LEAVE_DAY_COUNTING so that
every new request is sized the same way.
"""
from datetime import date
from decimal import Decimal
from typing import Optional

from leave_ledger.core.config import settings
from leave_ledger.services.holiday_calendar import HolidayCalendar, get_holiday_calendar
from leave_ledger.utils.datetime_utils import iter_days


def count_working_days(
    start_date: date,
    end_date: date,
    calendar: Optional[HolidayCalendar] = None,
) -> int:
    """Working days in [start_date, end_date]; 0 when start_date > end_date."""
    if start_date > end_date:
        return 0
    calendar = calendar or get_holiday_calendar()
    return sum(1 for day in iter_days(start_date, end_date) if calendar.is_working_day(day))


def count_calendar_days(start_date: date, end_date: date) -> int:
    if start_date > end_date:
        return 0
    return (end_date - start_date).days + 1


def size_leave_request(
    start_date: date,
    end_date: date,
    calendar: Optional[HolidayCalendar] = None,
    counting: Optional[str] = None,
) -> Decimal:
    """days_requested for a new leave request."""
    counting = counting or settings.LEAVE_DAY_COUNTING
    if counting == "working":
        return Decimal(count_working_days(start_date, end_date, calendar))
    return Decimal(count_calendar_days(start_date, end_date))
