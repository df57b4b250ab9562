"""
Accrual service - annual leave earned to date on the stepped curve.

- Jan 1-31: flat 1.50 days.
- Feb 1-28: 1.50 -> 3.00, +1.5/28 per calendar day since Feb 1.
- Mar 1-Dec 31: 3.00 -> 18.00, +15/305 per calendar day since Mar 1.
A date on Jan 31 or Feb 28 stays in the lower segment. Feb 29 is past Feb 28
and is evaluated on the March ramp. Result is bounded to [1.50, 18.00] and
rounded half-up to 2 places.
"""
from datetime import date
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional

from leave_ledger.core.constants import (
    ACCRUAL_BASE_DAYS,
    ACCRUAL_FEBRUARY_END_DAYS,
    ACCRUAL_YEAR_END_DAYS,
    FEBRUARY_RAMP_DAYS,
    MARCH_TO_DECEMBER_RAMP_DAYS,
    TWO_PLACES,
)
from leave_ledger.utils.datetime_utils import resolve_as_of

FEBRUARY_RATE = (ACCRUAL_FEBRUARY_END_DAYS - ACCRUAL_BASE_DAYS) / FEBRUARY_RAMP_DAYS
MARCH_RATE = (ACCRUAL_YEAR_END_DAYS - ACCRUAL_FEBRUARY_END_DAYS) / MARCH_TO_DECEMBER_RAMP_DAYS


def round_days(value: Decimal) -> Decimal:
    """Round a day count to 2 decimal places, half-up."""
    return Decimal(value).quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


def calculate_accrued_days(as_of_date: Optional[date] = None) -> Decimal:
    """Cumulative leave days earned in as_of_date's calendar year."""
    as_of = resolve_as_of(as_of_date)
    year = as_of.year

    if as_of > date(year, 2, 28):
        days_since_march = (as_of - date(year, 3, 1)).days
        accrued = ACCRUAL_FEBRUARY_END_DAYS + days_since_march * MARCH_RATE
        accrued = min(accrued, ACCRUAL_YEAR_END_DAYS)
    elif as_of > date(year, 1, 31):
        days_since_february = (as_of - date(year, 2, 1)).days
        accrued = ACCRUAL_BASE_DAYS + days_since_february * FEBRUARY_RATE
        accrued = min(accrued, ACCRUAL_FEBRUARY_END_DAYS)
    else:
        accrued = ACCRUAL_BASE_DAYS

    return round_days(max(accrued, ACCRUAL_BASE_DAYS))
