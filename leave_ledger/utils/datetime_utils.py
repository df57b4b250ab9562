"""
Date helpers.
- Timestamps are stored in UTC.
- Business dates ("today" for accrual) are resolved in settings.TZ.
"""
from datetime import date, datetime, timedelta, timezone
from typing import Iterator, Optional
from zoneinfo import ZoneInfo

from leave_ledger.core.config import settings

UTC = timezone.utc


def now_utc() -> datetime:
    """Current time in UTC (timezone-aware)."""
    return datetime.now(UTC)


def today() -> date:
    """Current business date in the configured timezone."""
    return datetime.now(ZoneInfo(settings.TZ)).date()


def resolve_as_of(as_of: Optional[date]) -> date:
    return as_of if as_of is not None else today()


def iter_days(start: date, end: date) -> Iterator[date]:
    """Every calendar day from start to end inclusive (nothing when start > end)."""
    current = start
    while current <= end:
        yield current
        current += timedelta(days=1)


def iso_8601_utc(dt: Optional[datetime]) -> Optional[str]:
    """ISO-8601 with Z for UTC."""
    if dt is None:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    s = dt.astimezone(UTC).isoformat()
    if s.endswith("+00:00"):
        s = s[:-6] + "Z"
    return s
