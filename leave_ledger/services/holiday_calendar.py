"""
Working-day calendar - public holidays and weekend classification.

Holidays for a year are a fixed list of (month, day, name) applied every year
plus a table of movable holidays keyed by year. A year missing from the
movable table falls back to fixed holidays only and logs a warning.
"""
import json
import logging
from dataclasses import dataclass
from datetime import date
from functools import lru_cache
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Set, Tuple

from leave_ledger.core.config import settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PublicHoliday:
    date: date
    name: str


# South African national public holidays
SA_FIXED_HOLIDAYS: Tuple[Tuple[int, int, str], ...] = (
    (1, 1, "New Year's Day"),
    (3, 21, "Human Rights Day"),
    (4, 27, "Freedom Day"),
    (5, 1, "Workers' Day"),
    (6, 16, "Youth Day"),
    (8, 9, "National Women's Day"),
    (9, 24, "Heritage Day"),
    (12, 16, "Day of Reconciliation"),
    (12, 25, "Christmas Day"),
    (12, 26, "Day of Goodwill"),
)

# Easter-derived holidays, maintained per year. Dates follow the Gregorian
# Easter computus; the legacy table carried wrong 2026/2027 entries.
SA_VARIABLE_HOLIDAYS: Dict[int, Tuple[Tuple[date, str], ...]] = {
    2025: (
        (date(2025, 4, 18), "Good Friday"),
        (date(2025, 4, 21), "Family Day"),
    ),
    2026: (
        (date(2026, 4, 3), "Good Friday"),
        (date(2026, 4, 6), "Family Day"),
    ),
    2027: (
        (date(2027, 3, 26), "Good Friday"),
        (date(2027, 3, 29), "Family Day"),
    ),
}


class HolidayCalendar:
    """Jurisdiction-agnostic holiday calendar built from static configuration."""

    def __init__(
        self,
        fixed_holidays: Iterable[Tuple[int, int, str]],
        variable_holidays: Dict[int, Iterable[Tuple[date, str]]],
    ):
        self._fixed = tuple(fixed_holidays)
        self._variable = {int(year): tuple(entries) for year, entries in variable_holidays.items()}
        self._warned_years: Set[int] = set()

    @property
    def configured_years(self) -> List[int]:
        return sorted(self._variable)

    def holidays_for_year(self, year: int) -> List[PublicHoliday]:
        """All public holidays for the year, ordered by date."""
        holidays = [PublicHoliday(date(year, month, day), name) for month, day, name in self._fixed]

        variable = self._variable.get(year)
        if variable is None:
            if year not in self._warned_years:
                self._warned_years.add(year)
                logger.warning(
                    "No movable public holidays configured for %s; using fixed holidays only", year
                )
        else:
            holidays.extend(PublicHoliday(d, name) for d, name in variable)

        return sorted(holidays, key=lambda h: h.date)

    def holiday_dates(self, year: int) -> Set[date]:
        return {h.date for h in self.holidays_for_year(year)}

    def is_weekend(self, day: date) -> bool:
        return day.weekday() >= 5

    def is_public_holiday(self, day: date) -> bool:
        return day in self.holiday_dates(day.year)

    def is_working_day(self, day: date) -> bool:
        return not self.is_weekend(day) and not self.is_public_holiday(day)


def _load_calendar_file(path: str) -> HolidayCalendar:
    """
    Build a calendar from JSON:
        {"fixed": [{"month": 1, "day": 1, "name": "..."}],
         "variable": {"2028": [{"date": "2028-04-14", "name": "..."}]}}
    """
    raw = json.loads(Path(path).read_text(encoding="utf-8"))
    fixed = [(int(h["month"]), int(h["day"]), h["name"]) for h in raw.get("fixed", [])]
    variable = {
        int(year): [(date.fromisoformat(h["date"]), h["name"]) for h in entries]
        for year, entries in raw.get("variable", {}).items()
    }
    logger.info("Loaded holiday calendar from %s (%d fixed, years %s)", path, len(fixed), sorted(variable))
    return HolidayCalendar(fixed, variable)


def build_holiday_calendar(path: Optional[str] = None) -> HolidayCalendar:
    if path:
        return _load_calendar_file(path)
    return HolidayCalendar(SA_FIXED_HOLIDAYS, SA_VARIABLE_HOLIDAYS)


@lru_cache(maxsize=1)
def get_holiday_calendar() -> HolidayCalendar:
    """Process-wide calendar, loaded once from settings."""
    return build_holiday_calendar(settings.HOLIDAY_CALENDAR_FILE)
