from __future__ import annotations

import calendar
from datetime import date, datetime


def now_local() -> datetime:
    """Current local time.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now()


def month_bounds(month: int, year: int) -> tuple[date, date]:
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, 1), date(year, month, last_day)


def working_days_in_month(month: int, year: int) -> int:
    """Monday to Friday days of the month."""
    last_day = calendar.monthrange(year, month)[1]
    return sum(1 for d in range(1, last_day + 1) if date(year, month, d).weekday() < 5)


def working_days_between(start: date, end: date) -> int:
    """Monday to Friday days in the inclusive range ``start..end``."""
    if end < start:
        return 0
    return sum(1 for n in range((end - start).days + 1) if date.fromordinal(start.toordinal() + n).weekday() < 5)
