"""Date manipulation utilities"""

import calendar
from datetime import date, timedelta
from typing import Optional, Union

from agency_tracker.domain.exceptions import InvalidInputError


def add_days(from_date: date, days: int) -> date:
    """Add calendar days to a date"""
    return from_date + timedelta(days=days)


def days_in_month(year: int, month: int) -> int:
    return calendar.monthrange(year, month)[1]


def build_monthly_date(year: int, month: int, day: int) -> date:
    """
    Build a date for a day-of-month, clamped to the length of that month.

    `month` is 1-based but may fall outside 1..12; it is normalised into the
    neighbouring year so callers can step forward/back with month + 1 / month - 1.

    Example:
        build_monthly_date(2025, 2, 31) -> 2025-02-28
        build_monthly_date(2025, 13, 5) -> 2026-01-05
    """
    year_offset, month_index = divmod(month - 1, 12)
    year += year_offset
    month = month_index + 1
    return date(year, month, min(day, days_in_month(year, month)))


def add_months(from_date: date, months: int) -> date:
    """Add calendar months keeping the day-of-month, clamped to shorter months"""
    return build_monthly_date(from_date.year, from_date.month + months, from_date.day)


def diff_in_days(start: Optional[date], end: Optional[date]) -> Optional[int]:
    """Signed whole days from start to end (None if either is missing)"""
    if start is None or end is None:
        return None
    return (end - start).days


def start_of_month(reference: date) -> date:
    return reference.replace(day=1)


def end_of_month(reference: date) -> date:
    return reference.replace(day=days_in_month(reference.year, reference.month))


def parse_iso_date(value: Union[date, str, None], field: str = "date") -> Optional[date]:
    """
    Parse a YYYY-MM-DD value into a date.

    Accepts an existing date unchanged and None as "not provided".

    Raises:
        InvalidInputError: If the value is not a valid ISO calendar date
    """
    if value is None or isinstance(value, date):
        return value

    try:
        return date.fromisoformat(value.strip())
    except (ValueError, AttributeError) as e:
        raise InvalidInputError(f"Unable to parse provided {field.replace('_', ' ')}", field=field) from e
