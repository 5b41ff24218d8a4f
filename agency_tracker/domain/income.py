"""Income recurrence projection over a date window"""

from datetime import date
from typing import Iterator, Optional

from agency_tracker.domain.exceptions import UnsupportedFrequencyError
from agency_tracker.domain.models import IncomeFrequency, IncomeProjection
from agency_tracker.utils.date_utils import add_days, add_months
from agency_tracker.utils.money import round_half_up

DEFAULT_MAX_STEPS = 500

# Fixed-length intervals in days
DAY_INTERVALS = {
    IncomeFrequency.WEEKLY: 7,
    IncomeFrequency.BIWEEKLY: 14,
    IncomeFrequency.SEMIMONTHLY: 15,
}

# Calendar intervals in months (day-of-month clamped to shorter months)
MONTH_INTERVALS = {
    IncomeFrequency.MONTHLY: 1,
    IncomeFrequency.QUARTERLY: 3,
    IncomeFrequency.ANNUALLY: 12,
}


def normalize_frequency(frequency: object) -> IncomeFrequency:
    """
    Coerce a stored frequency value into the enum.

    Raises:
        UnsupportedFrequencyError: For any value outside the known frequencies
    """
    try:
        return IncomeFrequency(frequency)
    except ValueError as e:
        raise UnsupportedFrequencyError(frequency) from e


def nth_occurrence(anchor: date, frequency: object, n: int) -> date:
    """
    Date of the n-th occurrence after the anchor (n=0 is the anchor itself).

    Month-based frequencies are stepped from the anchor rather than from the
    previous occurrence so a 31st payday clamps in February and returns to
    the 31st in March.
    """
    freq = normalize_frequency(frequency)

    if freq in DAY_INTERVALS:
        return add_days(anchor, DAY_INTERVALS[freq] * n)
    if freq in MONTH_INTERVALS:
        return add_months(anchor, MONTH_INTERVALS[freq] * n)

    raise UnsupportedFrequencyError(frequency)


def iter_occurrences_within_window(
    next_expected_date: Optional[date],
    frequency: object,
    start: date,
    end: date,
    max_steps: int = DEFAULT_MAX_STEPS,
) -> Iterator[date]:
    """
    Lazily yield occurrence dates of a recurring payout inside [start, end].

    Requirements:
    - No anchor date means no occurrences
    - Catch-up from an anchor before `start` is bounded by max_steps; if the
      bound is hit before reaching the window, nothing is yielded
    - Yielding inside the window is bounded by max_steps as well
    """
    if next_expected_date is None:
        return

    # Validate up front so an unknown frequency fails even for empty windows
    normalize_frequency(frequency)

    step = 0
    pointer = next_expected_date
    while pointer < start:
        if step >= max_steps:
            return
        step += 1
        pointer = nth_occurrence(next_expected_date, frequency, step)

    yielded = 0
    while pointer <= end and yielded < max_steps:
        yield pointer
        yielded += 1
        pointer = nth_occurrence(next_expected_date, frequency, step + yielded)


def occurrences_within_window(
    next_expected_date: Optional[date],
    frequency: object,
    start: date,
    end: date,
    max_steps: int = DEFAULT_MAX_STEPS,
) -> int:
    """Count occurrences of a recurring payout inside [start, end]"""
    return sum(
        1 for _ in iter_occurrences_within_window(next_expected_date, frequency, start, end, max_steps)
    )


def amount_per_occurrence(amount_cents: int, frequency: object) -> int:
    """Payout of a single occurrence (semimonthly pays half the stored amount)"""
    if normalize_frequency(frequency) == IncomeFrequency.SEMIMONTHLY:
        return round_half_up(amount_cents / 2)
    return amount_cents


def project_income_occurrences(
    stream,
    window_start: date,
    window_end: date,
    max_steps: int = DEFAULT_MAX_STEPS,
) -> IncomeProjection:
    """
    Project an income stream over a window.

    Args:
        stream: Any object with amount_cents, frequency and next_expected_date
            (domain dataclass or ORM row)
        window_start: First day of the window (inclusive)
        window_end: Last day of the window (inclusive)

    Returns:
        IncomeProjection with occurrence count and per-occurrence payout

    Example:
        420000 cents semimonthly, anchor in 10 days, 45-day window
        -> occurrences on day 10, 25, 40 -> count=3, per_occurrence=210000
    """
    count = occurrences_within_window(
        stream.next_expected_date,
        stream.frequency,
        window_start,
        window_end,
        max_steps=max_steps,
    )
    return IncomeProjection(
        count=count,
        per_occurrence_amount_cents=amount_per_occurrence(stream.amount_cents, stream.frequency),
    )
