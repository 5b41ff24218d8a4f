"""Unit tests for income recurrence projection"""

from datetime import date

import pytest

from agency_tracker.domain.exceptions import ConfigurationError, UnsupportedFrequencyError
from agency_tracker.domain.income import (
    amount_per_occurrence,
    iter_occurrences_within_window,
    occurrences_within_window,
    project_income_occurrences,
)
from agency_tracker.domain.models import IncomeStream

START = date(2025, 3, 1)
END = date(2025, 4, 15)  # 45-day window


def test_null_anchor_has_no_occurrences():
    assert occurrences_within_window(None, "monthly", START, END) == 0


def test_anchor_after_window_has_no_occurrences():
    assert occurrences_within_window(date(2025, 5, 1), "weekly", START, END) == 0


@pytest.mark.parametrize(
    "frequency,anchor,expected",
    [
        ("weekly", date(2025, 3, 1), 7),  # Mar 1, 8, 15, 22, 29, Apr 5, 12
        ("biweekly", date(2025, 3, 1), 4),  # Mar 1, 15, 29, Apr 12
        ("semimonthly", date(2025, 3, 11), 3),  # Mar 11, 26, Apr 10
        ("monthly", date(2025, 3, 11), 2),  # Mar 11, Apr 11
        ("quarterly", date(2025, 3, 11), 1),
        ("annually", date(2025, 3, 11), 1),
    ],
)
def test_occurrence_counts_per_frequency(frequency, anchor, expected):
    assert occurrences_within_window(anchor, frequency, START, END) == expected


def test_window_bounds_are_inclusive():
    assert occurrences_within_window(END, "monthly", START, END) == 1
    assert occurrences_within_window(START, "annually", START, END) == 1


def test_stale_anchor_catches_up_to_window():
    # Anchor two months before the window start
    dates = list(iter_occurrences_within_window(date(2025, 1, 11), "monthly", START, END))
    assert dates == [date(2025, 3, 11), date(2025, 4, 11)]


def test_month_end_anchor_clamps_per_occurrence():
    dates = list(iter_occurrences_within_window(date(2025, 1, 31), "monthly", date(2025, 1, 1), date(2025, 4, 30)))
    assert dates == [date(2025, 1, 31), date(2025, 2, 28), date(2025, 3, 31), date(2025, 4, 30)]


def test_catch_up_bound_exhausted_returns_zero():
    # 1000 weeks behind the window cannot be reached in 500 steps
    assert occurrences_within_window(date(2005, 1, 1), "weekly", START, END, max_steps=500) == 0


def test_occurrences_inside_window_are_bounded():
    assert occurrences_within_window(START, "weekly", START, date(2035, 1, 1), max_steps=10) == 10


def test_semimonthly_pays_half_rounded_up():
    assert amount_per_occurrence(420000, "semimonthly") == 210000
    assert amount_per_occurrence(100001, "semimonthly") == 50001
    assert amount_per_occurrence(420000, "monthly") == 420000


def test_project_income_occurrences_totals_count_times_payout():
    stream = IncomeStream(amount_cents=420000, frequency="semimonthly", next_expected_date=date(2025, 3, 11))

    projection = project_income_occurrences(stream, START, END)

    assert projection.count == 3
    assert projection.per_occurrence_amount_cents == 210000
    assert projection.total_cents == 630000


def test_unknown_frequency_is_a_configuration_error():
    with pytest.raises(UnsupportedFrequencyError) as exc_info:
        occurrences_within_window(date(2025, 3, 11), "fortnightly", START, END)

    assert isinstance(exc_info.value, ConfigurationError)
    assert exc_info.value.kind == "unsupported_frequency"
    assert "fortnightly" in exc_info.value.message


def test_unknown_frequency_fails_even_outside_window():
    with pytest.raises(UnsupportedFrequencyError):
        occurrences_within_window(date(2030, 1, 1), "daily", START, END)
