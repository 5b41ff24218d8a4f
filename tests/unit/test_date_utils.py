"""Unit tests for date and money helpers"""

from datetime import date

import pytest

from agency_tracker.domain.exceptions import InvalidInputError
from agency_tracker.utils.date_utils import (
    add_months,
    build_monthly_date,
    diff_in_days,
    end_of_month,
    parse_iso_date,
    start_of_month,
)
from agency_tracker.utils.money import percent_of, round_half_up


def test_build_monthly_date_clamps_day_to_month_length():
    assert build_monthly_date(2025, 2, 31) == date(2025, 2, 28)
    assert build_monthly_date(2024, 2, 31) == date(2024, 2, 29)
    assert build_monthly_date(2025, 4, 31) == date(2025, 4, 30)


def test_build_monthly_date_normalises_month_overflow():
    assert build_monthly_date(2025, 13, 5) == date(2026, 1, 5)
    assert build_monthly_date(2025, 0, 15) == date(2024, 12, 15)
    assert build_monthly_date(2025, -1, 31) == date(2024, 11, 30)


def test_add_months_clamps_without_drift_from_anchor():
    anchor = date(2025, 1, 31)
    assert add_months(anchor, 1) == date(2025, 2, 28)
    assert add_months(anchor, 2) == date(2025, 3, 31)
    assert add_months(date(2024, 2, 29), 12) == date(2025, 2, 28)


def test_diff_in_days_is_signed_and_none_safe():
    assert diff_in_days(date(2025, 3, 1), date(2025, 3, 11)) == 10
    assert diff_in_days(date(2025, 3, 11), date(2025, 3, 1)) == -10
    assert diff_in_days(None, date(2025, 3, 1)) is None


def test_month_bounds():
    assert start_of_month(date(2025, 2, 14)) == date(2025, 2, 1)
    assert end_of_month(date(2025, 2, 14)) == date(2025, 2, 28)


def test_parse_iso_date_accepts_dates_strings_and_none():
    assert parse_iso_date(" 2025-03-01 ") == date(2025, 3, 1)
    assert parse_iso_date(date(2025, 3, 1)) == date(2025, 3, 1)
    assert parse_iso_date(None) is None


@pytest.mark.parametrize("value", ["2025-02-30", "yesterday", "03/01/2025", 20250301])
def test_parse_iso_date_rejects_invalid_values(value):
    with pytest.raises(InvalidInputError) as exc_info:
        parse_iso_date(value, field="calculated_for")

    assert exc_info.value.field == "calculated_for"
    assert exc_info.value.message == "Unable to parse provided calculated for"


def test_round_half_up_rounds_halves_upward():
    assert round_half_up(2.5) == 3
    assert round_half_up(2.4999) == 2
    assert round_half_up(210000.5) == 210001


def test_percent_of_credit_buffer():
    assert percent_of(1_000_000, 0.05) == 50_000
    assert percent_of(12_345, 0.05) == 617
