"""Unit tests for billing cycle calculations"""

import uuid
from datetime import date

import pytest

from agency_tracker.domain.billing_cycles import (
    compute_upcoming_cycle,
    cycle_start_for_statement,
    due_date_for_statement,
    next_monthly_occurrence,
    sort_summaries,
    summarize_card,
)
from agency_tracker.domain.models import CreditCard, CreditCardCycle


def make_card(statement_day=25, payment_due_day=15, cycle_anchor_day=26, autopay_enabled=False, nickname="Visa"):
    return CreditCard(
        id=uuid.uuid4(),
        user_id=uuid.uuid4(),
        credit_limit_cents=500_000,
        cycle_anchor_day=cycle_anchor_day,
        statement_day=statement_day,
        payment_due_day=payment_due_day,
        autopay_enabled=autopay_enabled,
        nickname=nickname,
    )


def make_cycle(card, payment_due_date, statement_date=date(2025, 2, 25), payment_recorded_on=None):
    return CreditCardCycle(
        id=uuid.uuid4(),
        credit_card_id=card.id,
        cycle_number=3,
        cycle_start_date=date(2025, 1, 26),
        statement_date=statement_date,
        payment_due_date=payment_due_date,
        statement_balance_cents=264_075,
        minimum_payment_cents=12_000,
        payment_recorded_on=payment_recorded_on,
    )


def test_next_monthly_occurrence_same_or_next_month():
    assert next_monthly_occurrence(date(2025, 3, 10), 25) == date(2025, 3, 25)
    assert next_monthly_occurrence(date(2025, 3, 25), 25) == date(2025, 3, 25)
    assert next_monthly_occurrence(date(2025, 3, 26), 25) == date(2025, 4, 25)
    assert next_monthly_occurrence(date(2025, 12, 31), 5) == date(2026, 1, 5)


def test_cycle_start_steps_back_when_anchor_after_statement_day():
    assert cycle_start_for_statement(date(2025, 3, 25), 26) == date(2025, 2, 26)
    assert cycle_start_for_statement(date(2025, 3, 25), 1) == date(2025, 3, 1)
    assert cycle_start_for_statement(date(2025, 3, 28), 31) == date(2025, 2, 28)


def test_due_date_rolls_into_next_month_when_not_after_statement():
    assert due_date_for_statement(date(2025, 3, 25), 15) == date(2025, 4, 15)
    assert due_date_for_statement(date(2025, 3, 5), 28) == date(2025, 3, 28)
    assert due_date_for_statement(date(2025, 3, 25), 25) == date(2025, 4, 25)


@pytest.mark.parametrize("month", range(1, 13))
def test_due_date_strictly_after_statement_for_every_day(month):
    for statement_day in range(1, 32):
        for due_day in range(1, 32):
            card = make_card(statement_day=statement_day, payment_due_day=due_day, cycle_anchor_day=1)
            upcoming = compute_upcoming_cycle(card, date(2025, month, 1))
            assert upcoming.payment_due_date > upcoming.statement_date


def test_compute_upcoming_cycle_countdowns():
    upcoming = compute_upcoming_cycle(make_card(), date(2025, 3, 1))

    assert upcoming.statement_date == date(2025, 3, 25)
    assert upcoming.payment_due_date == date(2025, 4, 15)
    assert upcoming.cycle_start_date == date(2025, 2, 26)
    assert upcoming.days_until_statement == 24
    assert upcoming.days_until_payment_due == 45


def test_summarize_card_overdue_when_due_passed_and_unpaid():
    card = make_card()
    cycle = make_cycle(card, payment_due_date=date(2025, 3, 15))

    summary = summarize_card(card, cycle, date(2025, 3, 20))

    assert summary.current_cycle.is_overdue is True
    assert summary.current_cycle.is_paid is False
    assert summary.current_cycle.days_until_payment_due == -5
    assert summary.current_cycle.days_since_statement == 23
    assert summary.recommended_payment_cents == 264_075
    assert summary.total_statement_balance_cents == 264_075


def test_summarize_card_paid_cycle_is_not_overdue():
    card = make_card(autopay_enabled=True)
    cycle = make_cycle(card, payment_due_date=date(2025, 3, 15), payment_recorded_on=date(2025, 3, 14))

    summary = summarize_card(card, cycle, date(2025, 3, 20))

    assert summary.current_cycle.is_overdue is False
    assert summary.current_cycle.is_paid is True
    assert summary.recommended_payment_cents == 12_000


def test_days_since_statement_floors_at_zero():
    card = make_card()
    cycle = make_cycle(card, payment_due_date=date(2025, 3, 15), statement_date=date(2025, 2, 25))

    summary = summarize_card(card, cycle, date(2025, 2, 20))

    assert summary.current_cycle.days_since_statement == 0


def test_summarize_card_without_open_cycle():
    summary = summarize_card(make_card(), None, date(2025, 3, 1))

    assert summary.current_cycle is None
    assert summary.recommended_payment_cents == 0
    assert summary.total_statement_balance_cents == 0
    assert summary.upcoming_cycle.payment_due_date == date(2025, 4, 15)


def test_sort_summaries_by_nearest_due_date_stable():
    as_of = date(2025, 3, 1)
    late = make_card(nickname="late")
    early = make_card(nickname="early")
    tie_a = make_card(nickname="tie-a")
    tie_b = make_card(nickname="tie-b")

    summaries = [
        summarize_card(late, make_cycle(late, date(2025, 3, 28)), as_of),
        summarize_card(tie_a, make_cycle(tie_a, date(2025, 3, 20)), as_of),
        summarize_card(early, make_cycle(early, date(2025, 3, 5)), as_of),
        summarize_card(tie_b, make_cycle(tie_b, date(2025, 3, 20)), as_of),
    ]

    ordered = [s.credit_card_nickname for s in sort_summaries(summaries)]

    assert ordered == ["early", "tie-a", "tie-b", "late"]
