"""Credit card billing cycle calculations from day-of-month configuration"""

from datetime import date
from typing import List, Optional

from agency_tracker.domain.models import (
    CurrentCycleSummary,
    PaymentCycleSummary,
    UpcomingCycle,
)
from agency_tracker.utils.date_utils import build_monthly_date, diff_in_days


def next_monthly_occurrence(reference: date, day_of_month: int) -> date:
    """This month's day if it is on/after the reference, otherwise next month's"""
    candidate = build_monthly_date(reference.year, reference.month, day_of_month)

    if candidate < reference:
        candidate = build_monthly_date(reference.year, reference.month + 1, day_of_month)

    return candidate


def cycle_start_for_statement(statement_date: date, anchor_day: int) -> date:
    """
    Start of the spending cycle that closes on statement_date.

    The anchor day precedes the statement day within one cycle, so an anchor
    day after the statement day belongs to the previous month.
    """
    if anchor_day > statement_date.day:
        return build_monthly_date(statement_date.year, statement_date.month - 1, anchor_day)

    return build_monthly_date(statement_date.year, statement_date.month, anchor_day)


def due_date_for_statement(statement_date: date, due_day: int) -> date:
    """Payment due date for a statement; always strictly after the statement"""
    due_date = build_monthly_date(statement_date.year, statement_date.month, due_day)

    if due_date <= statement_date:
        due_date = build_monthly_date(statement_date.year, statement_date.month + 1, due_day)

    return due_date


def compute_upcoming_cycle(card, reference_date: date) -> UpcomingCycle:
    """
    Derive the next statement, cycle start and due dates for a card.

    Args:
        card: Any object with statement_day, payment_due_day and cycle_anchor_day
        reference_date: Day the countdowns are measured from
    """
    statement_date = next_monthly_occurrence(reference_date, card.statement_day)
    payment_due_date = due_date_for_statement(statement_date, card.payment_due_day)
    cycle_start_date = cycle_start_for_statement(statement_date, card.cycle_anchor_day)

    return UpcomingCycle(
        cycle_start_date=cycle_start_date,
        statement_date=statement_date,
        payment_due_date=payment_due_date,
        days_until_statement=diff_in_days(reference_date, statement_date),
        days_until_payment_due=diff_in_days(reference_date, payment_due_date),
    )


def summarize_current_cycle(cycle, as_of: date) -> CurrentCycleSummary:
    """Countdown and status flags for an open cycle"""
    is_paid = cycle.payment_recorded_on is not None
    due_date = cycle.payment_due_date

    return CurrentCycleSummary(
        id=cycle.id,
        cycle_number=cycle.cycle_number,
        cycle_start_date=cycle.cycle_start_date,
        statement_date=cycle.statement_date,
        payment_due_date=due_date,
        statement_balance_cents=cycle.statement_balance_cents,
        minimum_payment_cents=cycle.minimum_payment_cents,
        payment_recorded_on=cycle.payment_recorded_on,
        days_until_payment_due=diff_in_days(as_of, due_date),
        days_since_statement=max(diff_in_days(cycle.statement_date, as_of), 0),
        is_overdue=due_date < as_of and not is_paid,
        is_paid=is_paid,
    )


def recommended_payment_cents(card, open_cycle) -> int:
    """Minimum payment under autopay, otherwise the full statement balance"""
    if open_cycle is None:
        return 0
    if card.autopay_enabled:
        return open_cycle.minimum_payment_cents
    return open_cycle.statement_balance_cents


def summarize_card(card, open_cycle, as_of: date) -> PaymentCycleSummary:
    """Combine a card's open cycle (if any) with its computed upcoming cycle"""
    return PaymentCycleSummary(
        credit_card_id=card.id,
        credit_card_nickname=card.nickname,
        credit_card_issuer=card.issuer,
        credit_card_last_four=card.last_four,
        autopay_enabled=bool(card.autopay_enabled),
        calculated_for=as_of,
        recommended_payment_cents=recommended_payment_cents(card, open_cycle),
        total_statement_balance_cents=open_cycle.statement_balance_cents if open_cycle else 0,
        current_cycle=summarize_current_cycle(open_cycle, as_of) if open_cycle else None,
        upcoming_cycle=compute_upcoming_cycle(card, as_of),
    )


def sort_summaries(summaries: List[PaymentCycleSummary]) -> List[PaymentCycleSummary]:
    """
    Order summaries by nearest known due date.

    Summaries without any due date go last; ties keep their input order.
    """

    def sort_key(summary: PaymentCycleSummary) -> tuple[bool, Optional[date]]:
        due = summary.nearest_due_date
        return (due is None, due or date.min)

    return sorted(summaries, key=sort_key)
