"""Agency engine - aggregates obligations, income and credit into spending capacity"""

from dataclasses import dataclass
from datetime import date
from typing import Iterable, List, Optional, Tuple

from agency_tracker.domain.income import DEFAULT_MAX_STEPS, project_income_occurrences
from agency_tracker.domain.models import (
    AgencyFigures,
    AgencyWarning,
    SnapshotAssessment,
    TransactionType,
)
from agency_tracker.utils.date_utils import add_days
from agency_tracker.utils.money import percent_of, round_half_up


@dataclass(frozen=True)
class AgencyConfig:
    """Tunable constants for the agency calculation"""

    lookahead_days: int = 45
    credit_buffer_percent: float = 0.05
    recurrence_max_steps: int = DEFAULT_MAX_STEPS

    @classmethod
    def from_settings(cls, settings) -> "AgencyConfig":
        return cls(
            lookahead_days=settings.agency_lookahead_days,
            credit_buffer_percent=settings.agency_credit_buffer_percent,
            recurrence_max_steps=settings.recurrence_max_steps,
        )


# (minimum percent, level) from most to least severe
THRESHOLD_LEVELS: Tuple[Tuple[int, str], ...] = (
    (95, "critical"),
    (85, "warning"),
    (75, "caution"),
)

WARNING_LEVEL_PRIORITY = {"critical": 0, "warning": 1, "caution": 2}

BACKED_AGENCY_MESSAGES = {
    95: "Projected obligations are consuming at least 95% of expected income for the next {days} days. "
    "Only essential purchases are recommended.",
    85: "Projected obligations are consuming at least 85% of expected income for the next {days} days. "
    "Plan for limited backed agency.",
    75: "Projected obligations are consuming at least 75% of expected income for the next {days} days. "
    "Monitor discretionary spending.",
}

CREDIT_UTILIZATION_MESSAGES = {
    95: "Credit utilization across tracked cards is above 95%. Make a payment immediately to avoid interest risk.",
    85: "Credit utilization across tracked cards is above 85%. Consider paying down balances soon.",
    75: "Credit utilization across tracked cards is above 75%. Keep balances from climbing further.",
}

SAFE_TO_SPEND_MESSAGE = (
    "Projected expenses and savings commitments fully consume expected income. "
    "Pause discretionary spending until obligations are covered."
)


def agency_window(calculated_for: date, config: AgencyConfig) -> Tuple[date, date]:
    """Inclusive [start, end] lookahead window"""
    return calculated_for, add_days(calculated_for, config.lookahead_days)


def calculate_agency(
    calculated_for: date,
    credit_cards: Iterable,
    open_cycles: Iterable,
    transactions: Iterable,
    income_streams: Iterable,
    config: AgencyConfig = AgencyConfig(),
    projected_expense_total_cents: int = 0,
    savings_commitments_cents: int = 0,
) -> AgencyFigures:
    """
    Compute agency figures for one user and date.

    Inputs are already scoped to the user: active cards, open cycles of those
    cards, transactions dated inside the window and active income streams.

    Steps:
    1. Credit: total limit, outstanding statement balances, available credit
    2. Obligations: expense transactions in window + minimum payments due in window
    3. Income: occurrences per stream in window x per-occurrence payout
    4. Buffer: fixed share of total credit limit held back
    5. Credit agency: available - buffer - obligations not covered by income
    6. Backed agency: income left after obligations

    Example (limit $10,000, balance $2,640.75, minimum $120 due in window,
    $4,200 monthly pay in window):
        available = 735,925; buffer = 50,000; uncovered = 0
        credit agency = 685,925; backed agency = 408,000
    """
    start, end = agency_window(calculated_for, config)
    credit_cards = list(credit_cards)
    open_cycles = list(open_cycles)

    total_credit_limit = sum(card.credit_limit_cents for card in credit_cards)
    outstanding_balance = sum(cycle.statement_balance_cents for cycle in open_cycles)
    available_credit = max(total_credit_limit - outstanding_balance, 0)

    pending_expenses = sum(
        abs(txn.amount_cents)
        for txn in transactions
        if txn.type == TransactionType.EXPENSE.value and start <= txn.transaction_date <= end
    )

    minimum_payments = sum(
        cycle.minimum_payment_cents
        for cycle in open_cycles
        if cycle.payment_due_date is not None and start <= cycle.payment_due_date <= end
    )

    projected_obligations = pending_expenses + minimum_payments

    upcoming_income = sum(
        project_income_occurrences(stream, start, end, max_steps=config.recurrence_max_steps).total_cents
        for stream in income_streams
    )

    uncovered_obligations = max(projected_obligations - upcoming_income, 0)
    buffer = percent_of(total_credit_limit, config.credit_buffer_percent)

    credit_agency = max(available_credit - buffer - uncovered_obligations, 0)
    backed_agency = max(upcoming_income - projected_obligations, 0)

    safe_to_spend = max(
        upcoming_income - projected_obligations - projected_expense_total_cents - savings_commitments_cents,
        0,
    )

    return AgencyFigures(
        total_credit_limit_cents=total_credit_limit,
        outstanding_balance_cents=outstanding_balance,
        available_credit_cents=available_credit,
        pending_expenses_cents=pending_expenses,
        minimum_payments_cents=minimum_payments,
        projected_obligations_cents=projected_obligations,
        upcoming_income_cents=upcoming_income,
        uncovered_obligations_cents=uncovered_obligations,
        buffer_cents=buffer,
        credit_agency_cents=credit_agency,
        backed_agency_cents=backed_agency,
        projected_expense_total_cents=projected_expense_total_cents,
        savings_commitments_cents=savings_commitments_cents,
        safe_to_spend_cents=safe_to_spend,
    )


def classify_threshold(percent: int) -> Optional[Tuple[int, str]]:
    """Map a percentage to (threshold, level), or None below the lowest threshold"""
    for threshold, level in THRESHOLD_LEVELS:
        if percent >= threshold:
            return threshold, level
    return None


def backed_coverage_percent(projected_obligations_cents: int, upcoming_income_cents: int) -> int:
    """Share of expected income already spoken for by obligations, capped at 100"""
    if upcoming_income_cents:
        return min(round_half_up(projected_obligations_cents / upcoming_income_cents * 100), 100)
    return 100 if projected_obligations_cents > 0 else 0


def credit_utilization_percent(total_credit_limit_cents: int, available_credit_cents: int) -> Optional[int]:
    if total_credit_limit_cents <= 0:
        return None
    used = total_credit_limit_cents - available_credit_cents
    return min(round_half_up(used / total_credit_limit_cents * 100), 100)


def assess_snapshot(snapshot, total_credit_limit_cents: int, config: AgencyConfig = AgencyConfig()) -> SnapshotAssessment:
    """
    Attach coverage/utilization percentages and threshold warnings to a snapshot.

    Warnings are ordered critical -> warning -> caution.
    """
    projected_obligations = snapshot.projected_obligations_cents or 0
    upcoming_income = snapshot.upcoming_income_cents or 0
    safe_to_spend = snapshot.safe_to_spend_cents or 0

    coverage = backed_coverage_percent(projected_obligations, upcoming_income)
    utilization = credit_utilization_percent(total_credit_limit_cents, snapshot.available_credit_cents or 0)

    warnings: List[AgencyWarning] = []

    backed = classify_threshold(coverage)
    if backed:
        threshold, level = backed
        warnings.append(
            AgencyWarning(
                type="backed_agency",
                level=level,
                threshold=threshold,
                percent=coverage,
                message=BACKED_AGENCY_MESSAGES[threshold].format(days=config.lookahead_days),
            )
        )

    if utilization is not None:
        credit = classify_threshold(utilization)
        if credit:
            threshold, level = credit
            warnings.append(
                AgencyWarning(
                    type="credit_utilization",
                    level=level,
                    threshold=threshold,
                    percent=utilization,
                    message=CREDIT_UTILIZATION_MESSAGES[threshold],
                )
            )

    if safe_to_spend <= 0 and projected_obligations > 0:
        warnings.append(
            AgencyWarning(
                type="safe_to_spend",
                level="critical",
                threshold=0,
                percent=100,
                message=SAFE_TO_SPEND_MESSAGE,
            )
        )

    warnings.sort(key=lambda w: WARNING_LEVEL_PRIORITY[w.level])

    return SnapshotAssessment(
        total_credit_limit_cents=total_credit_limit_cents,
        backed_coverage_percent=coverage,
        credit_utilization_percent=utilization,
        warnings=warnings,
    )
