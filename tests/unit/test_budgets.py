"""Unit tests for category budget evaluation"""

from datetime import date

import pytest

from agency_tracker.domain.budgets import (
    calculate_category_spend,
    classify_utilisation,
    evaluate_category_budget,
    resolve_period_bounds,
)
from agency_tracker.domain.models import BudgetStatus, CategoryBudget, Transaction

REFERENCE = date(2025, 3, 14)


def expense(amount_cents, day=10, category="Groceries", is_pending=False, month=3):
    return Transaction(
        type="expense",
        amount_cents=amount_cents,
        transaction_date=date(2025, month, day),
        category=category,
        is_pending=is_pending,
    )


@pytest.mark.parametrize(
    "spent,status",
    [(8_499, "ok"), (8_500, "warning"), (9_999, "warning"), (10_000, "over"), (12_000, "over")],
)
def test_budget_status_boundaries(spent, status):
    budget = CategoryBudget(category="Groceries", limit_amount_cents=10_000)

    evaluation = evaluate_category_budget(budget, REFERENCE, [expense(-spent)])

    assert evaluation.status == status
    assert evaluation.spent_amount_cents == spent
    assert evaluation.remaining_amount_cents == max(10_000 - spent, 0)


def test_explicit_warning_threshold_overrides_default():
    budget = CategoryBudget(category="Groceries", limit_amount_cents=10_000, warning_threshold=0.5)

    evaluation = evaluate_category_budget(budget, REFERENCE, [expense(-5_000)])

    assert evaluation.status == "warning"
    assert evaluation.warning_threshold == 0.5


def test_spend_excludes_pending_other_categories_and_out_of_period():
    transactions = [
        expense(-1_000),
        expense(-2_000, category="  groceries "),
        expense(-4_000, is_pending=True),
        expense(-8_000, category="Dining"),
        expense(-16_000, month=2),
        Transaction(type="income", amount_cents=32_000, transaction_date=date(2025, 3, 3), category="Groceries"),
    ]

    assert calculate_category_spend(transactions, "Groceries", date(2025, 3, 1), date(2025, 3, 31)) == 3_000


def test_monthly_budget_defaults_to_calendar_month():
    budget = CategoryBudget(category="Groceries", limit_amount_cents=10_000)

    assert resolve_period_bounds(budget, REFERENCE) == (date(2025, 3, 1), date(2025, 3, 31))


def test_monthly_budget_fills_only_missing_bound():
    budget = CategoryBudget(category="Groceries", limit_amount_cents=10_000, period_start_date=date(2025, 3, 5))

    assert resolve_period_bounds(budget, REFERENCE) == (date(2025, 3, 5), date(2025, 3, 31))


def test_cycle_budget_with_one_bound_is_open_ended():
    budget = CategoryBudget(
        category="Groceries", limit_amount_cents=10_000, period="cycle", period_start_date=date(2025, 2, 20)
    )

    start, end = resolve_period_bounds(budget, REFERENCE)
    assert (start, end) == (date(2025, 2, 20), None)

    evaluation = evaluate_category_budget(budget, REFERENCE, [expense(-1_000, month=4), expense(-500, day=19, month=2)])
    assert evaluation.spent_amount_cents == 1_000


def test_cycle_budget_without_bounds_uses_calendar_month():
    budget = CategoryBudget(category="Groceries", limit_amount_cents=10_000, period="cycle")

    assert resolve_period_bounds(budget, REFERENCE) == (date(2025, 3, 1), date(2025, 3, 31))


def test_explicit_bounds_win():
    budget = CategoryBudget(
        category="Groceries",
        limit_amount_cents=10_000,
        period_start_date=date(2025, 2, 15),
        period_end_date=date(2025, 3, 14),
    )

    assert resolve_period_bounds(budget, REFERENCE) == (date(2025, 2, 15), date(2025, 3, 14))


def test_zero_limit_has_zero_utilisation():
    budget = CategoryBudget(category="Groceries", limit_amount_cents=0)

    evaluation = evaluate_category_budget(budget, REFERENCE, [expense(-500)])

    assert evaluation.utilisation == 0.0
    assert evaluation.status == "ok"
    assert evaluation.remaining_amount_cents == 0


def test_classify_utilisation():
    assert classify_utilisation(1.0, 0.85) == BudgetStatus.OVER
    assert classify_utilisation(0.85, 0.85) == BudgetStatus.WARNING
    assert classify_utilisation(0.2, 0.85) == BudgetStatus.OK
