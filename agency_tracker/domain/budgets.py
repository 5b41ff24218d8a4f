"""Category budget period resolution and utilisation classification"""

from datetime import date
from typing import Iterable, Optional, Tuple

from agency_tracker.domain.models import BudgetEvaluation, BudgetPeriod, BudgetStatus, TransactionType
from agency_tracker.utils.date_utils import end_of_month, start_of_month

DEFAULT_WARNING_THRESHOLD = 0.85


def resolve_period_bounds(budget, reference_date: date) -> Tuple[Optional[date], Optional[date]]:
    """
    Window a budget applies to on a reference date.

    - Both explicit bounds set: use them
    - Monthly: fill any missing bound from the reference's calendar month
    - Cycle with one explicit bound: that bound only, other side open
    - Cycle with no bounds: the reference's calendar month
    """
    explicit_start = budget.period_start_date
    explicit_end = budget.period_end_date

    if explicit_start and explicit_end:
        return explicit_start, explicit_end

    if budget.period == BudgetPeriod.MONTHLY.value:
        return explicit_start or start_of_month(reference_date), explicit_end or end_of_month(reference_date)

    if explicit_start or explicit_end:
        return explicit_start, explicit_end

    return start_of_month(reference_date), end_of_month(reference_date)


def classify_utilisation(utilisation: float, warning_threshold: float) -> BudgetStatus:
    if utilisation >= 1.0:
        return BudgetStatus.OVER
    if utilisation >= warning_threshold:
        return BudgetStatus.WARNING
    return BudgetStatus.OK


def _matches(txn, category: str, start: Optional[date], end: Optional[date]) -> bool:
    if txn.type != TransactionType.EXPENSE.value or txn.is_pending:
        return False
    if (txn.category or "").strip().lower() != category:
        return False
    if start is not None and txn.transaction_date < start:
        return False
    if end is not None and txn.transaction_date > end:
        return False
    return True


def calculate_category_spend(
    transactions: Iterable, category: str, start: Optional[date], end: Optional[date]
) -> int:
    """Sum of absolute settled expense amounts for a category inside the bounds"""
    normalized = (category or "").strip().lower()
    return sum(abs(txn.amount_cents) for txn in transactions if _matches(txn, normalized, start, end))


def evaluate_category_budget(
    budget,
    reference_date: date,
    transactions: Iterable,
    default_warning_threshold: float = DEFAULT_WARNING_THRESHOLD,
) -> BudgetEvaluation:
    """
    Evaluate spend against a budget's limit.

    Status thresholds:
    - over:    utilisation >= 1.0
    - warning: utilisation >= warning threshold (default 0.85)
    - ok:      otherwise

    Example:
        limit 10000, threshold 0.85: spent 8499 -> ok, 8500 -> warning, 10000 -> over
    """
    start, end = resolve_period_bounds(budget, reference_date)
    spent = calculate_category_spend(transactions, budget.category, start, end)

    limit = budget.limit_amount_cents or 0
    warning_threshold = (
        float(budget.warning_threshold) if budget.warning_threshold is not None else default_warning_threshold
    )
    utilisation = spent / limit if limit else 0.0

    return BudgetEvaluation(
        period_start_date=start,
        period_end_date=end,
        spent_amount_cents=spent,
        remaining_amount_cents=max(limit - spent, 0),
        utilisation=utilisation,
        warning_threshold=warning_threshold,
        status=classify_utilisation(utilisation, warning_threshold).value,
    )
