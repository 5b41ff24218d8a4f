"""Savings goal ledger arithmetic"""

from typing import Iterable

from agency_tracker.domain.models import SavingsGoalStatus


def outstanding_cents(target_amount_cents: int, total_contributions_cents: int) -> int:
    """Amount still needed to reach a goal (never negative)"""
    return max(target_amount_cents - (total_contributions_cents or 0), 0)


def sum_outstanding_commitments(goals: Iterable) -> int:
    """
    Committed-but-unmet savings across a user's active goals.

    Args:
        goals: Objects with status, target_amount_cents and total_contributions_cents
    """
    return sum(
        outstanding_cents(goal.target_amount_cents, goal.total_contributions_cents)
        for goal in goals
        if goal.status == SavingsGoalStatus.ACTIVE.value
    )
