"""Lifecycle transition tables for projected expenses and savings goals"""

from typing import FrozenSet, Mapping

from agency_tracker.domain.exceptions import ConflictError, InvalidInputError
from agency_tracker.domain.models import ProjectedExpenseStatus, SavingsGoalStatus

PROJECTED_EXPENSE_TRANSITIONS: Mapping[ProjectedExpenseStatus, FrozenSet[ProjectedExpenseStatus]] = {
    ProjectedExpenseStatus.PLANNED: frozenset({ProjectedExpenseStatus.COMMITTED, ProjectedExpenseStatus.CANCELLED}),
    ProjectedExpenseStatus.COMMITTED: frozenset({ProjectedExpenseStatus.PAID, ProjectedExpenseStatus.CANCELLED}),
    ProjectedExpenseStatus.PAID: frozenset(),
    ProjectedExpenseStatus.CANCELLED: frozenset(),
}

SAVINGS_GOAL_TRANSITIONS: Mapping[SavingsGoalStatus, FrozenSet[SavingsGoalStatus]] = {
    SavingsGoalStatus.ACTIVE: frozenset({SavingsGoalStatus.COMPLETED, SavingsGoalStatus.ABANDONED}),
    SavingsGoalStatus.COMPLETED: frozenset(),
    SavingsGoalStatus.ABANDONED: frozenset(),
}

# Statuses in which free-form field edits are still accepted
EDITABLE_EXPENSE_STATUSES = frozenset({ProjectedExpenseStatus.PLANNED, ProjectedExpenseStatus.COMMITTED})
DELETABLE_EXPENSE_STATUSES = frozenset({ProjectedExpenseStatus.PLANNED})


def parse_expense_status(value: object) -> ProjectedExpenseStatus:
    try:
        return ProjectedExpenseStatus(value)
    except ValueError as e:
        raise InvalidInputError(f"Unknown projected expense status: {value}", field="status") from e


def parse_goal_status(value: object) -> SavingsGoalStatus:
    try:
        return SavingsGoalStatus(value)
    except ValueError as e:
        raise InvalidInputError(f"Unknown savings goal status: {value}", field="status") from e


def allowed_expense_transitions(status: object) -> FrozenSet[ProjectedExpenseStatus]:
    return PROJECTED_EXPENSE_TRANSITIONS[parse_expense_status(status)]


def ensure_expense_transition(current: object, target: object) -> ProjectedExpenseStatus:
    """
    Validate a projected expense transition.

    Returns:
        The target status as an enum

    Raises:
        InvalidInputError: Target is not a known status
        ConflictError: Target is not reachable from the current status
    """
    target_status = parse_expense_status(target)
    if target_status not in allowed_expense_transitions(current):
        raise ConflictError(
            f"Invalid projected expense transition from {ProjectedExpenseStatus(current).value} "
            f"to {target_status.value}"
        )
    return target_status


def ensure_expense_editable(status: object) -> None:
    if parse_expense_status(status) not in EDITABLE_EXPENSE_STATUSES:
        raise ConflictError("Completed projected expenses cannot be updated")


def ensure_expense_deletable(status: object) -> None:
    if parse_expense_status(status) not in DELETABLE_EXPENSE_STATUSES:
        raise ConflictError("Only planned projected expenses can be deleted")


def ensure_goal_active(status: object, action: str) -> None:
    """Edits, contributions and terminal transitions all require an active goal"""
    if parse_goal_status(status) != SavingsGoalStatus.ACTIVE:
        raise ConflictError(f"Only active savings goals can {action}")


def ensure_goal_transition(current: object, target: object, action: str) -> SavingsGoalStatus:
    target_status = parse_goal_status(target)
    if target_status not in SAVINGS_GOAL_TRANSITIONS[parse_goal_status(current)]:
        raise ConflictError(f"Only active savings goals can {action}")
    return target_status
