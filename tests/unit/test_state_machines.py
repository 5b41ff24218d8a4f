"""Unit tests for projected expense and savings goal lifecycles"""

import pytest

from agency_tracker.domain.exceptions import ConflictError, InvalidInputError
from agency_tracker.domain.models import ProjectedExpenseStatus, SavingsGoalStatus
from agency_tracker.domain.state_machines import (
    PROJECTED_EXPENSE_TRANSITIONS,
    SAVINGS_GOAL_TRANSITIONS,
    ensure_expense_deletable,
    ensure_expense_editable,
    ensure_expense_transition,
    ensure_goal_active,
    ensure_goal_transition,
    parse_expense_status,
)

ALLOWED_EXPENSE_MOVES = {
    ("planned", "committed"),
    ("planned", "cancelled"),
    ("committed", "paid"),
    ("committed", "cancelled"),
}


def test_transition_tables_are_closed_over_their_statuses():
    for source, targets in PROJECTED_EXPENSE_TRANSITIONS.items():
        assert set(targets) <= set(ProjectedExpenseStatus)
    assert set(PROJECTED_EXPENSE_TRANSITIONS) == set(ProjectedExpenseStatus)

    for source, targets in SAVINGS_GOAL_TRANSITIONS.items():
        assert set(targets) <= set(SavingsGoalStatus)
    assert set(SAVINGS_GOAL_TRANSITIONS) == set(SavingsGoalStatus)


@pytest.mark.parametrize("current", [s.value for s in ProjectedExpenseStatus])
@pytest.mark.parametrize("target", [s.value for s in ProjectedExpenseStatus])
def test_expense_transition_matrix(current, target):
    if (current, target) in ALLOWED_EXPENSE_MOVES:
        assert ensure_expense_transition(current, target) == ProjectedExpenseStatus(target)
    else:
        with pytest.raises(ConflictError) as exc_info:
            ensure_expense_transition(current, target)
        assert exc_info.value.message == f"Invalid projected expense transition from {current} to {target}"


def test_unknown_expense_status_is_invalid_input():
    with pytest.raises(InvalidInputError) as exc_info:
        ensure_expense_transition("planned", "archived")

    assert exc_info.value.field == "status"


def test_parse_expense_status_accepts_enum_and_string():
    assert parse_expense_status("paid") == ProjectedExpenseStatus.PAID
    assert parse_expense_status(ProjectedExpenseStatus.PAID) == ProjectedExpenseStatus.PAID


@pytest.mark.parametrize("status", ["planned", "committed"])
def test_open_expenses_are_editable(status):
    ensure_expense_editable(status)


@pytest.mark.parametrize("status", ["paid", "cancelled"])
def test_terminal_expenses_are_not_editable(status):
    with pytest.raises(ConflictError, match="cannot be updated"):
        ensure_expense_editable(status)


def test_only_planned_expenses_are_deletable():
    ensure_expense_deletable("planned")
    for status in ("committed", "paid", "cancelled"):
        with pytest.raises(ConflictError, match="Only planned"):
            ensure_expense_deletable(status)


def test_goal_transitions_only_leave_active():
    assert ensure_goal_transition("active", "completed", "be completed") == SavingsGoalStatus.COMPLETED
    assert ensure_goal_transition("active", "abandoned", "be abandoned") == SavingsGoalStatus.ABANDONED

    for current in ("completed", "abandoned"):
        for target in ("active", "completed", "abandoned"):
            with pytest.raises(ConflictError, match="Only active savings goals can be completed"):
                ensure_goal_transition(current, target, "be completed")


def test_goal_cannot_reactivate_itself():
    with pytest.raises(ConflictError):
        ensure_goal_transition("active", "active", "be reactivated")


def test_ensure_goal_active_message_names_action():
    ensure_goal_active("active", "receive contributions")

    with pytest.raises(ConflictError) as exc_info:
        ensure_goal_active("completed", "receive contributions")

    assert exc_info.value.message == "Only active savings goals can receive contributions"
