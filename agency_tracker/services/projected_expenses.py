"""Projected expense lifecycle: planned -> committed -> paid, or cancelled"""

import uuid
from datetime import date
from typing import Any, Dict, Iterable, List, Optional, Union

from sqlalchemy.orm import Session

from agency_tracker.domain.exceptions import ConflictError, InvalidInputError, NotFoundError
from agency_tracker.domain.models import CurrentUser, ProjectedExpenseStatus, ProjectedExpenseTemplate
from agency_tracker.domain.state_machines import (
    ensure_expense_deletable,
    ensure_expense_editable,
    ensure_expense_transition,
    parse_expense_status,
)
from agency_tracker.domain.templates import PROJECTED_EXPENSE_TEMPLATES, find_template
from agency_tracker.infrastructure.database.models import ProjectedExpense
from agency_tracker.infrastructure.database.repositories import ProjectedExpenseRepository
from agency_tracker.infrastructure.observability.logging import log_transition
from agency_tracker.infrastructure.observability.metrics import (
    state_transition_conflict_counter,
    state_transition_counter,
)
from agency_tracker.services.access import Clock, ClockMixin, ensure_owned, resolve_target_user_id, utc_now
from agency_tracker.utils.date_utils import add_days, parse_iso_date

ENTITY = "projected_expense"

EDITABLE_FIELDS = ("amount_cents", "category", "expected_date", "notes", "credit_card_id")


class ProjectedExpenseService(ClockMixin):
    """Create, edit and move projected expenses through their lifecycle"""

    def __init__(self, db: Session, clock: Clock = utc_now):
        self.db = db
        self.clock = clock
        self.repo = ProjectedExpenseRepository(db)

    def list_projected_expenses(
        self,
        current_user: CurrentUser,
        user_id: Optional[uuid.UUID] = None,
        statuses: Optional[Iterable[str]] = None,
    ) -> List[ProjectedExpense]:
        target_user_id = resolve_target_user_id(self.db, current_user, user_id)
        normalized = [parse_expense_status(s).value for s in statuses] if statuses else None
        return self.repo.get_by_user(target_user_id, statuses=normalized)

    def get_projected_expense(self, current_user: CurrentUser, expense_id: uuid.UUID) -> ProjectedExpense:
        expense = self.repo.get_by_id(expense_id)
        ensure_owned(current_user, expense, expense.user_id if expense else None, "Projected expense")
        return expense

    def create_projected_expense(
        self,
        current_user: CurrentUser,
        amount_cents: int,
        category: str,
        expected_date: Union[date, str],
        notes: Optional[str] = None,
        credit_card_id: Optional[uuid.UUID] = None,
        user_id: Optional[uuid.UUID] = None,
    ) -> ProjectedExpense:
        target_user_id = resolve_target_user_id(self.db, current_user, user_id)
        fields = self._validated_fields(
            {
                "amount_cents": amount_cents,
                "category": category,
                "expected_date": expected_date,
                "notes": notes,
                "credit_card_id": credit_card_id,
            }
        )

        expense = self.repo.create(
            id=uuid.uuid4(),
            user_id=target_user_id,
            status=ProjectedExpenseStatus.PLANNED.value,
            **fields,
        )
        self.db.commit()
        return expense

    def update_projected_expense(
        self, current_user: CurrentUser, expense_id: uuid.UUID, updates: Dict[str, Any]
    ) -> ProjectedExpense:
        """
        Edit free-form fields while the expense is planned or committed.

        Raises:
            ConflictError: Expense is paid or cancelled
        """
        expense = self.get_projected_expense(current_user, expense_id)
        ensure_expense_editable(expense.status)

        fields = self._validated_fields({k: v for k, v in updates.items() if k in EDITABLE_FIELDS})
        if not fields:
            return expense

        self.repo.update_fields(expense, fields)
        self.db.commit()
        return expense

    def transition_projected_expense(
        self,
        current_user: CurrentUser,
        expense_id: uuid.UUID,
        target_status: Union[ProjectedExpenseStatus, str],
        transaction_id: Optional[uuid.UUID] = None,
        reason: Optional[str] = None,
    ) -> ProjectedExpense:
        """
        Move an expense to a new status and stamp the matching timestamp.

        The write is conditioned on the status read here, so a concurrent
        transition makes this one fail instead of overwriting it.

        Raises:
            InvalidInputError: Unknown target status
            ConflictError: Transition not allowed, or status changed concurrently
        """
        expense = self.get_projected_expense(current_user, expense_id)
        current_status = expense.status

        try:
            target = ensure_expense_transition(current_status, target_status)
        except ConflictError:
            state_transition_conflict_counter.labels(entity=ENTITY).inc()
            raise

        now = self.now()
        updates: Dict[str, Any] = {"status": target.value}
        if target == ProjectedExpenseStatus.COMMITTED:
            updates["committed_at"] = now
        elif target == ProjectedExpenseStatus.PAID:
            updates["paid_at"] = now
            updates["transaction_id"] = transaction_id
        elif target == ProjectedExpenseStatus.CANCELLED:
            updates["cancelled_at"] = now
            updates["cancelled_reason"] = reason

        if not self.repo.transition_status(expense.id, current_status, updates):
            self.db.rollback()
            state_transition_conflict_counter.labels(entity=ENTITY).inc()
            raise ConflictError("Projected expense was changed concurrently; reload and retry")

        self.db.commit()
        state_transition_counter.labels(entity=ENTITY, to_status=target.value).inc()
        log_transition(ENTITY, str(expense.id), current_status, target.value)

        return self.repo.get_by_id(expense.id)

    def commit_projected_expense(self, current_user: CurrentUser, expense_id: uuid.UUID) -> ProjectedExpense:
        return self.transition_projected_expense(current_user, expense_id, ProjectedExpenseStatus.COMMITTED)

    def mark_projected_expense_paid(
        self, current_user: CurrentUser, expense_id: uuid.UUID, transaction_id: Optional[uuid.UUID] = None
    ) -> ProjectedExpense:
        return self.transition_projected_expense(
            current_user, expense_id, ProjectedExpenseStatus.PAID, transaction_id=transaction_id
        )

    def cancel_projected_expense(
        self, current_user: CurrentUser, expense_id: uuid.UUID, reason: Optional[str] = None
    ) -> ProjectedExpense:
        return self.transition_projected_expense(
            current_user, expense_id, ProjectedExpenseStatus.CANCELLED, reason=reason
        )

    def delete_projected_expense(self, current_user: CurrentUser, expense_id: uuid.UUID) -> None:
        """
        Raises:
            ConflictError: Expense is no longer planned
        """
        expense = self.get_projected_expense(current_user, expense_id)
        ensure_expense_deletable(expense.status)

        if not self.repo.delete_if_status(expense.id, ProjectedExpenseStatus.PLANNED.value):
            self.db.rollback()
            raise ConflictError("Only planned projected expenses can be deleted")

        self.db.commit()

    def list_templates(self) -> List[ProjectedExpenseTemplate]:
        return list(PROJECTED_EXPENSE_TEMPLATES)

    def create_from_template(
        self,
        current_user: CurrentUser,
        template_id: str,
        expected_date: Union[date, str, None] = None,
        reference_date: Union[date, str, None] = None,
        amount_cents: Optional[int] = None,
        category: Optional[str] = None,
        notes: Optional[str] = None,
        credit_card_id: Optional[uuid.UUID] = None,
        user_id: Optional[uuid.UUID] = None,
    ) -> ProjectedExpense:
        """
        Plan an expense from a template, overriding any of its defaults.

        Expected date falls back to reference date (default today) plus the
        template's day offset.

        Raises:
            NotFoundError: Unknown template
            InvalidInputError: Amount not positive or category blank
        """
        template = find_template(template_id)
        if template is None:
            raise NotFoundError("Projected expense template not found")

        resolved_expected = parse_iso_date(expected_date, field="expected_date")
        if resolved_expected is None:
            reference = parse_iso_date(reference_date, field="reference_date") or self.today()
            resolved_expected = add_days(reference, template.default_expected_day_offset)

        if notes is not None:
            notes = notes.strip() or None
        else:
            notes = template.default_notes

        return self.create_projected_expense(
            current_user,
            amount_cents=amount_cents if amount_cents is not None else template.default_amount_cents,
            category=category if category is not None else template.default_category,
            expected_date=resolved_expected,
            notes=notes,
            credit_card_id=credit_card_id,
            user_id=user_id,
        )

    def _validated_fields(self, fields: Dict[str, Any]) -> Dict[str, Any]:
        """Check editable fields before anything is written"""
        validated: Dict[str, Any] = {}

        for key, value in fields.items():
            if key == "amount_cents":
                if not isinstance(value, int) or isinstance(value, bool) or value <= 0:
                    raise InvalidInputError("Amount must be provided as a positive integer", field="amount_cents")
            elif key == "category":
                value = (value or "").strip()
                if not value:
                    raise InvalidInputError("A category is required for this projected expense", field="category")
            elif key == "expected_date":
                value = parse_iso_date(value, field="expected_date")
                if value is None:
                    raise InvalidInputError("An expected date is required for the projected expense", field="expected_date")
            validated[key] = value

        return validated
