"""Category budget CRUD and utilisation summaries"""

import uuid
from dataclasses import dataclass
from datetime import date
from typing import Any, Dict, List, Optional, Union

from sqlalchemy.orm import Session

from agency_tracker.config import settings
from agency_tracker.domain.budgets import evaluate_category_budget, resolve_period_bounds
from agency_tracker.domain.exceptions import ConflictError, InvalidInputError
from agency_tracker.domain.models import BudgetEvaluation, BudgetPeriod, CurrentUser
from agency_tracker.infrastructure.database.models import CategoryBudget
from agency_tracker.infrastructure.database.repositories import CategoryBudgetRepository, TransactionRepository
from agency_tracker.infrastructure.observability.metrics import category_budget_status_counter
from agency_tracker.services.access import Clock, ClockMixin, ensure_owned, resolve_target_user_id, utc_now
from agency_tracker.utils.date_utils import parse_iso_date

EDITABLE_FIELDS = (
    "category",
    "period",
    "limit_amount_cents",
    "warning_threshold",
    "period_start_date",
    "period_end_date",
    "is_active",
)


@dataclass
class CategoryBudgetSummary:
    budget: CategoryBudget
    evaluation: BudgetEvaluation


def parse_budget_period(value: Any) -> BudgetPeriod:
    if value is None:
        return BudgetPeriod.MONTHLY
    try:
        return BudgetPeriod(value)
    except ValueError as e:
        raise InvalidInputError(f"Unknown budget period: {value}", field="period") from e


class CategoryBudgetService(ClockMixin):
    """Spending limits per category and how much of each is used"""

    def __init__(
        self,
        db: Session,
        clock: Clock = utc_now,
        default_warning_threshold: Optional[float] = None,
    ):
        self.db = db
        self.clock = clock
        self.repo = CategoryBudgetRepository(db)
        self.default_warning_threshold = (
            default_warning_threshold
            if default_warning_threshold is not None
            else settings.budget_default_warning_threshold
        )

    def list_category_budgets(
        self,
        current_user: CurrentUser,
        include_inactive: bool = False,
        user_id: Optional[uuid.UUID] = None,
    ) -> List[CategoryBudget]:
        target_user_id = resolve_target_user_id(self.db, current_user, user_id)
        return self.repo.get_by_user(target_user_id, include_inactive=include_inactive)

    def get_category_budget(self, current_user: CurrentUser, budget_id: uuid.UUID) -> CategoryBudget:
        budget = self.repo.get_by_id(budget_id)
        ensure_owned(current_user, budget, budget.user_id if budget else None, "Category budget")
        return budget

    def list_category_budget_summaries(
        self,
        current_user: CurrentUser,
        reference_date: Union[date, str, None] = None,
        include_inactive: bool = False,
        user_id: Optional[uuid.UUID] = None,
    ) -> List[CategoryBudgetSummary]:
        """
        Evaluate every budget against settled spend on the reference date.

        Raises:
            InvalidInputError: reference_date is not a valid ISO date
        """
        target_user_id = resolve_target_user_id(self.db, current_user, user_id)
        reference = parse_iso_date(reference_date, field="reference_date") or self.today()

        transactions = TransactionRepository(self.db)
        summaries = []
        for budget in self.repo.get_by_user(target_user_id, include_inactive=include_inactive):
            start, end = resolve_period_bounds(budget, reference)
            spend = transactions.get_settled_category_expenses(target_user_id, budget.category, start, end)

            evaluation = evaluate_category_budget(
                budget, reference, spend, default_warning_threshold=self.default_warning_threshold
            )
            category_budget_status_counter.labels(status=evaluation.status).inc()
            summaries.append(CategoryBudgetSummary(budget=budget, evaluation=evaluation))

        return summaries

    def create_category_budget(
        self,
        current_user: CurrentUser,
        category: str,
        limit_amount_cents: int,
        period: Union[BudgetPeriod, str, None] = None,
        warning_threshold: Optional[float] = None,
        period_start_date: Union[date, str, None] = None,
        period_end_date: Union[date, str, None] = None,
        user_id: Optional[uuid.UUID] = None,
    ) -> CategoryBudget:
        """
        Raises:
            InvalidInputError: Blank category, non-positive limit, bad threshold or dates
            ConflictError: A budget for this category and period already exists
        """
        target_user_id = resolve_target_user_id(self.db, current_user, user_id)
        fields = self._validated_fields(
            {
                "category": category,
                "period": period,
                "limit_amount_cents": limit_amount_cents,
                "warning_threshold": (
                    warning_threshold if warning_threshold is not None else self.default_warning_threshold
                ),
                "period_start_date": period_start_date,
                "period_end_date": period_end_date,
            }
        )

        if self.repo.get_by_key(target_user_id, fields["category"], fields["period"]) is not None:
            raise self._duplicate(fields["category"], fields["period"])

        budget = self.repo.create(id=uuid.uuid4(), user_id=target_user_id, is_active=True, **fields)
        self.db.commit()
        return budget

    def update_category_budget(
        self, current_user: CurrentUser, budget_id: uuid.UUID, updates: Dict[str, Any]
    ) -> CategoryBudget:
        budget = self.get_category_budget(current_user, budget_id)

        fields = self._validated_fields({k: v for k, v in updates.items() if k in EDITABLE_FIELDS})
        if not fields:
            return budget

        start = fields.get("period_start_date", budget.period_start_date)
        end = fields.get("period_end_date", budget.period_end_date)
        if start is not None and end is not None and end < start:
            raise InvalidInputError("Period end date cannot be before the start date", field="period_end_date")

        category = fields.get("category", budget.category)
        period = fields.get("period", budget.period)
        existing = self.repo.get_by_key(budget.user_id, category, period)
        if existing is not None and existing.id != budget.id:
            raise self._duplicate(category, period)

        self.repo.update_fields(budget, fields)
        self.db.commit()
        return budget

    def delete_category_budget(self, current_user: CurrentUser, budget_id: uuid.UUID) -> None:
        budget = self.get_category_budget(current_user, budget_id)
        self.repo.delete(budget)
        self.db.commit()

    def _duplicate(self, category: str, period: str) -> ConflictError:
        return ConflictError(f"A {period} budget for category '{category}' already exists for this user")

    def _validated_fields(self, fields: Dict[str, Any]) -> Dict[str, Any]:
        validated: Dict[str, Any] = {}

        for key, value in fields.items():
            if key == "category":
                value = (value or "").strip()
                if not value:
                    raise InvalidInputError("A category is required for the budget", field="category")
            elif key == "period":
                value = parse_budget_period(value).value
            elif key == "limit_amount_cents":
                if not isinstance(value, int) or isinstance(value, bool) or value <= 0:
                    raise InvalidInputError("Limit must be provided as a positive integer", field="limit_amount_cents")
            elif key == "warning_threshold":
                if value is None:
                    continue
                if isinstance(value, bool) or not isinstance(value, (int, float)) or not 0 <= value <= 1:
                    raise InvalidInputError("Warning threshold must be between 0 and 1", field="warning_threshold")
                value = float(value)
            elif key in ("period_start_date", "period_end_date"):
                value = parse_iso_date(value, field=key)
            elif key == "is_active":
                value = bool(value)
            validated[key] = value

        start = validated.get("period_start_date")
        end = validated.get("period_end_date")
        if start is not None and end is not None and end < start:
            raise InvalidInputError("Period end date cannot be before the start date", field="period_end_date")

        return validated
