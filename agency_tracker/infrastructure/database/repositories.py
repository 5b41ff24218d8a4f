"""Data access layer for finance tracker entities"""

import uuid
from datetime import date
from typing import Any, Dict, Iterable, List, Optional, Sequence

from sqlalchemy import func
from sqlalchemy.dialects.postgresql import insert as postgresql_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from agency_tracker.domain.exceptions import ConfigurationError, ConflictError
from agency_tracker.domain.models import ProjectedExpenseStatus, SavingsGoalStatus, TransactionType
from agency_tracker.domain.savings import sum_outstanding_commitments
from agency_tracker.infrastructure.database.models import (
    AgencySnapshot,
    CategoryBudget,
    CreditCard,
    CreditCardCycle,
    IncomeStream,
    ProjectedExpense,
    SavingsContribution,
    SavingsGoal,
    Transaction,
    User,
)

UPSERT_DIALECTS = {
    "postgresql": postgresql_insert,
    "sqlite": sqlite_insert,
}


class UserRepository:
    """Repository for user lookups"""

    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, user_id: uuid.UUID, include_inactive: bool = False) -> Optional[User]:
        query = self.db.query(User).filter(User.id == user_id)
        if not include_inactive:
            query = query.filter(User.is_active.is_(True))
        return query.first()


class CreditCardRepository:
    """Repository for credit cards"""

    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, card_id: uuid.UUID, include_inactive: bool = False) -> Optional[CreditCard]:
        query = self.db.query(CreditCard).filter(CreditCard.id == card_id)
        if not include_inactive:
            query = query.filter(CreditCard.is_active.is_(True))
        return query.first()

    def get_by_user(self, user_id: uuid.UUID, include_inactive: bool = False) -> List[CreditCard]:
        query = self.db.query(CreditCard).filter(CreditCard.user_id == user_id)
        if not include_inactive:
            query = query.filter(CreditCard.is_active.is_(True))
        return query.order_by(CreditCard.nickname.asc()).all()


class CreditCardCycleRepository:
    """Repository for statement cycles"""

    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, cycle_id: uuid.UUID) -> Optional[CreditCardCycle]:
        return self.db.query(CreditCardCycle).filter(CreditCardCycle.id == cycle_id).first()

    def get_open_by_card_ids(self, card_ids: Sequence[uuid.UUID]) -> List[CreditCardCycle]:
        """Open (unclosed) cycles for a set of cards"""
        if not card_ids:
            return []
        return (
            self.db.query(CreditCardCycle)
            .filter(CreditCardCycle.credit_card_id.in_(list(card_ids)))
            .filter(CreditCardCycle.closed_at.is_(None))
            .all()
        )

    def set_payment_recorded_on(self, cycle: CreditCardCycle, recorded_on: Optional[date]) -> CreditCardCycle:
        cycle.payment_recorded_on = recorded_on
        self.db.flush()
        return cycle


class IncomeStreamRepository:
    """Repository for income streams"""

    def __init__(self, db: Session):
        self.db = db

    def get_by_user(self, user_id: uuid.UUID, include_inactive: bool = False) -> List[IncomeStream]:
        query = self.db.query(IncomeStream).filter(IncomeStream.user_id == user_id)
        if not include_inactive:
            query = query.filter(IncomeStream.is_active.is_(True))
        return query.order_by(IncomeStream.created_at.desc()).all()


class TransactionRepository:
    """Repository for transactions"""

    def __init__(self, db: Session):
        self.db = db

    def get_by_user_within_date_range(
        self,
        user_id: uuid.UUID,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        type: Optional[str] = None,
    ) -> List[Transaction]:
        query = self.db.query(Transaction).filter(Transaction.user_id == user_id)
        if start_date is not None:
            query = query.filter(Transaction.transaction_date >= start_date)
        if end_date is not None:
            query = query.filter(Transaction.transaction_date <= end_date)
        if type is not None:
            query = query.filter(Transaction.type == type)
        return query.order_by(Transaction.transaction_date.asc()).all()

    def get_settled_category_expenses(
        self,
        user_id: uuid.UUID,
        category: str,
        start_date: Optional[date],
        end_date: Optional[date],
    ) -> List[Transaction]:
        """Non-pending expenses for a category (case-insensitive) inside optional bounds"""
        query = (
            self.db.query(Transaction)
            .filter(Transaction.user_id == user_id)
            .filter(Transaction.type == TransactionType.EXPENSE.value)
            .filter(Transaction.is_pending.is_(False))
            .filter(func.lower(func.trim(Transaction.category)) == category.strip().lower())
        )
        if start_date is not None:
            query = query.filter(Transaction.transaction_date >= start_date)
        if end_date is not None:
            query = query.filter(Transaction.transaction_date <= end_date)
        return query.all()


class AgencySnapshotRepository:
    """Repository for agency snapshots"""

    def __init__(self, db: Session):
        self.db = db

    def get_by_user_and_date(self, user_id: uuid.UUID, calculated_for: date) -> Optional[AgencySnapshot]:
        return (
            self.db.query(AgencySnapshot)
            .populate_existing()
            .filter(AgencySnapshot.user_id == user_id, AgencySnapshot.calculated_for == calculated_for)
            .first()
        )

    def get_by_user(self, user_id: uuid.UUID, limit: int = 25) -> List[AgencySnapshot]:
        return (
            self.db.query(AgencySnapshot)
            .filter(AgencySnapshot.user_id == user_id)
            .order_by(AgencySnapshot.calculated_for.desc())
            .limit(limit)
            .all()
        )

    def upsert_snapshot(self, values: Dict[str, Any]) -> AgencySnapshot:
        """
        Insert or overwrite the snapshot for (user_id, calculated_for) in one statement.

        Relies on the unique constraint so concurrent recalculations for the
        same user and date converge on a single row.
        """
        dialect = self.db.get_bind().dialect.name
        insert = UPSERT_DIALECTS.get(dialect)
        if insert is None:
            raise ConfigurationError(f"Snapshot upsert is not supported on database dialect: {dialect}")

        stmt = insert(AgencySnapshot).values(id=uuid.uuid4(), **values)
        overwrite = {
            key: stmt.excluded[key] for key in values if key not in ("user_id", "calculated_for")
        }
        overwrite["updated_at"] = func.now()
        stmt = stmt.on_conflict_do_update(index_elements=["user_id", "calculated_for"], set_=overwrite)

        self.db.execute(stmt)
        return self.get_by_user_and_date(values["user_id"], values["calculated_for"])


class ProjectedExpenseRepository:
    """Repository for projected expenses"""

    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, expense_id: uuid.UUID) -> Optional[ProjectedExpense]:
        return self.db.query(ProjectedExpense).filter(ProjectedExpense.id == expense_id).first()

    def get_by_user(self, user_id: uuid.UUID, statuses: Optional[Iterable[str]] = None) -> List[ProjectedExpense]:
        query = self.db.query(ProjectedExpense).filter(ProjectedExpense.user_id == user_id)
        if statuses:
            query = query.filter(ProjectedExpense.status.in_(list(statuses)))
        return query.order_by(ProjectedExpense.expected_date.asc(), ProjectedExpense.created_at.asc()).all()

    def create(self, **fields: Any) -> ProjectedExpense:
        expense = ProjectedExpense(**fields)
        self.db.add(expense)
        self.db.flush()
        return expense

    def update_fields(self, expense: ProjectedExpense, updates: Dict[str, Any]) -> ProjectedExpense:
        for key, value in updates.items():
            setattr(expense, key, value)
        self.db.flush()
        return expense

    def transition_status(self, expense_id: uuid.UUID, expected_status: str, updates: Dict[str, Any]) -> bool:
        """
        Apply a status change only if the row still has the expected status.

        Returns:
            False when another writer changed the status first
        """
        updated = (
            self.db.query(ProjectedExpense)
            .filter(ProjectedExpense.id == expense_id, ProjectedExpense.status == expected_status)
            .update(updates, synchronize_session="fetch")
        )
        return updated == 1

    def delete_if_status(self, expense_id: uuid.UUID, expected_status: str) -> bool:
        deleted = (
            self.db.query(ProjectedExpense)
            .filter(ProjectedExpense.id == expense_id, ProjectedExpense.status == expected_status)
            .delete(synchronize_session="fetch")
        )
        return deleted == 1

    def sum_open_amounts_by_user_id(self, user_id: uuid.UUID) -> int:
        """Total of planned and committed expenses"""
        total = (
            self.db.query(func.coalesce(func.sum(ProjectedExpense.amount_cents), 0))
            .filter(ProjectedExpense.user_id == user_id)
            .filter(
                ProjectedExpense.status.in_(
                    [ProjectedExpenseStatus.PLANNED.value, ProjectedExpenseStatus.COMMITTED.value]
                )
            )
            .scalar()
        )
        return int(total or 0)


class SavingsGoalRepository:
    """Repository for savings goals"""

    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, goal_id: uuid.UUID, for_update: bool = False) -> Optional[SavingsGoal]:
        query = self.db.query(SavingsGoal).populate_existing().filter(SavingsGoal.id == goal_id)
        if for_update:
            query = query.with_for_update()
        return query.first()

    def get_by_owner(self, owner_user_id: uuid.UUID, statuses: Optional[Iterable[str]] = None) -> List[SavingsGoal]:
        query = self.db.query(SavingsGoal).filter(SavingsGoal.owner_user_id == owner_user_id)
        if statuses:
            query = query.filter(SavingsGoal.status.in_(list(statuses)))
        return query.order_by(SavingsGoal.created_at.asc()).all()

    def create(self, **fields: Any) -> SavingsGoal:
        goal = SavingsGoal(**fields)
        self.db.add(goal)
        self.db.flush()
        return goal

    def update_fields(self, goal: SavingsGoal, updates: Dict[str, Any]) -> SavingsGoal:
        for key, value in updates.items():
            setattr(goal, key, value)
        self.db.flush()
        return goal

    def transition_status(self, goal_id: uuid.UUID, expected_status: str, updates: Dict[str, Any]) -> bool:
        updated = (
            self.db.query(SavingsGoal)
            .filter(SavingsGoal.id == goal_id, SavingsGoal.status == expected_status)
            .update(updates, synchronize_session="fetch")
        )
        return updated == 1

    def sum_outstanding_commitments_by_user_id(self, user_id: uuid.UUID) -> int:
        """Unmet savings across active goals, each floored at zero"""
        return sum_outstanding_commitments(self.get_by_owner(user_id, statuses=[SavingsGoalStatus.ACTIVE.value]))


class SavingsContributionRepository:
    """Repository for savings contributions"""

    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, contribution_id: uuid.UUID) -> Optional[SavingsContribution]:
        return self.db.query(SavingsContribution).filter(SavingsContribution.id == contribution_id).first()

    def get_by_goal(self, goal_id: uuid.UUID) -> List[SavingsContribution]:
        return (
            self.db.query(SavingsContribution)
            .filter(SavingsContribution.goal_id == goal_id)
            .order_by(SavingsContribution.contribution_date.desc(), SavingsContribution.created_at.desc())
            .all()
        )

    def create(self, **fields: Any) -> SavingsContribution:
        contribution = SavingsContribution(**fields)
        self.db.add(contribution)
        self.db.flush()
        return contribution

    def delete(self, contribution: SavingsContribution) -> None:
        self.db.delete(contribution)
        self.db.flush()


class CategoryBudgetRepository:
    """Repository for category budgets"""

    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, budget_id: uuid.UUID) -> Optional[CategoryBudget]:
        return self.db.query(CategoryBudget).filter(CategoryBudget.id == budget_id).first()

    def get_by_key(self, user_id: uuid.UUID, category: str, period: str) -> Optional[CategoryBudget]:
        return (
            self.db.query(CategoryBudget)
            .filter(CategoryBudget.user_id == user_id)
            .filter(func.lower(CategoryBudget.category) == category.strip().lower())
            .filter(CategoryBudget.period == period)
            .first()
        )

    def get_by_user(self, user_id: uuid.UUID, include_inactive: bool = False) -> List[CategoryBudget]:
        query = self.db.query(CategoryBudget).filter(CategoryBudget.user_id == user_id)
        if not include_inactive:
            query = query.filter(CategoryBudget.is_active.is_(True))
        return query.order_by(CategoryBudget.category.asc()).all()

    def create(self, **fields: Any) -> CategoryBudget:
        budget = CategoryBudget(**fields)
        self.db.add(budget)
        self._flush_unique(budget.category, budget.period)
        return budget

    def update_fields(self, budget: CategoryBudget, updates: Dict[str, Any]) -> CategoryBudget:
        for key, value in updates.items():
            setattr(budget, key, value)
        self._flush_unique(budget.category, budget.period)
        return budget

    def delete(self, budget: CategoryBudget) -> None:
        self.db.delete(budget)
        self.db.flush()

    def _flush_unique(self, category: str, period: str) -> None:
        try:
            self.db.flush()
        except IntegrityError as e:
            self.db.rollback()
            raise ConflictError(
                f"A {period} budget for category '{category}' already exists for this user"
            ) from e
