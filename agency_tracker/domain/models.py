"""Domain models - pure Python dataclasses representing business entities"""

import uuid
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import List, Optional


class UserRole(str, Enum):
    ADMIN = "admin"
    ADULT = "adult"
    CHILD = "child"


class IncomeFrequency(str, Enum):
    WEEKLY = "weekly"
    BIWEEKLY = "biweekly"
    SEMIMONTHLY = "semimonthly"
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    ANNUALLY = "annually"


class TransactionType(str, Enum):
    EXPENSE = "expense"
    INCOME = "income"
    PAYMENT = "payment"
    TRANSFER = "transfer"


class ProjectedExpenseStatus(str, Enum):
    PLANNED = "planned"
    COMMITTED = "committed"
    PAID = "paid"
    CANCELLED = "cancelled"


class SavingsGoalStatus(str, Enum):
    ACTIVE = "active"
    COMPLETED = "completed"
    ABANDONED = "abandoned"


class ContributionSource(str, Enum):
    MANUAL = "manual"
    TRANSFER = "transfer"
    AUTOMATION = "automation"


class BudgetPeriod(str, Enum):
    MONTHLY = "monthly"
    CYCLE = "cycle"


class BudgetStatus(str, Enum):
    OK = "ok"
    WARNING = "warning"
    OVER = "over"


@dataclass(frozen=True)
class CurrentUser:
    """Caller identity resolved by the API layer"""

    id: uuid.UUID
    role: str = UserRole.ADULT.value

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN.value


@dataclass
class CreditCard:
    """Credit card billing configuration"""

    id: uuid.UUID
    user_id: uuid.UUID
    credit_limit_cents: int
    cycle_anchor_day: int
    statement_day: int
    payment_due_day: int
    autopay_enabled: bool = False
    is_active: bool = True
    nickname: str = ""
    issuer: Optional[str] = None
    last_four: Optional[str] = None


@dataclass
class CreditCardCycle:
    """One statement period of a credit card"""

    id: uuid.UUID
    credit_card_id: uuid.UUID
    cycle_number: int
    cycle_start_date: date
    statement_date: date
    payment_due_date: date
    statement_balance_cents: int = 0
    minimum_payment_cents: int = 0
    payment_recorded_on: Optional[date] = None
    closed_at: Optional[datetime] = None


@dataclass
class IncomeStream:
    """Recurring income source"""

    amount_cents: int
    frequency: str
    next_expected_date: Optional[date]
    id: Optional[uuid.UUID] = None
    user_id: Optional[uuid.UUID] = None
    name: str = ""
    is_active: bool = True


@dataclass
class Transaction:
    """Ledger transaction (expenses negative, income positive)"""

    type: str
    amount_cents: int
    transaction_date: date
    category: str
    is_pending: bool = False
    id: Optional[uuid.UUID] = None
    user_id: Optional[uuid.UUID] = None
    credit_card_id: Optional[uuid.UUID] = None


@dataclass
class CategoryBudget:
    """Spending limit for one category over a period"""

    category: str
    limit_amount_cents: int
    period: str = BudgetPeriod.MONTHLY.value
    warning_threshold: Optional[float] = None
    period_start_date: Optional[date] = None
    period_end_date: Optional[date] = None
    id: Optional[uuid.UUID] = None
    user_id: Optional[uuid.UUID] = None
    is_active: bool = True


@dataclass
class IncomeProjection:
    """Occurrences of one income stream inside a window"""

    count: int
    per_occurrence_amount_cents: int

    @property
    def total_cents(self) -> int:
        return self.count * self.per_occurrence_amount_cents


@dataclass
class UpcomingCycle:
    """Next billing cycle derived purely from card configuration"""

    cycle_start_date: date
    statement_date: date
    payment_due_date: date
    days_until_statement: int
    days_until_payment_due: int


@dataclass
class CurrentCycleSummary:
    """Open cycle state relative to a reference date"""

    id: uuid.UUID
    cycle_number: int
    cycle_start_date: date
    statement_date: date
    payment_due_date: date
    statement_balance_cents: int
    minimum_payment_cents: int
    payment_recorded_on: Optional[date]
    days_until_payment_due: int
    days_since_statement: int
    is_overdue: bool
    is_paid: bool


@dataclass
class PaymentCycleSummary:
    """Per-card view combining the open cycle with the computed upcoming cycle"""

    credit_card_id: uuid.UUID
    credit_card_nickname: str
    credit_card_issuer: Optional[str]
    credit_card_last_four: Optional[str]
    autopay_enabled: bool
    calculated_for: date
    recommended_payment_cents: int
    total_statement_balance_cents: int
    current_cycle: Optional[CurrentCycleSummary]
    upcoming_cycle: UpcomingCycle

    @property
    def nearest_due_date(self) -> Optional[date]:
        if self.current_cycle is not None and self.current_cycle.payment_due_date is not None:
            return self.current_cycle.payment_due_date
        return self.upcoming_cycle.payment_due_date if self.upcoming_cycle else None


@dataclass
class AgencyFigures:
    """Output of the agency calculation for one user and date"""

    total_credit_limit_cents: int
    outstanding_balance_cents: int
    available_credit_cents: int
    pending_expenses_cents: int
    minimum_payments_cents: int
    projected_obligations_cents: int
    upcoming_income_cents: int
    uncovered_obligations_cents: int
    buffer_cents: int
    credit_agency_cents: int
    backed_agency_cents: int
    projected_expense_total_cents: int = 0
    savings_commitments_cents: int = 0
    safe_to_spend_cents: int = 0


@dataclass
class AgencyWarning:
    """Threshold warning attached to a snapshot when it is read"""

    type: str
    level: str
    threshold: int
    percent: int
    message: str


@dataclass
class SnapshotAssessment:
    """Read-time decoration of a stored snapshot"""

    total_credit_limit_cents: int
    backed_coverage_percent: int
    credit_utilization_percent: Optional[int]
    warnings: List[AgencyWarning] = field(default_factory=list)


@dataclass
class BudgetEvaluation:
    """Utilisation of a category budget over its period"""

    period_start_date: Optional[date]
    period_end_date: Optional[date]
    spent_amount_cents: int
    remaining_amount_cents: int
    utilisation: float
    warning_threshold: float
    status: str


@dataclass
class ProjectedExpenseTemplate:
    """Preset for quickly planning a common expense"""

    id: str
    name: str
    description: str
    default_category: str
    default_amount_cents: int
    default_expected_day_offset: int
    default_notes: Optional[str] = None
    tags: List[str] = field(default_factory=list)
