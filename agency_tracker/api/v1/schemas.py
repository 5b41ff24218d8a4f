"""Pydantic schemas for API request/response validation"""

from datetime import date, datetime
from typing import List, Optional

from pydantic import UUID4, BaseModel, ConfigDict, Field

# Date inputs are accepted as strings and parsed by the services, so a
# malformed date surfaces as a 400 invalid_input error rather than a 422.


# Agency snapshots


class SnapshotRequest(BaseModel):
    """Request body for POST /v1/agency/snapshots"""

    user_id: Optional[UUID4] = Field(None, description="Target user (admins only)")
    calculated_for: Optional[str] = Field(None, description="ISO date; defaults to today")
    notes: Optional[str] = Field(None, max_length=500)


class AgencyWarningSchema(BaseModel):
    type: str
    level: str
    threshold: int
    percent: int
    message: str


class SnapshotResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID4
    user_id: UUID4
    calculated_for: date
    credit_agency_cents: int
    backed_agency_cents: int
    available_credit_cents: int
    projected_obligations_cents: int
    upcoming_income_cents: int
    projected_expense_total_cents: int
    savings_commitments_cents: int
    safe_to_spend_cents: int
    calculated_at: datetime
    notes: Optional[str] = None
    total_credit_limit_cents: int
    backed_coverage_percent: int
    credit_utilization_percent: Optional[int] = None
    warnings: List[AgencyWarningSchema] = []


class SnapshotListResponse(BaseModel):
    snapshots: List[SnapshotResponse]


# Payment cycles


class UpcomingCycleSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    cycle_start_date: date
    statement_date: date
    payment_due_date: date
    days_until_statement: Optional[int] = None
    days_until_payment_due: Optional[int] = None


class CurrentCycleSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID4
    cycle_number: int
    cycle_start_date: date
    statement_date: date
    payment_due_date: date
    statement_balance_cents: int
    minimum_payment_cents: int
    payment_recorded_on: Optional[date] = None
    days_until_payment_due: Optional[int] = None
    days_since_statement: Optional[int] = None
    is_overdue: bool
    is_paid: bool


class PaymentCycleSummarySchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    credit_card_id: UUID4
    credit_card_nickname: str
    credit_card_issuer: Optional[str] = None
    credit_card_last_four: Optional[str] = None
    autopay_enabled: bool
    calculated_for: date
    recommended_payment_cents: int
    total_statement_balance_cents: int
    current_cycle: Optional[CurrentCycleSchema] = None
    upcoming_cycle: UpcomingCycleSchema


class PaymentCycleListResponse(BaseModel):
    calculated_for: date
    cycles: List[PaymentCycleSummarySchema]


class RecordPaymentRequest(BaseModel):
    payment_recorded_on: Optional[str] = Field(None, description="ISO date; defaults to today")
    clear: bool = False
    as_of: Optional[str] = None


# Projected expenses


class ProjectedExpenseCreateRequest(BaseModel):
    user_id: Optional[UUID4] = None
    amount_cents: int
    category: str
    expected_date: str
    notes: Optional[str] = Field(None, max_length=500)
    credit_card_id: Optional[UUID4] = None


class ProjectedExpenseUpdateRequest(BaseModel):
    amount_cents: Optional[int] = None
    category: Optional[str] = None
    expected_date: Optional[str] = None
    notes: Optional[str] = Field(None, max_length=500)
    credit_card_id: Optional[UUID4] = None


class ProjectedExpenseTransitionRequest(BaseModel):
    status: str
    transaction_id: Optional[UUID4] = None
    reason: Optional[str] = Field(None, max_length=500)


class PayRequest(BaseModel):
    transaction_id: Optional[UUID4] = None


class CancelRequest(BaseModel):
    reason: Optional[str] = Field(None, max_length=500)


class TemplateInstantiateRequest(BaseModel):
    user_id: Optional[UUID4] = None
    expected_date: Optional[str] = None
    reference_date: Optional[str] = None
    amount_cents: Optional[int] = None
    category: Optional[str] = None
    notes: Optional[str] = Field(None, max_length=500)
    credit_card_id: Optional[UUID4] = None


class ProjectedExpenseResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID4
    user_id: UUID4
    amount_cents: int
    category: str
    expected_date: date
    status: str
    notes: Optional[str] = None
    credit_card_id: Optional[UUID4] = None
    transaction_id: Optional[UUID4] = None
    committed_at: Optional[datetime] = None
    paid_at: Optional[datetime] = None
    cancelled_at: Optional[datetime] = None
    cancelled_reason: Optional[str] = None


class ProjectedExpenseTemplateResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    description: str
    default_category: str
    default_amount_cents: int
    default_expected_day_offset: int
    default_notes: Optional[str] = None
    tags: List[str] = []


# Savings goals


class SavingsGoalCreateRequest(BaseModel):
    user_id: Optional[UUID4] = None
    name: str
    target_amount_cents: int
    start_date: Optional[str] = None
    target_date: Optional[str] = None
    category: Optional[str] = None
    notes: Optional[str] = Field(None, max_length=500)


class SavingsGoalUpdateRequest(BaseModel):
    name: Optional[str] = None
    target_amount_cents: Optional[int] = None
    start_date: Optional[str] = None
    target_date: Optional[str] = None
    category: Optional[str] = None
    notes: Optional[str] = Field(None, max_length=500)


class AbandonRequest(BaseModel):
    reason: Optional[str] = Field(None, max_length=500)


class SavingsGoalResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID4
    owner_user_id: UUID4
    name: str
    target_amount_cents: int
    total_contributions_cents: int
    start_date: date
    target_date: Optional[date] = None
    status: str
    category: Optional[str] = None
    notes: Optional[str] = None
    completed_at: Optional[datetime] = None
    abandoned_at: Optional[datetime] = None
    abandoned_reason: Optional[str] = None


class ContributionCreateRequest(BaseModel):
    amount_cents: int
    source: Optional[str] = None
    contribution_date: Optional[str] = None
    notes: Optional[str] = Field(None, max_length=500)


class ContributionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID4
    goal_id: UUID4
    user_id: UUID4
    amount_cents: int
    source: str
    contribution_date: date
    notes: Optional[str] = None


class ContributionCreatedResponse(BaseModel):
    goal: SavingsGoalResponse
    contribution: ContributionResponse


# Category budgets


class CategoryBudgetCreateRequest(BaseModel):
    user_id: Optional[UUID4] = None
    category: str
    limit_amount_cents: int
    period: Optional[str] = None
    warning_threshold: Optional[float] = None
    period_start_date: Optional[str] = None
    period_end_date: Optional[str] = None


class CategoryBudgetUpdateRequest(BaseModel):
    category: Optional[str] = None
    limit_amount_cents: Optional[int] = None
    period: Optional[str] = None
    warning_threshold: Optional[float] = None
    period_start_date: Optional[str] = None
    period_end_date: Optional[str] = None
    is_active: Optional[bool] = None


class CategoryBudgetResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID4
    user_id: UUID4
    category: str
    period: str
    limit_amount_cents: int
    warning_threshold: float
    period_start_date: Optional[date] = None
    period_end_date: Optional[date] = None
    is_active: bool


class BudgetEvaluationSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    period_start_date: Optional[date] = None
    period_end_date: Optional[date] = None
    spent_amount_cents: int
    remaining_amount_cents: int
    utilisation: float
    warning_threshold: float
    status: str


class CategoryBudgetSummaryResponse(BaseModel):
    budget: CategoryBudgetResponse
    evaluation: BudgetEvaluationSchema
