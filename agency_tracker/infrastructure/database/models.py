"""SQLAlchemy ORM models for the finance tracker"""

import uuid
from sqlalchemy import (
    BigInteger,
    Boolean,
    CheckConstraint,
    Column,
    Date,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
    Uuid,
    select,
)
from sqlalchemy.orm import column_property, declarative_base, relationship
from sqlalchemy.sql import func

Base = declarative_base()


class TimestampMixin:
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())


class User(TimestampMixin, Base):
    """Household member; only looked up here, managed elsewhere"""

    __tablename__ = "users"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    email = Column(String(255), nullable=False, unique=True)
    role = Column(Text, nullable=False, default="adult")
    is_active = Column(Boolean, nullable=False, default=True)


class CreditCard(TimestampMixin, Base):
    """Credit card with day-of-month billing configuration"""

    __tablename__ = "credit_cards"
    __table_args__ = (
        CheckConstraint("cycle_anchor_day BETWEEN 1 AND 31", name="credit_cards_cycle_anchor_day_check"),
        CheckConstraint("statement_day BETWEEN 1 AND 31", name="credit_cards_statement_day_check"),
        CheckConstraint("payment_due_day BETWEEN 1 AND 31", name="credit_cards_payment_due_day_check"),
        CheckConstraint("credit_limit_cents > 0", name="credit_cards_credit_limit_positive"),
    )

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    nickname = Column(String(120), nullable=False)
    issuer = Column(String(120), nullable=True)
    last_four = Column(String(4), nullable=True)
    credit_limit_cents = Column(BigInteger, nullable=False)
    cycle_anchor_day = Column(Integer, nullable=False)  # Day of month the spending cycle starts
    statement_day = Column(Integer, nullable=False)  # Day of month the statement closes
    payment_due_day = Column(Integer, nullable=False)  # Day of month payment is due
    autopay_enabled = Column(Boolean, nullable=False, default=False)
    is_active = Column(Boolean, nullable=False, default=True)

    cycles = relationship("CreditCardCycle", back_populates="credit_card", cascade="all, delete-orphan")


class CreditCardCycle(TimestampMixin, Base):
    """One statement period; open while closed_at is null"""

    __tablename__ = "credit_card_cycles"
    __table_args__ = (
        UniqueConstraint("credit_card_id", "cycle_number"),
        CheckConstraint("cycle_number > 0", name="credit_card_cycles_cycle_number_positive"),
        CheckConstraint("statement_balance_cents >= 0", name="credit_card_cycles_balance_non_negative"),
        CheckConstraint("minimum_payment_cents >= 0", name="credit_card_cycles_minimum_non_negative"),
    )

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    credit_card_id = Column(Uuid(as_uuid=True), ForeignKey("credit_cards.id", ondelete="CASCADE"), nullable=False)
    cycle_number = Column(Integer, nullable=False)
    cycle_start_date = Column(Date, nullable=False)
    statement_date = Column(Date, nullable=False)
    payment_due_date = Column(Date, nullable=False)
    statement_balance_cents = Column(BigInteger, nullable=False, default=0)
    minimum_payment_cents = Column(BigInteger, nullable=False, default=0)
    payment_recorded_on = Column(Date, nullable=True)
    closed_at = Column(DateTime(timezone=True), nullable=True)

    credit_card = relationship("CreditCard", back_populates="cycles")


class IncomeStream(TimestampMixin, Base):
    """Recurring income source"""

    __tablename__ = "income_streams"
    __table_args__ = (CheckConstraint("amount_cents > 0", name="income_streams_amount_positive_check"),)

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(120), nullable=False)
    amount_cents = Column(BigInteger, nullable=False)
    frequency = Column(Text, nullable=False)  # weekly | biweekly | semimonthly | monthly | quarterly | annually
    next_expected_date = Column(Date, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    notes = Column(String(500), nullable=True)


class Transaction(TimestampMixin, Base):
    """Posted or pending money movement"""

    __tablename__ = "transactions"
    __table_args__ = (
        CheckConstraint("amount_cents <> 0", name="transactions_amount_cents_check"),
        CheckConstraint(
            "type NOT IN ('expense', 'payment') OR credit_card_id IS NOT NULL",
            name="transactions_card_presence_check",
        ),
    )

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    credit_card_id = Column(Uuid(as_uuid=True), ForeignKey("credit_cards.id", ondelete="SET NULL"), nullable=True)
    income_stream_id = Column(Uuid(as_uuid=True), ForeignKey("income_streams.id", ondelete="SET NULL"), nullable=True)
    card_cycle_id = Column(Uuid(as_uuid=True), ForeignKey("credit_card_cycles.id", ondelete="SET NULL"), nullable=True)
    type = Column(Text, nullable=False)  # expense | income | payment | transfer
    amount_cents = Column(BigInteger, nullable=False)
    currency = Column(String(3), nullable=False, default="CAD")
    category = Column(String(120), nullable=False)
    transaction_date = Column(Date, nullable=False, index=True)
    is_pending = Column(Boolean, nullable=False, default=False)
    merchant = Column(String(120), nullable=True)
    memo = Column(String(500), nullable=True)


class AgencySnapshot(TimestampMixin, Base):
    """Derived spending capacity for one user and date"""

    __tablename__ = "agency_snapshots"
    __table_args__ = (
        UniqueConstraint("user_id", "calculated_for", name="agency_snapshots_user_date_unique"),
        CheckConstraint("credit_agency_cents >= 0", name="agency_snapshots_credit_non_negative"),
        CheckConstraint("backed_agency_cents >= 0", name="agency_snapshots_backed_non_negative"),
        CheckConstraint("available_credit_cents >= 0", name="agency_snapshots_available_non_negative"),
        CheckConstraint("projected_obligations_cents >= 0", name="agency_snapshots_obligations_non_negative"),
    )

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    calculated_for = Column(Date, nullable=False)
    credit_agency_cents = Column(BigInteger, nullable=False)
    backed_agency_cents = Column(BigInteger, nullable=False)
    available_credit_cents = Column(BigInteger, nullable=False)
    projected_obligations_cents = Column(BigInteger, nullable=False, default=0)
    upcoming_income_cents = Column(BigInteger, nullable=False, default=0)
    projected_expense_total_cents = Column(BigInteger, nullable=False, default=0)
    savings_commitments_cents = Column(BigInteger, nullable=False, default=0)
    safe_to_spend_cents = Column(BigInteger, nullable=False, default=0)
    calculated_at = Column(DateTime(timezone=True), nullable=False)
    notes = Column(String(500), nullable=True)


class ProjectedExpense(TimestampMixin, Base):
    """Planned future spend moving through planned -> committed -> paid"""

    __tablename__ = "projected_expenses"
    __table_args__ = (CheckConstraint("amount_cents > 0", name="projected_expenses_amount_positive"),)

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    credit_card_id = Column(Uuid(as_uuid=True), ForeignKey("credit_cards.id", ondelete="SET NULL"), nullable=True)
    transaction_id = Column(Uuid(as_uuid=True), ForeignKey("transactions.id", ondelete="SET NULL"), nullable=True)
    amount_cents = Column(BigInteger, nullable=False)
    category = Column(String(120), nullable=False)
    expected_date = Column(Date, nullable=False)
    status = Column(Text, nullable=False, default="planned")
    notes = Column(String(500), nullable=True)
    committed_at = Column(DateTime(timezone=True), nullable=True)
    paid_at = Column(DateTime(timezone=True), nullable=True)
    cancelled_at = Column(DateTime(timezone=True), nullable=True)
    cancelled_reason = Column(String(500), nullable=True)


class SavingsContribution(TimestampMixin, Base):
    """Ledger row adding money to a savings goal"""

    __tablename__ = "savings_contributions"
    __table_args__ = (CheckConstraint("amount_cents > 0", name="savings_contributions_amount_positive"),)

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    goal_id = Column(Uuid(as_uuid=True), ForeignKey("savings_goals.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    amount_cents = Column(BigInteger, nullable=False)
    source = Column(Text, nullable=False, default="manual")
    contribution_date = Column(Date, nullable=False)
    notes = Column(String(500), nullable=True)


class SavingsGoal(TimestampMixin, Base):
    """Savings target; contribution total is always summed from the ledger"""

    __tablename__ = "savings_goals"
    __table_args__ = (CheckConstraint("target_amount_cents > 0", name="savings_goals_target_positive_check"),)

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    owner_user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(150), nullable=False)
    target_amount_cents = Column(BigInteger, nullable=False)
    start_date = Column(Date, nullable=False)
    target_date = Column(Date, nullable=True)
    status = Column(Text, nullable=False, default="active")
    category = Column(String(120), nullable=True)
    notes = Column(String(500), nullable=True)
    completed_at = Column(DateTime(timezone=True), nullable=True)
    abandoned_at = Column(DateTime(timezone=True), nullable=True)
    abandoned_reason = Column(String(500), nullable=True)

    total_contributions_cents = column_property(
        select(func.coalesce(func.sum(SavingsContribution.amount_cents), 0))
        .where(SavingsContribution.goal_id == id)
        .correlate_except(SavingsContribution)
        .scalar_subquery()
    )


class CategoryBudget(TimestampMixin, Base):
    """Spending limit for a category per period"""

    __tablename__ = "category_budgets"
    __table_args__ = (
        CheckConstraint("limit_amount_cents > 0", name="category_budgets_limit_positive_check"),
        CheckConstraint(
            "warning_threshold >= 0 AND warning_threshold <= 1",
            name="category_budgets_warning_threshold_range",
        ),
    )

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    category = Column(String(120), nullable=False)
    period = Column(Text, nullable=False, default="monthly")
    limit_amount_cents = Column(BigInteger, nullable=False)
    warning_threshold = Column(Float, nullable=False, default=0.85)
    period_start_date = Column(Date, nullable=True)
    period_end_date = Column(Date, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)


# Category names are unique per user and period regardless of case
Index(
    "category_budgets_user_category_period_unique",
    CategoryBudget.user_id,
    func.lower(CategoryBudget.category),
    CategoryBudget.period,
    unique=True,
)
