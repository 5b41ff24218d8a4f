"""Pytest fixtures for testing"""

import uuid
from datetime import date, datetime, timezone
from typing import Callable, Dict, Generator, Optional

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from agency_tracker.api.main import create_app
from agency_tracker.infrastructure.database.models import (
    Base,
    CreditCard,
    CreditCardCycle,
    IncomeStream,
    Transaction,
    User,
)
from agency_tracker.infrastructure.database.session import get_db
from agency_tracker.utils.date_utils import add_days

# Test database
TEST_DATABASE_URL = "sqlite:///./test.db"
engine = create_engine(TEST_DATABASE_URL, connect_args={"check_same_thread": False})
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

FIXED_NOW = datetime(2025, 3, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def db() -> Generator[Session, None, None]:
    """Create test database and session"""
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db: Session) -> TestClient:
    """Create FastAPI test client with test database"""
    app = create_app()

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    return TestClient(app)


@pytest.fixture
def fixed_clock() -> Callable[[], datetime]:
    """Clock pinned to 2025-03-01 12:00 UTC"""
    return lambda: FIXED_NOW


@pytest.fixture
def today() -> date:
    """Today's date as the services see it (UTC)"""
    return datetime.now(timezone.utc).date()


@pytest.fixture
def auth() -> Callable[[User], Dict[str, str]]:
    """Headers identifying a user to the API"""
    return lambda user: {"X-User-Id": str(user.id)}


@pytest.fixture
def make_user(db: Session) -> Callable[..., User]:
    def _make_user(role: str = "adult", is_active: bool = True, email: Optional[str] = None) -> User:
        user = User(
            id=uuid.uuid4(),
            email=email or f"{uuid.uuid4().hex[:8]}@family.test",
            role=role,
            is_active=is_active,
        )
        db.add(user)
        db.commit()
        return user

    return _make_user


@pytest.fixture
def adult(make_user) -> User:
    return make_user()


@pytest.fixture
def admin(make_user) -> User:
    return make_user(role="admin")


@pytest.fixture
def make_card(db: Session) -> Callable[..., CreditCard]:
    def _make_card(
        user: User,
        credit_limit_cents: int = 1_000_000,
        cycle_anchor_day: int = 1,
        statement_day: int = 25,
        payment_due_day: int = 15,
        autopay_enabled: bool = False,
        is_active: bool = True,
        nickname: str = "Everyday Visa",
    ) -> CreditCard:
        card = CreditCard(
            id=uuid.uuid4(),
            user_id=user.id,
            nickname=nickname,
            issuer="Maple Bank",
            last_four="4242",
            credit_limit_cents=credit_limit_cents,
            cycle_anchor_day=cycle_anchor_day,
            statement_day=statement_day,
            payment_due_day=payment_due_day,
            autopay_enabled=autopay_enabled,
            is_active=is_active,
        )
        db.add(card)
        db.commit()
        return card

    return _make_card


@pytest.fixture
def make_cycle(db: Session) -> Callable[..., CreditCardCycle]:
    def _make_cycle(
        card: CreditCard,
        payment_due_date: date,
        statement_balance_cents: int = 0,
        minimum_payment_cents: int = 0,
        cycle_number: int = 1,
        closed_at: Optional[datetime] = None,
        payment_recorded_on: Optional[date] = None,
    ) -> CreditCardCycle:
        statement_date = add_days(payment_due_date, -21)
        cycle = CreditCardCycle(
            id=uuid.uuid4(),
            credit_card_id=card.id,
            cycle_number=cycle_number,
            cycle_start_date=add_days(statement_date, -30),
            statement_date=statement_date,
            payment_due_date=payment_due_date,
            statement_balance_cents=statement_balance_cents,
            minimum_payment_cents=minimum_payment_cents,
            payment_recorded_on=payment_recorded_on,
            closed_at=closed_at,
        )
        db.add(cycle)
        db.commit()
        return cycle

    return _make_cycle


@pytest.fixture
def make_income_stream(db: Session) -> Callable[..., IncomeStream]:
    def _make_income_stream(
        user: User,
        amount_cents: int,
        frequency: str,
        next_expected_date: Optional[date],
        is_active: bool = True,
    ) -> IncomeStream:
        stream = IncomeStream(
            id=uuid.uuid4(),
            user_id=user.id,
            name="Salary",
            amount_cents=amount_cents,
            frequency=frequency,
            next_expected_date=next_expected_date,
            is_active=is_active,
        )
        db.add(stream)
        db.commit()
        return stream

    return _make_income_stream


@pytest.fixture
def make_transaction(db: Session) -> Callable[..., Transaction]:
    def _make_transaction(
        user: User,
        amount_cents: int,
        transaction_date: date,
        category: str = "Groceries",
        type: str = "expense",
        card: Optional[CreditCard] = None,
        is_pending: bool = False,
    ) -> Transaction:
        txn = Transaction(
            id=uuid.uuid4(),
            user_id=user.id,
            credit_card_id=card.id if card else None,
            type=type,
            amount_cents=amount_cents,
            category=category,
            transaction_date=transaction_date,
            is_pending=is_pending,
        )
        db.add(txn)
        db.commit()
        return txn

    return _make_transaction
