"""Agency snapshot orchestration: fetch inputs, calculate, upsert, decorate"""

import time
import uuid
from dataclasses import dataclass
from datetime import date
from typing import List, Optional, Union

from sqlalchemy.orm import Session

from agency_tracker.config import settings
from agency_tracker.domain.agency import AgencyConfig, agency_window, assess_snapshot, calculate_agency
from agency_tracker.domain.exceptions import NotFoundError
from agency_tracker.domain.models import AgencyFigures, CurrentUser, SnapshotAssessment
from agency_tracker.infrastructure.database.models import AgencySnapshot
from agency_tracker.infrastructure.database.repositories import (
    AgencySnapshotRepository,
    CreditCardCycleRepository,
    CreditCardRepository,
    IncomeStreamRepository,
    ProjectedExpenseRepository,
    SavingsGoalRepository,
    TransactionRepository,
)
from agency_tracker.infrastructure.observability.logging import log_snapshot
from agency_tracker.infrastructure.observability.metrics import record_snapshot
from agency_tracker.services.access import Clock, ClockMixin, resolve_target_user_id, utc_now
from agency_tracker.utils.date_utils import parse_iso_date


@dataclass
class DecoratedSnapshot:
    """Stored snapshot plus read-time assessment"""

    snapshot: AgencySnapshot
    assessment: SnapshotAssessment


class AgencyService(ClockMixin):
    """Calculates and serves agency snapshots"""

    def __init__(self, db: Session, config: Optional[AgencyConfig] = None, clock: Clock = utc_now):
        self.db = db
        self.config = config or AgencyConfig.from_settings(settings)
        self.clock = clock

    def calculate_figures(self, user_id: uuid.UUID, calculated_for: date) -> AgencyFigures:
        """Gather the user's inputs for the window and run the calculation"""
        start, end = agency_window(calculated_for, self.config)

        credit_cards = CreditCardRepository(self.db).get_by_user(user_id)
        income_streams = IncomeStreamRepository(self.db).get_by_user(user_id)
        open_cycles = CreditCardCycleRepository(self.db).get_open_by_card_ids([card.id for card in credit_cards])
        transactions = TransactionRepository(self.db).get_by_user_within_date_range(user_id, start, end)

        return calculate_agency(
            calculated_for,
            credit_cards=credit_cards,
            open_cycles=open_cycles,
            transactions=transactions,
            income_streams=income_streams,
            config=self.config,
            projected_expense_total_cents=ProjectedExpenseRepository(self.db).sum_open_amounts_by_user_id(user_id),
            savings_commitments_cents=SavingsGoalRepository(self.db).sum_outstanding_commitments_by_user_id(user_id),
        )

    def calculate_snapshot_for_user(
        self,
        user_id: uuid.UUID,
        calculated_for: Union[date, str, None] = None,
        notes: Optional[str] = None,
        request_id: Optional[str] = None,
    ) -> DecoratedSnapshot:
        """
        Calculate and persist the snapshot for a user and date.

        Recalculating the same date overwrites the stored row.

        Raises:
            InvalidInputError: calculated_for is not a valid ISO date
            UnsupportedFrequencyError: An income stream has an unknown frequency
        """
        start_time = time.time()
        target_date = parse_iso_date(calculated_for, field="calculated_for") or self.today()

        figures = self.calculate_figures(user_id, target_date)

        snapshot = AgencySnapshotRepository(self.db).upsert_snapshot(
            {
                "user_id": user_id,
                "calculated_for": target_date,
                "credit_agency_cents": figures.credit_agency_cents,
                "backed_agency_cents": figures.backed_agency_cents,
                "available_credit_cents": figures.available_credit_cents,
                "projected_obligations_cents": figures.projected_obligations_cents,
                "upcoming_income_cents": figures.upcoming_income_cents,
                "projected_expense_total_cents": figures.projected_expense_total_cents,
                "savings_commitments_cents": figures.savings_commitments_cents,
                "safe_to_spend_cents": figures.safe_to_spend_cents,
                "calculated_at": self.now(),
                "notes": notes,
            }
        )
        self.db.commit()

        duration_ms = (time.time() - start_time) * 1000
        record_snapshot(figures.credit_agency_cents, figures.backed_agency_cents)
        log_snapshot(
            str(user_id),
            target_date.isoformat(),
            figures.credit_agency_cents,
            figures.backed_agency_cents,
            duration_ms,
            request_id=request_id,
        )

        return self._decorate(snapshot, figures.total_credit_limit_cents)

    def recalculate_snapshot(
        self,
        current_user: CurrentUser,
        user_id: Optional[uuid.UUID] = None,
        calculated_for: Union[date, str, None] = None,
        notes: Optional[str] = None,
        request_id: Optional[str] = None,
    ) -> DecoratedSnapshot:
        target_user_id = resolve_target_user_id(self.db, current_user, user_id)
        return self.calculate_snapshot_for_user(target_user_id, calculated_for, notes=notes, request_id=request_id)

    def list_snapshots(
        self, current_user: CurrentUser, user_id: Optional[uuid.UUID] = None, limit: int = 25
    ) -> List[DecoratedSnapshot]:
        target_user_id = resolve_target_user_id(self.db, current_user, user_id)
        snapshots = AgencySnapshotRepository(self.db).get_by_user(target_user_id, limit=limit)
        total_limit = self._total_credit_limit(target_user_id)
        return [self._decorate(snapshot, total_limit) for snapshot in snapshots]

    def get_snapshot_by_date(
        self,
        current_user: CurrentUser,
        calculated_for: Union[date, str],
        user_id: Optional[uuid.UUID] = None,
    ) -> DecoratedSnapshot:
        target_user_id = resolve_target_user_id(self.db, current_user, user_id)
        target_date = parse_iso_date(calculated_for, field="calculated_for")

        snapshot = AgencySnapshotRepository(self.db).get_by_user_and_date(target_user_id, target_date)
        if snapshot is None:
            raise NotFoundError("Agency snapshot not found")

        return self._decorate(snapshot, self._total_credit_limit(target_user_id))

    def _total_credit_limit(self, user_id: uuid.UUID) -> int:
        return sum(card.credit_limit_cents for card in CreditCardRepository(self.db).get_by_user(user_id))

    def _decorate(self, snapshot: AgencySnapshot, total_credit_limit_cents: int) -> DecoratedSnapshot:
        assessment = assess_snapshot(snapshot, total_credit_limit_cents, self.config)
        return DecoratedSnapshot(snapshot=snapshot, assessment=assessment)
