"""Payment cycle summaries and payment recording"""

import logging
import uuid
from datetime import date
from typing import List, Optional, Union

from sqlalchemy.orm import Session

from agency_tracker.domain.billing_cycles import sort_summaries, summarize_card
from agency_tracker.domain.exceptions import ConflictError
from agency_tracker.domain.models import CurrentUser, PaymentCycleSummary
from agency_tracker.infrastructure.database.repositories import CreditCardCycleRepository, CreditCardRepository
from agency_tracker.services.access import Clock, ClockMixin, ensure_owned, resolve_target_user_id, utc_now
from agency_tracker.utils.date_utils import parse_iso_date


class PaymentCycleService(ClockMixin):
    """Per-card billing cycle views for a user"""

    def __init__(self, db: Session, clock: Clock = utc_now):
        self.db = db
        self.clock = clock

    def summarize_payment_cycles(
        self,
        current_user: CurrentUser,
        as_of: Union[date, str, None] = None,
        user_id: Optional[uuid.UUID] = None,
    ) -> List[PaymentCycleSummary]:
        """
        Summaries for every active card, nearest due date first.

        Raises:
            InvalidInputError: as_of is not a valid ISO date
        """
        target_user_id = resolve_target_user_id(self.db, current_user, user_id)
        as_of_date = parse_iso_date(as_of, field="as_of") or self.today()

        cards = CreditCardRepository(self.db).get_by_user(target_user_id)
        if not cards:
            return []

        open_cycles = CreditCardCycleRepository(self.db).get_open_by_card_ids([card.id for card in cards])
        open_cycle_by_card = {cycle.credit_card_id: cycle for cycle in open_cycles}

        summaries = [summarize_card(card, open_cycle_by_card.get(card.id), as_of_date) for card in cards]
        return sort_summaries(summaries)

    def record_cycle_payment(
        self,
        current_user: CurrentUser,
        cycle_id: uuid.UUID,
        payment_recorded_on: Union[date, str, None] = None,
        clear: bool = False,
        as_of: Union[date, str, None] = None,
    ) -> PaymentCycleSummary:
        """
        Set or clear the recorded payment date on an open cycle.

        Without an explicit date, the payment is recorded as made today.

        Raises:
            NotFoundError: Cycle missing or owned by someone else
            ConflictError: Cycle is already closed
            InvalidInputError: A date could not be parsed
        """
        cycle_repo = CreditCardCycleRepository(self.db)
        cycle = cycle_repo.get_by_id(cycle_id)
        card = (
            CreditCardRepository(self.db).get_by_id(cycle.credit_card_id, include_inactive=True)
            if cycle is not None
            else None
        )
        ensure_owned(current_user, card, card.user_id if card else None, "Payment cycle")

        if cycle.closed_at is not None:
            raise ConflictError("Payments can only be recorded on open cycles")

        as_of_date = parse_iso_date(as_of, field="as_of") or self.today()
        if clear:
            recorded_on = None
        else:
            recorded_on = parse_iso_date(payment_recorded_on, field="payment_recorded_on") or self.today()

        cycle_repo.set_payment_recorded_on(cycle, recorded_on)
        self.db.commit()

        logging.info(
            "Cycle payment recorded" if recorded_on else "Cycle payment cleared",
            extra={
                "credit_card_id": str(card.id),
                "cycle_id": str(cycle.id),
                "payment_recorded_on": recorded_on.isoformat() if recorded_on else None,
            },
        )

        return summarize_card(card, cycle, as_of_date)
