"""Savings goals and their contribution ledger"""

import logging
import uuid
from datetime import date
from typing import Any, Dict, Iterable, List, Optional, Union

from sqlalchemy.orm import Session

from agency_tracker.domain.exceptions import ConflictError, InvalidInputError, NotFoundError
from agency_tracker.domain.models import ContributionSource, CurrentUser, SavingsGoalStatus
from agency_tracker.domain.state_machines import ensure_goal_active, ensure_goal_transition, parse_goal_status
from agency_tracker.infrastructure.database.models import SavingsContribution, SavingsGoal
from agency_tracker.infrastructure.database.repositories import SavingsContributionRepository, SavingsGoalRepository
from agency_tracker.infrastructure.observability.logging import log_transition
from agency_tracker.infrastructure.observability.metrics import (
    state_transition_conflict_counter,
    state_transition_counter,
)
from agency_tracker.services.access import Clock, ClockMixin, ensure_owned, resolve_target_user_id, utc_now
from agency_tracker.utils.date_utils import parse_iso_date

ENTITY = "savings_goal"

EDITABLE_FIELDS = ("name", "target_amount_cents", "start_date", "target_date", "category", "notes")


def _positive_cents(value: Any, field: str) -> int:
    if not isinstance(value, int) or isinstance(value, bool) or value <= 0:
        raise InvalidInputError("Amount must be provided as a positive integer", field=field)
    return value


def parse_contribution_source(value: Any) -> ContributionSource:
    if value is None:
        return ContributionSource.MANUAL
    try:
        return ContributionSource(value)
    except ValueError as e:
        raise InvalidInputError(f"Unknown contribution source: {value}", field="source") from e


class SavingsGoalService(ClockMixin):
    """Goal lifecycle (active -> completed | abandoned) and contributions"""

    def __init__(self, db: Session, clock: Clock = utc_now):
        self.db = db
        self.clock = clock
        self.goals = SavingsGoalRepository(db)
        self.contributions = SavingsContributionRepository(db)

    def list_savings_goals(
        self,
        current_user: CurrentUser,
        user_id: Optional[uuid.UUID] = None,
        statuses: Optional[Iterable[str]] = None,
    ) -> List[SavingsGoal]:
        target_user_id = resolve_target_user_id(self.db, current_user, user_id)
        normalized = [parse_goal_status(s).value for s in statuses] if statuses else None
        return self.goals.get_by_owner(target_user_id, statuses=normalized)

    def get_savings_goal(
        self, current_user: CurrentUser, goal_id: uuid.UUID, for_update: bool = False
    ) -> SavingsGoal:
        goal = self.goals.get_by_id(goal_id, for_update=for_update)
        ensure_owned(current_user, goal, goal.owner_user_id if goal else None, "Savings goal")
        return goal

    def create_savings_goal(
        self,
        current_user: CurrentUser,
        name: str,
        target_amount_cents: int,
        start_date: Union[date, str, None] = None,
        target_date: Union[date, str, None] = None,
        category: Optional[str] = None,
        notes: Optional[str] = None,
        user_id: Optional[uuid.UUID] = None,
    ) -> SavingsGoal:
        target_user_id = resolve_target_user_id(self.db, current_user, user_id)
        fields = self._validated_fields(
            {
                "name": name,
                "target_amount_cents": target_amount_cents,
                "start_date": start_date if start_date is not None else self.today(),
                "target_date": target_date,
                "category": category,
                "notes": notes,
            }
        )

        goal = self.goals.create(
            id=uuid.uuid4(),
            owner_user_id=target_user_id,
            status=SavingsGoalStatus.ACTIVE.value,
            **fields,
        )
        self.db.commit()
        return goal

    def update_savings_goal(
        self, current_user: CurrentUser, goal_id: uuid.UUID, updates: Dict[str, Any]
    ) -> SavingsGoal:
        goal = self.get_savings_goal(current_user, goal_id)
        ensure_goal_active(goal.status, "be updated")

        fields = self._validated_fields({k: v for k, v in updates.items() if k in EDITABLE_FIELDS})
        if not fields:
            return goal

        start = fields.get("start_date", goal.start_date)
        target = fields.get("target_date", goal.target_date)
        if start is not None and target is not None and target < start:
            raise InvalidInputError("Target date cannot be before the start date", field="target_date")

        self.goals.update_fields(goal, fields)
        self.db.commit()
        return goal

    def complete_savings_goal(self, current_user: CurrentUser, goal_id: uuid.UUID) -> SavingsGoal:
        return self._transition(
            current_user, goal_id, SavingsGoalStatus.COMPLETED, "be completed", {"completed_at": self.now()}
        )

    def abandon_savings_goal(
        self, current_user: CurrentUser, goal_id: uuid.UUID, reason: Optional[str] = None
    ) -> SavingsGoal:
        if reason is not None:
            reason = reason.strip() or None
        return self._transition(
            current_user,
            goal_id,
            SavingsGoalStatus.ABANDONED,
            "be abandoned",
            {"abandoned_at": self.now(), "abandoned_reason": reason},
        )

    def list_contributions(self, current_user: CurrentUser, goal_id: uuid.UUID) -> List[SavingsContribution]:
        goal = self.get_savings_goal(current_user, goal_id)
        return self.contributions.get_by_goal(goal.id)

    def add_contribution(
        self,
        current_user: CurrentUser,
        goal_id: uuid.UUID,
        amount_cents: int,
        source: Union[ContributionSource, str, None] = None,
        contribution_date: Union[date, str, None] = None,
        notes: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Record money set aside for an active goal.

        The goal row is locked and re-read before the insert so a concurrent
        completion or abandonment cannot be overtaken.

        Returns:
            {"goal": SavingsGoal, "contribution": SavingsContribution}

        Raises:
            InvalidInputError: Amount not positive, unknown source or bad date
            NotFoundError: Goal missing or owned by someone else
            ConflictError: Goal is no longer active
        """
        amount_cents = _positive_cents(amount_cents, "amount_cents")
        resolved_source = parse_contribution_source(source)
        resolved_date = parse_iso_date(contribution_date, field="contribution_date") or self.today()

        goal = self.get_savings_goal(current_user, goal_id, for_update=True)
        ensure_goal_active(goal.status, "receive contributions")

        contribution = self.contributions.create(
            id=uuid.uuid4(),
            goal_id=goal.id,
            user_id=goal.owner_user_id,
            amount_cents=amount_cents,
            source=resolved_source.value,
            contribution_date=resolved_date,
            notes=notes,
        )
        self.db.commit()

        logging.info(
            "Savings contribution added",
            extra={
                "goal_id": str(goal.id),
                "contribution_id": str(contribution.id),
                "amount_cents": amount_cents,
                "source": resolved_source.value,
            },
        )

        return {"goal": self.goals.get_by_id(goal.id), "contribution": contribution}

    def delete_contribution(
        self, current_user: CurrentUser, goal_id: uuid.UUID, contribution_id: uuid.UUID
    ) -> SavingsGoal:
        """
        Remove a contribution from a goal's ledger. The goal status is left as is.

        Raises:
            NotFoundError: Goal or contribution missing, or contribution on another goal
        """
        goal = self.get_savings_goal(current_user, goal_id)

        contribution = self.contributions.get_by_id(contribution_id)
        if contribution is None or contribution.goal_id != goal.id:
            raise NotFoundError("Savings contribution not found")

        self.contributions.delete(contribution)
        self.db.commit()

        return self.goals.get_by_id(goal.id)

    def sum_outstanding_commitments_by_user_id(self, user_id: uuid.UUID) -> int:
        return self.goals.sum_outstanding_commitments_by_user_id(user_id)

    def _transition(
        self,
        current_user: CurrentUser,
        goal_id: uuid.UUID,
        target: SavingsGoalStatus,
        action: str,
        stamps: Dict[str, Any],
    ) -> SavingsGoal:
        goal = self.get_savings_goal(current_user, goal_id)
        current_status = goal.status

        try:
            ensure_goal_transition(current_status, target, action)
        except ConflictError:
            state_transition_conflict_counter.labels(entity=ENTITY).inc()
            raise

        updates = {"status": target.value, **stamps}
        if not self.goals.transition_status(goal.id, current_status, updates):
            self.db.rollback()
            state_transition_conflict_counter.labels(entity=ENTITY).inc()
            raise ConflictError("Savings goal was changed concurrently; reload and retry")

        self.db.commit()
        state_transition_counter.labels(entity=ENTITY, to_status=target.value).inc()
        log_transition(ENTITY, str(goal.id), current_status, target.value)

        return self.goals.get_by_id(goal.id)

    def _validated_fields(self, fields: Dict[str, Any]) -> Dict[str, Any]:
        validated: Dict[str, Any] = {}

        for key, value in fields.items():
            if key == "name":
                value = (value or "").strip()
                if not value:
                    raise InvalidInputError("A name is required for the savings goal", field="name")
            elif key == "target_amount_cents":
                value = _positive_cents(value, "target_amount_cents")
            elif key == "start_date":
                value = parse_iso_date(value, field="start_date")
                if value is None:
                    raise InvalidInputError("A start date is required for the savings goal", field="start_date")
            elif key == "target_date":
                value = parse_iso_date(value, field="target_date")
            validated[key] = value

        start = validated.get("start_date")
        target = validated.get("target_date")
        if start is not None and target is not None and target < start:
            raise InvalidInputError("Target date cannot be before the start date", field="target_date")

        return validated
