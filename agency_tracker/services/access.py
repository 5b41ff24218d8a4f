"""Caller-to-target-user resolution shared by all services"""

import uuid
from datetime import date, datetime, timezone
from typing import Callable, Optional

from sqlalchemy.orm import Session

from agency_tracker.domain.exceptions import ForbiddenError, NotFoundError
from agency_tracker.domain.models import CurrentUser
from agency_tracker.infrastructure.database.repositories import UserRepository

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def resolve_target_user_id(
    db: Session, current_user: CurrentUser, requested_user_id: Optional[uuid.UUID]
) -> uuid.UUID:
    """
    Decide which user a caller acts on.

    - Admins default to themselves and may target any existing user (active or not)
    - Everyone else may only target themselves

    Raises:
        NotFoundError: Admin targeted a user id that does not exist
        ForbiddenError: Non-admin targeted another user
    """
    if current_user.is_admin:
        if requested_user_id is None:
            return current_user.id

        if UserRepository(db).get_by_id(requested_user_id, include_inactive=True) is None:
            raise NotFoundError("User not found")

        return requested_user_id

    if requested_user_id is not None and requested_user_id != current_user.id:
        raise ForbiddenError("You do not have permission to manage this resource")

    return current_user.id


def ensure_owned(current_user: CurrentUser, resource, owner_id: Optional[uuid.UUID], label: str) -> None:
    """Missing and foreign resources both surface as not found"""
    if resource is None:
        raise NotFoundError(f"{label} not found")

    if not current_user.is_admin and owner_id != current_user.id:
        raise NotFoundError(f"{label} not found")


class ClockMixin:
    """Wall-clock access for services; tests inject a fixed clock"""

    clock: Clock

    def now(self) -> datetime:
        return self.clock()

    def today(self) -> date:
        return self.clock().date()
