"""Dependency injection for FastAPI endpoints"""

import uuid
from typing import Optional

from fastapi import Depends, Header, HTTPException, Request
from sqlalchemy.orm import Session

from agency_tracker.domain.models import CurrentUser
from agency_tracker.infrastructure.database.repositories import UserRepository
from agency_tracker.infrastructure.database.session import get_db


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_current_user(
    x_user_id: Optional[str] = Header(None, alias="X-User-Id"),
    db: Session = Depends(get_db),
) -> CurrentUser:
    """
    Resolve the caller from the X-User-Id header.

    Raises:
        HTTPException 401: Header missing, malformed, or not an active user
    """
    if not x_user_id:
        raise HTTPException(status_code=401, detail="Authentication required")

    try:
        user_id = uuid.UUID(x_user_id)
    except ValueError:
        raise HTTPException(status_code=401, detail="Authentication required")

    user = UserRepository(db).get_by_id(user_id)
    if user is None:
        raise HTTPException(status_code=401, detail="Authentication required")

    return CurrentUser(id=user.id, role=user.role)
