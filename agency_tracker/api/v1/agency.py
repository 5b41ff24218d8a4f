"""Agency snapshot endpoints"""

import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session

from agency_tracker.api.dependencies import get_current_user, get_request_id
from agency_tracker.api.v1.schemas import (
    AgencyWarningSchema,
    SnapshotListResponse,
    SnapshotRequest,
    SnapshotResponse,
)
from agency_tracker.domain.models import CurrentUser
from agency_tracker.infrastructure.database.session import get_db
from agency_tracker.services.agency import AgencyService, DecoratedSnapshot

router = APIRouter()


def to_snapshot_response(decorated: DecoratedSnapshot) -> SnapshotResponse:
    snapshot = decorated.snapshot
    assessment = decorated.assessment
    return SnapshotResponse(
        id=snapshot.id,
        user_id=snapshot.user_id,
        calculated_for=snapshot.calculated_for,
        credit_agency_cents=snapshot.credit_agency_cents,
        backed_agency_cents=snapshot.backed_agency_cents,
        available_credit_cents=snapshot.available_credit_cents,
        projected_obligations_cents=snapshot.projected_obligations_cents,
        upcoming_income_cents=snapshot.upcoming_income_cents,
        projected_expense_total_cents=snapshot.projected_expense_total_cents,
        savings_commitments_cents=snapshot.savings_commitments_cents,
        safe_to_spend_cents=snapshot.safe_to_spend_cents,
        calculated_at=snapshot.calculated_at,
        notes=snapshot.notes,
        total_credit_limit_cents=assessment.total_credit_limit_cents,
        backed_coverage_percent=assessment.backed_coverage_percent,
        credit_utilization_percent=assessment.credit_utilization_percent,
        warnings=[AgencyWarningSchema(**vars(warning)) for warning in assessment.warnings],
    )


@router.post("/agency/snapshots", response_model=SnapshotResponse)
def recalculate_snapshot(
    request_body: SnapshotRequest,
    request: Request,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    """
    Calculate (or recalculate) the agency snapshot for a date.

    Recalculating the same user and date overwrites the stored snapshot.
    """
    decorated = AgencyService(db).recalculate_snapshot(
        current_user,
        user_id=request_body.user_id,
        calculated_for=request_body.calculated_for,
        notes=request_body.notes,
        request_id=get_request_id(request),
    )
    return to_snapshot_response(decorated)


@router.get("/agency/snapshots", response_model=SnapshotListResponse)
def list_snapshots(
    user_id: Optional[uuid.UUID] = None,
    limit: int = Query(25, ge=1, le=100),
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    snapshots = AgencyService(db).list_snapshots(current_user, user_id=user_id, limit=limit)
    return SnapshotListResponse(snapshots=[to_snapshot_response(s) for s in snapshots])


@router.get("/agency/snapshots/{calculated_for}", response_model=SnapshotResponse)
def get_snapshot(
    calculated_for: str,
    user_id: Optional[uuid.UUID] = None,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    decorated = AgencyService(db).get_snapshot_by_date(current_user, calculated_for, user_id=user_id)
    return to_snapshot_response(decorated)
