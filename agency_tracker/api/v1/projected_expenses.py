"""Projected expense endpoints"""

import uuid
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.orm import Session

from agency_tracker.api.dependencies import get_current_user
from agency_tracker.api.v1.schemas import (
    CancelRequest,
    PayRequest,
    ProjectedExpenseCreateRequest,
    ProjectedExpenseResponse,
    ProjectedExpenseTemplateResponse,
    ProjectedExpenseTransitionRequest,
    ProjectedExpenseUpdateRequest,
    TemplateInstantiateRequest,
)
from agency_tracker.domain.models import CurrentUser
from agency_tracker.infrastructure.database.session import get_db
from agency_tracker.services.projected_expenses import ProjectedExpenseService

router = APIRouter()


@router.get("/projected-expenses", response_model=List[ProjectedExpenseResponse])
def list_projected_expenses(
    status: Optional[List[str]] = Query(None),
    user_id: Optional[uuid.UUID] = None,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    return ProjectedExpenseService(db).list_projected_expenses(current_user, user_id=user_id, statuses=status)


@router.post("/projected-expenses", response_model=ProjectedExpenseResponse, status_code=201)
def create_projected_expense(
    request_body: ProjectedExpenseCreateRequest,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    return ProjectedExpenseService(db).create_projected_expense(
        current_user,
        amount_cents=request_body.amount_cents,
        category=request_body.category,
        expected_date=request_body.expected_date,
        notes=request_body.notes,
        credit_card_id=request_body.credit_card_id,
        user_id=request_body.user_id,
    )


@router.get("/projected-expenses/templates", response_model=List[ProjectedExpenseTemplateResponse])
def list_templates(
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    return [ProjectedExpenseTemplateResponse.model_validate(t) for t in ProjectedExpenseService(db).list_templates()]


@router.post(
    "/projected-expenses/templates/{template_id}", response_model=ProjectedExpenseResponse, status_code=201
)
def create_from_template(
    template_id: str,
    request_body: TemplateInstantiateRequest,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    return ProjectedExpenseService(db).create_from_template(
        current_user,
        template_id,
        expected_date=request_body.expected_date,
        reference_date=request_body.reference_date,
        amount_cents=request_body.amount_cents,
        category=request_body.category,
        notes=request_body.notes,
        credit_card_id=request_body.credit_card_id,
        user_id=request_body.user_id,
    )


@router.get("/projected-expenses/{expense_id}", response_model=ProjectedExpenseResponse)
def get_projected_expense(
    expense_id: uuid.UUID,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    return ProjectedExpenseService(db).get_projected_expense(current_user, expense_id)


@router.patch("/projected-expenses/{expense_id}", response_model=ProjectedExpenseResponse)
def update_projected_expense(
    expense_id: uuid.UUID,
    request_body: ProjectedExpenseUpdateRequest,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    return ProjectedExpenseService(db).update_projected_expense(
        current_user, expense_id, request_body.model_dump(exclude_unset=True)
    )


@router.delete("/projected-expenses/{expense_id}", status_code=204)
def delete_projected_expense(
    expense_id: uuid.UUID,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    ProjectedExpenseService(db).delete_projected_expense(current_user, expense_id)
    return Response(status_code=204)


@router.post("/projected-expenses/{expense_id}/commit", response_model=ProjectedExpenseResponse)
def commit_projected_expense(
    expense_id: uuid.UUID,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    return ProjectedExpenseService(db).commit_projected_expense(current_user, expense_id)


@router.post("/projected-expenses/{expense_id}/pay", response_model=ProjectedExpenseResponse)
def mark_projected_expense_paid(
    expense_id: uuid.UUID,
    request_body: Optional[PayRequest] = None,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    transaction_id = request_body.transaction_id if request_body else None
    return ProjectedExpenseService(db).mark_projected_expense_paid(current_user, expense_id, transaction_id)


@router.post("/projected-expenses/{expense_id}/cancel", response_model=ProjectedExpenseResponse)
def cancel_projected_expense(
    expense_id: uuid.UUID,
    request_body: Optional[CancelRequest] = None,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    reason = request_body.reason if request_body else None
    return ProjectedExpenseService(db).cancel_projected_expense(current_user, expense_id, reason)


@router.post("/projected-expenses/{expense_id}/transition", response_model=ProjectedExpenseResponse)
def transition_projected_expense(
    expense_id: uuid.UUID,
    request_body: ProjectedExpenseTransitionRequest,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    return ProjectedExpenseService(db).transition_projected_expense(
        current_user,
        expense_id,
        request_body.status,
        transaction_id=request_body.transaction_id,
        reason=request_body.reason,
    )
