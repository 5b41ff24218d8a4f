"""Savings goal and contribution endpoints"""

import uuid
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from agency_tracker.api.dependencies import get_current_user
from agency_tracker.api.v1.schemas import (
    AbandonRequest,
    ContributionCreatedResponse,
    ContributionCreateRequest,
    ContributionResponse,
    SavingsGoalCreateRequest,
    SavingsGoalResponse,
    SavingsGoalUpdateRequest,
)
from agency_tracker.domain.models import CurrentUser
from agency_tracker.infrastructure.database.session import get_db
from agency_tracker.services.savings_goals import SavingsGoalService

router = APIRouter()


@router.get("/savings-goals", response_model=List[SavingsGoalResponse])
def list_savings_goals(
    status: Optional[List[str]] = Query(None),
    user_id: Optional[uuid.UUID] = None,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    return SavingsGoalService(db).list_savings_goals(current_user, user_id=user_id, statuses=status)


@router.post("/savings-goals", response_model=SavingsGoalResponse, status_code=201)
def create_savings_goal(
    request_body: SavingsGoalCreateRequest,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    return SavingsGoalService(db).create_savings_goal(
        current_user,
        name=request_body.name,
        target_amount_cents=request_body.target_amount_cents,
        start_date=request_body.start_date,
        target_date=request_body.target_date,
        category=request_body.category,
        notes=request_body.notes,
        user_id=request_body.user_id,
    )


@router.get("/savings-goals/{goal_id}", response_model=SavingsGoalResponse)
def get_savings_goal(
    goal_id: uuid.UUID,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    return SavingsGoalService(db).get_savings_goal(current_user, goal_id)


@router.patch("/savings-goals/{goal_id}", response_model=SavingsGoalResponse)
def update_savings_goal(
    goal_id: uuid.UUID,
    request_body: SavingsGoalUpdateRequest,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    return SavingsGoalService(db).update_savings_goal(
        current_user, goal_id, request_body.model_dump(exclude_unset=True)
    )


@router.post("/savings-goals/{goal_id}/complete", response_model=SavingsGoalResponse)
def complete_savings_goal(
    goal_id: uuid.UUID,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    return SavingsGoalService(db).complete_savings_goal(current_user, goal_id)


@router.post("/savings-goals/{goal_id}/abandon", response_model=SavingsGoalResponse)
def abandon_savings_goal(
    goal_id: uuid.UUID,
    request_body: Optional[AbandonRequest] = None,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    reason = request_body.reason if request_body else None
    return SavingsGoalService(db).abandon_savings_goal(current_user, goal_id, reason)


@router.get("/savings-goals/{goal_id}/contributions", response_model=List[ContributionResponse])
def list_contributions(
    goal_id: uuid.UUID,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    return SavingsGoalService(db).list_contributions(current_user, goal_id)


@router.post(
    "/savings-goals/{goal_id}/contributions", response_model=ContributionCreatedResponse, status_code=201
)
def add_contribution(
    goal_id: uuid.UUID,
    request_body: ContributionCreateRequest,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    result = SavingsGoalService(db).add_contribution(
        current_user,
        goal_id,
        amount_cents=request_body.amount_cents,
        source=request_body.source,
        contribution_date=request_body.contribution_date,
        notes=request_body.notes,
    )
    return ContributionCreatedResponse(
        goal=SavingsGoalResponse.model_validate(result["goal"]),
        contribution=ContributionResponse.model_validate(result["contribution"]),
    )


@router.delete("/savings-goals/{goal_id}/contributions/{contribution_id}", response_model=SavingsGoalResponse)
def delete_contribution(
    goal_id: uuid.UUID,
    contribution_id: uuid.UUID,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    """Remove a contribution and return the goal with its recomputed total"""
    return SavingsGoalService(db).delete_contribution(current_user, goal_id, contribution_id)
