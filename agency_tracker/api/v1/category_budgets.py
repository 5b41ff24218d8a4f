"""Category budget endpoints"""

import uuid
from typing import List, Optional

from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session

from agency_tracker.api.dependencies import get_current_user
from agency_tracker.api.v1.schemas import (
    BudgetEvaluationSchema,
    CategoryBudgetCreateRequest,
    CategoryBudgetResponse,
    CategoryBudgetSummaryResponse,
    CategoryBudgetUpdateRequest,
)
from agency_tracker.domain.models import CurrentUser
from agency_tracker.infrastructure.database.session import get_db
from agency_tracker.services.category_budgets import CategoryBudgetService

router = APIRouter()


@router.get("/category-budgets", response_model=List[CategoryBudgetResponse])
def list_category_budgets(
    include_inactive: bool = False,
    user_id: Optional[uuid.UUID] = None,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    return CategoryBudgetService(db).list_category_budgets(
        current_user, include_inactive=include_inactive, user_id=user_id
    )


@router.post("/category-budgets", response_model=CategoryBudgetResponse, status_code=201)
def create_category_budget(
    request_body: CategoryBudgetCreateRequest,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    return CategoryBudgetService(db).create_category_budget(
        current_user,
        category=request_body.category,
        limit_amount_cents=request_body.limit_amount_cents,
        period=request_body.period,
        warning_threshold=request_body.warning_threshold,
        period_start_date=request_body.period_start_date,
        period_end_date=request_body.period_end_date,
        user_id=request_body.user_id,
    )


@router.get("/category-budgets/summaries", response_model=List[CategoryBudgetSummaryResponse])
def list_category_budget_summaries(
    reference_date: Optional[str] = None,
    include_inactive: bool = False,
    user_id: Optional[uuid.UUID] = None,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    """Spend, remaining amount and ok/warning/over status for each budget"""
    summaries = CategoryBudgetService(db).list_category_budget_summaries(
        current_user, reference_date=reference_date, include_inactive=include_inactive, user_id=user_id
    )
    return [
        CategoryBudgetSummaryResponse(
            budget=CategoryBudgetResponse.model_validate(summary.budget),
            evaluation=BudgetEvaluationSchema.model_validate(summary.evaluation),
        )
        for summary in summaries
    ]


@router.patch("/category-budgets/{budget_id}", response_model=CategoryBudgetResponse)
def update_category_budget(
    budget_id: uuid.UUID,
    request_body: CategoryBudgetUpdateRequest,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    return CategoryBudgetService(db).update_category_budget(
        current_user, budget_id, request_body.model_dump(exclude_unset=True)
    )


@router.delete("/category-budgets/{budget_id}", status_code=204)
def delete_category_budget(
    budget_id: uuid.UUID,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    CategoryBudgetService(db).delete_category_budget(current_user, budget_id)
    return Response(status_code=204)
