"""Credit card payment cycle endpoints"""

import uuid
from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from agency_tracker.api.dependencies import get_current_user
from agency_tracker.api.v1.schemas import (
    PaymentCycleListResponse,
    PaymentCycleSummarySchema,
    RecordPaymentRequest,
)
from agency_tracker.domain.models import CurrentUser
from agency_tracker.infrastructure.database.session import get_db
from agency_tracker.services.payment_cycles import PaymentCycleService
from agency_tracker.utils.date_utils import parse_iso_date

router = APIRouter()


@router.get("/payment-cycles", response_model=PaymentCycleListResponse)
def list_payment_cycles(
    as_of: Optional[str] = None,
    user_id: Optional[uuid.UUID] = None,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    """Per-card cycle summaries ordered by nearest payment due date"""
    service = PaymentCycleService(db)
    as_of_date = parse_iso_date(as_of, field="as_of") or service.today()
    summaries = service.summarize_payment_cycles(current_user, as_of=as_of_date, user_id=user_id)
    return PaymentCycleListResponse(
        calculated_for=as_of_date,
        cycles=[PaymentCycleSummarySchema.model_validate(summary) for summary in summaries],
    )


@router.post("/payment-cycles/{cycle_id}/payment", response_model=PaymentCycleSummarySchema)
def record_cycle_payment(
    cycle_id: uuid.UUID,
    request_body: RecordPaymentRequest,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    """Record (or clear with clear=true) the payment date on an open cycle"""
    summary = PaymentCycleService(db).record_cycle_payment(
        current_user,
        cycle_id,
        payment_recorded_on=request_body.payment_recorded_on,
        clear=request_body.clear,
        as_of=request_body.as_of,
    )
    return PaymentCycleSummarySchema.model_validate(summary)
