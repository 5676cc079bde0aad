"""Repayment endpoints: farmer schedule and admin settlement"""

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from agrocredit.api.v1.schemas import PaymentResponse, PaymentScheduleResponse
from agrocredit.api.dependencies import require_admin, require_farmer
from agrocredit.infrastructure.database.models import User
from agrocredit.infrastructure.database.session import get_db
from agrocredit.infrastructure.database.repositories import PaymentRepository
from agrocredit.domain.exceptions import DependencyFailure, NotFoundError, PreconditionViolation
from agrocredit.domain.schedule import partition_payments
from agrocredit.infrastructure.observability.metrics import payment_settled_counter
from agrocredit.services.farmers import farmer_for_user
from agrocredit.services.orders import mark_payment_paid
from agrocredit.utils.date_utils import utcnow

router = APIRouter()


@router.get("/farmer/payments", response_model=PaymentScheduleResponse)
def get_payment_schedule(db: Session = Depends(get_db), user: User = Depends(require_farmer)):
    """
    Retrieve the farmer's remaining-balance payments.

    Returns:
        Payments ordered by due date, the next pending payment, and how many
        pending payments are past due as of now
    """
    try:
        farmer = farmer_for_user(db, user)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))

    now = utcnow()
    payments = PaymentRepository(db).list_by_farmer(farmer.id)
    next_payment, overdue = partition_payments(payments, now)

    return PaymentScheduleResponse(
        farmer_id=farmer.id,
        next_payment=PaymentResponse.from_record(next_payment, now) if next_payment else None,
        overdue_count=len(overdue),
        payments=[PaymentResponse.from_record(p, now) for p in payments],
    )


@router.post("/payments/{payment_id}/pay", response_model=PaymentResponse)
def pay_payment(payment_id: str, db: Session = Depends(get_db), admin: User = Depends(require_admin)):
    """Record the remaining balance as received"""
    try:
        payment = mark_payment_paid(db, payment_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except PreconditionViolation as e:
        raise HTTPException(status_code=409, detail=str(e))
    except DependencyFailure:
        raise HTTPException(status_code=503, detail="Record store unavailable")

    payment_settled_counter.inc()
    return PaymentResponse.from_record(payment)
