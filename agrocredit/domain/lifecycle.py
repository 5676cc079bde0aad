"""Order and payment lifecycle policy"""

from datetime import datetime

from agrocredit.domain.exceptions import PreconditionViolation
from agrocredit.domain.models import OrderStatus, PaymentStatus, ScheduledPayment
from agrocredit.domain.pricing import Number, to_money
from agrocredit.domain.schedule import schedule_due_date

# pending is the only non-terminal order status
ORDER_TRANSITIONS = {
    OrderStatus.PENDING.value: {OrderStatus.APPROVED.value, OrderStatus.REJECTED.value},
    OrderStatus.APPROVED.value: set(),
    OrderStatus.REJECTED.value: set(),
}


def can_transition(current: str, target: str) -> bool:
    return target in ORDER_TRANSITIONS.get(current, set())


def ensure_transition(current: str, target: str) -> None:
    """
    Raises:
        PreconditionViolation: order cannot move from current to target
    """
    if not can_transition(current, target):
        raise PreconditionViolation(f"Cannot move order from '{current}' to '{target}'")


def ensure_payable(status: str) -> None:
    """Only a pending payment can be settled; overdue is pending past its due date"""
    if status != PaymentStatus.PENDING.value:
        raise PreconditionViolation(f"Payment is already '{status}'")


def build_payment(remaining_balance: Number, approved_at: datetime, days_until_due: int | None = None) -> ScheduledPayment:
    """Derive the single remaining-balance payment created when an order is approved"""
    return ScheduledPayment(
        amount=to_money(remaining_balance),
        due_date=schedule_due_date(approved_at, days_until_due),
        status=PaymentStatus.PENDING.value,
    )
