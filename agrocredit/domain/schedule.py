"""Payment schedule derivation and overdue classification"""

from datetime import date, datetime, timedelta
from typing import Iterable, List, Optional, Protocol, Tuple, TypeVar

from agrocredit.config import settings
from agrocredit.domain.models import PaymentStatus
from agrocredit.utils.date_utils import ensure_utc, utcnow


class _PaymentLike(Protocol):
    status: str
    due_date: datetime


P = TypeVar("P", bound=_PaymentLike)


def schedule_due_date(approval_instant: date | datetime, days_until_due: int | None = None) -> date | datetime:
    """
    Due date for the remaining balance, counted in calendar days from approval.

    Example:
        2024-01-31 + 30 days -> 2024-03-01 (leap year February absorbed)
    """
    if days_until_due is None:
        days_until_due = settings.payment_due_days
    return approval_instant + timedelta(days=days_until_due)


def is_overdue(due_date: date | datetime, now: date | datetime | None = None) -> bool:
    """Strictly past due: a payment due exactly now is not overdue yet"""
    current = ensure_utc(now) if now is not None else utcnow()
    return current > ensure_utc(due_date)


def effective_payment_status(status: str, due_date: date | datetime, now: date | datetime | None = None) -> str:
    """Stored status, except pending payments past their due date read as overdue"""
    if status == PaymentStatus.PENDING.value and is_overdue(due_date, now):
        return PaymentStatus.OVERDUE.value
    return status


def partition_payments(payments: Iterable[P], now: date | datetime | None = None) -> Tuple[Optional[P], List[P]]:
    """
    Split a payment history for schedule display.

    Returns:
        (earliest pending payment or None, pending payments already overdue)
    """
    ordered = sorted(payments, key=lambda p: ensure_utc(p.due_date))
    pending = [p for p in ordered if p.status == PaymentStatus.PENDING.value]
    next_payment = pending[0] if pending else None
    overdue = [p for p in pending if is_overdue(p.due_date, now)]
    return next_payment, overdue
