"""Order write paths: creation, approval with payment scheduling, rejection, settlement"""

import logging
from datetime import datetime
from typing import Tuple

from sqlalchemy.orm import Session

from agrocredit.domain.exceptions import NotFoundError, PreconditionViolation, ValidationError
from agrocredit.domain.lifecycle import build_payment, ensure_payable, ensure_transition
from agrocredit.domain.models import OrderStatus, OrderTerms
from agrocredit.domain.pricing import Number, calculate_order_terms, to_money, validate_down_payment
from agrocredit.infrastructure.database.models import Order, Payment, User
from agrocredit.infrastructure.database.repositories import FarmerRepository, OrderRepository, PaymentRepository
from agrocredit.infrastructure.database.session import atomic
from agrocredit.utils.date_utils import utcnow

logger = logging.getLogger(__name__)


def create_order(
    db: Session,
    agent: User,
    farmer_id: str,
    product_name: str,
    quantity: Number,
    unit_price: Number,
    down_payment: Number,
) -> Order:
    """
    Single write path for new orders.

    The recorded down payment must equal the required share of the total;
    the remaining balance is whatever the farmer still owes after it.

    Raises:
        ValidationError: Non-positive inputs or total, sub-cent inputs, blank
            product or wrong down payment
        NotFoundError: Farmer does not exist
        PreconditionViolation: Farmer is not linked to this agent
    """
    product_name = (product_name or "").strip()
    if not product_name:
        raise ValidationError("Product name is required")

    terms = calculate_order_terms(quantity, unit_price)
    validate_down_payment(terms.total_cost, down_payment)
    recorded = to_money(down_payment)
    if recorded <= 0:
        raise ValidationError(f"Down payment must be positive, got {recorded}")
    terms = OrderTerms(
        total_cost=terms.total_cost,
        down_payment=recorded,
        remaining_balance=terms.total_cost - recorded,
    )

    farmer = FarmerRepository(db).get_farmer_by_id(farmer_id)
    if farmer is None:
        raise NotFoundError("Farmer not found")
    if farmer.agent_id != agent.id:
        raise PreconditionViolation("Farmer is not linked to this agent")

    with atomic(db):
        order = OrderRepository(db).create_order(
            farmer_id=farmer.id,
            agent_id=agent.id,
            product_name=product_name,
            quantity=to_money(quantity),
            unit_price=to_money(unit_price),
            terms=terms,
        )
    return order


def approve_order(
    db: Session,
    order_id: str,
    admin: User,
    now: datetime | None = None,
    days_until_due: int | None = None,
) -> Tuple[Order, Payment]:
    """
    Approve a pending order and schedule its remaining-balance payment.

    Both writes share one transaction: the status flip is a conditional
    update on status == pending, so of two concurrent approvals exactly one
    creates a payment and the other fails without side effects.

    Raises:
        NotFoundError: Order does not exist
        PreconditionViolation: Order is no longer pending
        ValidationError: Stored down payment breaks the 50% rule
    """
    approved_at = now or utcnow()
    orders = OrderRepository(db)

    with atomic(db):
        order = orders.get_order_by_id(order_id)
        if order is None:
            raise NotFoundError("Order not found")
        ensure_transition(order.status, OrderStatus.APPROVED.value)
        validate_down_payment(order.total_cost, order.down_payment)

        updated = orders.transition(
            order_id,
            expected=OrderStatus.PENDING.value,
            target=OrderStatus.APPROVED.value,
            approved_at=approved_at,
            approved_by=admin.id,
        )
        if updated != 1:
            raise PreconditionViolation("Order was already decided by another request")

        scheduled = build_payment(order.remaining_balance, approved_at, days_until_due)
        payment = PaymentRepository(db).create_payment(order.id, scheduled)

    logger.info("Order %s approved, payment %s due %s", order_id, payment.id, scheduled.due_date.isoformat())
    return order, payment


def reject_order(db: Session, order_id: str, admin: User) -> Order:
    """
    Raises:
        NotFoundError: Order does not exist
        PreconditionViolation: Order is no longer pending
    """
    orders = OrderRepository(db)

    with atomic(db):
        order = orders.get_order_by_id(order_id)
        if order is None:
            raise NotFoundError("Order not found")
        ensure_transition(order.status, OrderStatus.REJECTED.value)

        updated = orders.transition(order_id, expected=OrderStatus.PENDING.value, target=OrderStatus.REJECTED.value)
        if updated != 1:
            raise PreconditionViolation("Order was already decided by another request")

    logger.info("Order %s rejected by %s", order_id, admin.id)
    return order


def mark_payment_paid(db: Session, payment_id: str, paid_at: datetime | None = None) -> Payment:
    """
    Record the remaining balance as received.

    Raises:
        NotFoundError: Payment does not exist
        PreconditionViolation: Payment is already paid
    """
    payments = PaymentRepository(db)

    with atomic(db):
        payment = payments.get_payment_by_id(payment_id)
        if payment is None:
            raise NotFoundError("Payment not found")
        ensure_payable(payment.status)

        if payments.settle(payment_id, paid_at or utcnow()) != 1:
            raise PreconditionViolation("Payment was already settled by another request")

    return payment
