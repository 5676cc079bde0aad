"""Integration tests for order write paths against the test database"""

import pytest
from datetime import datetime, timezone
from decimal import Decimal
from sqlalchemy.orm import Session
from agrocredit.domain.exceptions import (
    AuthorizationError,
    DuplicateRecordError,
    NotFoundError,
    PreconditionViolation,
    ValidationError,
)
from agrocredit.domain.models import Principal
from agrocredit.infrastructure.database.models import Farmer, Order, Payment, User
from agrocredit.infrastructure.database.repositories import OrderRepository, PaymentRepository
from agrocredit.services import orders as order_service
from agrocredit.services.dashboard import admin_stats
from agrocredit.services.farmers import import_farmers, link_farmer
from agrocredit.services.users import resolve_user


def _payment_count(db: Session) -> int:
    return db.query(Payment).count()


def test_create_order_computes_terms(pending_order: Order):
    """Test quantity=10, unit_price=1000 end-to-end breakdown"""
    assert pending_order.status == "pending"
    assert pending_order.total_cost == Decimal("10000.00")
    assert pending_order.down_payment == Decimal("5000.00")
    assert pending_order.remaining_balance == Decimal("5000.00")


def test_create_order_rejects_wrong_down_payment(db: Session, agent_user: User, linked_farmer: Farmer):
    """Test 4999 on a 10000 order is refused at the write path"""
    with pytest.raises(ValidationError):
        order_service.create_order(db, agent_user, linked_farmer.id, "Urea", 10, 1000, 4999)

    assert db.query(Order).count() == 0


def test_create_order_requires_linked_farmer(db: Session, other_agent: User, linked_farmer: Farmer):
    with pytest.raises(PreconditionViolation):
        order_service.create_order(db, other_agent, linked_farmer.id, "Urea", 10, 1000, 5000)


def test_create_order_unknown_farmer(db: Session, agent_user: User):
    with pytest.raises(NotFoundError):
        order_service.create_order(db, agent_user, "missing", "Urea", 10, 1000, 5000)


def test_create_order_blank_product(db: Session, agent_user: User, linked_farmer: Farmer):
    with pytest.raises(ValidationError):
        order_service.create_order(db, agent_user, linked_farmer.id, "   ", 10, 1000, 5000)


def test_create_order_rejects_zero_total(db: Session, agent_user: User, linked_farmer: Farmer):
    """Test a nonzero quantity and price whose total rounds to 0.00 is refused"""
    with pytest.raises(ValidationError, match="Total cost"):
        order_service.create_order(db, agent_user, linked_farmer.id, "Urea", "0.01", "0.01", "0.001")

    assert db.query(Order).count() == 0


def test_create_order_rejects_down_payment_rounding_to_zero(db: Session, agent_user: User, linked_farmer: Farmer):
    with pytest.raises(ValidationError, match="Down payment must be positive"):
        order_service.create_order(db, agent_user, linked_farmer.id, "Urea", "0.01", "1", "0.001")

    assert db.query(Order).count() == 0


def test_create_order_rejects_sub_cent_quantity(db: Session, agent_user: User, linked_farmer: Farmer):
    """Test stored quantity and price always multiply to the stored total"""
    with pytest.raises(ValidationError, match="2 decimal places"):
        order_service.create_order(
            db, agent_user, linked_farmer.id, "Urea", Decimal("1.005"), Decimal("1000"), Decimal("502.50")
        )

    assert db.query(Order).count() == 0


def test_approve_order_schedules_payment(db: Session, pending_order: Order, admin_user: User):
    """Test approval on 2024-03-01 creates a 5000 payment due 2024-03-31"""
    approved_at = datetime(2024, 3, 1, 10, 0, tzinfo=timezone.utc)

    order, payment = order_service.approve_order(db, pending_order.id, admin_user, now=approved_at)

    assert order.status == "approved"
    assert order.approved_by == admin_user.id
    assert payment.order_id == order.id
    assert payment.amount == Decimal("5000.00")
    assert payment.status == "pending"
    assert payment.due_date.date().isoformat() == "2024-03-31"
    assert _payment_count(db) == 1


def test_approve_twice_is_rejected(db: Session, pending_order: Order, admin_user: User):
    """Test a second approval neither succeeds nor duplicates the payment"""
    order_service.approve_order(db, pending_order.id, admin_user)

    with pytest.raises(PreconditionViolation):
        order_service.approve_order(db, pending_order.id, admin_user)

    assert _payment_count(db) == 1


def test_concurrent_approval_loser_writes_nothing(db: Session, pending_order: Order, admin_user: User, monkeypatch):
    """Test the conditional update stops a caller whose status read went stale"""
    # Another session approves between our read and our write
    OrderRepository(db).transition(pending_order.id, expected="pending", target="approved")
    db.commit()
    monkeypatch.setattr(order_service, "ensure_transition", lambda current, target: None)

    with pytest.raises(PreconditionViolation, match="another request"):
        order_service.approve_order(db, pending_order.id, admin_user)

    assert _payment_count(db) == 0


def test_approval_rolls_back_when_payment_insert_fails(db: Session, pending_order: Order, admin_user: User, monkeypatch):
    """Test order stays pending if the payment cannot be created"""

    def fail(self, order_id, scheduled):
        raise RuntimeError("insert failed")

    monkeypatch.setattr(PaymentRepository, "create_payment", fail)

    with pytest.raises(RuntimeError):
        order_service.approve_order(db, pending_order.id, admin_user)

    db.expire_all()
    order = db.get(Order, pending_order.id)
    assert order.status == "pending"
    assert order.approved_at is None
    assert _payment_count(db) == 0


def test_approve_refuses_stored_bad_down_payment(db: Session, pending_order: Order, admin_user: User):
    """Test a row written around the service with a wrong down payment cannot be approved"""
    pending_order.down_payment = Decimal("4000.00")
    pending_order.remaining_balance = Decimal("6000.00")
    db.commit()

    with pytest.raises(ValidationError):
        order_service.approve_order(db, pending_order.id, admin_user)

    assert _payment_count(db) == 0


def test_reject_then_approve_is_refused(db: Session, pending_order: Order, admin_user: User):
    order = order_service.reject_order(db, pending_order.id, admin_user)
    assert order.status == "rejected"

    with pytest.raises(PreconditionViolation):
        order_service.approve_order(db, pending_order.id, admin_user)
    with pytest.raises(PreconditionViolation):
        order_service.reject_order(db, pending_order.id, admin_user)


def test_approve_unknown_order(db: Session, admin_user: User):
    with pytest.raises(NotFoundError):
        order_service.approve_order(db, "missing", admin_user)


def test_mark_payment_paid(db: Session, pending_order: Order, admin_user: User):
    _, payment = order_service.approve_order(db, pending_order.id, admin_user)
    paid_at = datetime(2024, 4, 1, tzinfo=timezone.utc)

    paid = order_service.mark_payment_paid(db, payment.id, paid_at)

    assert paid.status == "paid"
    assert paid.paid_date is not None
    with pytest.raises(PreconditionViolation):
        order_service.mark_payment_paid(db, payment.id)


def test_link_farmer_first_claim_wins(db: Session, unlinked_farmer: Farmer, agent_user: User, other_agent: User):
    farmer = link_farmer(db, unlinked_farmer.id, agent_user)
    assert farmer.agent_id == agent_user.id

    with pytest.raises(PreconditionViolation):
        link_farmer(db, unlinked_farmer.id, other_agent)

    db.expire_all()
    assert db.get(Farmer, unlinked_farmer.id).agent_id == agent_user.id


def test_import_farmers_duplicate_rolls_back_batch(db: Session, linked_farmer: Farmer):
    """Test one duplicate phone rejects the whole upload"""
    text = "name,phone,national_id\nNew Farmer,+254799999999,55555555\nDup,+254700000001,66666666\n"

    with pytest.raises(DuplicateRecordError):
        import_farmers(db, text)

    assert db.query(Farmer).count() == 1


def test_resolve_user_creates_then_keeps_role(db: Session):
    """Test first sight creates the user and role is immutable afterwards"""
    user = resolve_user(db, Principal(id="u-9", email="new@example.com", role="agent", name="New Agent"))
    assert user.role == "agent"

    again = resolve_user(db, Principal(id="u-9", email="new@example.com", role="admin"))
    assert again.role == "agent"


def test_resolve_user_without_role(db: Session):
    with pytest.raises(AuthorizationError):
        resolve_user(db, Principal(id="u-10", email="norole@example.com"))


def test_admin_stats_drop_settled_debt(db: Session, pending_order: Order, admin_user: User):
    """Test a paid balance no longer counts as pending debt"""
    _, payment = order_service.approve_order(db, pending_order.id, admin_user)
    assert admin_stats(db).total_pending_debt == Decimal("5000.00")

    order_service.mark_payment_paid(db, payment.id)

    stats = admin_stats(db)
    assert stats.total_pending_debt == Decimal("0.00")
    assert stats.total_down_payments == Decimal("5000.00")
    assert stats.approved_orders == 1
