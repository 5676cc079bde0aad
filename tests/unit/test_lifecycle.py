"""Unit tests for order and payment lifecycle rules"""

import pytest
from datetime import datetime, timezone
from decimal import Decimal
from agrocredit.domain.lifecycle import build_payment, can_transition, ensure_payable, ensure_transition
from agrocredit.domain.exceptions import PreconditionViolation


def test_pending_can_be_approved_or_rejected():
    assert can_transition("pending", "approved")
    assert can_transition("pending", "rejected")


@pytest.mark.parametrize(
    "current, target",
    [
        ("approved", "approved"),
        ("approved", "rejected"),
        ("rejected", "approved"),
        ("rejected", "pending"),
        ("approved", "pending"),
        ("bogus", "approved"),
    ],
)
def test_terminal_statuses_cannot_move(current, target):
    assert can_transition(current, target) is False
    with pytest.raises(PreconditionViolation):
        ensure_transition(current, target)


def test_ensure_payable():
    ensure_payable("pending")
    with pytest.raises(PreconditionViolation):
        ensure_payable("paid")


def test_build_payment_from_remaining_balance():
    """Test approval on 2024-03-01 schedules the balance for 2024-03-31"""
    approved_at = datetime(2024, 3, 1, 9, 0, tzinfo=timezone.utc)

    payment = build_payment(Decimal("5000"), approved_at)

    assert payment.amount == Decimal("5000.00")
    assert payment.due_date == datetime(2024, 3, 31, 9, 0, tzinfo=timezone.utc)
    assert payment.status == "pending"
