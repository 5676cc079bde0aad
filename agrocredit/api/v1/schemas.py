"""Pydantic schemas for API request/response validation"""

from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field

from agrocredit.domain.presentation import format_currency, format_date, status_variant
from agrocredit.domain.pricing import to_money
from agrocredit.domain.schedule import effective_payment_status
from agrocredit.utils.date_utils import ensure_utc


def _iso(value: Optional[datetime]) -> Optional[str]:
    return ensure_utc(value).isoformat() if value is not None else None


class UserResponse(BaseModel):
    """Response for GET /v1/me"""

    id: str
    email: str
    role: str
    name: str
    phone: Optional[str] = None
    agent_id: Optional[str] = None


class OrderCreateRequest(BaseModel):
    """Request body for POST /v1/orders"""

    farmer_id: str = Field(..., min_length=1, description="Farmer linked to the agent")
    product_name: str = Field(..., min_length=1, description="e.g. NPK Fertilizer 50kg")
    quantity: Decimal = Field(..., gt=0, max_digits=10, decimal_places=2, description="Units ordered")
    unit_price: Decimal = Field(..., gt=0, max_digits=10, decimal_places=2, description="Price per unit in KES")
    down_payment: Decimal = Field(..., gt=0, description="Upfront payment collected, exactly 50% of total")


class OrderResponse(BaseModel):
    """Single credit order"""

    id: str
    farmer_id: str
    agent_id: str
    product_name: str
    quantity: Decimal
    unit_price: Decimal
    total_cost: Decimal
    down_payment: Decimal
    remaining_balance: Decimal
    total_cost_display: str
    status: str
    badge: str
    created_at: Optional[str] = None
    approved_at: Optional[str] = None
    approved_by: Optional[str] = None

    @classmethod
    def from_record(cls, order) -> "OrderResponse":
        return cls(
            id=order.id,
            farmer_id=order.farmer_id,
            agent_id=order.agent_id,
            product_name=order.product_name,
            quantity=to_money(order.quantity),
            unit_price=to_money(order.unit_price),
            total_cost=to_money(order.total_cost),
            down_payment=to_money(order.down_payment),
            remaining_balance=to_money(order.remaining_balance),
            total_cost_display=format_currency(order.total_cost),
            status=order.status,
            badge=status_variant(order.status),
            created_at=_iso(order.created_at),
            approved_at=_iso(order.approved_at),
            approved_by=order.approved_by,
        )


class PaymentResponse(BaseModel):
    """Remaining-balance payment; status is derived (pending past due reads overdue)"""

    id: str
    order_id: str
    product_name: Optional[str] = None
    amount: Decimal
    amount_display: str
    due_date: str
    due_date_display: str
    paid_date: Optional[str] = None
    status: str
    badge: str
    overdue: bool

    @classmethod
    def from_record(cls, payment, now: Optional[datetime] = None) -> "PaymentResponse":
        status = effective_payment_status(payment.status, payment.due_date, now)
        return cls(
            id=payment.id,
            order_id=payment.order_id,
            product_name=payment.order.product_name if payment.order is not None else None,
            amount=to_money(payment.amount),
            amount_display=format_currency(payment.amount),
            due_date=_iso(payment.due_date),
            due_date_display=format_date(payment.due_date),
            paid_date=_iso(payment.paid_date),
            status=status,
            badge=status_variant(status),
            overdue=status == "overdue",
        )


class ApprovalResponse(BaseModel):
    """Response for POST /v1/orders/{order_id}/approve"""

    order: OrderResponse
    payment: PaymentResponse


class FarmerResponse(BaseModel):
    """Registered farmer"""

    id: str
    name: str
    phone: str
    national_id: str
    agent_id: Optional[str] = None
    created_at: Optional[str] = None

    @classmethod
    def from_record(cls, farmer) -> "FarmerResponse":
        return cls(
            id=farmer.id,
            name=farmer.name,
            phone=farmer.phone,
            national_id=farmer.national_id,
            agent_id=farmer.agent_id,
            created_at=_iso(farmer.created_at),
        )


class FarmerImportResponse(BaseModel):
    """Response for POST /v1/farmers/import"""

    imported: int
    farmers: List[FarmerResponse]


class AgentFarmersResponse(BaseModel):
    """Response for GET /v1/agent/farmers"""

    mine: List[FarmerResponse]
    available: List[FarmerResponse]


class PaymentScheduleResponse(BaseModel):
    """Response for GET /v1/farmer/payments"""

    farmer_id: str
    next_payment: Optional[PaymentResponse] = None
    overdue_count: int
    payments: List[PaymentResponse]


class AdminStatsResponse(BaseModel):
    """Response for GET /v1/admin/stats"""

    total_down_payments: Decimal
    total_down_payments_display: str
    total_pending_debt: Decimal
    total_pending_debt_display: str
    pending_orders: int
    approved_orders: int
    overdue_payments: int


class AgentStatsResponse(BaseModel):
    """Response for GET /v1/agent/stats"""

    total_orders: int
    pending_orders: int
    approved_orders: int
    linked_farmers: int
