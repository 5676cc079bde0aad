"""Dashboard aggregates for admins and agents"""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from sqlalchemy.orm import Session

from agrocredit.domain.models import OrderStatus
from agrocredit.domain.schedule import is_overdue
from agrocredit.infrastructure.database.models import User
from agrocredit.infrastructure.database.repositories import FarmerRepository, OrderRepository, PaymentRepository


@dataclass
class AdminStats:
    total_down_payments: Decimal
    total_pending_debt: Decimal
    pending_orders: int
    approved_orders: int
    overdue_payments: int


@dataclass
class AgentStats:
    total_orders: int
    pending_orders: int
    approved_orders: int
    linked_farmers: int


def admin_stats(db: Session, now: datetime | None = None) -> AdminStats:
    """Collected down payments over approved orders and debt still owed on unpaid payments"""
    orders = OrderRepository(db).list_orders()
    approved = [o for o in orders if o.status == OrderStatus.APPROVED.value]
    unpaid = PaymentRepository(db).list_pending()

    return AdminStats(
        total_down_payments=sum((o.down_payment for o in approved), Decimal("0.00")),
        total_pending_debt=sum((p.amount for p in unpaid), Decimal("0.00")),
        pending_orders=sum(1 for o in orders if o.status == OrderStatus.PENDING.value),
        approved_orders=len(approved),
        overdue_payments=sum(1 for p in unpaid if is_overdue(p.due_date, now)),
    )


def agent_stats(db: Session, agent: User) -> AgentStats:
    orders = OrderRepository(db).list_orders(agent_id=agent.id)
    return AgentStats(
        total_orders=len(orders),
        pending_orders=sum(1 for o in orders if o.status == OrderStatus.PENDING.value),
        approved_orders=sum(1 for o in orders if o.status == OrderStatus.APPROVED.value),
        linked_farmers=FarmerRepository(db).count_by_agent(agent.id),
    )
