"""GET /v1/me and dashboard statistics"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from agrocredit.api.v1.schemas import AdminStatsResponse, AgentStatsResponse, UserResponse
from agrocredit.api.dependencies import get_current_user, require_admin, require_agent
from agrocredit.domain.presentation import format_currency
from agrocredit.infrastructure.database.models import User
from agrocredit.infrastructure.database.session import get_db
from agrocredit.services.dashboard import admin_stats, agent_stats

router = APIRouter()


@router.get("/me", response_model=UserResponse)
def get_me(user: User = Depends(get_current_user)):
    return UserResponse(
        id=user.id,
        email=user.email,
        role=user.role,
        name=user.name,
        phone=user.phone,
        agent_id=user.agent_id,
    )


@router.get("/admin/stats", response_model=AdminStatsResponse)
def get_admin_stats(db: Session = Depends(get_db), admin: User = Depends(require_admin)):
    """
    System financials.

    Returns:
        Down payments collected and remaining balances owed on approved
        orders, order counts by status, and overdue payment count
    """
    stats = admin_stats(db)
    return AdminStatsResponse(
        total_down_payments=stats.total_down_payments,
        total_down_payments_display=format_currency(stats.total_down_payments),
        total_pending_debt=stats.total_pending_debt,
        total_pending_debt_display=format_currency(stats.total_pending_debt),
        pending_orders=stats.pending_orders,
        approved_orders=stats.approved_orders,
        overdue_payments=stats.overdue_payments,
    )


@router.get("/agent/stats", response_model=AgentStatsResponse)
def get_agent_stats(db: Session = Depends(get_db), agent: User = Depends(require_agent)):
    stats = agent_stats(db, agent)
    return AgentStatsResponse(
        total_orders=stats.total_orders,
        pending_orders=stats.pending_orders,
        approved_orders=stats.approved_orders,
        linked_farmers=stats.linked_farmers,
    )
