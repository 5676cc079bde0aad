"""Credit order endpoints: agent submission, admin approval and listings"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlalchemy.orm import Session

from agrocredit.api.v1.schemas import ApprovalResponse, OrderCreateRequest, OrderResponse, PaymentResponse
from agrocredit.api.dependencies import get_request_id, require_admin, require_agent, require_farmer
from agrocredit.infrastructure.database.models import User
from agrocredit.infrastructure.database.session import get_db
from agrocredit.infrastructure.database.repositories import OrderRepository
from agrocredit.domain.exceptions import DependencyFailure, NotFoundError, PreconditionViolation, ValidationError
from agrocredit.infrastructure.observability.metrics import record_order_created, record_order_decision
from agrocredit.infrastructure.observability.logging import log_order_created, log_order_decision
from agrocredit.services import orders as order_service
from agrocredit.services.farmers import farmer_for_user

router = APIRouter()


@router.post("/orders", response_model=OrderResponse, status_code=201)
def create_order(
    request_body: OrderCreateRequest,
    request: Request,
    db: Session = Depends(get_db),
    agent: User = Depends(require_agent),
):
    """
    Submit a credit order for a linked farmer.

    The down payment must be exactly 50% of quantity x unit price; the order
    starts pending and waits for admin approval.
    """
    request_id = get_request_id(request)

    try:
        order = order_service.create_order(
            db,
            agent=agent,
            farmer_id=request_body.farmer_id,
            product_name=request_body.product_name,
            quantity=request_body.quantity,
            unit_price=request_body.unit_price,
            down_payment=request_body.down_payment,
        )
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=str(e))
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except PreconditionViolation as e:
        raise HTTPException(status_code=409, detail=str(e))
    except DependencyFailure:
        raise HTTPException(status_code=503, detail="Record store unavailable")
    except Exception as e:
        logging.error(f"Unexpected error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Internal server error")

    record_order_created(order.total_cost)
    log_order_created(request_id, order.id, agent.id, order.total_cost)
    return OrderResponse.from_record(order)


@router.get("/orders", response_model=List[OrderResponse])
def list_orders(
    status: Optional[str] = Query(None, description="pending | approved | rejected"),
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
):
    """All orders, newest first"""
    return [OrderResponse.from_record(o) for o in OrderRepository(db).list_orders(status=status)]


@router.get("/agent/orders", response_model=List[OrderResponse])
def list_agent_orders(db: Session = Depends(get_db), agent: User = Depends(require_agent)):
    return [OrderResponse.from_record(o) for o in OrderRepository(db).list_orders(agent_id=agent.id)]


@router.get("/farmer/orders", response_model=List[OrderResponse])
def list_farmer_orders(db: Session = Depends(get_db), user: User = Depends(require_farmer)):
    try:
        farmer = farmer_for_user(db, user)
    except NotFoundError:
        return []
    return [OrderResponse.from_record(o) for o in OrderRepository(db).list_orders(farmer_id=farmer.id)]


@router.post("/orders/{order_id}/approve", response_model=ApprovalResponse)
def approve_order(
    order_id: str,
    request: Request,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
):
    """
    Approve a pending order.

    Flow:
    1. Flip status pending -> approved (only if still pending)
    2. Schedule the remaining balance due 30 days from now
    3. Commit both writes together, or neither
    """
    request_id = get_request_id(request)

    try:
        order, payment = order_service.approve_order(db, order_id, admin)

    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))

    except PreconditionViolation as e:
        logging.warning(f"Approval refused: {e}", extra={"request_id": request_id, "order_id": order_id})
        raise HTTPException(status_code=409, detail=str(e))

    except ValidationError as e:
        raise HTTPException(status_code=422, detail=str(e))

    except DependencyFailure:
        raise HTTPException(status_code=503, detail="Record store unavailable")

    except Exception as e:
        logging.error(f"Unexpected error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Internal server error")

    record_order_decision("approved")
    log_order_decision(request_id, order.id, admin.id, "approved", payment.id)
    return ApprovalResponse(order=OrderResponse.from_record(order), payment=PaymentResponse.from_record(payment))


@router.post("/orders/{order_id}/reject", response_model=OrderResponse)
def reject_order(
    order_id: str,
    request: Request,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
):
    request_id = get_request_id(request)

    try:
        order = order_service.reject_order(db, order_id, admin)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except PreconditionViolation as e:
        raise HTTPException(status_code=409, detail=str(e))
    except DependencyFailure:
        raise HTTPException(status_code=503, detail="Record store unavailable")

    record_order_decision("rejected")
    log_order_decision(request_id, order.id, admin.id, "rejected")
    return OrderResponse.from_record(order)
