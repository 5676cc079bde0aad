"""Data access layer for credit entities"""

from datetime import datetime
from typing import List, Optional, Sequence
from sqlalchemy import func, or_
from sqlalchemy.orm import Session
from agrocredit.infrastructure.database.models import User, Farmer, Order, Payment
from agrocredit.domain.models import FarmerRow, OrderTerms, Principal, ScheduledPayment


class UserRepository:
    """Repository for application users"""

    def __init__(self, db: Session):
        self.db = db

    def get_user_by_id(self, user_id: str) -> Optional[User]:
        return self.db.get(User, user_id)

    def create_user(self, principal: Principal, role: str) -> User:
        """Persist a user the first time its principal is seen"""
        db_user = User(
            id=principal.id,
            email=principal.email,
            role=role,
            name=principal.name or principal.email,
            phone=principal.phone,
        )
        self.db.add(db_user)
        self.db.flush()
        return db_user


class FarmerRepository:
    """Repository for farmers and agent links"""

    def __init__(self, db: Session):
        self.db = db

    def create_farmers(self, rows: Sequence[FarmerRow]) -> List[Farmer]:
        """Insert one upload batch; uniqueness is enforced by the store"""
        farmers = [Farmer(name=r.name, phone=r.phone, national_id=r.national_id) for r in rows]
        self.db.add_all(farmers)
        self.db.flush()
        return farmers

    def get_farmer_by_id(self, farmer_id: str) -> Optional[Farmer]:
        return self.db.get(Farmer, farmer_id)

    def find_by_contact(self, phone: Optional[str], email: Optional[str]) -> Optional[Farmer]:
        """Match a farmer login to its record: phone first, then email stored in the phone column"""
        for contact in (phone, email):
            if not contact:
                continue
            farmer = self.db.query(Farmer).filter(Farmer.phone == contact).first()
            if farmer:
                return farmer
        return None

    def list_farmers(self, search: Optional[str] = None) -> List[Farmer]:
        """All farmers, newest first, optionally filtered by phone / national ID / name"""
        query = self.db.query(Farmer)
        if search:
            pattern = f"%{search}%"
            query = query.filter(
                or_(
                    Farmer.phone.ilike(pattern),
                    Farmer.national_id.ilike(pattern),
                    Farmer.name.ilike(pattern),
                )
            )
        return query.order_by(Farmer.created_at.desc(), Farmer.name).all()

    def count_by_agent(self, agent_id: str) -> int:
        return self.db.query(func.count(Farmer.id)).filter(Farmer.agent_id == agent_id).scalar()

    def claim(self, farmer_id: str, agent_id: str) -> int:
        """Link an unlinked farmer; returns rows updated (0 if another agent got there first)"""
        return (
            self.db.query(Farmer)
            .filter(Farmer.id == farmer_id, Farmer.agent_id.is_(None))
            .update({Farmer.agent_id: agent_id}, synchronize_session="fetch")
        )


class OrderRepository:
    """Repository for credit orders"""

    def __init__(self, db: Session):
        self.db = db

    def create_order(
        self,
        farmer_id: str,
        agent_id: str,
        product_name: str,
        quantity,
        unit_price,
        terms: OrderTerms,
    ) -> Order:
        """Persist a pending order"""
        db_order = Order(
            farmer_id=farmer_id,
            agent_id=agent_id,
            product_name=product_name,
            quantity=quantity,
            unit_price=unit_price,
            total_cost=terms.total_cost,
            down_payment=terms.down_payment,
            remaining_balance=terms.remaining_balance,
            status="pending",
        )
        self.db.add(db_order)
        self.db.flush()
        return db_order

    def get_order_by_id(self, order_id: str) -> Optional[Order]:
        return self.db.get(Order, order_id)

    def list_orders(
        self,
        status: Optional[str] = None,
        agent_id: Optional[str] = None,
        farmer_id: Optional[str] = None,
    ) -> List[Order]:
        """Orders newest first, filtered by any combination of status / agent / farmer"""
        query = self.db.query(Order)
        if status:
            query = query.filter(Order.status == status)
        if agent_id:
            query = query.filter(Order.agent_id == agent_id)
        if farmer_id:
            query = query.filter(Order.farmer_id == farmer_id)
        return query.order_by(Order.created_at.desc()).all()

    def transition(self, order_id: str, expected: str, target: str, **fields) -> int:
        """
        Conditional status update: applies only while the order is still in
        the expected status, so exactly one concurrent caller wins.
        """
        values = {Order.status: target}
        values.update({getattr(Order, k): v for k, v in fields.items()})
        return (
            self.db.query(Order)
            .filter(Order.id == order_id, Order.status == expected)
            .update(values, synchronize_session="fetch")
        )


class PaymentRepository:
    """Repository for remaining-balance payments"""

    def __init__(self, db: Session):
        self.db = db

    def create_payment(self, order_id: str, scheduled: ScheduledPayment) -> Payment:
        db_payment = Payment(
            order_id=order_id,
            amount=scheduled.amount,
            due_date=scheduled.due_date,
            status=scheduled.status,
        )
        self.db.add(db_payment)
        self.db.flush()
        return db_payment

    def get_payment_by_id(self, payment_id: str) -> Optional[Payment]:
        return self.db.get(Payment, payment_id)

    def list_by_farmer(self, farmer_id: str) -> List[Payment]:
        """Payment history for a farmer's orders, earliest due first"""
        return (
            self.db.query(Payment)
            .join(Order, Payment.order_id == Order.id)
            .filter(Order.farmer_id == farmer_id)
            .order_by(Payment.due_date.asc())
            .all()
        )

    def list_pending(self) -> List[Payment]:
        return self.db.query(Payment).filter(Payment.status == "pending").all()

    def settle(self, payment_id: str, paid_at: datetime) -> int:
        """Mark a pending payment paid; returns rows updated"""
        return (
            self.db.query(Payment)
            .filter(Payment.id == payment_id, Payment.status == "pending")
            .update({Payment.status: "paid", Payment.paid_date: paid_at}, synchronize_session="fetch")
        )
