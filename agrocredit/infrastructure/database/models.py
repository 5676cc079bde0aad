"""SQLAlchemy ORM models matching db/schema.sql"""

import uuid
from sqlalchemy import Column, String, Numeric, DateTime, Text, ForeignKey
from sqlalchemy.orm import declarative_base, relationship
from sqlalchemy.sql import func

Base = declarative_base()


def _uuid() -> str:
    return str(uuid.uuid4())


class User(Base):
    """Application user; id is the identity provider's subject"""

    __tablename__ = "users"

    id = Column(String(64), primary_key=True)
    email = Column(Text, nullable=False, unique=True)
    role = Column(Text, nullable=False)  # admin | agent | farmer
    name = Column(Text, nullable=False)
    phone = Column(Text, nullable=True)
    agent_id = Column(Text, nullable=True)  # Agent's public agent code
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())


class Farmer(Base):
    """Farmer registered for input credit"""

    __tablename__ = "farmers"

    id = Column(String(36), primary_key=True, default=_uuid)
    name = Column(Text, nullable=False)
    phone = Column(Text, nullable=False, unique=True)
    national_id = Column(Text, nullable=False, unique=True)
    agent_id = Column(String(64), ForeignKey("users.id"), nullable=True, index=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    agent = relationship("User")
    orders = relationship("Order", back_populates="farmer")


class Order(Base):
    """Credit order for farm inputs"""

    __tablename__ = "orders"

    id = Column(String(36), primary_key=True, default=_uuid)
    farmer_id = Column(String(36), ForeignKey("farmers.id"), nullable=False, index=True)
    agent_id = Column(String(64), ForeignKey("users.id"), nullable=False, index=True)
    product_name = Column(Text, nullable=False)
    quantity = Column(Numeric(10, 2), nullable=False)
    unit_price = Column(Numeric(10, 2), nullable=False)
    total_cost = Column(Numeric(12, 2), nullable=False)
    down_payment = Column(Numeric(12, 2), nullable=False)
    remaining_balance = Column(Numeric(12, 2), nullable=False)
    status = Column(Text, nullable=False, default="pending", index=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    approved_at = Column(DateTime(timezone=True), nullable=True)
    approved_by = Column(String(64), ForeignKey("users.id"), nullable=True)

    farmer = relationship("Farmer", back_populates="orders")
    agent = relationship("User", foreign_keys=[agent_id])
    payments = relationship("Payment", back_populates="order", cascade="all, delete-orphan")


class Payment(Base):
    """Remaining-balance payment scheduled on approval"""

    __tablename__ = "payments"

    id = Column(String(36), primary_key=True, default=_uuid)
    order_id = Column(String(36), ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, unique=True)
    amount = Column(Numeric(12, 2), nullable=False)
    due_date = Column(DateTime(timezone=True), nullable=False)
    paid_date = Column(DateTime(timezone=True), nullable=True)
    status = Column(Text, nullable=False, default="pending")  # pending | paid
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    order = relationship("Order", back_populates="payments")
