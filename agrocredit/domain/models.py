"""Domain models - pure Python dataclasses and enums representing business entities"""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional


class OrderStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class PaymentStatus(str, Enum):
    PENDING = "pending"
    PAID = "paid"
    OVERDUE = "overdue"  # Derived at read time, never persisted by the service


class UserRole(str, Enum):
    ADMIN = "admin"
    AGENT = "agent"
    FARMER = "farmer"


@dataclass(frozen=True)
class OrderTerms:
    """Cost breakdown of a credit order"""

    total_cost: Decimal
    down_payment: Decimal
    remaining_balance: Decimal


@dataclass(frozen=True)
class ScheduledPayment:
    """Remaining-balance payment derived on order approval"""

    amount: Decimal
    due_date: datetime
    status: str = PaymentStatus.PENDING.value


@dataclass(frozen=True)
class Principal:
    """Authenticated identity returned by the identity provider"""

    id: str
    email: str
    role: Optional[str] = None
    name: Optional[str] = None
    phone: Optional[str] = None


@dataclass(frozen=True)
class FarmerRow:
    """One farmer parsed from a bulk upload"""

    name: str
    phone: str
    national_id: str
