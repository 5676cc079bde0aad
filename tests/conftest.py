"""Pytest fixtures for testing"""

import os

# Test database; must be set before the app's engine is created
TEST_DATABASE_URL = "sqlite:///./test.db"
os.environ["DATABASE_URL"] = TEST_DATABASE_URL

import pytest
from decimal import Decimal
from typing import Callable, Generator
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker, Session
from agrocredit.api.main import create_app
from agrocredit.api.dependencies import get_current_user
from agrocredit.infrastructure.database.models import Base, Farmer, Order, User
from agrocredit.infrastructure.database.session import build_engine, get_db
from agrocredit.services.orders import create_order


engine = build_engine(TEST_DATABASE_URL)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db() -> Generator[Session, None, None]:
    """Create test database and session"""
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db: Session) -> TestClient:
    """Create FastAPI test client with test database"""
    app = create_app()

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    return TestClient(app)


@pytest.fixture
def login(client: TestClient) -> Callable[[User], TestClient]:
    """Authenticate subsequent requests as the given user, bypassing the identity provider"""

    def _login(user: User) -> TestClient:
        client.app.dependency_overrides[get_current_user] = lambda: user
        return client

    return _login


def _make_user(db: Session, user_id: str, role: str, **fields) -> User:
    user = User(id=user_id, email=f"{user_id}@example.com", role=role, name=user_id.title(), **fields)
    db.add(user)
    db.commit()
    return user


@pytest.fixture
def admin_user(db: Session) -> User:
    return _make_user(db, "admin", "admin")


@pytest.fixture
def agent_user(db: Session) -> User:
    return _make_user(db, "agent", "agent", agent_id="AG-001")


@pytest.fixture
def other_agent(db: Session) -> User:
    return _make_user(db, "agent2", "agent", agent_id="AG-002")


@pytest.fixture
def farmer_user(db: Session) -> User:
    return _make_user(db, "wanjiru", "farmer", phone="+254700000001")


@pytest.fixture
def linked_farmer(db: Session, agent_user: User) -> Farmer:
    """Farmer record matching farmer_user's phone, already claimed by agent_user"""
    farmer = Farmer(name="Wanjiru Kamau", phone="+254700000001", national_id="12345678", agent_id=agent_user.id)
    db.add(farmer)
    db.commit()
    return farmer


@pytest.fixture
def unlinked_farmer(db: Session) -> Farmer:
    farmer = Farmer(name="Otieno Ouma", phone="+254700000002", national_id="87654321")
    db.add(farmer)
    db.commit()
    return farmer


@pytest.fixture
def pending_order(db: Session, agent_user: User, linked_farmer: Farmer) -> Order:
    """10 bags at 1000 KES: total 10000, 5000 down, 5000 remaining"""
    return create_order(
        db,
        agent=agent_user,
        farmer_id=linked_farmer.id,
        product_name="NPK Fertilizer 50kg",
        quantity=Decimal("10"),
        unit_price=Decimal("1000"),
        down_payment=Decimal("5000"),
    )
