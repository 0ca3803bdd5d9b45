"""Pytest fixtures for testing"""

import pytest
from datetime import date
from decimal import Decimal
from typing import Callable, Generator
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from petty_cash.api.main import create_app
from petty_cash.domain.models import Actor
from petty_cash.infrastructure.database.models import Base, Transaction, User
from petty_cash.infrastructure.database.session import get_db
from petty_cash.services.approvals import ApprovalService


# Test database
TEST_DATABASE_URL = "sqlite:///./test.db"
engine = create_engine(TEST_DATABASE_URL, connect_args={"check_same_thread": False})
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
def session_factory(db: Session) -> sessionmaker:
    """Independent sessions on the same test database, for concurrency tests"""
    return TestingSessionLocal


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
def users(db: Session) -> dict[str, User]:
    """One registered user per role"""
    people = {
        "custodian": User(id="u_custodian", email="casey@example.com", first_name="Casey", last_name="Cole", role="custodian"),
        "accountant": User(id="u_accountant", email="avery@example.com", first_name="Avery", last_name="Ames", role="accountant"),
        "admin": User(id="u_admin", email="ari@example.com", first_name="Ari", last_name="Adams", role="admin"),
    }
    db.add_all(people.values())
    db.commit()
    return people


@pytest.fixture
def custodian(users: dict[str, User]) -> Actor:
    return Actor(id=users["custodian"].id, role="custodian")


@pytest.fixture
def accountant(users: dict[str, User]) -> Actor:
    return Actor(id=users["accountant"].id, role="accountant")


@pytest.fixture
def admin(users: dict[str, User]) -> Actor:
    return Actor(id=users["admin"].id, role="admin")


@pytest.fixture
def service(db: Session) -> ApprovalService:
    return ApprovalService(db)


@pytest.fixture
def submit_expense(service: ApprovalService, custodian: Actor) -> Callable[..., Transaction]:
    """Submit a pending transaction dated today"""

    def _submit(amount: str, description: str = "Office supplies", on: date | None = None) -> Transaction:
        return service.submit_transaction(
            custodian,
            transaction_date=on or date.today(),
            description=description,
            amount=Decimal(amount),
            received_by="Corner Store",
            payment_method="cash",
        )

    return _submit


@pytest.fixture
def headers(users: dict[str, User]) -> dict[str, dict[str, str]]:
    """Identity headers per role"""
    return {role: {"X-User-Id": user.id} for role, user in users.items()}
