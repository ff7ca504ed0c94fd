"""Pytest fixtures for testing"""

from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Generator
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from rahnu_gateway.api.dependencies import get_clock, get_messaging_client, get_storage
from rahnu_gateway.api.main import create_app
from rahnu_gateway.domain.models import Client, GoldItem, Loan, LoanStatus, User, UserRole
from rahnu_gateway.infrastructure.database.models import Base
from rahnu_gateway.infrastructure.database.repositories import SqlStorage
from rahnu_gateway.infrastructure.memory.repositories import InMemoryStorage
from rahnu_gateway.services.container import Services


class FixedClock:
    """Deterministic clock; tests move it with set() or advance()"""

    def __init__(self, now: datetime):
        self.current = now

    def __call__(self) -> datetime:
        return self.current

    def set(self, now: datetime) -> None:
        self.current = now

    def advance(self, days: int) -> None:
        self.current += timedelta(days=days)


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock(datetime(2025, 1, 15, 9, 0, tzinfo=timezone.utc))


@pytest.fixture
def storage() -> InMemoryStorage:
    return InMemoryStorage()


@pytest.fixture
def services(storage: InMemoryStorage, clock: FixedClock) -> Services:
    return Services(storage, clock)


@pytest.fixture
def officer(services: Services) -> User:
    return services.users.create_user(
        {
            "username": "officer1",
            "password": "s3cure-pass",
            "full_name": "Nur Aisyah",
            "email": "officer1@example.com",
            "role": UserRole.LOAN_OFFICER,
        }
    )


@pytest.fixture
def applicant(services: Services) -> Client:
    return services.clients.create_client(
        {
            "full_name": "Ahmad bin Ismail",
            "email": "ahmad@example.com",
            "phone": "+60123456789",
            "address": "12 Jalan Ampang, Kuala Lumpur",
            "identification_number": "850101-14-5678",
            "identification_type": "national_id",
        }
    )


@pytest.fixture
def gold_item(services: Services) -> GoldItem:
    return services.gold_items.create_gold_item(
        {
            "type": "jewelry",
            "weight": Decimal("50"),
            "purity": 22,
            "description": "Gold bangle",
            "estimated_value": Decimal("5000"),
        }
    )


@pytest.fixture
def loan(services: Services, applicant: Client, gold_item: GoldItem, officer: User) -> Loan:
    """Pending loan: RM 5000 collateral at 70%, 5% p.a. over 12 monthly installments"""
    return services.loans.create_loan(
        {
            "client_id": applicant.id,
            "gold_item_ids": [gold_item.id],
            "financing_ratio": Decimal("0.70"),
            "profit_rate": Decimal("5"),
            "term_months": 12,
            "payment_frequency": "monthly",
            "created_by": officer.id,
        }
    )


@pytest.fixture
def active_loan(services: Services, loan: Loan) -> Loan:
    for status in (LoanStatus.VERIFICATION, LoanStatus.APPROVED, LoanStatus.ACTIVE):
        services.loans.update_loan_status(loan.id, status)
    return services.loans.get_loan(loan.id)


@pytest.fixture
def messaging_client() -> MagicMock:
    """Stand-in for the messaging gateway so reminder tasks never hit the network"""
    client = MagicMock()
    client.dispatch = AsyncMock(return_value=None)
    return client


@pytest.fixture
def client(storage: InMemoryStorage, clock: FixedClock, messaging_client: MagicMock) -> TestClient:
    """Create FastAPI test client over the in-memory store"""
    app = create_app()

    def override_get_storage():
        yield storage

    app.dependency_overrides[get_storage] = override_get_storage
    app.dependency_overrides[get_clock] = lambda: clock
    app.dependency_overrides[get_messaging_client] = lambda: messaging_client
    return TestClient(app)


@pytest.fixture
def db() -> Generator[Session, None, None]:
    """Create test database and session"""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture
def sql_storage(db: Session) -> SqlStorage:
    return SqlStorage(db)
