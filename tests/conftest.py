"""Pytest fixtures for testing"""

import os

os.environ.setdefault("DATABASE_URL", "sqlite:///./test.db")

import pytest
from datetime import date
from typing import Generator
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from nvjmi_finance.api.dependencies import get_today
from nvjmi_finance.api.main import create_app
from nvjmi_finance.infrastructure.database.models import Base
from nvjmi_finance.infrastructure.database.session import get_db
from nvjmi_finance.domain.models import Installment, InstallmentPlan, LegacyTerms, PlanStatus


# Test database
TEST_DATABASE_URL = "sqlite:///./test.db"
engine = create_engine(TEST_DATABASE_URL, connect_args={"check_same_thread": False})
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

TODAY = date(2025, 6, 10)


@pytest.fixture
def today() -> date:
    """Fixed calendar day shared by unit and API tests"""
    return TODAY


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
    """Create FastAPI test client with test database and a pinned 'today'"""
    app = create_app()

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_today] = lambda: TODAY
    return TestClient(app)


@pytest.fixture
def itemized_plan() -> InstallmentPlan:
    """RM10.00 over three installments, first one paid"""
    return InstallmentPlan(
        id="plan-itemized",
        user_id="user_1",
        merchant="Shopee",
        item_name="Air fryer",
        installments=[
            Installment(sequence=1, amount_cents=334, is_paid=True, due_date=date(2025, 5, 10)),
            Installment(sequence=2, amount_cents=333, due_date=date(2025, 6, 10)),
            Installment(sequence=3, amount_cents=333, due_date=date(2025, 7, 10)),
        ],
        next_due_date=date(2025, 6, 10),
    )


@pytest.fixture
def legacy_plan() -> InstallmentPlan:
    """RM300 plan stored only as flat terms, one of three paid"""
    return InstallmentPlan(
        id="plan-legacy",
        user_id="user_1",
        merchant="Atome",
        status=PlanStatus.ACTIVE,
        legacy=LegacyTerms(
            total_amount_cents=30000,
            installment_amount_cents=10000,
            installments_total=3,
            installments_paid=1,
        ),
    )
