"""Pytest configuration and fixtures."""

import os

# Settings are read at import time; point them at throwaway values first
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("SECRET_KEY", "test-secret-key-that-is-at-least-32-characters-long")
os.environ.setdefault("DEBUG", "true")

import pytest
from decimal import Decimal
from typing import Generator

from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from stockflow.core.rbac import UserRole
from stockflow.core.security import create_access_token
from stockflow.db.base import Base
from stockflow.db.session import enable_sqlite_foreign_keys, get_db
from stockflow.main import app
# Import all models to ensure they're registered with Base.metadata
from stockflow.models import *
from stockflow.models.product import Product
from stockflow.models.stock import StockOnHand
from stockflow.models.warehouse import Warehouse

# Use in-memory SQLite for tests
TEST_DATABASE_URL = "sqlite:///:memory:"

API = "/api/v1"


@pytest.fixture(scope="function")
def db_engine():
    """Create a test database engine."""
    engine = create_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    enable_sqlite_foreign_keys(engine)
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture(scope="function")
def db_session(db_engine) -> Generator[Session, None, None]:
    """Create a test database session."""
    SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=db_engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture(scope="function")
def client(db_session: Session) -> Generator[TestClient, None, None]:
    """Create a test client with database override."""
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    # Disable the rate limiter during tests to avoid flaky failures
    from stockflow.core.rate_limit import limiter
    limiter.enabled = False
    # Don't raise server exceptions so we can test error status codes
    with TestClient(app, raise_server_exceptions=False) as test_client:
        yield test_client
    limiter.enabled = True
    app.dependency_overrides.clear()


def _token(user_id: int, email: str, role: UserRole) -> str:
    return create_access_token(data={"sub": str(user_id), "email": email, "role": role.value})


@pytest.fixture
def auth_headers() -> dict:
    """Headers for a staff user (id 7)."""
    return {"Authorization": f"Bearer {_token(7, 'staff@example.com', UserRole.STAFF)}"}


@pytest.fixture
def manager_headers() -> dict:
    """Headers for a manager user (id 3)."""
    return {"Authorization": f"Bearer {_token(3, 'manager@example.com', UserRole.MANAGER)}"}


@pytest.fixture
def test_warehouse(db_session: Session) -> Warehouse:
    """Create a test warehouse."""
    warehouse = Warehouse(name="Main Warehouse", code="WH1", active=True)
    db_session.add(warehouse)
    db_session.commit()
    db_session.refresh(warehouse)
    return warehouse


@pytest.fixture
def second_warehouse(db_session: Session) -> Warehouse:
    warehouse = Warehouse(name="Overflow Warehouse", code="WH2", active=True)
    db_session.add(warehouse)
    db_session.commit()
    db_session.refresh(warehouse)
    return warehouse


@pytest.fixture
def test_product(db_session: Session) -> Product:
    """Create a test product."""
    product = Product(name="Steel Bolt M8", sku="BOLT-M8", unit="pcs", active=True)
    db_session.add(product)
    db_session.commit()
    db_session.refresh(product)
    return product


@pytest.fixture
def second_product(db_session: Session) -> Product:
    product = Product(name="Hex Nut M8", sku="NUT-M8", unit="pcs", active=True)
    db_session.add(product)
    db_session.commit()
    db_session.refresh(product)
    return product


@pytest.fixture
def stock_level(db_session: Session):
    """Seed a balance through a receipt so the ledger stays consistent with it.

    Usage: ``stock_level(product, warehouse, Decimal("150"))``.
    """
    from stockflow.schemas.receipt import ReceiptCreate, ReceiptLineCreate
    from stockflow.services.receipt_service import ReceiptService

    counter = {"n": 0}

    def _seed(product: Product, warehouse: Warehouse, qty: Decimal) -> StockOnHand:
        counter["n"] += 1
        service = ReceiptService(db_session)
        receipt = service.create(ReceiptCreate(
            reference=f"SEED-{counter['n']}",
            warehouse_id=warehouse.id,
            lines=[ReceiptLineCreate(product_id=product.id, qty_ordered=qty)],
        ))
        service.complete(receipt.id)
        return db_session.query(StockOnHand).filter(
            StockOnHand.product_id == product.id,
            StockOnHand.warehouse_id == warehouse.id,
        ).one()

    return _seed
