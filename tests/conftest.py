"""
Test Configuration and Fixtures
Shared testing infrastructure for the wholesale allocation service
"""

import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("LOG_TO_FILE", "false")
os.environ.setdefault("DEBUG", "true")

import pytest
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Generator, Iterable, Optional, Tuple
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool

from wholesale.main import app
from wholesale.core.database import get_db, Base
from wholesale.models import InventoryOption, Order, OrderItem, Product

# Test database - in-memory SQLite shared across the session's connections
TEST_DATABASE_URL = "sqlite://"

engine = create_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

BASE_TIME = datetime(2024, 1, 1, 9, 0, 0)


@pytest.fixture(scope="function")
def db_session() -> Generator[Session, None, None]:
    """Create a fresh database session for each test"""
    Base.metadata.create_all(bind=engine)

    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def client(db_session: Session) -> Generator[TestClient, None, None]:
    """Create a test client with database dependency override"""
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def make_product(db_session: Session):
    """
    Factory for products.

    options maps (color, size) to either an int (legacy available scalar)
    or a (physical, allocated) tuple.
    """
    counter = {"n": 0}

    def _make(options: Optional[dict] = None, stock_quantity: int = 0,
              price: Decimal = Decimal("10000")) -> Product:
        counter["n"] += 1
        product = Product(
            name=f"Test Shirt {counter['n']}",
            code=f"SHIRT{counter['n']:03d}",
            price=price,
            stock_quantity=stock_quantity,
        )
        for (color, size), stock in (options or {}).items():
            if isinstance(stock, tuple):
                physical, allocated = stock
                option = InventoryOption(color=color, size=size,
                                         physical_stock=physical, allocated_stock=allocated)
            else:
                option = InventoryOption(color=color, size=size, stock_quantity=stock)
            product.inventory_options.append(option)
        product.refresh_stock_quantity()
        db_session.add(product)
        db_session.commit()
        db_session.refresh(product)
        return product

    return _make


@pytest.fixture
def make_order(db_session: Session):
    """
    Factory for purchase orders inserted directly, bypassing allocation.

    lines are (product, color, size, quantity) tuples; minutes offsets the
    creation time from a fixed base so FIFO order is deterministic.
    """
    counter = {"n": 0}

    def _make(lines: Iterable[Tuple[Product, str, str, int]], minutes: int = 0,
              status: str = "pending", order_type: str = "purchase") -> Order:
        counter["n"] += 1
        order = Order(
            order_number=f"PO-TEST-{counter['n']:04d}",
            order_type=order_type,
            status=status,
            allocation_status="pending",
            created_at=BASE_TIME + timedelta(minutes=minutes),
        )
        for product, color, size, quantity in lines:
            order.items.append(OrderItem(
                product_id=product.id if product is not None else None,
                product_name=product.name if product is not None else "Custom",
                color=color,
                size=size,
                quantity=quantity,
                unit_price=Decimal("10000"),
                total_price=Decimal("10000") * quantity,
                allocated_quantity=0,
                shipped_quantity=0,
            ))
        db_session.add(order)
        db_session.commit()
        db_session.refresh(order)
        return order

    return _make
