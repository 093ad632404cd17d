"""
Wspolne fixtury testow.

Magazyn dziala na prawdziwym SQLAlchemy (sqlite w pamieci),
redis zastapiony repozytorium w pamieci, product-service przez Mock.
"""
import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("REDIS_URL", "redis://localhost:6379/15")

import threading
import time
from contextlib import contextmanager
from decimal import Decimal
from typing import Dict, List
from unittest.mock import Mock

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.data.database import Base
from app.data import models  # noqa: F401
from app.domain.errors import NotFoundError
from app.domain.schemas import Cart, ProductData
from app.services.cart_service import CartService
from app.services.inventory_service import InventoryService
from app.services.payment_service import PaymentService
from app.services.review_service import ReviewService
from app.services.shipping_service import ShippingService
from app.services.product_client import ProductClient


CATALOG = {
    "P1": ProductData(product_id="P1", product_name="Sunscreen SPF50",
                      selling_price=Decimal("1000"), sale_percentage=Decimal("10")),
    "P2": ProductData(product_id="P2", product_name="Hydrating Serum",
                      selling_price=Decimal("459"), sale_percentage=None),
    "P3": ProductData(product_id="P3", product_name="Cleansing Foam",
                      selling_price=Decimal("250"), sale_percentage=Decimal("15")),
}

STOCK = {"P1": 10, "P2": 5, "P3": 3}


class InMemoryCartRepo:
    """Ten sam kontrakt co CartRepo, zapis jako JSON zeby zachowac semantyke migawki."""

    def __init__(self, ttl_ms: int = 86_400_000):
        self.ttl_ms = ttl_ms
        self.records: Dict[str, str] = {}
        self.ledgers: Dict[str, Dict[str, int]] = {}
        self.expiry: Dict[str, int] = {}
        self.saves: List[str] = []
        self.deletes: List[str] = []

    def get(self, user_id: str) -> Cart | None:
        raw = self.records.get(user_id)
        return Cart.model_validate_json(raw) if raw is not None else None

    def save(self, cart: Cart) -> None:
        self.saves.append(cart.user_id)
        self.records[cart.user_id] = cart.model_dump_json()
        self.ledgers[cart.user_id] = {i.product_id: i.quantity for i in cart.items}
        self.expiry[cart.user_id] = int(time.time() * 1000) + self.ttl_ms

    def delete(self, user_id: str) -> None:
        self.deletes.append(user_id)
        self.records.pop(user_id, None)
        self.ledgers.pop(user_id, None)
        self.expiry.pop(user_id, None)

    def exists(self, user_id: str) -> bool:
        return user_id in self.records

    def expire(self, user_id: str) -> None:
        #symulacja wygasniecia TTL, ksiazka rezerwacji zostaje
        self.records.pop(user_id, None)

    def expired_owners(self, now_ms: int | None = None) -> List[str]:
        now_ms = now_ms if now_ms is not None else int(time.time() * 1000)
        return [uid for uid, exp in self.expiry.items() if exp <= now_ms]

    def pop_ledger(self, user_id: str) -> Dict[str, int]:
        self.expiry.pop(user_id, None)
        return self.ledgers.pop(user_id, {})


class ThreadLockService:
    """Lock koszyka na threading.Lock, ten sam interfejs co LockService.cart_lock."""

    def __init__(self):
        self._guard = threading.Lock()
        self._locks: Dict[str, threading.Lock] = {}

    @contextmanager
    def cart_lock(self, user_id: str):
        with self._guard:
            lock = self._locks.setdefault(user_id, threading.Lock())
        with lock:
            yield "token"


def _find_product(product_id: str) -> ProductData:
    if product_id not in CATALOG:
        raise NotFoundError(f"Product with ID {product_id} not found")
    return CATALOG[product_id]


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db(engine):
    session = sessionmaker(bind=engine, autoflush=False, autocommit=False)()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def inventory(db) -> InventoryService:
    svc = InventoryService(db)
    for product_id, quantity in STOCK.items():
        svc.set_stock(product_id, quantity)
    return svc


@pytest.fixture
def product_client():
    client = Mock(spec=ProductClient)
    client.find_one.side_effect = _find_product
    return client


@pytest.fixture
def cart_repo() -> InMemoryCartRepo:
    return InMemoryCartRepo()


@pytest.fixture
def cart_service(cart_repo, product_client, inventory) -> CartService:
    return CartService(
        repo=cart_repo,
        product_client=product_client,
        inventory_service=inventory,
    )


@pytest.fixture
def test_client(cart_service, db):
    from app.main import app
    from app.api.routers import carts, inventory as inventory_router, payments, reviews, shipping

    app.dependency_overrides[carts.get_service] = lambda: cart_service
    app.dependency_overrides[inventory_router.get_service] = lambda: InventoryService(db)
    app.dependency_overrides[payments.get_service] = lambda: PaymentService(db)
    app.dependency_overrides[reviews.get_service] = lambda: ReviewService(db)
    app.dependency_overrides[shipping.get_service] = lambda: ShippingService(db)

    with TestClient(app) as client:
        yield client

    app.dependency_overrides.clear()
