"""
Dwa rownolegle read-modify-write na tym samym koszyku.
Bez locka drugi zapis nadpisuje pierwszy, z lockiem obie zmiany zostaja.
"""
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from unittest.mock import Mock

from app.services.cart_service import CartService
from conftest import InMemoryCartRepo, ThreadLockService


class BarrierCartRepo(InMemoryCartRepo):
    """Oba watki czytaja koszyk zanim ktorykolwiek zapisze."""

    def __init__(self, parties: int):
        super().__init__()
        self.barrier = threading.Barrier(parties, timeout=5)

    def get(self, user_id):
        cart = super().get(user_id)
        self.barrier.wait()
        return cart


class SlowCartRepo(InMemoryCartRepo):
    def get(self, user_id):
        cart = super().get(user_id)
        time.sleep(0.05)
        return cart


def _stock_ok():
    inventory = Mock()
    inventory.reserve_stock.return_value = Mock(success=True, available=100)
    return inventory


def _add_concurrently(svc: CartService, product_ids):
    with ThreadPoolExecutor(max_workers=len(product_ids)) as pool:
        futures = [pool.submit(svc.add_to_cart, "u1", pid, 1) for pid in product_ids]
        for f in futures:
            f.result()


class TestConcurrentWriters:
    def test_without_lock_second_write_loses_first_update(self, product_client):
        repo = BarrierCartRepo(parties=2)
        inventory = _stock_ok()
        svc = CartService(repo, product_client, inventory)

        _add_concurrently(svc, ["P1", "P2"])

        cart = InMemoryCartRepo.get(repo, "u1")
        # obie rezerwacje poszly, ale w koszyku zostala jedna pozycja
        assert inventory.reserve_stock.call_count == 2
        assert len(cart.items) == 1

    def test_with_lock_both_updates_survive(self, product_client):
        repo = SlowCartRepo()
        inventory = _stock_ok()
        svc = CartService(repo, product_client, inventory, lock_service=ThreadLockService())

        _add_concurrently(svc, ["P1", "P2", "P3"])

        cart = InMemoryCartRepo.get(repo, "u1")
        assert sorted(i.product_id for i in cart.items) == ["P1", "P2", "P3"]
        assert cart.total_items == 3
