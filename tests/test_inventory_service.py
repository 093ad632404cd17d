"""
Testy magazynu na sqlite w pamieci.
"""
import pytest

from app.domain.errors import NotFoundError, InvalidArgumentError
from app.services.inventory_service import InventoryService


class TestReserve:
    def test_reserve_within_stock(self, inventory):
        result = inventory.reserve_stock("P1", 4)

        assert result.success is True
        assert result.available == 6
        stock = inventory.get_stock("P1")
        assert stock.quantity == 10
        assert stock.reserved == 4
        assert stock.available == 6

    def test_reserve_beyond_available_is_refused(self, inventory):
        inventory.reserve_stock("P3", 2)
        result = inventory.reserve_stock("P3", 2)

        assert result.success is False
        assert result.reason == "Insufficient stock"
        assert result.available == 1
        assert inventory.get_stock("P3").reserved == 2

    def test_reserve_unknown_product(self, inventory):
        result = inventory.reserve_stock("NOPE", 1)

        assert result.success is False
        assert result.available == 0

    def test_reserved_never_exceeds_quantity(self, inventory):
        outcomes = [inventory.reserve_stock("P2", 2).success for _ in range(4)]

        assert outcomes == [True, True, False, False]
        assert inventory.get_stock("P2").reserved == 4

    def test_non_positive_reserve_is_invalid(self, inventory):
        with pytest.raises(InvalidArgumentError):
            inventory.reserve_stock("P1", 0)


class TestRelease:
    def test_release_partial(self, inventory):
        inventory.reserve_stock("P1", 5)
        inventory.release_reservation("P1", 3)

        assert inventory.get_stock("P1").reserved == 2

    def test_release_never_goes_negative(self, inventory):
        inventory.reserve_stock("P1", 1)
        inventory.release_reservation("P1", 5)

        assert inventory.get_stock("P1").reserved == 0

    def test_release_unknown_product_is_noop(self, inventory):
        inventory.release_reservation("NOPE", 1)


class TestStock:
    def test_set_stock_creates_row(self, db):
        svc = InventoryService(db)
        stock = svc.set_stock("NEW", 7)

        assert stock.product_id == "NEW"
        assert stock.quantity == 7
        assert stock.reserved == 0

    def test_set_stock_below_reserved_is_invalid(self, inventory):
        inventory.reserve_stock("P1", 6)

        with pytest.raises(InvalidArgumentError):
            inventory.set_stock("P1", 5)

        assert inventory.set_stock("P1", 6).available == 0

    def test_negative_stock_is_invalid(self, inventory):
        with pytest.raises(InvalidArgumentError):
            inventory.set_stock("P1", -1)

    def test_get_unknown_stock(self, inventory):
        with pytest.raises(NotFoundError):
            inventory.get_stock("NOPE")


class TestCommitReservation:
    def test_commit_moves_reservation_to_sale(self, inventory):
        inventory.reserve_stock("P1", 3)
        stock = inventory.commit_reservation("P1", 2)

        assert stock.quantity == 8
        assert stock.reserved == 1
        assert stock.available == 7

    def test_commit_more_than_reserved_is_invalid(self, inventory):
        inventory.reserve_stock("P1", 1)

        with pytest.raises(InvalidArgumentError):
            inventory.commit_reservation("P1", 2)

        assert inventory.get_stock("P1").reserved == 1

    def test_commit_unknown_product(self, inventory):
        with pytest.raises(NotFoundError):
            inventory.commit_reservation("NOPE", 1)
