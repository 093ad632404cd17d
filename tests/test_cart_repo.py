"""
CartRepo na zmockowanym kliencie redis: klucze, TTL, ksiazka rezerwacji.
"""
from decimal import Decimal
from unittest.mock import MagicMock

from app.domain.schemas import Cart, CartItem
from app.repos.cart_repo import CartRepo, LEDGER_EXPIRY_KEY


def _cart():
    return Cart(
        user_id="u1",
        items=[
            CartItem(product_id="P1", product_name="Sunscreen", price=Decimal("900"),
                     original_price=Decimal("1000"), sale_percentage=Decimal("10"), quantity=2),
        ],
        total_items=2,
        total_price=Decimal("1800"),
    )


def _repo():
    client = MagicMock()
    pipe = MagicMock()
    client.pipeline.return_value = pipe
    return CartRepo(client), client, pipe


class TestCartRepo:
    def test_get_missing_returns_none(self):
        repo, client, _ = _repo()
        client.get.return_value = None

        assert repo.get("u1") is None
        client.get.assert_called_once_with("cart:u1")

    def test_get_parses_snapshot(self):
        repo, client, _ = _repo()
        client.get.return_value = _cart().model_dump_json()

        cart = repo.get("u1")

        assert cart.items[0].product_id == "P1"
        assert cart.total_price == Decimal("1800")

    def test_save_writes_record_with_24h_ttl_and_ledger(self):
        repo, client, pipe = _repo()
        cart = _cart()

        repo.save(cart)

        client.pipeline.assert_called_once_with(transaction=True)
        pipe.set.assert_called_once_with("cart:u1", cart.model_dump_json(), px=86_400_000)
        pipe.hset.assert_called_once_with("cart-reservations:u1", mapping={"P1": 2})
        assert pipe.zadd.call_args.args[0] == LEDGER_EXPIRY_KEY
        assert "u1" in pipe.zadd.call_args.args[1]
        pipe.execute.assert_called_once()

    def test_delete_removes_record_and_ledger(self):
        repo, _, pipe = _repo()

        repo.delete("u1")

        deleted = [c.args[0] for c in pipe.delete.call_args_list]
        assert deleted == ["cart:u1", "cart-reservations:u1"]
        pipe.zrem.assert_called_once_with(LEDGER_EXPIRY_KEY, "u1")

    def test_pop_ledger_returns_quantities(self):
        repo, _, pipe = _repo()
        pipe.execute.return_value = [{"P1": "2", "P2": "5"}, 1, 1]

        assert repo.pop_ledger("u1") == {"P1": 2, "P2": 5}

    def test_expired_owners_queries_by_score(self):
        repo, client, _ = _repo()
        client.zrangebyscore.return_value = ["u1", "u2"]

        assert repo.expired_owners(now_ms=1000) == ["u1", "u2"]
        client.zrangebyscore.assert_called_once_with(LEDGER_EXPIRY_KEY, "-inf", 1000)
