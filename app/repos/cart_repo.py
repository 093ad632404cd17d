# app/repos/cart_repo.py
import time
from typing import List, Dict

import redis

from app.domain.schemas import Cart
from app.utils.retry import redis_retry
from app.utils.settings import CART_TTL_MS

LEDGER_EXPIRY_KEY = "cart-reservations:expiry"


def cart_key(user_id: str) -> str:
    return f"cart:{user_id}"


def ledger_key(user_id: str) -> str:
    return f"cart-reservations:{user_id}"


class CartRepo:
    """
    Koszyk w redisie, jeden klucz na uzytkownika: cart:{user_id} -> JSON.
    Kazdy zapis nadpisuje caly rekord i odswieza TTL (24h).

    Obok koszyka trzymamy ksiazke rezerwacji (hash product_id -> ilosc, bez TTL)
    i zbior sortowany z czasem wygasniecia koszyka. Po wygasnieciu klucza
    koszyka tylko z niej wiadomo ile towaru zwolnic w magazynie.
    """

    def __init__(self, client: redis.Redis, ttl_ms: int = CART_TTL_MS):
        self.redis = client
        self.ttl_ms = ttl_ms

    @redis_retry()
    def get(self, user_id: str) -> Cart | None:
        raw = self.redis.get(cart_key(user_id))
        if raw is None:
            return None
        return Cart.model_validate_json(raw)

    @redis_retry()
    def save(self, cart: Cart) -> None:
        expires_at_ms = int(time.time() * 1000) + self.ttl_ms
        ledger = {item.product_id: item.quantity for item in cart.items}

        #MULTI/EXEC, koszyk i ksiazka zmieniaja sie razem
        pipe = self.redis.pipeline(transaction=True)
        pipe.set(cart_key(cart.user_id), cart.model_dump_json(), px=self.ttl_ms)
        pipe.delete(ledger_key(cart.user_id))
        if ledger:
            pipe.hset(ledger_key(cart.user_id), mapping=ledger)
            pipe.zadd(LEDGER_EXPIRY_KEY, {cart.user_id: expires_at_ms})
        else:
            pipe.zrem(LEDGER_EXPIRY_KEY, cart.user_id)
        pipe.execute()

    @redis_retry()
    def delete(self, user_id: str) -> None:
        pipe = self.redis.pipeline(transaction=True)
        pipe.delete(cart_key(user_id))
        pipe.delete(ledger_key(user_id))
        pipe.zrem(LEDGER_EXPIRY_KEY, user_id)
        pipe.execute()

    @redis_retry()
    def exists(self, user_id: str) -> bool:
        return bool(self.redis.exists(cart_key(user_id)))

    @redis_retry()
    def expired_owners(self, now_ms: int | None = None) -> List[str]:
        now_ms = now_ms if now_ms is not None else int(time.time() * 1000)
        return list(self.redis.zrangebyscore(LEDGER_EXPIRY_KEY, "-inf", now_ms))

    @redis_retry()
    def pop_ledger(self, user_id: str) -> Dict[str, int]:
        pipe = self.redis.pipeline(transaction=True)
        pipe.hgetall(ledger_key(user_id))
        pipe.delete(ledger_key(user_id))
        pipe.zrem(LEDGER_EXPIRY_KEY, user_id)
        ledger, _, _ = pipe.execute()
        return {product_id: int(qty) for product_id, qty in (ledger or {}).items()}
