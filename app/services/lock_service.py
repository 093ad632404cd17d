import uuid
from contextlib import contextmanager

import redis

from app.domain.errors import CartLockBusy, CartLockTimeout
from app.utils.retry import redis_retry, lock_wait
from app.utils.settings import REDIS_URL, CART_LOCK_TTL_MS, CART_LOCK_WAIT_SECONDS
from app.utils.logging import get_logger

logger = get_logger(__name__)

#LUA porownaj i usun, atomicity
_RELEASE_LUA = """
if redis.call('GET', KEYS[1]) == ARGV[1] then
    return redis.call('DEL', KEYS[1])
else
    return 0
end
"""

#redis wykonuje skrypt lua atomowo, nikt nie wcisnie sie miedzy GET a DEL
#wiec nie zdejmiemy locka ktory po wygasnieciu przejal ktos inny


class LockService:
    """
    -lock na koszyk uzytkownika (jeden read-modify-write naraz)
    -token wlasciciela, zwalnianie tylko swojego locka
    -TTL zeby lock po padnietym procesie sam wygasl
    """

    def __init__(
        self,
        client: redis.Redis | None = None,
        ttl_ms: int = CART_LOCK_TTL_MS,
        wait_seconds: float = CART_LOCK_WAIT_SECONDS,
    ):
        self.redis = client or redis.Redis.from_url(REDIS_URL, decode_responses=True)
        self.ttl_ms = ttl_ms
        self.wait_seconds = wait_seconds

    @staticmethod
    def _key(user_id: str) -> str:
        return f"cart:{user_id}:lock"

    @redis_retry()
    def try_acquire(self, user_id: str, token: str) -> bool:
        #SET cart:u1:lock "<token>" NX PX 10000
        return bool(
            self.redis.set(
                name=self._key(user_id),
                value=token,
                nx=True,
                px=self.ttl_ms,
            )
        )

    @redis_retry()
    def release(self, user_id: str, token: str) -> bool:
        res = self.redis.eval(_RELEASE_LUA, 1, self._key(user_id), token)
        return bool(res)

    def acquire(self, user_id: str) -> str:
        token = uuid.uuid4().hex

        @lock_wait(self.wait_seconds)
        def _acquire():
            if not self.try_acquire(user_id, token):
                raise CartLockBusy(user_id)

        try:
            _acquire()
        except CartLockBusy:
            logger.warning(f"Timeout waiting for cart lock of user {user_id}")
            raise CartLockTimeout(
                "Cart is being modified by another request, try again"
            )

        logger.debug(f"Acquired cart lock for user {user_id}")
        return token

    @contextmanager
    def cart_lock(self, user_id: str):
        token = self.acquire(user_id)
        try:
            yield token
        finally:
            if not self.release(user_id, token):
                #lock wygasl w trakcie operacji
                logger.warning(f"Cart lock of user {user_id} expired before release")
