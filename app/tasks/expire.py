# app/tasks/expire.py
from contextlib import nullcontext

import redis

from app.celery_worker import celery_app
from app.data.database import SessionLocal
from app.domain.errors import CartLockTimeout
from app.repos.cart_repo import CartRepo
from app.services.cart_service import release_ledger
from app.services.inventory_service import InventoryService
from app.services.lock_service import LockService
from app.utils.settings import REDIS_URL
from app.utils.logging import get_logger

logger = get_logger(__name__)


def release_expired_reservations(
    repo: CartRepo,
    inventory_service: InventoryService,
    lock_service: LockService | None = None,
    now_ms: int | None = None,
) -> int:
    """
    Koszyk wygasl przez TTL -> zwalniamy to co trzymal w magazynie.
    Zwraca liczbe obsluzonych koszykow.
    """
    owners = repo.expired_owners(now_ms)
    logger.info(f"Found {len(owners)} expired carts with reservations")

    released = 0
    for user_id in owners:
        scope = lock_service.cart_lock(user_id) if lock_service else nullcontext()
        try:
            with scope:
                if repo.exists(user_id):
                    #uzytkownik zdazyl wrocic, nowy zapis przesunie wygasniecie
                    logger.info(f"Cart of {user_id} still alive, skipping")
                    continue

                release_ledger(repo, inventory_service, user_id)
                released += 1
        except CartLockTimeout as e:
            #zostaje w zbiorze, wezmie go nastepne uruchomienie
            logger.warning(f"Skipping expired cart of {user_id}, lock busy: {e}")

    return released


@celery_app.task(name="app.tasks.expire.release_expired_reservations_task")
def release_expired_reservations_task():
    logger.info("Release expired reservations task started")

    client = redis.Redis.from_url(REDIS_URL, decode_responses=True)
    db = SessionLocal()
    try:
        return release_expired_reservations(
            repo=CartRepo(client),
            inventory_service=InventoryService(db),
            lock_service=LockService(client),
        )
    finally:
        db.close()
