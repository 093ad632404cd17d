# app/celery_worker.py
from celery import Celery
from celery.schedules import crontab

from app.utils.settings import CELERY_BROKER_URL, CELERY_RESULT_BACKEND, SWEEP_INTERVAL_SECONDS

celery_app = Celery(
    "cart",
    broker=CELERY_BROKER_URL,
    backend=CELERY_RESULT_BACKEND,
)

#taski trzeba zaimportowac jawnie zeby celery je zarejestrowal
celery_app.conf.imports = (
    "app.tasks.expire",
    "app.tasks.shipping",
)

celery_app.conf.beat_schedule = {
    "release-expired-reservations": {
        "task": "app.tasks.expire.release_expired_reservations_task",
        "schedule": SWEEP_INTERVAL_SECONDS,
    },
    #co godzine, o pelnej
    "auto-assign-shipping-logs": {
        "task": "app.tasks.shipping.auto_assign_shipping_logs_task",
        "schedule": crontab(minute=0),
    },
}

celery_app.conf.timezone = "UTC"
