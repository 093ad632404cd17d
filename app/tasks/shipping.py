# app/tasks/shipping.py
from app.celery_worker import celery_app
from app.data.database import SessionLocal
from app.services.shipping_service import ShippingService
from app.utils.logging import get_logger

logger = get_logger(__name__)


@celery_app.task(name="app.tasks.shipping.auto_assign_shipping_logs_task")
def auto_assign_shipping_logs_task():
    logger.info("Auto-assign unassigned shipping logs task started")

    db = SessionLocal()
    try:
        result = ShippingService(db).auto_assign_unassigned()
    finally:
        db.close()

    if result["assigned_count"]:
        logger.info(f"Auto-assigned {result['assigned_count']} shipping logs to staff members")
    else:
        logger.info("No shipping logs needed auto-assignment")
    return result
