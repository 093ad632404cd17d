# app/services/shipping_service.py
import random
from datetime import datetime, timedelta, timezone
from typing import Any, Dict

from sqlalchemy.orm import Session

from app.data.models.shipping import ShippingLogModel
from app.domain.errors import NotFoundError, InvalidArgumentError
from app.domain.schemas import GhnStatusWebhookIn
from app.repos.shipping_repo import ShippingRepo
from app.utils.settings import SHIPPING_AUTO_ASSIGN_AFTER_HOURS
from app.utils.logging import get_logger

logger = get_logger(__name__)


class ShippingService:
    def __init__(self, db: Session, rng: random.Random | None = None):
        self.repo = ShippingRepo(db)
        self.rng = rng or random.Random()

    def create_log(self, order_code: str) -> ShippingLogModel:
        if self.repo.get_by_order_code(order_code):
            raise InvalidArgumentError(f"Shipping log for {order_code} already exists")
        log = self.repo.add(ShippingLogModel(order_code=order_code, status="ready_to_pick"))
        logger.info(f"Shipping log {log.id} created for {order_code}")
        return log

    def find_by_order_code(self, order_code: str) -> ShippingLogModel:
        log = self.repo.get_by_order_code(order_code)
        if log is None:
            raise NotFoundError(f"Shipping log for {order_code} not found")
        return log

    def handle_ghn_webhook(self, payload: GhnStatusWebhookIn) -> Dict[str, Any]:
        log = self.find_by_order_code(payload.order_code)
        previous = log.status

        if not self.repo.update_status(payload.order_code, payload.status, payload.status_text):
            logger.info(f"Shipment {payload.order_code} already {payload.status}, webhook ignored")
            return {"processed": False, "order_code": payload.order_code, "status": previous}

        logger.info(f"Shipment {payload.order_code}: {previous} -> {payload.status}")
        return {"processed": True, "order_code": payload.order_code, "status": payload.status}

    def auto_assign_unassigned(self, now: datetime | None = None) -> Dict[str, int]:
        """
        Przesylki bez pracownika starsze niz SHIPPING_AUTO_ASSIGN_AFTER_HOURS
        dostaja losowego aktywnego pracownika.
        """
        now = now or datetime.now(timezone.utc)
        cutoff = now - timedelta(hours=SHIPPING_AUTO_ASSIGN_AFTER_HOURS)

        logs = self.repo.unassigned_created_before(cutoff)
        if not logs:
            return {"assigned_count": 0}

        staff = self.repo.active_staff()
        if not staff:
            logger.warning(f"{len(logs)} shipping logs waiting, but no active staff to assign")
            return {"assigned_count": 0}

        assigned = 0
        for log in logs:
            member = self.rng.choice(staff)
            if self.repo.assign(log.id, member.id):
                logger.info(f"Shipping log {log.id} ({log.order_code}) auto-assigned to staff {member.id}")
                assigned += 1
        self.repo.commit()

        return {"assigned_count": assigned}
