# app/services/payment_service.py
import re
import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List

from sqlalchemy.orm import Session

from app.data.models.payment import PaymentModel
from app.domain.errors import NotFoundError, InvalidArgumentError
from app.domain.schemas import PaymentCreateIn, SepayWebhookIn
from app.repos.payment_repo import PaymentRepo
from app.utils.settings import PAYMENT_EXPIRY_MINUTES
from app.utils.logging import get_logger

logger = get_logger(__name__)

#PAY + 10 znakow hex, patrz new_payment_code
PAYMENT_CODE_RE = re.compile(r"PAY[0-9A-F]{10}")


def new_payment_code() -> str:
    return "PAY" + uuid.uuid4().hex[:10].upper()


def extract_payment_code(content: str) -> str | None:
    #bank potrafi dokleic swoje prefiksy i zmienic wielkosc liter
    match = PAYMENT_CODE_RE.search((content or "").upper())
    return match.group(0) if match else None


class PaymentService:
    """
    Platnosci przelewem: tworzymy kod, klient wpisuje go w tytul,
    SePay zglasza przelew webhookiem, a my dopasowujemy go do oczekujacej platnosci.
    """

    def __init__(self, db: Session):
        self.repo = PaymentRepo(db)

    def create_payment(self, data: PaymentCreateIn) -> PaymentModel:
        if data.payment_type == "order" and not data.order_id:
            raise InvalidArgumentError("order_id is required for order payments")

        now = datetime.now(timezone.utc)
        payment = PaymentModel(
            payment_code=new_payment_code(),
            payment_type=data.payment_type,
            order_id=data.order_id,
            user_id=data.user_id,
            amount=data.amount,
            payment_method=data.payment_method,
            status="PENDING",
            expired_at=now + timedelta(minutes=PAYMENT_EXPIRY_MINUTES),
            created_at=now,
        )
        created = self.repo.add(payment)
        logger.info(f"Payment {created.payment_code} created for user {created.user_id}, amount {created.amount}")
        return created

    def find_by_code(self, payment_code: str) -> PaymentModel:
        payment = self.repo.get_by_code(payment_code)
        if payment is None:
            raise NotFoundError(f"Payment with code {payment_code} not found")
        return payment

    def find_by_order(self, order_id: str) -> List[PaymentModel]:
        return self.repo.list_by_order(order_id)

    def check_payment_status(self, payment_code: str) -> PaymentModel:
        payment = self.find_by_code(payment_code)
        if self.repo.mark_expired(payment_code, datetime.now(timezone.utc)):
            logger.info(f"Payment {payment_code} expired")
            self.repo.refresh(payment)
        return payment

    def handle_sepay_webhook(self, payload: SepayWebhookIn) -> Dict[str, Any]:
        if payload.transfer_type != "in":
            logger.info(f"Transaction #{payload.id} is outgoing, ignored")
            return {"processed": False, "reason": "Outgoing transfer ignored"}

        payment_code = extract_payment_code(payload.content)
        if payment_code is None:
            raise InvalidArgumentError(f"No payment code in transfer content of transaction #{payload.id}")

        payment = self.find_by_code(payment_code)

        if payment.status == "COMPLETED":
            logger.info(f"Payment {payment_code} already completed, transaction #{payload.id} ignored")
            return {"processed": False, "reason": "Payment already processed", "payment_code": payment_code}

        if payment.status != "PENDING":
            raise InvalidArgumentError(f"Payment {payment_code} is {payment.status}")

        if payload.transfer_amount < payment.amount:
            raise InvalidArgumentError(
                f"Transferred amount {payload.transfer_amount} is lower than {payment.amount} for {payment_code}"
            )

        updated = self.repo.mark_completed(
            payment_code,
            transaction_id=str(payload.id),
            paid_at=datetime.now(timezone.utc),
        )
        if not updated:
            #rownolegly webhook byl pierwszy
            logger.info(f"Payment {payment_code} completed concurrently, transaction #{payload.id} ignored")
            return {"processed": False, "reason": "Payment already processed", "payment_code": payment_code}

        logger.info(f"Payment {payment_code} completed by transaction #{payload.id}")
        return {
            "processed": True,
            "payment_code": payment_code,
            "payment_type": payment.payment_type,
            "order_id": payment.order_id,
            "user_id": payment.user_id,
            "amount": str(payment.amount),
        }
