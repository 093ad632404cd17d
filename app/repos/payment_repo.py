# app/repos/payment_repo.py
from datetime import datetime
from typing import List

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from app.data.models.payment import PaymentModel


class PaymentRepo:
    def __init__(self, db: Session):
        self.db = db

    def add(self, payment: PaymentModel) -> PaymentModel:
        self.db.add(payment)
        self.db.commit()
        self.db.refresh(payment)
        return payment

    def get_by_code(self, payment_code: str) -> PaymentModel | None:
        return self.db.execute(
            select(PaymentModel).where(PaymentModel.payment_code == payment_code)
        ).scalar_one_or_none()

    def list_by_order(self, order_id: str) -> List[PaymentModel]:
        return list(
            self.db.execute(
                select(PaymentModel)
                .where(PaymentModel.order_id == order_id)
                .order_by(PaymentModel.created_at.desc())
            ).scalars()
        )

    def mark_completed(self, payment_code: str, transaction_id: str, paid_at: datetime) -> int:
        #tylko PENDING -> COMPLETED, powtorzony webhook trafia w 0 wierszy
        stmt = (
            update(PaymentModel)
            .where(
                PaymentModel.payment_code == payment_code,
                PaymentModel.status == "PENDING",
            )
            .values(status="COMPLETED", transaction_id=transaction_id, paid_at=paid_at)
            .execution_options(synchronize_session=False)
        )
        result = self.db.execute(stmt)
        self.db.commit()
        return result.rowcount

    def mark_expired(self, payment_code: str, now: datetime) -> int:
        stmt = (
            update(PaymentModel)
            .where(
                PaymentModel.payment_code == payment_code,
                PaymentModel.status == "PENDING",
                PaymentModel.expired_at < now,
            )
            .values(status="EXPIRED")
            .execution_options(synchronize_session=False)
        )
        result = self.db.execute(stmt)
        self.db.commit()
        return result.rowcount

    def refresh(self, payment: PaymentModel):
        self.db.refresh(payment)
