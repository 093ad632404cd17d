import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, String, DateTime, Numeric

from app.data.database import Base


class PaymentModel(Base):
    __tablename__ = "payments"

    payment_id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    payment_code = Column(String, nullable=False, unique=True, index=True)  # klient wpisuje go w tytul przelewu

    payment_type = Column(String, nullable=False, default="order")  # order, topup
    order_id = Column(String, nullable=True, index=True)
    user_id = Column(String, nullable=False)

    amount = Column(Numeric(12, 2), nullable=False)
    payment_method = Column(String, nullable=False, default="bank_transfer")
    status = Column(String, nullable=False, default="PENDING")  # PENDING, COMPLETED, EXPIRED
    transaction_id = Column(String, nullable=True)

    paid_at = Column(DateTime(timezone=True), nullable=True)
    expired_at = Column(DateTime(timezone=True), nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))
