# app/api/routers/payments.py
from typing import List

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Request
from sqlalchemy.orm import Session

from app.data.database import get_db
from app.domain.errors import NotFoundError
from app.domain.schemas import (
    PaymentCreateIn,
    PaymentOut,
    PaymentStatusOut,
    SepayWebhookIn,
    WebhookAck,
)
from app.services.payment_service import PaymentService
from app.utils.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/payments", tags=["payments"])


def get_service(db: Session = Depends(get_db)):
    return PaymentService(db)


@router.post("/webhook/sepay", response_model=WebhookAck)
def sepay_webhook(
    payload: SepayWebhookIn,
    request: Request,
    background_tasks: BackgroundTasks,
    svc: PaymentService = Depends(get_service),
):
    """
    SePay wola nas przy kazdej transakcji na koncie.
    Zawsze 200, inaczej SePay ponawia; blad idzie w success=False.
    """
    logger.info(f"Received SePay webhook: transaction #{payload.id}")
    try:
        result = svc.handle_sepay_webhook(payload)
    except ValueError as e:
        logger.error(f"Webhook processing error for transaction #{payload.id}: {e}")
        return WebhookAck(success=False, message=str(e))

    if result["processed"]:
        background_tasks.add_task(
            request.app.state.connections.send_to_user,
            result["user_id"],
            {
                "type": "payment-completed",
                "paymentCode": result["payment_code"],
                "orderId": result["order_id"],
                "amount": result["amount"],
            },
        )
    return WebhookAck(success=True, message="Webhook received", data=result)


@router.post("", response_model=PaymentOut, status_code=201)
def create_payment(payload: PaymentCreateIn, svc: PaymentService = Depends(get_service)):
    try:
        return svc.create_payment(payload)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.get("/check/{payment_code}", response_model=PaymentStatusOut)
def check_payment_status(payment_code: str, svc: PaymentService = Depends(get_service)):
    try:
        return svc.check_payment_status(payment_code)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.get("/order/{order_id}", response_model=List[PaymentOut])
def get_payments_by_order(order_id: str, svc: PaymentService = Depends(get_service)):
    return svc.find_by_order(order_id)


@router.get("/{payment_code}", response_model=PaymentOut)
def get_payment(payment_code: str, svc: PaymentService = Depends(get_service)):
    try:
        return svc.find_by_code(payment_code)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
