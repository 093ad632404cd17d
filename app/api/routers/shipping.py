# app/api/routers/shipping.py
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from app.data.database import get_db
from app.domain.errors import NotFoundError
from app.domain.schemas import ShippingLogIn, ShippingLogOut, GhnStatusWebhookIn, WebhookAck
from app.services.shipping_service import ShippingService
from app.utils.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/shipping", tags=["shipping"])


def get_service(db: Session = Depends(get_db)):
    return ShippingService(db)


@router.post("/logs", response_model=ShippingLogOut, status_code=201)
def create_shipping_log(payload: ShippingLogIn, svc: ShippingService = Depends(get_service)):
    try:
        return svc.create_log(payload.order_code)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.get("/logs/{order_code}", response_model=ShippingLogOut)
def get_shipping_log(order_code: str, svc: ShippingService = Depends(get_service)):
    try:
        return svc.find_by_order_code(order_code)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.post("/webhook/ghn", response_model=WebhookAck)
def ghn_webhook(payload: GhnStatusWebhookIn, svc: ShippingService = Depends(get_service)):
    logger.info(f"Received GHN webhook: {payload.order_code} -> {payload.status}")
    try:
        result = svc.handle_ghn_webhook(payload)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return WebhookAck(success=True, message="Webhook received", data=result)
