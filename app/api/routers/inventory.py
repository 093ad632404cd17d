# app/api/routers/inventory.py
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from app.data.database import get_db
from app.domain.errors import NotFoundError
from app.domain.schemas import StockIn, StockOut, CommitIn
from app.services.inventory_service import InventoryService

router = APIRouter(prefix="/inventory", tags=["inventory"])


def get_service(db: Session = Depends(get_db)):
    return InventoryService(db)


@router.get("/{product_id}", response_model=StockOut)
def get_stock(product_id: str, svc: InventoryService = Depends(get_service)):
    try:
        return svc.get_stock(product_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.put("/{product_id}", response_model=StockOut)
def set_stock(product_id: str, payload: StockIn, svc: InventoryService = Depends(get_service)):
    try:
        return svc.set_stock(product_id, payload.quantity)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.post("/{product_id}/commit", response_model=StockOut)
def commit_reservation(
    product_id: str,
    payload: CommitIn,
    svc: InventoryService = Depends(get_service),
):
    """
    Potwierdzenie zamowienia: rezerwacja schodzi ze stanu fizycznego.
    """
    try:
        return svc.commit_reservation(product_id, payload.quantity)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
