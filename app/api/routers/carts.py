#app/api/routers/carts.py
from typing import List

import redis
import requests
from fastapi import APIRouter, Depends, HTTPException, Query, Response
from sqlalchemy.orm import Session

from app.data.database import get_db
from app.data.redis_client import get_redis
from app.domain.errors import NotFoundError, InsufficientStockError, CartLockTimeout
from app.domain.schemas import (
    AddItemIn,
    UpdateItemIn,
    SelectIn,
    RemoveItemsIn,
    Cart,
    CartItem,
    CartCountOut,
)
from app.repos.cart_repo import CartRepo
from app.services.cart_service import CartService
from app.services.inventory_service import InventoryService
from app.services.lock_service import LockService
from app.services.product_client import ProductClient

router = APIRouter(prefix="/cart", tags=["cart"])


def get_service(
    db: Session = Depends(get_db),
    client: redis.Redis = Depends(get_redis),
):
    return CartService(
        repo=CartRepo(client),
        product_client=ProductClient(),
        inventory_service=InventoryService(db),
        lock_service=LockService(client),
    )


def _to_http(e: Exception) -> HTTPException:
    if isinstance(e, requests.HTTPError):
        #katalog odpowiedzial bledem
        return HTTPException(status_code=502, detail="Product service error")
    if isinstance(e, requests.RequestException):
        return HTTPException(status_code=503, detail="Product service unavailable")
    if isinstance(e, NotFoundError):
        return HTTPException(status_code=404, detail=str(e))
    if isinstance(e, InsufficientStockError):
        return HTTPException(status_code=400, detail={"message": str(e), "available": e.available})
    if isinstance(e, PermissionError):
        return HTTPException(status_code=403, detail=str(e))
    if isinstance(e, CartLockTimeout):
        return HTTPException(status_code=409, detail=str(e))
    return HTTPException(status_code=400, detail=str(e))


@router.get("", response_model=Cart)
def get_cart(user_id: str = Query(...), svc: CartService = Depends(get_service)):
    return svc.get_cart(user_id)


@router.get("/count", response_model=CartCountOut)
def get_cart_count(user_id: str = Query(...), svc: CartService = Depends(get_service)):
    return CartCountOut(user_id=user_id, total_items=svc.get_cart_item_count(user_id))


@router.get("/selected", response_model=List[CartItem])
def get_selected_items(user_id: str = Query(...), svc: CartService = Depends(get_service)):
    return svc.get_selected_items(svc.get_cart(user_id))


@router.post("/items", response_model=Cart)
def add_item(
    payload: AddItemIn,
    user_id: str = Query(...),
    svc: CartService = Depends(get_service),
):
    try:
        return svc.add_to_cart(user_id, payload.product_id, payload.quantity)
    except (ValueError, PermissionError, CartLockTimeout, requests.RequestException) as e:
        raise _to_http(e)


@router.patch("/items/{product_id}", response_model=Cart)
def update_item(
    product_id: str,
    payload: UpdateItemIn,
    user_id: str = Query(...),
    svc: CartService = Depends(get_service),
):
    try:
        return svc.update_cart_item(user_id, product_id, payload.quantity)
    except (ValueError, PermissionError, CartLockTimeout) as e:
        raise _to_http(e)


@router.delete("/items/{product_id}", response_model=Cart)
def remove_item(
    product_id: str,
    user_id: str = Query(...),
    svc: CartService = Depends(get_service),
):
    try:
        return svc.remove_from_cart(user_id, product_id)
    except (ValueError, PermissionError, CartLockTimeout) as e:
        raise _to_http(e)


@router.patch("/items/{product_id}/select", response_model=Cart)
def select_item(
    product_id: str,
    payload: SelectIn,
    user_id: str = Query(...),
    svc: CartService = Depends(get_service),
):
    try:
        return svc.toggle_select_item(user_id, product_id, payload.selected)
    except (ValueError, PermissionError, CartLockTimeout) as e:
        raise _to_http(e)


@router.patch("/select-all", response_model=Cart)
def select_all(
    payload: SelectIn,
    user_id: str = Query(...),
    svc: CartService = Depends(get_service),
):
    try:
        return svc.toggle_select_all(user_id, payload.selected)
    except CartLockTimeout as e:
        raise _to_http(e)


@router.delete("/selected", response_model=Cart)
def remove_selected(user_id: str = Query(...), svc: CartService = Depends(get_service)):
    """
    Sprzatanie po checkoucie, rezerwacje zostaja do potwierdzenia zamowienia.
    """
    try:
        return svc.remove_selected_items(user_id)
    except CartLockTimeout as e:
        raise _to_http(e)


@router.post("/remove-items", response_model=Cart)
def remove_items(
    payload: RemoveItemsIn,
    user_id: str = Query(...),
    svc: CartService = Depends(get_service),
):
    try:
        return svc.remove_items_by_product_ids(user_id, payload.product_ids)
    except (ValueError, PermissionError, CartLockTimeout) as e:
        raise _to_http(e)


@router.delete("", status_code=204)
def clear_cart(user_id: str = Query(...), svc: CartService = Depends(get_service)):
    try:
        svc.clear_cart(user_id)
    except CartLockTimeout as e:
        raise _to_http(e)
    return Response(status_code=204)
