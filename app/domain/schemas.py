# app/domain/schemas.py
from pydantic import BaseModel, Field, ConfigDict
from typing import Any, Dict, List, Literal
from decimal import Decimal
from datetime import datetime, timezone


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ProductData(BaseModel):
    """Migawka produktu z product-service."""

    product_id: str
    product_name: str
    selling_price: Decimal
    sale_percentage: Decimal | None = None


class CartItem(BaseModel):
    """Pozycja koszyka, cena zamrozona w chwili dodania."""

    product_id: str
    product_name: str
    price: Decimal
    original_price: Decimal
    sale_percentage: Decimal = Decimal("0")
    quantity: int = Field(..., ge=1)
    selected: bool = True
    added_at: datetime = Field(default_factory=utcnow)


class Cart(BaseModel):
    """Koszyk uzytkownika trzymany w redisie jako jeden rekord JSON."""

    user_id: str
    items: List[CartItem] = Field(default_factory=list)
    total_items: int = 0
    total_price: Decimal = Decimal("0")
    updated_at: datetime = Field(default_factory=utcnow)


class AddItemIn(BaseModel):
    """Schema dla dodawania produktu do koszyka."""

    product_id: str = Field(..., min_length=1)
    quantity: int = Field(..., gt=0, description="Ilosc produktu (musi byc > 0)")


class UpdateItemIn(BaseModel):
    # walidacja > 0 w serwisie, bo 400 zamiast 422
    quantity: int


class SelectIn(BaseModel):
    selected: bool


class RemoveItemsIn(BaseModel):
    product_ids: List[str] = Field(..., min_length=1)


class CartCountOut(BaseModel):
    user_id: str
    total_items: int


class ReserveResult(BaseModel):
    success: bool
    reason: str | None = None
    available: int = 0


class StockIn(BaseModel):
    quantity: int = Field(..., ge=0)


class CommitIn(BaseModel):
    quantity: int = Field(..., gt=0)


class StockOut(BaseModel):
    product_id: str
    quantity: int
    reserved: int
    available: int
    updated_at: datetime | None = None

    model_config = ConfigDict(from_attributes=True)


#platnosci
class PaymentCreateIn(BaseModel):
    user_id: str
    amount: Decimal = Field(..., gt=0)
    payment_type: Literal["order", "topup"] = "order"
    order_id: str | None = None
    payment_method: str = "bank_transfer"


class PaymentOut(BaseModel):
    payment_id: str
    payment_code: str
    payment_type: str
    order_id: str | None = None
    user_id: str
    amount: Decimal
    payment_method: str
    status: str
    transaction_id: str | None = None
    paid_at: datetime | None = None
    expired_at: datetime
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class PaymentStatusOut(BaseModel):
    payment_code: str
    status: str
    amount: Decimal
    paid_at: datetime | None = None
    expired_at: datetime

    model_config = ConfigDict(from_attributes=True)


class SepayWebhookIn(BaseModel):
    """Powiadomienie SePay o transakcji na koncie (pola camelCase jak w ich API)."""

    model_config = ConfigDict(populate_by_name=True)

    id: int
    gateway: str | None = None
    transaction_date: str | None = Field(None, alias="transactionDate")
    account_number: str | None = Field(None, alias="accountNumber")
    content: str = ""
    transfer_type: str = Field("in", alias="transferType")
    transfer_amount: Decimal = Field(..., alias="transferAmount")
    reference_code: str | None = Field(None, alias="referenceCode")


class WebhookAck(BaseModel):
    success: bool
    message: str
    data: Dict[str, Any] | None = None


#recenzje
class ReviewIn(BaseModel):
    product_id: str
    rating: int = Field(..., ge=1, le=5)
    content: str | None = None


class ReviewUpdateIn(BaseModel):
    rating: int | None = Field(None, ge=1, le=5)
    content: str | None = None


class ReviewOut(BaseModel):
    review_id: str
    user_id: str
    product_id: str
    rating: int
    content: str | None = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class RatingBucket(BaseModel):
    rating: int
    count: int


class RatingStatsOut(BaseModel):
    average_rating: float
    total_reviews: int
    rating_distribution: List[RatingBucket]


#przesylki
class ShippingLogIn(BaseModel):
    order_code: str


class ShippingLogOut(BaseModel):
    id: int
    order_code: str
    status: str
    status_text: str | None = None
    staff_id: int | None = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class GhnStatusWebhookIn(BaseModel):
    """Zmiana statusu przesylki z GHN (nazwy pol PascalCase jak w ich API)."""

    model_config = ConfigDict(populate_by_name=True)

    order_code: str = Field(..., alias="OrderCode")
    status: str = Field(..., alias="Status")
    status_text: str | None = Field(None, alias="StatusText")
    time: str | None = Field(None, alias="Time")
    note: str | None = Field(None, alias="Note")


class AutoAssignOut(BaseModel):
    assigned_count: int
