# fulfillment/domain/schemas.py
from pydantic import BaseModel, Field, ConfigDict
from typing import Generic, List, Optional, TypeVar
from decimal import Decimal
from datetime import datetime

from fulfillment.domain.order_state import DeliveryStatus, PaymentStatus

T = TypeVar("T")


class ApiResponse(BaseModel, Generic[T]):
    """Wspolna koperta odpowiedzi {success, data, message}."""

    success: bool = True
    data: Optional[T] = None
    message: str = ""


# ---------- cart ----------

class CartItemIn(BaseModel):
    """Schema dla dodawania produktu do koszyka."""

    variant_id: int = Field(..., gt=0, description="ID wariantu (kolor)")
    stock_record_id: int = Field(..., gt=0, description="ID rekordu rozmiar/stan")
    quantity: int = Field(..., gt=0, description="Ilosc (musi byc > 0)")


class CartItemUpdate(BaseModel):
    quantity: Optional[int] = Field(None, gt=0)
    stock_record_id: Optional[int] = Field(None, gt=0)


class CartItemOut(BaseModel):
    id: int
    variant_id: int
    stock_record_id: int
    size: Optional[str] = None
    quantity: int
    unit_price: Optional[Decimal] = None
    actual_price: Optional[Decimal] = None
    total_price: Decimal
    available: Optional[int] = None


class ChargesOut(BaseModel):
    id: int
    user_id: int
    total_quantity: int
    total_price: Decimal
    discount_price: Decimal
    tax: Decimal
    delivery_charge: Decimal
    handling_charge: Decimal
    total_payable_amount: Decimal


class CartOut(BaseModel):
    user_id: int
    items: List[CartItemOut]
    charges: Optional[ChargesOut] = None


# ---------- orders ----------

class CodOrderIn(BaseModel):
    """Schema dla zamowienia za pobraniem."""

    user_id: int = Field(..., gt=0)
    address_id: int = Field(..., gt=0)
    cart_item_ids: List[int] = Field(..., min_length=1, description="Pozycje koszyka do zamowienia")
    charges_id: int = Field(..., gt=0)


class OnlineOrderIn(CodOrderIn):
    """Zamowienie oplacone online, potwierdzenie z bramki platnosci."""

    remote_order_ref: str = Field(..., min_length=1)
    remote_payment_ref: str = Field(..., min_length=1)
    signature: str = Field(..., min_length=1)


class CreatePaymentIn(BaseModel):
    user_id: int = Field(..., gt=0)
    charges_id: int = Field(..., gt=0)


class PaymentOrderOut(BaseModel):
    remote_order_ref: str
    amount: int
    currency: str
    receipt: Optional[str] = None
    key_id: Optional[str] = None


class OrderStatusUpdate(BaseModel):
    delivery_status: Optional[DeliveryStatus] = None
    payment_status: Optional[PaymentStatus] = None


class CancelOrderIn(BaseModel):
    order_id: int = Field(..., gt=0)
    user_id: int = Field(..., gt=0)


class AddressOut(BaseModel):
    id: int
    name: str
    email: Optional[str] = None
    phone: Optional[str] = None
    address: str
    city: Optional[str] = None
    state: Optional[str] = None
    pincode: Optional[str] = None
    country: Optional[str] = None


class OrderItemOut(BaseModel):
    id: int
    variant_id: int
    stock_record_id: int
    size: Optional[str] = None
    quantity: int
    price: Decimal


class OrderOut(BaseModel):
    id: int
    user_id: int
    address_id: int
    total_quantity: int
    total_price: Decimal
    discount_price: Decimal
    tax: Decimal
    delivery_charge: Decimal
    handling_charge: Decimal
    total_payable_amount: Decimal
    payment_mode: str
    payment_status: str
    order_status: str
    delivery_status: str
    invoice_status: str
    invoice_url: Optional[str] = None
    delivered_at: Optional[datetime] = None
    cancelled_at: Optional[datetime] = None
    created_at: datetime
    items: List[OrderItemOut] = []
    address: Optional[AddressOut] = None

    model_config = ConfigDict(from_attributes=True)
