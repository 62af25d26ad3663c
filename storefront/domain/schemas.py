# storefront/domain/schemas.py
from datetime import datetime, timezone
from decimal import Decimal
from typing import Generic, List, TypeVar
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from storefront.domain.status import OrderStatus, QuotationStatus

T = TypeVar("T")


class CamelModel(BaseModel):
    """JSON na zewnatrz w camelCase, w pythonie snake_case."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class Envelope(CamelModel, Generic[T]):
    status: str = "success"
    message: str | None = None
    data: T


class MessageOut(CamelModel):
    status: str = "success"
    message: str


# ---------------------------------------------------------------- requests

class Address(CamelModel):
    """Adres - zapisywany w zamowieniu jako snapshot."""

    street: str = Field(..., min_length=1, max_length=200)
    city: str = Field(..., min_length=1, max_length=100)
    state: str = Field(..., min_length=1, max_length=100)
    zip_code: str = Field(..., min_length=1, max_length=20)
    country: str = Field(..., min_length=1, max_length=100)

    @field_validator("street", "city", "state", "zip_code", "country", mode="before")
    @classmethod
    def strip_and_require(cls, value):
        if isinstance(value, str):
            value = value.strip()
        return value


class ItemIn(CamelModel):
    """Dodawanie produktu do koszyka."""

    product_id: UUID
    quantity: int = Field(..., ge=1, description="Quantity must be at least 1")


class ItemQuantityIn(CamelModel):
    quantity: int = Field(..., ge=1)


class OrderCreate(CamelModel):
    shipping_address: Address
    billing_address: Address
    payment_method: str | None = Field(default=None, min_length=1, max_length=50)
    notes: str | None = Field(default=None, max_length=500)


class OrderStatusUpdate(CamelModel):
    status: OrderStatus
    payment_status: str | None = Field(default=None, min_length=1, max_length=50)


class QuotationItemIn(CamelModel):
    product_id: UUID
    quantity: int = Field(..., ge=1)


class QuotationCreate(CamelModel):
    items: List[QuotationItemIn] = Field(..., min_length=1)
    valid_until: datetime
    notes: str | None = Field(default=None, max_length=500)
    customer_notes: str | None = Field(default=None, max_length=500)

    @field_validator("valid_until")
    @classmethod
    def must_be_in_future(cls, value: datetime) -> datetime:
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        if value <= datetime.now(timezone.utc):
            raise ValueError("Valid until date must be in the future")
        return value


class QuotationStatusUpdate(CamelModel):
    status: QuotationStatus
    notes: str | None = Field(default=None, max_length=500)

    @field_validator("status")
    @classmethod
    def not_converted(cls, value: QuotationStatus) -> QuotationStatus:
        if value == QuotationStatus.CONVERTED:
            raise ValueError("Invalid status")
        return value


class ConvertToOrderIn(CamelModel):
    shipping_address: Address
    billing_address: Address


# ---------------------------------------------------------------- responses

class CartProductOut(CamelModel):
    name: str
    price: Decimal
    stock: int
    images: List[str] = []
    sku: str
    is_active: bool


class CartItemOut(CamelModel):
    id: str
    product_id: str
    quantity: int
    product: CartProductOut
    item_total: Decimal


class CartOut(CamelModel):
    cart_id: str | None
    items: List[CartItemOut]
    item_count: int
    total: Decimal


class LineProductOut(CamelModel):
    name: str
    sku: str
    images: List[str] = []


class LineItemOut(CamelModel):
    id: str
    product_id: str
    quantity: int
    price: Decimal
    subtotal: Decimal
    product: LineProductOut


class OrderOut(CamelModel):
    id: str
    order_number: str
    user_id: str
    status: OrderStatus
    total: Decimal
    payment_method: str | None = None
    payment_status: str | None = None
    shipping_address: dict
    billing_address: dict
    notes: str | None = None
    created_at: datetime
    updated_at: datetime
    items: List[LineItemOut] = []
    item_count: int = 0


class Pagination(CamelModel):
    page: int
    limit: int
    total: int
    total_pages: int


class OrderList(CamelModel):
    orders: List[OrderOut]
    pagination: Pagination


class QuotationOut(CamelModel):
    id: str
    quotation_number: str
    user_id: str
    status: QuotationStatus
    total: Decimal
    valid_until: datetime
    notes: str | None = None
    customer_notes: str | None = None
    order_id: str | None = None
    created_at: datetime
    updated_at: datetime
    items: List[LineItemOut] = []
    item_count: int = 0


class QuotationList(CamelModel):
    quotations: List[QuotationOut]
    pagination: Pagination


class ConversionOut(CamelModel):
    order_id: str
    order_number: str
    order: OrderOut
