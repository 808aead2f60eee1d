# storefront/domain/schemas.py
from pydantic import BaseModel, Field, ConfigDict
from typing import List, Optional
from datetime import datetime

from storefront.domain.order_status import OrderStatus
from storefront.domain.pricing import ShippingMethod


class ItemIn(BaseModel):
    """Schema dla dodawania produktu do koszyka."""

    product_id: int = Field(..., gt=0, description="ID produktu (musi być > 0)")
    # bez gt=0: zla ilosc ma wrocic jako invalid_quantity z serwisu
    quantity: int = Field(1, description="Ilość produktu")


class QuantityIn(BaseModel):
    """Schema dla zmiany ilości linii koszyka."""

    quantity: int


class PricedLineOut(BaseModel):
    line_id: int
    product_id: int
    product_name: str
    quantity: int
    unit_price: int
    discount_percentage: Optional[float] = None
    effective_unit_price: int
    line_total: int
    blocks_checkout: bool

    model_config = ConfigDict(from_attributes=True)


class UnavailableLineOut(BaseModel):
    line_id: int
    product_id: int
    quantity: int

    model_config = ConfigDict(from_attributes=True)


class CartOut(BaseModel):
    """Schema dla wycenionego koszyka (response)."""

    user_id: int
    lines: List[PricedLineOut]
    unavailable: List[UnavailableLineOut]
    shipping_method: ShippingMethod
    item_count: int
    subtotal: int
    shipping: int
    tax: int
    total: int
    amount_to_free_shipping: int
    blocks_checkout: bool

    @classmethod
    def from_breakdown(cls, user_id: int, breakdown) -> "CartOut":
        return cls(
            user_id=user_id,
            lines=[PricedLineOut.model_validate(line) for line in breakdown.lines],
            unavailable=[UnavailableLineOut.model_validate(line) for line in breakdown.unavailable],
            shipping_method=breakdown.shipping_method,
            item_count=breakdown.item_count,
            subtotal=breakdown.subtotal,
            shipping=breakdown.shipping,
            tax=breakdown.tax,
            total=breakdown.total,
            amount_to_free_shipping=breakdown.amount_to_free_shipping,
            blocks_checkout=breakdown.blocks_checkout,
        )


class ShippingInfo(BaseModel):
    """Dane wysyłki przekazywane przy składaniu zamówienia."""

    address: str = Field(..., min_length=1, max_length=500)
    method: ShippingMethod = ShippingMethod.STANDARD


class OrderCreate(BaseModel):
    """Schema dla tworzenia zamówienia."""

    user_id: int = Field(..., gt=0, description="ID użytkownika (musi być > 0)")
    shipping_address: str = Field(..., min_length=1, max_length=500)
    shipping_method: ShippingMethod = ShippingMethod.STANDARD
    payment_method: str = Field(..., min_length=1, max_length=50)
    status: OrderStatus = OrderStatus.PENDING
    notes: Optional[str] = None


class StatusUpdateIn(BaseModel):
    status: OrderStatus


class OrderLineOut(BaseModel):
    id: int
    product_id: int
    product_name: str
    quantity: int
    unit_price: int

    model_config = ConfigDict(from_attributes=True)


class OrderOut(BaseModel):
    """Schema dla zamówienia (response)."""

    id: int
    user_id: int
    status: OrderStatus
    subtotal: int
    shipping: int
    tax: int
    total: int
    shipping_address: str
    shipping_method: str
    payment_method: str
    notes: Optional[str] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class OrderDetailOut(OrderOut):
    lines: List[OrderLineOut]
