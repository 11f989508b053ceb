# cardapio/schemas.py

# Pydantic schemas for the record-store read models, the persisted cart state
# and the API request/response bodies.

from __future__ import annotations
from decimal import Decimal
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

DeliveryType = Literal["delivery", "pickup", "table"]
PaymentMethod = Literal["pix", "card", "cash", "counter"]


# ---------- read models ----------

class PeriodOut(BaseModel):
    open_time: str
    close_time: str
    sort_order: int = 0
    model_config = ConfigDict(from_attributes=True)


class BusinessHourOut(BaseModel):
    day_of_week: int = Field(ge=0, le=6)
    is_open: bool
    periods: list[PeriodOut] = []
    model_config = ConfigDict(from_attributes=True)


class OptionOut(BaseModel):
    id: int
    name: str
    price: Decimal = Decimal("0")
    model_config = ConfigDict(from_attributes=True)


class OptionGroupOut(BaseModel):
    id: int
    title: str
    is_required: bool = False
    max_select: int = Field(default=1, ge=1)
    options: list[OptionOut] = []
    model_config = ConfigDict(from_attributes=True)


class ProductOut(BaseModel):
    id: int
    name: str
    description: Optional[str] = None
    price: Decimal
    category_id: Optional[int] = None
    image_url: Optional[str] = None
    is_available: bool = True
    allows_half_half: bool = False
    option_groups: list[OptionGroupOut] = []
    model_config = ConfigDict(from_attributes=True)


class DeliveryZoneOut(BaseModel):
    id: int
    name: str
    price: Decimal
    is_active: bool = True
    model_config = ConfigDict(from_attributes=True)


class StoreConfigOut(BaseModel):
    id: int
    subdomain: str
    name: str
    whatsapp: str = ""
    address: Optional[str] = None
    is_open: bool = False
    auto_schedule_enabled: bool = False
    minimum_order: Decimal = Decimal("0")
    pix_key: Optional[str] = None
    pix_key_type: Optional[str] = None
    table_mode_enabled: bool = False
    table_count: int = 0
    business_hours: list[BusinessHourOut] = []
    model_config = ConfigDict(from_attributes=True)


class AvailabilityOut(BaseModel):
    is_open: bool
    status_label: str
    next_opening: Optional[str] = None
    banner: Optional[str] = None


class StorefrontOut(BaseModel):
    store: StoreConfigOut
    availability: AvailabilityOut


class HalfHalfOptionsOut(BaseModel):
    offered: bool
    candidates: list[ProductOut]


# ---------- cart state ----------

class SelectedOption(BaseModel):
    group_name: str
    option_name: str
    price: Decimal = Decimal("0")


class HalfHalf(BaseModel):
    first_half_name: str
    second_half_name: str
    final_price: Decimal


class CartItem(BaseModel):
    id: str = ""
    product_id: int
    product_name: str
    quantity: int = Field(default=1, ge=1)
    selected_options: list[SelectedOption] = []
    observation: Optional[str] = None
    half_half: Optional[HalfHalf] = None
    # frozen unit price * quantity, see CartStore.update_quantity
    item_total: Decimal


class CustomerInfo(BaseModel):
    name: str = ""
    phone: str = ""
    address: str = ""
    complement: str = ""
    reference: str = ""


class DeliverySelection(BaseModel):
    type: DeliveryType = "delivery"
    zone_id: Optional[int] = None
    zone_name: str = ""
    zone_price: Decimal = Decimal("0")
    table_number: Optional[int] = None


class PaymentSelection(BaseModel):
    method: PaymentMethod = "pix"
    cash_change: Optional[Decimal] = None


class CartState(BaseModel):
    items: list[CartItem] = []
    customer: CustomerInfo = Field(default_factory=CustomerInfo)
    delivery: DeliverySelection = Field(default_factory=DeliverySelection)
    payment: PaymentSelection = Field(default_factory=PaymentSelection)


# ---------- requests ----------

class HalfHalfChoice(BaseModel):
    enabled: bool = False
    first_half_id: Optional[int] = None
    second_half_id: Optional[int] = None


class AddItemRequest(BaseModel):
    product_id: int
    quantity: int = Field(default=1, ge=1)
    # option group id -> chosen option ids
    options: dict[int, list[int]] = {}
    observation: Optional[str] = None
    half_half: Optional[HalfHalfChoice] = None


class QuantityUpdate(BaseModel):
    quantity: int


class CustomerUpdate(BaseModel):
    name: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    complement: Optional[str] = None
    reference: Optional[str] = None


class DeliveryUpdate(BaseModel):
    type: DeliveryType = "delivery"
    zone_id: Optional[int] = None
    table_number: Optional[int] = None


class PaymentUpdate(BaseModel):
    method: PaymentMethod = "pix"
    cash_change: Optional[Decimal] = None


# ---------- responses ----------

class CartView(BaseModel):
    cart_id: str
    items: list[CartItem]
    customer: CustomerInfo
    delivery: DeliverySelection
    payment: PaymentSelection
    subtotal: Decimal
    delivery_fee: Decimal
    total: Decimal
    minimum_order_gap: Decimal
    subtotal_display: str
    delivery_fee_display: str
    total_display: str
    can_checkout: bool
    notice: Optional[str] = None


class OrderConfirmationOut(BaseModel):
    payment_method: PaymentMethod
    whatsapp_number: str
    pix_notice: Optional[str] = None
    contact_url: str


class CheckoutOut(BaseModel):
    message: str
    whatsapp_url: str
    confirmation: OrderConfirmationOut
