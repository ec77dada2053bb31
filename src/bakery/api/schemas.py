"""Pydantic request/response schemas for the bakery back office API.

These are external contracts (anti-corruption layer), separate from the
internal Protean commands. Business rules (amount limits, required
references, pricing bounds) are enforced by the domain and reported as 400;
only the shape of the payload is checked here.
"""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Shared sub-models
# ---------------------------------------------------------------------------
class StatusResponse(BaseModel):
    status: str = "ok"


class IdResponse(BaseModel):
    id: str


class PageMeta(BaseModel):
    page: int
    limit: int
    total: int
    pages: int


class DeliveryAddressSchema(BaseModel):
    address_id: str
    label: str | None = None
    line1: str
    line2: str | None = None
    city: str
    state: str | None = None
    postal_code: str
    notes: str | None = None


class PaymentSummaryResponse(BaseModel):
    order_id: str
    total_amount: float
    paid_amount: float
    payment_status: str
    payments_total: float
    refunds_total: float


# ---------------------------------------------------------------------------
# Order Schemas
# ---------------------------------------------------------------------------
class OrderItemRequest(BaseModel):
    product_type_id: str
    flavor_id: str
    cake_shape_id: str | None = None
    quantity: int | None = None
    weight: float | None = None
    special_instructions: str | None = None


class CreateOrderRequest(BaseModel):
    customer_id: str
    delivery_method: Literal["pickup", "delivery"]
    delivery_address_id: str | None = None
    fulfillment_at: datetime
    items: list[OrderItemRequest]
    notes: str | None = None
    initial_paid_amount: float = 0.0

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "customer_id": "cust-001",
                    "delivery_method": "pickup",
                    "fulfillment_at": "2025-06-01T10:00:00Z",
                    "items": [
                        {"product_type_id": "cupcakes", "flavor_id": "vanilla", "quantity": 12},
                        {
                            "product_type_id": "birthday-cake",
                            "flavor_id": "chocolate",
                            "cake_shape_id": "round",
                            "weight": 1.5,
                            "special_instructions": "Happy birthday Ana",
                        },
                    ],
                    "initial_paid_amount": 10.0,
                }
            ]
        }
    }


class OrderItemResponse(BaseModel):
    id: str
    product_type_id: str
    product_type_name: str
    flavor_id: str
    flavor_name: str
    cake_shape_id: str | None = None
    cake_shape_name: str = ""
    pricing_method: str
    quantity: int | None = None
    weight: float | None = None
    unit_base_price: float
    flavor_extra_price: float
    line_total: float
    special_instructions: str = ""


class OrderResponse(BaseModel):
    id: str
    order_number: str
    customer_id: str
    customer_name: str
    customer_phone: str
    customer_email: str
    delivery_method: str
    delivery_address: DeliveryAddressSchema | None = None
    fulfillment_at: datetime
    items: list[OrderItemResponse]
    notes: str = ""
    sub_total: float
    discount: float
    total_amount: float
    paid_amount: float
    payment_status: str
    status: str
    created_by: str
    created_at: datetime | None = None
    updated_at: datetime | None = None


class OrderListResponse(PageMeta):
    orders: list[OrderResponse]


# ---------------------------------------------------------------------------
# Payment Schemas
# ---------------------------------------------------------------------------
class RecordPaymentRequest(BaseModel):
    order_id: str
    type: Literal["payment", "refund"] = "payment"
    method: Literal["cash", "bank_transfer", "mbway"]
    amount: float
    reference: str | None = None
    note: str | None = None
    proof_image: str | None = None
    received_at: datetime | None = None


class AmendPaymentRequest(BaseModel):
    type: Literal["payment", "refund"] | None = None
    method: Literal["cash", "bank_transfer", "mbway"] | None = None
    amount: float | None = None
    reference: str | None = None
    note: str | None = None
    proof_image: str | None = None
    received_at: datetime | None = None


class PaymentResponse(BaseModel):
    id: str
    order_id: str
    type: str
    method: str
    amount: float
    reference: str | None = None
    note: str | None = None
    proof_image: str | None = None
    received_by: str
    received_by_name: str | None = None
    received_at: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class LedgerEntryResponse(BaseModel):
    payment: PaymentResponse | None = None
    summary: PaymentSummaryResponse


class PaymentListResponse(PageMeta):
    payments: list[PaymentResponse]


# ---------------------------------------------------------------------------
# Customer Schemas
# ---------------------------------------------------------------------------
class RegisterCustomerRequest(BaseModel):
    first_name: str
    last_name: str
    email: str
    phone: str
    notes: str | None = None


class AddAddressRequest(BaseModel):
    label: str | None = None
    line1: str
    line2: str | None = None
    city: str
    state: str | None = None
    postal_code: str
    notes: str | None = None


# ---------------------------------------------------------------------------
# Catalogue Schemas
# ---------------------------------------------------------------------------
class RegisterProductTypeRequest(BaseModel):
    name: str
    description: str | None = None
    pricing_method: Literal["perunit", "perkg"]
    unit_price: float | None = Field(default=None, ge=0)
    min_quantity: int | None = Field(default=None, ge=0)
    max_quantity: int | None = Field(default=None, ge=0)
    price_per_kg: float | None = Field(default=None, ge=0)
    min_weight: float | None = Field(default=None, ge=0)
    max_weight: float | None = Field(default=None, ge=0)
    shape_ids: list[str] = []
    sort_order: int = 0


class RegisterFlavorTypeRequest(BaseModel):
    name: str
    description: str | None = None
    has_extra_price: bool = False
    extra_price_per_unit: float | None = Field(default=None, ge=0)
    extra_price_per_kg: float | None = Field(default=None, ge=0)
    sort_order: int = 0


class RegisterCakeShapeRequest(BaseModel):
    name: str
    description: str | None = None
    sort_order: int = 0


class SetFlavorAvailabilityRequest(BaseModel):
    is_available: bool = True
    notes: str | None = None
