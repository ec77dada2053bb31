"""FastAPI routes for the bakery back office — orders, payments, customers, catalogue."""

import json
from dataclasses import dataclass

from fastapi import APIRouter, Depends, Header, HTTPException, Query
from protean.utils.globals import current_domain

from bakery.api.schemas import (
    AddAddressRequest,
    AmendPaymentRequest,
    CreateOrderRequest,
    IdResponse,
    LedgerEntryResponse,
    OrderListResponse,
    OrderResponse,
    PaymentListResponse,
    PaymentResponse,
    PaymentSummaryResponse,
    RecordPaymentRequest,
    RegisterCakeShapeRequest,
    RegisterCustomerRequest,
    RegisterFlavorTypeRequest,
    RegisterProductTypeRequest,
    SetFlavorAvailabilityRequest,
)
from bakery.catalogue.management import (
    RegisterCakeShape,
    RegisterFlavorType,
    RegisterProductType,
    SetFlavorAvailability,
)
from bakery.customer.registration import AddCustomerAddress, RegisterCustomer
from bakery.order.creation import PlaceOrder
from bakery.order.queries import DEFAULT_PAGE_SIZE, get_order, list_orders
from bakery.payment.ledger import AmendPayment, RecordPayment, RemovePayment, get_payment
from bakery.payment.locking import process_serialized
from bakery.payment.queries import list_order_payments
from bakery.payment.reconciliation import ReconcileOrderPayments, get_payment_summary


# ---------------------------------------------------------------------------
# Caller identity
# ---------------------------------------------------------------------------
@dataclass(frozen=True)
class StaffIdentity:
    staff_id: str
    name: str | None = None


def current_staff(
    x_staff_id: str = Header(default=""),
    x_staff_name: str = Header(default=""),
) -> StaffIdentity:
    """Identity forwarded by the auth proxy in front of the API."""
    if not x_staff_id.strip():
        raise HTTPException(status_code=401, detail="Staff identity required")
    return StaffIdentity(staff_id=x_staff_id.strip(), name=x_staff_name.strip() or None)


# ---------------------------------------------------------------------------
# Response mapping
# ---------------------------------------------------------------------------
def _order_response(order) -> OrderResponse:
    address = order.delivery_address
    return OrderResponse(
        id=str(order.id),
        order_number=order.order_number,
        customer_id=str(order.customer_id),
        customer_name=order.customer_name,
        customer_phone=order.customer_phone,
        customer_email=order.customer_email,
        delivery_method=order.delivery_method,
        delivery_address=(
            {
                "address_id": address.address_id,
                "label": address.label,
                "line1": address.line1,
                "line2": address.line2,
                "city": address.city,
                "state": address.state,
                "postal_code": address.postal_code,
                "notes": address.notes,
            }
            if address
            else None
        ),
        fulfillment_at=order.fulfillment_at,
        items=[
            {
                "id": str(item.id),
                "product_type_id": str(item.product_type_id),
                "product_type_name": item.product_type_name,
                "flavor_id": str(item.flavor_id),
                "flavor_name": item.flavor_name,
                "cake_shape_id": str(item.cake_shape_id) if item.cake_shape_id else None,
                "cake_shape_name": item.cake_shape_name or "",
                "pricing_method": item.pricing_method,
                "quantity": item.quantity,
                "weight": item.weight,
                "unit_base_price": item.unit_base_price,
                "flavor_extra_price": item.flavor_extra_price,
                "line_total": item.line_total,
                "special_instructions": item.special_instructions or "",
            }
            for item in order.items
        ],
        notes=order.notes or "",
        sub_total=order.sub_total,
        discount=order.discount,
        total_amount=order.total_amount,
        paid_amount=order.paid_amount,
        payment_status=order.payment_status,
        status=order.status,
        created_by=order.created_by,
        created_at=order.created_at,
        updated_at=order.updated_at,
    )


def _payment_response(payment) -> PaymentResponse:
    return PaymentResponse(
        id=str(payment.id),
        order_id=str(payment.order_id),
        type=payment.type,
        method=payment.method,
        amount=payment.amount,
        reference=payment.reference,
        note=payment.note,
        proof_image=payment.proof_image,
        received_by=payment.received_by,
        received_by_name=payment.received_by_name,
        received_at=payment.received_at,
        created_at=payment.created_at,
        updated_at=payment.updated_at,
    )


def _ledger_response(result) -> LedgerEntryResponse:
    return LedgerEntryResponse(
        payment=_payment_response(result.payment) if result.payment else None,
        summary=PaymentSummaryResponse(**result.summary.to_dict()),
    )


# ---------------------------------------------------------------------------
# Order Router
# ---------------------------------------------------------------------------
order_router = APIRouter(prefix="/orders", tags=["orders"])


@order_router.post("", status_code=201, response_model=OrderResponse)
async def create_order(body: CreateOrderRequest, staff: StaffIdentity = Depends(current_staff)) -> OrderResponse:
    command = PlaceOrder(
        customer_id=body.customer_id,
        delivery_method=body.delivery_method,
        delivery_address_id=body.delivery_address_id,
        fulfillment_at=body.fulfillment_at,
        items=json.dumps([item.model_dump() for item in body.items]),
        notes=body.notes,
        initial_paid_amount=body.initial_paid_amount,
        created_by=staff.staff_id,
    )
    order_id = current_domain.process(command, asynchronous=False)
    return _order_response(get_order(order_id))


@order_router.get("", response_model=OrderListResponse)
async def search_orders(
    customer_id: str | None = None,
    status: str | None = None,
    payment_status: str | None = None,
    page: int = Query(default=1),
    limit: int = Query(default=DEFAULT_PAGE_SIZE),
) -> OrderListResponse:
    result = list_orders(
        customer_id=customer_id,
        status=status,
        payment_status=payment_status,
        page=page,
        limit=limit,
    )
    return OrderListResponse(
        orders=[_order_response(order) for order in result.items],
        page=result.page,
        limit=result.limit,
        total=result.total,
        pages=result.pages,
    )


@order_router.get("/{order_id}", response_model=OrderResponse)
async def read_order(order_id: str) -> OrderResponse:
    return _order_response(get_order(order_id))


@order_router.get("/{order_id}/payment-summary", response_model=PaymentSummaryResponse)
async def read_payment_summary(order_id: str) -> PaymentSummaryResponse:
    return PaymentSummaryResponse(**get_payment_summary(order_id).to_dict())


@order_router.post("/{order_id}/payments/reconcile", response_model=PaymentSummaryResponse)
async def reconcile_order_payments(
    order_id: str, staff: StaffIdentity = Depends(current_staff)
) -> PaymentSummaryResponse:
    summary = process_serialized(order_id, ReconcileOrderPayments(order_id=order_id))
    return PaymentSummaryResponse(**summary.to_dict())


@order_router.get("/{order_id}/payments", response_model=PaymentListResponse)
async def read_order_payments(
    order_id: str,
    page: int = Query(default=1),
    limit: int = Query(default=DEFAULT_PAGE_SIZE),
) -> PaymentListResponse:
    result = list_order_payments(order_id, page=page, limit=limit)
    return PaymentListResponse(
        payments=[_payment_response(payment) for payment in result.items],
        page=result.page,
        limit=result.limit,
        total=result.total,
        pages=result.pages,
    )


# ---------------------------------------------------------------------------
# Payment Router
# ---------------------------------------------------------------------------
payment_router = APIRouter(prefix="/payments", tags=["payments"])


@payment_router.post("", status_code=201, response_model=LedgerEntryResponse)
async def add_payment(
    body: RecordPaymentRequest, staff: StaffIdentity = Depends(current_staff)
) -> LedgerEntryResponse:
    command = RecordPayment(
        order_id=body.order_id,
        transaction_type=body.type,
        method=body.method,
        amount=body.amount,
        reference=body.reference,
        note=body.note,
        proof_image=body.proof_image,
        received_at=body.received_at,
        received_by=staff.staff_id,
        received_by_name=staff.name,
    )
    return _ledger_response(process_serialized(body.order_id, command))


@payment_router.get("/{payment_id}", response_model=PaymentResponse)
async def read_payment(payment_id: str) -> PaymentResponse:
    return _payment_response(get_payment(payment_id))


@payment_router.patch("/{payment_id}", response_model=LedgerEntryResponse)
async def edit_payment(
    payment_id: str, body: AmendPaymentRequest, staff: StaffIdentity = Depends(current_staff)
) -> LedgerEntryResponse:
    payment = get_payment(payment_id)
    command = AmendPayment(
        payment_id=payment_id,
        transaction_type=body.type,
        method=body.method,
        amount=body.amount,
        reference=body.reference,
        note=body.note,
        proof_image=body.proof_image,
        received_at=body.received_at,
    )
    return _ledger_response(process_serialized(payment.order_id, command))


@payment_router.delete("/{payment_id}", response_model=LedgerEntryResponse)
async def delete_payment(payment_id: str, staff: StaffIdentity = Depends(current_staff)) -> LedgerEntryResponse:
    payment = get_payment(payment_id)
    result = process_serialized(payment.order_id, RemovePayment(payment_id=payment_id))
    return _ledger_response(result)


# ---------------------------------------------------------------------------
# Customer Router
# ---------------------------------------------------------------------------
customer_router = APIRouter(prefix="/customers", tags=["customers"])


@customer_router.post("", status_code=201, response_model=IdResponse)
async def register_customer(
    body: RegisterCustomerRequest, staff: StaffIdentity = Depends(current_staff)
) -> IdResponse:
    command = RegisterCustomer(
        first_name=body.first_name,
        last_name=body.last_name,
        email=body.email,
        phone=body.phone,
        notes=body.notes,
    )
    return IdResponse(id=current_domain.process(command, asynchronous=False))


@customer_router.post("/{customer_id}/addresses", status_code=201, response_model=IdResponse)
async def add_customer_address(
    customer_id: str, body: AddAddressRequest, staff: StaffIdentity = Depends(current_staff)
) -> IdResponse:
    command = AddCustomerAddress(customer_id=customer_id, **body.model_dump())
    return IdResponse(id=current_domain.process(command, asynchronous=False))


# ---------------------------------------------------------------------------
# Catalogue Router
# ---------------------------------------------------------------------------
catalogue_router = APIRouter(prefix="/catalogue", tags=["catalogue"])


@catalogue_router.post("/product-types", status_code=201, response_model=IdResponse)
async def register_product_type(
    body: RegisterProductTypeRequest, staff: StaffIdentity = Depends(current_staff)
) -> IdResponse:
    command = RegisterProductType(
        **body.model_dump(exclude={"shape_ids"}),
        shape_ids=json.dumps(body.shape_ids),
    )
    return IdResponse(id=current_domain.process(command, asynchronous=False))


@catalogue_router.post("/flavor-types", status_code=201, response_model=IdResponse)
async def register_flavor_type(
    body: RegisterFlavorTypeRequest, staff: StaffIdentity = Depends(current_staff)
) -> IdResponse:
    command = RegisterFlavorType(**body.model_dump())
    return IdResponse(id=current_domain.process(command, asynchronous=False))


@catalogue_router.post("/cake-shapes", status_code=201, response_model=IdResponse)
async def register_cake_shape(
    body: RegisterCakeShapeRequest, staff: StaffIdentity = Depends(current_staff)
) -> IdResponse:
    command = RegisterCakeShape(**body.model_dump())
    return IdResponse(id=current_domain.process(command, asynchronous=False))


@catalogue_router.put("/product-types/{product_type_id}/flavors/{flavor_id}", response_model=IdResponse)
async def set_flavor_availability(
    product_type_id: str,
    flavor_id: str,
    body: SetFlavorAvailabilityRequest,
    staff: StaffIdentity = Depends(current_staff),
) -> IdResponse:
    command = SetFlavorAvailability(
        product_type_id=product_type_id,
        flavor_id=flavor_id,
        is_available=body.is_available,
        notes=body.notes,
    )
    return IdResponse(id=current_domain.process(command, asynchronous=False))
