"""Order creation — command and handler.

The handler is the order assembler: customer, delivery address, pricing,
discount, initial payment state and order number are resolved in that order
and nothing is written unless every step succeeds.
"""

import json

import structlog
from protean import handle
from protean.exceptions import ValidationError
from protean.fields import DateTime, Float, Identifier, String, Text

from bakery.catalogue.lookup import RepositoryCatalogue
from bakery.customer.lookup import get_customer, has_any_prior_order
from bakery.domain import bakery
from bakery.order.discount import apply_loyalty_discount
from bakery.order.numbering import add_with_unique_number
from bakery.order.order import DeliveryMethod, Order
from bakery.order.pricing import RequestedItem, price_line_items
from bakery.shared.money import exceeds_currency_limit, round2

logger = structlog.get_logger(__name__)


@bakery.command(part_of="Order")
class PlaceOrder:
    customer_id = Identifier(required=True)
    delivery_method = String(choices=DeliveryMethod, required=True)
    delivery_address_id = Identifier()
    fulfillment_at = DateTime(required=True)
    items = Text(required=True)  # JSON: list of requested item dicts
    notes = String(max_length=2000)
    initial_paid_amount = Float(default=0.0)
    created_by = String(required=True, max_length=100)


def _requested_items(raw) -> list[RequestedItem]:
    try:
        items_data = json.loads(raw) if isinstance(raw, str) else raw
    except json.JSONDecodeError as exc:
        raise ValidationError({"items": ["Items must be a JSON list of order items"]}) from exc
    if not isinstance(items_data or [], list):
        raise ValidationError({"items": ["Items must be a JSON list of order items"]})

    requested = []
    for index, item in enumerate(items_data or []):
        if not isinstance(item, dict):
            raise ValidationError({f"items.{index}": ["Order item must be an object"]})
        missing = [name for name in ("product_type_id", "flavor_id") if not item.get(name)]
        if missing:
            raise ValidationError({f"items.{index}.{name}": ["This field is required"] for name in missing})
        requested.append(
            RequestedItem(
                product_type_id=str(item["product_type_id"]),
                flavor_id=str(item["flavor_id"]),
                cake_shape_id=item.get("cake_shape_id") or None,
                quantity=item.get("quantity"),
                weight=item.get("weight"),
                special_instructions=item.get("special_instructions"),
            )
        )
    return requested


@bakery.command_handler(part_of=Order)
class PlaceOrderHandler:
    @handle(PlaceOrder)
    def place_order(self, command):
        customer = get_customer(command.customer_id)

        delivery_address = None
        if command.delivery_method == DeliveryMethod.DELIVERY.value:
            delivery_address = customer.require_address(command.delivery_address_id)

        cart = price_line_items(_requested_items(command.items), RepositoryCatalogue())
        prior_order = has_any_prior_order(command.customer_id)
        totals = apply_loyalty_discount(cart.sub_total, prior_order)

        initial_paid = round2(command.initial_paid_amount or 0.0)
        if initial_paid < 0:
            raise ValidationError({"initial_paid_amount": ["Paid amount cannot be negative"]})
        if exceeds_currency_limit(initial_paid, totals.total_amount):
            raise ValidationError({"initial_paid_amount": ["Paid amount cannot be greater than total amount"]})

        def build(order_number):
            return Order.place(
                order_number=order_number,
                customer=customer,
                delivery_method=command.delivery_method,
                delivery_address=delivery_address,
                fulfillment_at=command.fulfillment_at,
                items=cart.items,
                sub_total=cart.sub_total,
                discount=totals.discount,
                total_amount=totals.total_amount,
                created_by=command.created_by,
                notes=command.notes,
                initial_paid_amount=initial_paid,
            )

        order = add_with_unique_number(build)

        logger.info(
            "order_placed",
            order_id=str(order.id),
            order_number=order.order_number,
            customer_id=str(command.customer_id),
            discount_rate=totals.rate,
            sub_total=order.sub_total,
            discount=order.discount,
            total_amount=order.total_amount,
            payment_status=order.payment_status,
        )
        return str(order.id)
