"""Order aggregate — a priced, immutable snapshot of what the customer asked for.

Line items copy product, flavor and shape names and prices at creation time,
so later menu edits never change an existing order. ``paid_amount`` and
``payment_status`` form a materialized view over the order's payment ledger
and are only written by the reconciler (``bakery.payment.reconciliation``).
"""

from datetime import UTC, datetime
from enum import Enum

from protean import atomic_change, invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, Float, HasMany, Identifier, Integer, String, Text, ValueObject

from bakery.domain import bakery
from bakery.order.events import OrderPaymentReconciled, OrderPlaced
from bakery.shared.money import CURRENCY_EPSILON, round2


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class DeliveryMethod(Enum):
    PICKUP = "pickup"
    DELIVERY = "delivery"


class OrderStatus(Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    IN_PROGRESS = "in-progress"
    READY = "ready"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class PaymentStatus(Enum):
    UNPAID = "unpaid"
    PARTIAL = "partial"
    PAID = "paid"


def resolve_payment_status(total_amount: float, paid_amount: float) -> str:
    """Payment status for a paid amount against an order total.

    Over-payment still reports ``paid``; there is no fourth state.
    """
    if paid_amount <= 0:
        return PaymentStatus.UNPAID.value
    if paid_amount >= total_amount:
        return PaymentStatus.PAID.value
    return PaymentStatus.PARTIAL.value


# ---------------------------------------------------------------------------
# Value Objects
# ---------------------------------------------------------------------------
@bakery.value_object(part_of="Order")
class DeliveryAddress:
    """Copy of the customer's address at the time the order was placed."""

    address_id = String(required=True, max_length=50)
    label = String(max_length=50)
    line1 = String(required=True, max_length=255)
    line2 = String(max_length=255)
    city = String(required=True, max_length=100)
    state = String(max_length=100)
    postal_code = String(required=True, max_length=20)
    notes = String(max_length=500)


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------
@bakery.entity(part_of="Order")
class OrderItem:
    """One priced product + flavor (+ shape) line.

    Per-unit lines carry ``quantity``; per-kg lines carry ``weight``. The
    other measure is always empty.
    """

    product_type_id = Identifier(required=True)
    product_type_name = String(required=True, max_length=150)
    flavor_id = Identifier(required=True)
    flavor_name = String(required=True, max_length=150)
    cake_shape_id = Identifier()
    cake_shape_name = String(max_length=150, default="")
    pricing_method = String(required=True, max_length=10)
    quantity = Integer(min_value=1)
    weight = Float()
    unit_base_price = Float(required=True, min_value=0.0)
    flavor_extra_price = Float(default=0.0, min_value=0.0)
    line_total = Float(required=True, min_value=0.0)
    special_instructions = String(max_length=1000, default="")

    @invariant.post
    def measure_matches_pricing_method(self):
        if self.pricing_method == "perunit":
            if self.quantity is None or self.weight is not None:
                raise ValidationError({"quantity": ["Per-unit lines carry a quantity and no weight"]})
        elif self.pricing_method == "perkg":
            if self.weight is None or self.quantity is not None:
                raise ValidationError({"weight": ["Per-kg lines carry a weight and no quantity"]})
        else:
            raise ValidationError({"pricing_method": [f"Unknown pricing method: {self.pricing_method}"]})


# ---------------------------------------------------------------------------
# Aggregate Root
# ---------------------------------------------------------------------------
@bakery.aggregate
class Order:
    order_number = String(required=True, max_length=50, unique=True)
    customer_id = Identifier(required=True)
    customer_name = String(required=True, max_length=201)
    customer_phone = String(required=True, max_length=30)
    customer_email = String(required=True, max_length=254)
    delivery_method = String(choices=DeliveryMethod, required=True)
    delivery_address = ValueObject(DeliveryAddress)
    fulfillment_at = DateTime(required=True)
    items = HasMany(OrderItem)
    notes = Text(default="")
    sub_total = Float(required=True, min_value=0.0)
    discount = Float(default=0.0, min_value=0.0)
    total_amount = Float(required=True, min_value=0.0)
    paid_amount = Float(default=0.0, min_value=0.0)
    payment_status = String(choices=PaymentStatus, default=PaymentStatus.UNPAID.value)
    status = String(choices=OrderStatus, default=OrderStatus.PENDING.value)
    created_by = String(required=True, max_length=100)
    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def total_is_subtotal_less_discount(self):
        expected = max(round2(self.sub_total - (self.discount or 0.0)), 0.0)
        if abs(self.total_amount - expected) > CURRENCY_EPSILON:
            raise ValidationError(
                {"total_amount": [f"Total {self.total_amount} does not match subtotal less discount ({expected})"]}
            )

    # -------------------------------------------------------------------
    # Factory method
    # -------------------------------------------------------------------
    @classmethod
    def place(
        cls,
        order_number: str,
        customer,
        delivery_method: str,
        fulfillment_at: datetime,
        items: list,
        sub_total: float,
        discount: float,
        total_amount: float,
        created_by: str,
        delivery_address=None,
        notes: str | None = None,
        initial_paid_amount: float = 0.0,
    ):
        """Assemble a new order from priced line items.

        ``items`` are priced line items (see ``bakery.order.pricing``).
        ``initial_paid_amount`` is what the counter reported as already paid;
        it seeds ``paid_amount`` until the ledger is first reconciled.
        """
        if not items:
            raise ValidationError({"items": ["At least one order item is required"]})

        paid_amount = round2(initial_paid_amount or 0.0)
        now = datetime.now(UTC)

        address = None
        if delivery_method == DeliveryMethod.DELIVERY.value and delivery_address is not None:
            address = DeliveryAddress(
                address_id=str(delivery_address.id),
                label=delivery_address.label,
                line1=delivery_address.line1,
                line2=delivery_address.line2,
                city=delivery_address.city,
                state=delivery_address.state,
                postal_code=delivery_address.postal_code,
                notes=delivery_address.notes,
            )

        order = cls(
            order_number=order_number,
            customer_id=str(customer.id),
            customer_name=customer.full_name,
            customer_phone=customer.phone,
            customer_email=customer.email,
            delivery_method=delivery_method,
            delivery_address=address,
            fulfillment_at=fulfillment_at,
            notes=notes or "",
            sub_total=sub_total,
            discount=discount,
            total_amount=total_amount,
            paid_amount=paid_amount,
            payment_status=resolve_payment_status(total_amount, paid_amount),
            created_by=created_by,
            created_at=now,
            updated_at=now,
        )
        for item in items:
            order.add_items(
                OrderItem(
                    product_type_id=item.product_type_id,
                    product_type_name=item.product_type_name,
                    flavor_id=item.flavor_id,
                    flavor_name=item.flavor_name,
                    cake_shape_id=item.cake_shape_id,
                    cake_shape_name=item.cake_shape_name,
                    pricing_method=item.pricing_method,
                    quantity=item.quantity,
                    weight=item.weight,
                    unit_base_price=item.unit_base_price,
                    flavor_extra_price=item.flavor_extra_price,
                    line_total=item.line_total,
                    special_instructions=item.special_instructions,
                )
            )

        order.raise_(
            OrderPlaced(
                order_id=str(order.id),
                order_number=order_number,
                customer_id=str(customer.id),
                delivery_method=delivery_method,
                item_count=len(items),
                sub_total=sub_total,
                discount=discount,
                total_amount=total_amount,
                paid_amount=paid_amount,
                payment_status=order.payment_status,
                placed_at=now,
            )
        )
        return order

    # -------------------------------------------------------------------
    # Payment view
    # -------------------------------------------------------------------
    def record_payment_summary(self, paid_amount: float, payment_status: str) -> bool:
        """Overwrite the paid view with values re-derived from the ledger.

        Returns ``True`` when something changed. Re-asserting the current
        values is a no-op: no event, no timestamp bump.
        """
        unchanged = (
            self.paid_amount is not None
            and abs(self.paid_amount - paid_amount) <= CURRENCY_EPSILON
            and self.payment_status == payment_status
        )
        if unchanged:
            return False

        previous_paid, previous_status = self.paid_amount, self.payment_status
        now = datetime.now(UTC)
        with atomic_change(self):
            self.paid_amount = paid_amount
            self.payment_status = payment_status
            self.updated_at = now

        self.raise_(
            OrderPaymentReconciled(
                order_id=str(self.id),
                total_amount=self.total_amount,
                previous_paid_amount=previous_paid,
                paid_amount=paid_amount,
                previous_payment_status=previous_status,
                payment_status=payment_status,
                reconciled_at=now,
            )
        )
        return True
