"""Domain events for the Order aggregate."""

from protean.fields import DateTime, Float, Identifier, Integer, String

from bakery.domain import bakery


@bakery.event(part_of="Order")
class OrderPlaced:
    """A priced order was assembled and persisted."""

    __version__ = 1

    order_id = Identifier(required=True)
    order_number = String(required=True)
    customer_id = Identifier(required=True)
    delivery_method = String(required=True)
    item_count = Integer(required=True)
    sub_total = Float(required=True)
    discount = Float(required=True)
    total_amount = Float(required=True)
    paid_amount = Float(required=True)
    payment_status = String(required=True)
    placed_at = DateTime(required=True)


@bakery.event(part_of="Order")
class OrderPaymentReconciled:
    """Paid amount or payment status changed after the ledger was re-derived."""

    __version__ = 1

    order_id = Identifier(required=True)
    total_amount = Float(required=True)
    previous_paid_amount = Float()
    paid_amount = Float(required=True)
    previous_payment_status = String()
    payment_status = String(required=True)
    reconciled_at = DateTime(required=True)
