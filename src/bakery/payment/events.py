"""Domain events for the Payment aggregate.

Removing a ledger entry is a hard delete and has no event of its own; the
order's ``OrderPaymentReconciled`` records the effect on the paid amount.
"""

from protean.fields import DateTime, Float, Identifier, String, Text

from bakery.domain import bakery


@bakery.event(part_of="Payment")
class PaymentRecorded:
    """A payment or refund was added to an order's ledger."""

    __version__ = 1

    payment_id = Identifier(required=True)
    order_id = Identifier(required=True)
    transaction_type = String(required=True)
    method = String(required=True)
    amount = Float(required=True)
    reference = String()
    received_by = String(required=True)
    received_at = DateTime(required=True)


@bakery.event(part_of="Payment")
class PaymentAmended:
    __version__ = 1

    payment_id = Identifier(required=True)
    order_id = Identifier(required=True)
    changed_fields = Text(required=True)  # JSON: list of field names
    previous_signed_amount = Float(required=True)
    signed_amount = Float(required=True)
    amended_at = DateTime(required=True)
