"""Payment ledger — record, amend and remove entries.

Each handler validates against the ledger as it stood before the change,
writes the change, then reconciles the order over that same snapshot with
the change applied. Callers go through ``bakery.payment.locking`` so that
only one mutation per order is in flight.
"""

from dataclasses import dataclass

import structlog
from protean import handle
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.fields import DateTime, Float, Identifier, String, Text
from protean.utils.globals import current_domain

from bakery.domain import bakery
from bakery.order.queries import get_order
from bakery.payment.payment import Payment, PaymentMethod, PaymentType
from bakery.payment.reconciliation import PaymentSummary, ledger_totals, load_ledger, reconcile
from bakery.shared.money import CURRENCY_EPSILON, exceeds_currency_limit, round2

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class LedgerEntryResult:
    summary: PaymentSummary
    payment: Payment | None = None


def get_payment(payment_id: str) -> Payment:
    try:
        return current_domain.repository_for(Payment).get(payment_id)
    except ObjectNotFoundError as exc:
        raise ObjectNotFoundError(f"Payment not found: {payment_id}") from exc


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------
@bakery.command(part_of="Payment")
class RecordPayment:
    order_id = Identifier(required=True)
    transaction_type = String(choices=PaymentType, default=PaymentType.PAYMENT.value)
    method = String(choices=PaymentMethod, required=True)
    amount = Float(required=True)
    reference = String(max_length=150)
    note = String(max_length=1000)
    proof_image = Text()
    received_at = DateTime()
    received_by = String(required=True, max_length=100)
    received_by_name = String(max_length=201)


@bakery.command(part_of="Payment")
class AmendPayment:
    payment_id = Identifier(required=True)
    transaction_type = String(choices=PaymentType)
    method = String(choices=PaymentMethod)
    amount = Float()
    reference = String(max_length=150)
    note = String(max_length=1000)
    proof_image = Text()
    received_at = DateTime()


@bakery.command(part_of="Payment")
class RemovePayment:
    payment_id = Identifier(required=True)


# ---------------------------------------------------------------------------
# Handler
# ---------------------------------------------------------------------------
@bakery.command_handler(part_of=Payment)
class PaymentLedgerHandler:
    @handle(RecordPayment)
    def record_payment(self, command):
        order = get_order(command.order_id)
        payment = Payment.record(
            order_id=command.order_id,
            type=command.transaction_type,
            method=command.method,
            amount=command.amount,
            reference=command.reference,
            note=command.note,
            proof_image=command.proof_image,
            received_by=command.received_by,
            received_by_name=command.received_by_name,
            received_at=command.received_at,
        )

        ledger = load_ledger(order.id)
        net_paid = ledger_totals(ledger).net_paid
        if payment.type == PaymentType.PAYMENT.value:
            if exceeds_currency_limit(net_paid + payment.amount, order.total_amount):
                raise ValidationError({"amount": ["Payment amount exceeds remaining balance"]})
        elif exceeds_currency_limit(payment.amount, net_paid):
            raise ValidationError({"amount": ["Refund amount exceeds amount paid"]})

        current_domain.repository_for(Payment).add(payment)
        summary = reconcile(order, [*ledger, payment])

        logger.info(
            "payment_recorded",
            payment_id=str(payment.id),
            order_id=str(order.id),
            type=payment.type,
            method=payment.method,
            amount=payment.amount,
        )
        return LedgerEntryResult(payment=payment, summary=summary)

    @handle(AmendPayment)
    def amend_payment(self, command):
        payment = get_payment(command.payment_id)
        order = get_order(payment.order_id)

        ledger = load_ledger(order.id)
        net_paid = ledger_totals(ledger).net_paid
        previous_signed = payment.signed_amount

        changed_fields = payment.amend(
            type=command.transaction_type,
            method=command.method,
            amount=command.amount,
            reference=command.reference,
            note=command.note,
            proof_image=command.proof_image,
            received_at=command.received_at,
        )

        new_net_paid = round2(net_paid - previous_signed + payment.signed_amount)
        if new_net_paid < -CURRENCY_EPSILON:
            raise ValidationError({"amount": ["Updated payment would make the paid amount negative"]})
        if exceeds_currency_limit(new_net_paid, order.total_amount):
            raise ValidationError({"amount": ["Updated payment exceeds order total"]})

        current_domain.repository_for(Payment).add(payment)
        entries = [payment if str(entry.id) == str(payment.id) else entry for entry in ledger]
        summary = reconcile(order, entries)

        logger.info(
            "payment_amended",
            payment_id=str(payment.id),
            order_id=str(order.id),
            changed_fields=changed_fields,
            signed_amount=payment.signed_amount,
        )
        return LedgerEntryResult(payment=payment, summary=summary)

    @handle(RemovePayment)
    def remove_payment(self, command):
        payment = get_payment(command.payment_id)
        order = get_order(payment.order_id)
        ledger = load_ledger(order.id)

        current_domain.repository_for(Payment)._dao.delete(payment)
        entries = [entry for entry in ledger if str(entry.id) != str(payment.id)]
        summary = reconcile(order, entries)

        logger.info(
            "payment_removed",
            payment_id=str(payment.id),
            order_id=str(order.id),
            type=payment.type,
            amount=payment.amount,
        )
        return LedgerEntryResult(summary=summary)
