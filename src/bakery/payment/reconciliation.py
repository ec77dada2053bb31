"""Status reconciler.

An order's ``paid_amount`` and ``payment_status`` are re-derived from the
full ledger every time, never adjusted incrementally:

    net paid = round2(max(Σ payments − Σ refunds, 0))
    status   = unpaid if net ≤ 0, paid if net ≥ total, else partial

``summarize`` is pure; ``reconcile`` writes the result onto the order and
is a no-op when nothing changed, so running it twice gives the same state.
"""

from dataclasses import asdict, dataclass

import structlog
from protean import handle
from protean.fields import Identifier
from protean.utils.globals import current_domain

from bakery.domain import bakery
from bakery.order.order import Order, resolve_payment_status
from bakery.order.queries import get_order
from bakery.payment.payment import Payment, PaymentType
from bakery.shared.money import round2

logger = structlog.get_logger(__name__)

LEDGER_PAGE_SIZE = 100


@dataclass(frozen=True)
class LedgerTotals:
    payments_total: float
    refunds_total: float

    @property
    def net_paid(self) -> float:
        return round2(max(self.payments_total - self.refunds_total, 0.0))


@dataclass(frozen=True)
class PaymentSummary:
    order_id: str
    total_amount: float
    paid_amount: float
    payment_status: str
    payments_total: float
    refunds_total: float

    def to_dict(self) -> dict:
        return asdict(self)


def ledger_totals(entries) -> LedgerTotals:
    """Sum payments and refunds independently, each rounded to cents."""
    payments_total = round2(sum(e.amount for e in entries if e.type == PaymentType.PAYMENT.value))
    refunds_total = round2(sum(e.amount for e in entries if e.type == PaymentType.REFUND.value))
    return LedgerTotals(payments_total=payments_total, refunds_total=refunds_total)


def summarize(order_id: str, total_amount: float, entries) -> PaymentSummary:
    totals = ledger_totals(entries)
    paid_amount = totals.net_paid
    return PaymentSummary(
        order_id=str(order_id),
        total_amount=total_amount,
        paid_amount=paid_amount,
        payment_status=resolve_payment_status(total_amount, paid_amount),
        payments_total=totals.payments_total,
        refunds_total=totals.refunds_total,
    )


def load_ledger(order_id: str) -> list[Payment]:
    """Every ledger entry for an order, read page by page."""
    dao = current_domain.repository_for(Payment)._dao
    entries: list[Payment] = []
    offset = 0
    while True:
        page = dao.query.filter(order_id=str(order_id)).offset(offset).limit(LEDGER_PAGE_SIZE).all()
        entries.extend(page.items)
        if len(page.items) < LEDGER_PAGE_SIZE:
            return entries
        offset += LEDGER_PAGE_SIZE


def reconcile(order: Order, entries) -> PaymentSummary:
    """Write the ledger-derived paid amount and status onto the order."""
    summary = summarize(order.id, order.total_amount, entries)
    changed = order.record_payment_summary(summary.paid_amount, summary.payment_status)
    if changed:
        current_domain.repository_for(Order).add(order)

    logger.info(
        "payment_status_recalculated",
        order_id=summary.order_id,
        total_amount=summary.total_amount,
        paid_amount=summary.paid_amount,
        payment_status=summary.payment_status,
        payments_total=summary.payments_total,
        refunds_total=summary.refunds_total,
        changed=changed,
    )
    return summary


def recalculate(order_id: str) -> PaymentSummary:
    """Load the order and its whole ledger and reconcile them."""
    order = get_order(order_id)
    return reconcile(order, load_ledger(order_id))


def get_payment_summary(order_id: str) -> PaymentSummary:
    """Ledger-derived summary for an order, without touching the stored order."""
    order = get_order(order_id)
    return summarize(order.id, order.total_amount, load_ledger(order_id))


@bakery.command(part_of="Order")
class ReconcileOrderPayments:
    order_id = Identifier(required=True)


@bakery.command_handler(part_of=Order)
class ReconcileOrderPaymentsHandler:
    @handle(ReconcileOrderPayments)
    def reconcile_order_payments(self, command):
        return recalculate(command.order_id)
