"""Read side for the payment ledger."""

from protean.utils.globals import current_domain

from bakery.order.queries import DEFAULT_PAGE_SIZE, Page, check_page, get_order
from bakery.payment.payment import Payment


def list_order_payments(order_id: str, page: int = 1, limit: int = DEFAULT_PAGE_SIZE) -> Page:
    """An order's ledger entries, most recently received first."""
    check_page(page, limit)
    get_order(order_id)

    results = (
        current_domain.repository_for(Payment)
        ._dao.query.filter(order_id=str(order_id))
        .order_by("-received_at")
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )
    return Page(items=list(results.items), total=results.total, page=page, limit=limit)
