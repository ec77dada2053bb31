"""Read side for orders: fetch one, or page through a filtered list."""

from dataclasses import dataclass

from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.utils.globals import current_domain

from bakery.order.order import Order

DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100


@dataclass(frozen=True)
class Page:
    items: list
    total: int
    page: int
    limit: int

    @property
    def pages(self) -> int:
        return (self.total + self.limit - 1) // self.limit if self.total else 0


def check_page(page: int, limit: int) -> None:
    errors = {}
    if page < 1:
        errors["page"] = ["Page must be at least 1"]
    if limit < 1 or limit > MAX_PAGE_SIZE:
        errors["limit"] = [f"Limit must be between 1 and {MAX_PAGE_SIZE}"]
    if errors:
        raise ValidationError(errors)


def get_order(order_id: str) -> Order:
    try:
        return current_domain.repository_for(Order).get(order_id)
    except ObjectNotFoundError as exc:
        raise ObjectNotFoundError(f"Order not found: {order_id}") from exc


def list_orders(
    customer_id: str | None = None,
    status: str | None = None,
    payment_status: str | None = None,
    page: int = 1,
    limit: int = DEFAULT_PAGE_SIZE,
) -> Page:
    """Newest orders first, optionally narrowed by customer, workflow status and payment status."""
    check_page(page, limit)

    filters = {}
    if customer_id:
        filters["customer_id"] = str(customer_id)
    if status:
        filters["status"] = status
    if payment_status:
        filters["payment_status"] = payment_status

    query = current_domain.repository_for(Order)._dao.query
    if filters:
        query = query.filter(**filters)
    results = query.order_by("-created_at").offset((page - 1) * limit).limit(limit).all()
    return Page(items=list(results.items), total=results.total, page=page, limit=limit)
