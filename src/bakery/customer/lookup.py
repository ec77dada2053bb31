"""Customer lookups used by the order assembler."""

from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from bakery.customer.customer import Customer
from bakery.order.order import Order


def get_customer(customer_id: str) -> Customer:
    try:
        return current_domain.repository_for(Customer).get(customer_id)
    except ObjectNotFoundError as exc:
        raise ObjectNotFoundError(f"Customer not found: {customer_id}") from exc


def has_any_prior_order(customer_id: str) -> bool:
    """True when the customer has at least one order, whatever its status."""
    orders = current_domain.repository_for(Order)._dao.query.filter(customer_id=str(customer_id)).limit(1).all()
    return bool(orders.items)
