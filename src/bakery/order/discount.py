"""Loyalty discount policy: returning customers get a flat rate off the subtotal."""

from dataclasses import dataclass

from bakery.shared.money import round2

LOYALTY_DISCOUNT_RATE = 0.10


@dataclass(frozen=True)
class DiscountedTotal:
    rate: float
    discount: float
    total_amount: float


def discount_rate_for(has_prior_order: bool) -> float:
    return LOYALTY_DISCOUNT_RATE if has_prior_order else 0.0


def apply_loyalty_discount(sub_total: float, has_prior_order: bool) -> DiscountedTotal:
    """Discount and total for a subtotal. No tiers and no caps; the total never goes negative."""
    rate = discount_rate_for(has_prior_order)
    discount = round2(sub_total * rate)
    return DiscountedTotal(
        rate=rate,
        discount=discount,
        total_amount=max(round2(sub_total - discount), 0.0),
    )
