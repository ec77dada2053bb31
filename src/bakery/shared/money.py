"""Currency arithmetic shared by pricing, discounts and the payment ledger.

Every multiplication and every sum is rounded with ``round2`` at the point it
happens. Totals built from unrounded intermediates drift by a cent against
the per-line figures stored on the order.

Two roundings coexist and are not interchangeable:

``round2``
    ``floor(value * 100 + 0.5) / 100`` on the binary float. Halfway values
    that are stored just below the half (``2.675``, ``1.005``) round down.
    Used for prices, discounts, ledger totals and stored amounts.
``round_currency``
    Same, after nudging the value up by one machine epsilon. Used only when
    comparing a ledger figure against a limit.
"""

import math
import sys

# Tolerance for comparing two already-rounded currency values
CURRENCY_EPSILON = 0.000001


def round2(value: float | int | None) -> float:
    """Round half-up to two decimals on the float itself."""
    if value is None:
        return 0.0
    return math.floor(float(value) * 100 + 0.5) / 100


def round_currency(value: float | int | None) -> float:
    if value is None:
        return 0.0
    return math.floor((float(value) + sys.float_info.epsilon) * 100 + 0.5) / 100


def exceeds_currency_limit(value: float, limit: float) -> bool:
    """True when ``value`` is more than ``limit`` once both are rounded to cents."""
    return round_currency(value) - round_currency(limit) > CURRENCY_EPSILON


def signed_amount(transaction_type: str, amount: float) -> float:
    """Contribution of a ledger entry to the net paid figure."""
    if transaction_type == "refund":
        return -amount
    return amount
