"""Bakery back office — order pricing and payment reconciliation.

Turns a cart of cakes and pastries into a priced order with a loyalty
discount, and keeps each order's paid amount and payment status derived
from its ledger of payments and refunds.
"""

from protean.domain import Domain

from bakery.utils.logging import configure_logging

configure_logging()

bakery = Domain(name="bakery")
