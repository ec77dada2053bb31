"""Errors raised by the bakery domain that Protean does not already model.

Missing records surface as ``protean.exceptions.ObjectNotFoundError`` and
business-rule violations as ``protean.exceptions.ValidationError``.
"""


class ConflictError(Exception):
    """A concurrent mutation of the same order's ledger is already in flight.

    The caller is expected to retry; the server never retries on its behalf.
    """

    def __init__(self, message: str, order_id: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.order_id = order_id
