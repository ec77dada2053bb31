"""Per-order serialization of ledger mutations.

Every ledger mutation runs under its order's lock, held around the whole
command so the unit of work has committed before the lock is released. A
second mutation that finds the lock taken fails immediately with
``ConflictError``.

Only orders with a mutation in flight are tracked; an order leaves the
registry as soon as its lock is released. The registry is process-local.
"""

import threading
from contextlib import contextmanager

import structlog
from protean.utils.globals import current_domain

from bakery.shared.errors import ConflictError

logger = structlog.get_logger(__name__)

_registry_guard = threading.Lock()
_locked_orders: set[str] = set()


def _try_acquire(order_id: str) -> bool:
    with _registry_guard:
        if order_id in _locked_orders:
            return False
        _locked_orders.add(order_id)
        return True


def _release(order_id: str) -> None:
    with _registry_guard:
        _locked_orders.discard(order_id)


@contextmanager
def ledger_lock(order_id):
    """Hold the ledger lock for ``order_id`` or raise ``ConflictError``."""
    order_id = str(order_id)
    if not _try_acquire(order_id):
        logger.warning("ledger_lock_conflict", order_id=order_id)
        raise ConflictError(
            "Another payment change for this order is in progress, please retry",
            order_id=order_id,
        )
    try:
        yield
    finally:
        _release(order_id)


def process_serialized(order_id, command):
    """Process a ledger command while holding its order's lock."""
    with ledger_lock(order_id):
        return current_domain.process(command, asynchronous=False)


def reset_locks() -> None:
    with _registry_guard:
        _locked_orders.clear()
