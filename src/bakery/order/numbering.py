"""Human-readable order numbers.

Candidates look like ``ORD-241231-7K2Q9Z``. Concurrent creators can pick the
same candidate, so each one is checked against existing orders before use and
a candidate lost to a concurrent write at ``add`` time is treated as a
collision. After a bounded number of attempts a timestamp-based number is
used instead.

Provides get_generator() / set_generator() to swap the candidate source:
- RandomOrderNumbers by default
- any OrderNumberGenerator in tests that need to force collisions
"""

import secrets
import string
import time
from abc import ABC, abstractmethod
from collections.abc import Callable
from datetime import UTC, datetime

import structlog
from protean.exceptions import ValidationError
from protean.utils.globals import current_domain

from bakery.order.order import Order

logger = structlog.get_logger(__name__)

MAX_ATTEMPTS = 5
SUFFIX_LENGTH = 6
ALPHABET = string.digits + string.ascii_uppercase


class OrderNumberGenerator(ABC):
    @abstractmethod
    def candidate(self) -> str:
        """Return a candidate order number. Need not be unique."""


class RandomOrderNumbers(OrderNumberGenerator):
    def candidate(self) -> str:
        day = datetime.now(UTC).strftime("%y%m%d")
        suffix = "".join(secrets.choice(ALPHABET) for _ in range(SUFFIX_LENGTH))
        return f"ORD-{day}-{suffix}"


_current_generator: OrderNumberGenerator | None = None


def get_generator() -> OrderNumberGenerator:
    """Return the active generator. Defaults to RandomOrderNumbers."""
    global _current_generator
    if _current_generator is None:
        _current_generator = RandomOrderNumbers()
    return _current_generator


def set_generator(generator: OrderNumberGenerator) -> None:
    global _current_generator
    _current_generator = generator


def reset_generator() -> None:
    global _current_generator
    _current_generator = None


def fallback_order_number() -> str:
    return f"ORD-{int(time.time() * 1000)}-{secrets.token_hex(3).upper()}"


def order_number_taken(order_number: str) -> bool:
    matches = current_domain.repository_for(Order)._dao.query.filter(order_number=order_number).limit(1).all()
    return bool(matches.items)


def _lost_number_race(exc: ValidationError) -> bool:
    return "order_number" in (exc.messages or {})


def add_with_unique_number(build: Callable[[str], Order]) -> Order:
    """Build an order under a free number and add it to the repository.

    A candidate that passes the existence check can still be claimed by a
    concurrent creator before this order is written; the uniqueness failure
    on ``add`` then counts as a collision and the next candidate is tried.
    """
    repository = current_domain.repository_for(Order)
    generator = get_generator()
    for attempt in range(1, MAX_ATTEMPTS + 1):
        candidate = generator.candidate()
        if order_number_taken(candidate):
            logger.debug("order_number_collision", candidate=candidate, attempt=attempt)
            continue

        order = build(candidate)
        try:
            repository.add(order)
        except ValidationError as exc:
            if not _lost_number_race(exc):
                raise
            logger.debug("order_number_claimed_concurrently", candidate=candidate, attempt=attempt)
            continue
        return order

    fallback = fallback_order_number()
    logger.warning("order_number_fallback", attempts=MAX_ATTEMPTS, order_number=fallback)
    order = build(fallback)
    repository.add(order)
    return order
