"""Payment aggregate — one entry in an order's payment ledger.

An entry is either a ``payment`` (money in) or a ``refund`` (money out).
The ledger is the source of truth for what an order has been paid; the
order's ``paid_amount`` is only ever re-derived from it.

Entry rules, checked whenever an entry is created or amended:
    bank_transfer                      → reference required
    payment via bank_transfer / mbway  → proof image required
"""

import json
import re
from datetime import UTC, datetime
from enum import Enum

from protean import atomic_change, invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, Float, Identifier, String, Text

from bakery.domain import bakery
from bakery.payment.events import PaymentAmended, PaymentRecorded
from bakery.shared.money import round2, signed_amount

MAX_PROOF_IMAGE_LENGTH = 4_000_000
PROOF_IMAGE_PATTERN = re.compile(r"^data:image/(png|jpeg|jpg|webp);base64,", re.IGNORECASE)

AMENDABLE_FIELDS = ("type", "method", "amount", "reference", "note", "proof_image", "received_at")


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class PaymentType(Enum):
    PAYMENT = "payment"
    REFUND = "refund"


class PaymentMethod(Enum):
    CASH = "cash"
    BANK_TRANSFER = "bank_transfer"
    MBWAY = "mbway"


PROOF_REQUIRED_METHODS = (PaymentMethod.BANK_TRANSFER.value, PaymentMethod.MBWAY.value)


# ---------------------------------------------------------------------------
# Aggregate Root
# ---------------------------------------------------------------------------
@bakery.aggregate
class Payment:
    order_id = Identifier(required=True)
    type = String(choices=PaymentType, default=PaymentType.PAYMENT.value)
    method = String(choices=PaymentMethod, required=True)
    amount = Float(required=True)
    reference = String(max_length=150)
    note = String(max_length=1000)
    proof_image = Text()
    received_by = String(required=True, max_length=100)
    received_by_name = String(max_length=201)
    received_at = DateTime()
    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def amount_is_positive(self):
        if self.amount is None or self.amount <= 0:
            raise ValidationError({"amount": ["Amount must be greater than 0"]})

    @invariant.post
    def bank_transfer_has_reference(self):
        if self.method == PaymentMethod.BANK_TRANSFER.value and not (self.reference or "").strip():
            raise ValidationError({"reference": ["Reference is required for bank transfer"]})

    @invariant.post
    def proof_is_attached_when_required(self):
        if self.type == PaymentType.PAYMENT.value and self.method in PROOF_REQUIRED_METHODS and not self.proof_image:
            raise ValidationError({"proof_image": ["Proof image is required for bank transfer or MBWay payment"]})

    @invariant.post
    def proof_is_an_image_data_url(self):
        if not self.proof_image:
            return
        if len(self.proof_image) > MAX_PROOF_IMAGE_LENGTH:
            raise ValidationError({"proof_image": ["Proof image is too large"]})
        if not PROOF_IMAGE_PATTERN.match(self.proof_image):
            raise ValidationError({"proof_image": ["Invalid proof image format"]})

    @property
    def signed_amount(self) -> float:
        """Contribution of this entry to the order's net paid amount."""
        return signed_amount(self.type, self.amount)

    @classmethod
    def record(
        cls,
        order_id,
        method,
        amount,
        received_by,
        type=PaymentType.PAYMENT.value,
        reference=None,
        note=None,
        proof_image=None,
        received_by_name=None,
        received_at=None,
    ):
        now = datetime.now(UTC)
        payment = cls(
            order_id=str(order_id),
            type=type or PaymentType.PAYMENT.value,
            method=method,
            amount=round2(amount),
            reference=(reference or "").strip() or None,
            note=note,
            proof_image=proof_image,
            received_by=received_by,
            received_by_name=received_by_name,
            received_at=received_at or now,
            created_at=now,
            updated_at=now,
        )
        payment.raise_(
            PaymentRecorded(
                payment_id=str(payment.id),
                order_id=str(order_id),
                transaction_type=payment.type,
                method=payment.method,
                amount=payment.amount,
                reference=payment.reference,
                received_by=received_by,
                received_at=payment.received_at,
            )
        )
        return payment

    def amend(self, **changes) -> list[str]:
        """Apply the given field changes and re-check every entry rule.

        Only keys in ``AMENDABLE_FIELDS`` with a non-``None`` value count as
        changes. Returns the names of the fields that were applied.
        """
        applied = {key: value for key, value in changes.items() if key in AMENDABLE_FIELDS and value is not None}
        if not applied:
            raise ValidationError({"_entity": ["At least one field is required for update"]})

        if "amount" in applied:
            applied["amount"] = round2(applied["amount"])
        if "reference" in applied:
            applied["reference"] = applied["reference"].strip()

        previous_signed = self.signed_amount
        now = datetime.now(UTC)
        with atomic_change(self):
            for key, value in applied.items():
                setattr(self, key, value)
            self.updated_at = now

        self.raise_(
            PaymentAmended(
                payment_id=str(self.id),
                order_id=str(self.order_id),
                changed_fields=json.dumps(sorted(applied)),
                previous_signed_amount=previous_signed,
                signed_amount=self.signed_amount,
                amended_at=now,
            )
        )
        return sorted(applied)
