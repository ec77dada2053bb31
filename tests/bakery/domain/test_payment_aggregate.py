"""Tests for ledger entry rules on the Payment aggregate."""

import pytest
from bakery.payment.events import PaymentAmended, PaymentRecorded
from bakery.payment.payment import MAX_PROOF_IMAGE_LENGTH, Payment
from protean.exceptions import ValidationError

PROOF = "data:image/png;base64,iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAYAAAAfFcSJAAAADUlEQVR42mNk"


def _make_payment(**overrides):
    fields = {
        "order_id": "ord-001",
        "method": "cash",
        "amount": 10.0,
        "received_by": "staff-001",
    }
    fields.update(overrides)
    return Payment.record(**fields)


class TestRecordPayment:
    def test_cash_payment(self):
        payment = _make_payment()
        assert payment.type == "payment"
        assert payment.amount == 10.0
        assert payment.received_at is not None
        assert payment.signed_amount == 10.0

    def test_refund_counts_negative(self):
        payment = _make_payment(type="refund")
        assert payment.signed_amount == -10.0

    def test_amount_is_rounded_to_cents(self):
        assert _make_payment(amount=10.006).amount == 10.01

    def test_raises_payment_recorded(self):
        payment = _make_payment()
        events = [e for e in payment._events if isinstance(e, PaymentRecorded)]
        assert len(events) == 1
        assert events[0].transaction_type == "payment"
        assert events[0].order_id == "ord-001"

    @pytest.mark.parametrize("amount", [0, -5.0, 0.001])
    def test_amount_must_be_positive(self, amount):
        with pytest.raises(ValidationError) as exc:
            _make_payment(amount=amount)
        assert "amount" in exc.value.messages

    def test_unknown_method(self):
        with pytest.raises(ValidationError):
            _make_payment(method="cheque")


class TestEntryRules:
    def test_bank_transfer_requires_reference(self):
        with pytest.raises(ValidationError) as exc:
            _make_payment(method="bank_transfer", proof_image=PROOF)
        assert "reference" in exc.value.messages

    def test_blank_reference_counts_as_missing(self):
        with pytest.raises(ValidationError):
            _make_payment(method="bank_transfer", reference="   ", proof_image=PROOF)

    def test_bank_transfer_payment_requires_proof(self):
        with pytest.raises(ValidationError) as exc:
            _make_payment(method="bank_transfer", reference="TRF-001")
        assert "proof_image" in exc.value.messages

    def test_mbway_payment_requires_proof(self):
        with pytest.raises(ValidationError) as exc:
            _make_payment(method="mbway")
        assert "proof_image" in exc.value.messages

    def test_mbway_refund_does_not_require_proof(self):
        payment = _make_payment(method="mbway", type="refund")
        assert payment.proof_image is None

    def test_bank_transfer_with_reference_and_proof(self):
        payment = _make_payment(method="bank_transfer", reference=" TRF-001 ", proof_image=PROOF)
        assert payment.reference == "TRF-001"

    def test_proof_must_be_an_image_data_url(self):
        with pytest.raises(ValidationError) as exc:
            _make_payment(method="mbway", proof_image="data:application/pdf;base64,JVBERi0x")
        assert exc.value.messages["proof_image"] == ["Invalid proof image format"]

    def test_proof_format_is_case_insensitive(self):
        payment = _make_payment(method="mbway", proof_image="data:image/JPEG;base64,/9j/4AAQ")
        assert payment.proof_image.startswith("data:image/JPEG")

    def test_proof_size_limit(self):
        oversized = "data:image/png;base64," + "A" * MAX_PROOF_IMAGE_LENGTH
        with pytest.raises(ValidationError) as exc:
            _make_payment(method="mbway", proof_image=oversized)
        assert exc.value.messages["proof_image"] == ["Proof image is too large"]

    def test_reference_length_limit(self):
        with pytest.raises(ValidationError):
            _make_payment(reference="R" * 151)


class TestAmendPayment:
    def test_amend_amount(self):
        payment = _make_payment()
        payment._events.clear()

        changed = payment.amend(amount=15.0)

        assert changed == ["amount"]
        assert payment.amount == 15.0
        event = next(e for e in payment._events if isinstance(e, PaymentAmended))
        assert event.previous_signed_amount == 10.0
        assert event.signed_amount == 15.0

    def test_switch_to_refund_flips_sign(self):
        payment = _make_payment()
        payment.amend(type="refund")
        assert payment.signed_amount == -10.0

    def test_amended_entry_is_revalidated(self):
        payment = _make_payment()
        with pytest.raises(ValidationError) as exc:
            payment.amend(method="bank_transfer")
        assert "reference" in exc.value.messages

    def test_none_values_are_not_changes(self):
        payment = _make_payment()
        with pytest.raises(ValidationError):
            payment.amend(amount=None, note=None)

    def test_at_least_one_field(self):
        payment = _make_payment()
        with pytest.raises(ValidationError):
            payment.amend()
