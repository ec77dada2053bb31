"""Shared BDD fixtures and step definitions for the bakery domain."""

import pytest
from bakery.order.order import Order
from protean import current_domain
from protean.exceptions import ValidationError
from pytest_bdd import given, parsers, then


@pytest.fixture()
def error():
    """Container for captured validation errors."""
    return {"exc": None}


def _order(order_id):
    return current_domain.repository_for(Order).get(order_id)


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given("an order totalling 30.00", target_fixture="order_id")
def order_totalling_thirty(place_order):
    return place_order()


@given(parsers.cfparse("a cash payment of {amount:f} has been recorded"))
def cash_payment_recorded(order_id, record_payment, amount):
    record_payment(order_id, amount)


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse('the order payment status is "{status}"'))
def order_payment_status_is(order_id, status):
    assert _order(order_id).payment_status == status


@then(parsers.cfparse("the order paid amount is {amount:f}"))
def order_paid_amount_is(order_id, amount):
    assert _order(order_id).paid_amount == pytest.approx(amount)


@then("the ledger action fails with a validation error")
def ledger_action_fails(error):
    assert error["exc"] is not None, "Expected a validation error but none was raised"
    assert isinstance(error["exc"], ValidationError)


@then(parsers.cfparse('the ledger action fails with "{message}"'))
def ledger_action_fails_with(error, message):
    assert isinstance(error["exc"], ValidationError)
    messages = [text for texts in error["exc"].messages.values() for text in texts]
    assert message in messages, f"{message!r} not in {messages}"
