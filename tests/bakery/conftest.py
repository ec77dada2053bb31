import json
from types import SimpleNamespace

import pytest
from protean.integrations.pytest import DomainFixture


@pytest.fixture(scope="session")
def bakery_bed():
    from bakery.domain import bakery

    bed = DomainFixture(bakery)
    bed.setup()
    yield bed
    bed.teardown()


@pytest.fixture(autouse=True)
def _ctx(bakery_bed):
    with bakery_bed.domain_context():
        yield

        from protean import current_domain

        for _, provider in current_domain.providers.items():
            provider._data_reset()
        current_domain.event_store.store._data_reset()


def seed_menu():
    """Register a small menu through the catalogue commands.

    cupcakes  per unit, 2.50, 6..48, no shapes     vanilla, chocolate
    cake      per kg, 20.00/kg, 1..5 kg, round|heart  vanilla, chocolate
    cookies   per unit, 1.20, unbounded            vanilla only

    chocolate carries a surcharge of 0.50 per unit and 4.00 per kg.
    """
    from bakery.catalogue.management import (
        RegisterCakeShape,
        RegisterFlavorType,
        RegisterProductType,
        SetFlavorAvailability,
    )
    from protean import current_domain

    def process(command):
        return current_domain.process(command, asynchronous=False)

    round_id = process(RegisterCakeShape(name="Round"))
    heart_id = process(RegisterCakeShape(name="Heart"))
    square_id = process(RegisterCakeShape(name="Square"))

    vanilla_id = process(RegisterFlavorType(name="Vanilla"))
    chocolate_id = process(
        RegisterFlavorType(
            name="Chocolate",
            has_extra_price=True,
            extra_price_per_unit=0.5,
            extra_price_per_kg=4.0,
        )
    )
    lemon_id = process(RegisterFlavorType(name="Lemon"))

    cupcakes_id = process(
        RegisterProductType(
            name="Cupcakes",
            pricing_method="perunit",
            unit_price=2.5,
            min_quantity=6,
            max_quantity=48,
        )
    )
    cake_id = process(
        RegisterProductType(
            name="Birthday Cake",
            pricing_method="perkg",
            price_per_kg=20.0,
            min_weight=1.0,
            max_weight=5.0,
            shape_ids=json.dumps([round_id, heart_id]),
        )
    )
    cookies_id = process(RegisterProductType(name="Cookies", pricing_method="perunit", unit_price=1.2))

    for product_id, flavor_id in (
        (cupcakes_id, vanilla_id),
        (cupcakes_id, chocolate_id),
        (cake_id, vanilla_id),
        (cake_id, chocolate_id),
        (cookies_id, vanilla_id),
    ):
        process(SetFlavorAvailability(product_type_id=product_id, flavor_id=flavor_id))

    # Lemon cupcakes were offered once and withdrawn
    process(SetFlavorAvailability(product_type_id=cupcakes_id, flavor_id=lemon_id, is_available=False))

    return SimpleNamespace(
        cupcakes=cupcakes_id,
        cake=cake_id,
        cookies=cookies_id,
        vanilla=vanilla_id,
        chocolate=chocolate_id,
        lemon=lemon_id,
        round=round_id,
        heart=heart_id,
        square=square_id,
    )


def seed_customer(first_name="Ana", last_name="Silva", with_address=True):
    from bakery.customer.registration import AddCustomerAddress, RegisterCustomer
    from protean import current_domain

    customer_id = current_domain.process(
        RegisterCustomer(
            first_name=first_name,
            last_name=last_name,
            email=f"{first_name.lower()}@example.com",
            phone="912345678",
        ),
        asynchronous=False,
    )
    address_id = None
    if with_address:
        address_id = current_domain.process(
            AddCustomerAddress(
                customer_id=customer_id,
                label="Home",
                line1="Rua das Flores 12",
                city="Porto",
                postal_code="4050-262",
            ),
            asynchronous=False,
        )
    return SimpleNamespace(id=customer_id, address_id=address_id)


@pytest.fixture()
def menu():
    return seed_menu()


@pytest.fixture()
def customer():
    return seed_customer()


@pytest.fixture()
def place_order(menu, customer):
    """Place an order through ``PlaceOrder``; defaults to a dozen vanilla cupcakes (30.00)."""
    from datetime import UTC, datetime, timedelta

    from bakery.order.creation import PlaceOrder
    from protean import current_domain

    def _place(items=None, **overrides):
        fields = {
            "customer_id": customer.id,
            "delivery_method": "pickup",
            "fulfillment_at": datetime.now(UTC) + timedelta(days=2),
            "items": json.dumps(items or [{"product_type_id": menu.cupcakes, "flavor_id": menu.vanilla, "quantity": 12}]),
            "created_by": "staff-001",
        }
        fields.update(overrides)
        return current_domain.process(PlaceOrder(**fields), asynchronous=False)

    return _place


@pytest.fixture()
def record_payment():
    """Record a ledger entry under the order's ledger lock; defaults to a cash payment."""
    from bakery.payment.ledger import RecordPayment
    from bakery.payment.locking import process_serialized

    def _record(order_id, amount, transaction_type="payment", method="cash", **overrides):
        fields = {
            "order_id": order_id,
            "transaction_type": transaction_type,
            "method": method,
            "amount": amount,
            "received_by": "staff-001",
            "received_by_name": "Marta",
        }
        fields.update(overrides)
        return process_serialized(order_id, RecordPayment(**fields))

    return _record
