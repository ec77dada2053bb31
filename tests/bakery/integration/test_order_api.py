"""Integration tests for order endpoints via TestClient."""

import pytest
from bakery.api import order_router, payment_router, register_error_handlers
from fastapi import FastAPI
from fastapi.testclient import TestClient

STAFF = {"X-Staff-Id": "staff-001", "X-Staff-Name": "Marta"}


@pytest.fixture()
def client():
    app = FastAPI()
    app.include_router(order_router)
    app.include_router(payment_router)
    register_error_handlers(app)
    return TestClient(app)


def _order_body(menu, customer, **overrides):
    body = {
        "customer_id": customer.id,
        "delivery_method": "pickup",
        "fulfillment_at": "2030-06-01T10:00:00+00:00",
        "items": [{"product_type_id": menu.cupcakes, "flavor_id": menu.chocolate, "quantity": 12}],
    }
    body.update(overrides)
    return body


def _create_order(client, menu, customer, **overrides):
    response = client.post("/orders", json=_order_body(menu, customer, **overrides), headers=STAFF)
    assert response.status_code == 201
    return response.json()


class TestCreateOrderAPI:
    def test_create_returns_201_with_priced_order(self, client, menu, customer):
        order = _create_order(client, menu, customer)

        assert order["sub_total"] == 36.0
        assert order["discount"] == 0.0
        assert order["total_amount"] == 36.0
        assert order["payment_status"] == "unpaid"
        assert order["status"] == "pending"
        assert order["created_by"] == "staff-001"
        assert order["order_number"].startswith("ORD-")
        item = order["items"][0]
        assert item["unit_base_price"] == 30.0
        assert item["flavor_extra_price"] == 6.0
        assert item["quantity"] == 12
        assert item["weight"] is None

    def test_delivery_order_carries_address(self, client, menu, customer):
        order = _create_order(
            client,
            menu,
            customer,
            delivery_method="delivery",
            delivery_address_id=customer.address_id,
        )
        assert order["delivery_address"]["address_id"] == customer.address_id
        assert order["delivery_address"]["city"] == "Porto"

    def test_missing_staff_identity_returns_401(self, client, menu, customer):
        response = client.post("/orders", json=_order_body(menu, customer))
        assert response.status_code == 401

    def test_unknown_product_returns_404(self, client, menu, customer):
        body = _order_body(menu, customer, items=[{"product_type_id": "nope", "flavor_id": menu.vanilla, "quantity": 6}])
        response = client.post("/orders", json=body, headers=STAFF)
        assert response.status_code == 404

    def test_unknown_customer_returns_404(self, client, menu, customer):
        response = client.post("/orders", json=_order_body(menu, customer, customer_id="nobody"), headers=STAFF)
        assert response.status_code == 404

    def test_business_rule_violation_returns_400(self, client, menu, customer):
        body = _order_body(menu, customer, items=[{"product_type_id": menu.cupcakes, "flavor_id": menu.lemon, "quantity": 6}])
        response = client.post("/orders", json=body, headers=STAFF)
        assert response.status_code == 400

    def test_malformed_payload_returns_422(self, client, menu, customer):
        response = client.post("/orders", json={"customer_id": customer.id}, headers=STAFF)
        assert response.status_code == 422

    def test_initial_paid_over_total_returns_400(self, client, menu, customer):
        response = client.post(
            "/orders",
            json=_order_body(menu, customer, initial_paid_amount=50.0),
            headers=STAFF,
        )
        assert response.status_code == 400


class TestReadOrdersAPI:
    def test_get_order(self, client, menu, customer):
        created = _create_order(client, menu, customer)
        response = client.get(f"/orders/{created['id']}")
        assert response.status_code == 200
        assert response.json()["order_number"] == created["order_number"]

    def test_get_unknown_order_returns_404(self, client):
        assert client.get("/orders/no-such-order").status_code == 404

    def test_list_orders(self, client, menu, customer):
        _create_order(client, menu, customer)
        _create_order(client, menu, customer)

        response = client.get("/orders", params={"customer_id": customer.id, "limit": 1})

        assert response.status_code == 200
        data = response.json()
        assert data["total"] == 2
        assert data["pages"] == 2
        assert len(data["orders"]) == 1

    def test_list_orders_rejects_oversized_page(self, client):
        assert client.get("/orders", params={"limit": 500}).status_code == 400

    def test_payment_summary(self, client, menu, customer):
        order = _create_order(client, menu, customer)
        client.post(
            "/payments",
            json={"order_id": order["id"], "method": "cash", "amount": 16.0},
            headers=STAFF,
        )

        response = client.get(f"/orders/{order['id']}/payment-summary")

        assert response.status_code == 200
        assert response.json() == {
            "order_id": order["id"],
            "total_amount": 36.0,
            "paid_amount": 16.0,
            "payment_status": "partial",
            "payments_total": 16.0,
            "refunds_total": 0.0,
        }

    def test_reconcile(self, client, menu, customer):
        order = _create_order(client, menu, customer, initial_paid_amount=10.0)
        assert order["paid_amount"] == 10.0

        response = client.post(f"/orders/{order['id']}/payments/reconcile", headers=STAFF)

        assert response.status_code == 200
        assert response.json()["paid_amount"] == 0.0
        assert client.get(f"/orders/{order['id']}").json()["payment_status"] == "unpaid"
