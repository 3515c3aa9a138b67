"""Integration tests for the cart endpoints via TestClient."""

import pytest

USER = {"X-User-Id": "user-1"}
ADDRESS = {
    "name": "Wanjiku Kamau",
    "address": "12 Moi Avenue",
    "city": "Nairobi",
    "postal_code": "00100",
    "country": "Kenya",
}


@pytest.fixture()
def malt(add_product):
    return str(add_product(name="Single Malt", price=1000.0, quantity=5).id)


@pytest.fixture()
def gin(add_product):
    return str(add_product(name="Dry Gin", price=500.0, quantity=5).id)


def _create_cart(client):
    """Helper: POST /cart and return the cart_id."""
    response = client.post("/cart")
    assert response.status_code == 201
    return response.json()["cart_id"]


def _add_item(client, cart_id, product_id, quantity=1):
    return client.post(f"/cart/{cart_id}/items", json={"product_id": product_id, "quantity": quantity})


class TestCreateCartEndpoint:
    def test_create_cart(self, client):
        cart_id = _create_cart(client)

        response = client.get(f"/cart/{cart_id}")
        assert response.status_code == 200
        assert response.json() == {"cart_id": cart_id, "items": [], "total": 0, "item_count": 0}

    def test_create_cart_with_session_id(self, client):
        response = client.post("/cart", json={"cart_id": "session-001"})
        assert response.json()["cart_id"] == "session-001"

    def test_unknown_cart(self, client):
        assert client.get("/cart/missing").status_code == 404


class TestCartItemEndpoints:
    def test_add_items_and_totals(self, client, malt, gin):
        cart_id = _create_cart(client)
        _add_item(client, cart_id, malt, 2)

        response = _add_item(client, cart_id, gin, 1)

        assert response.status_code == 200
        data = response.json()
        assert len(data["items"]) == 2
        assert data["total"] == 2500.0
        assert data["item_count"] == 3

    def test_over_stock_is_rejected(self, client, malt):
        cart_id = _create_cart(client)
        _add_item(client, cart_id, malt, 3)

        response = _add_item(client, cart_id, malt, 4)

        assert response.status_code == 400
        assert "quantity" in response.json()["error"]
        assert client.get(f"/cart/{cart_id}").json()["items"][0]["quantity"] == 3

    def test_zero_quantity_rejected(self, client, malt):
        cart_id = _create_cart(client)
        assert _add_item(client, cart_id, malt, 0).status_code == 400

    def test_update_quantity(self, client, malt):
        cart_id = _create_cart(client)
        _add_item(client, cart_id, malt)

        response = client.patch(f"/cart/{cart_id}/items/{malt}", json={"quantity": 4})

        assert response.status_code == 200
        assert response.json()["items"][0]["quantity"] == 4

    def test_update_to_zero_removes(self, client, malt):
        cart_id = _create_cart(client)
        _add_item(client, cart_id, malt)

        response = client.patch(f"/cart/{cart_id}/items/{malt}", json={"quantity": 0})

        assert response.json()["items"] == []

    def test_remove_item(self, client, malt, gin):
        cart_id = _create_cart(client)
        _add_item(client, cart_id, malt)
        _add_item(client, cart_id, gin)

        response = client.delete(f"/cart/{cart_id}/items/{malt}")

        assert [item["name"] for item in response.json()["items"]] == ["Dry Gin"]

    def test_clear_cart(self, client, malt, gin):
        cart_id = _create_cart(client)
        _add_item(client, cart_id, malt)
        _add_item(client, cart_id, gin)

        response = client.delete(f"/cart/{cart_id}/items")

        assert response.status_code == 200
        assert response.json()["items"] == []

    def test_discard_cart(self, client, malt):
        cart_id = _create_cart(client)
        _add_item(client, cart_id, malt)

        response = client.delete(f"/cart/{cart_id}")

        assert response.json() == {"status": "ok"}
        assert client.get(f"/cart/{cart_id}").status_code == 404


class TestCheckoutEndpoint:
    def test_checkout(self, client, malt):
        cart_id = _create_cart(client)
        _add_item(client, cart_id, malt, 2)

        response = client.post(f"/cart/{cart_id}/checkout", json={"shipping_address": ADDRESS}, headers=USER)

        assert response.status_code == 201
        order_id = response.json()["order_id"]
        assert client.get("/orders", params={"orderId": order_id}, headers=USER).json()["total"] == 2000.0
        assert client.get(f"/cart/{cart_id}").json()["items"] == []
        assert client.get(f"/products/{malt}").json()["quantity"] == 3

    def test_checkout_requires_identity(self, client, malt):
        cart_id = _create_cart(client)
        _add_item(client, cart_id, malt)

        response = client.post(f"/cart/{cart_id}/checkout", json={"shipping_address": ADDRESS})

        assert response.status_code == 401

    def test_empty_cart_rejected(self, client):
        cart_id = _create_cart(client)

        response = client.post(f"/cart/{cart_id}/checkout", json={"shipping_address": ADDRESS}, headers=USER)

        assert response.status_code == 400
        assert response.json()["error"]["items"] == ["Cart is empty"]

    def test_incomplete_address_rejected(self, client, malt):
        cart_id = _create_cart(client)
        _add_item(client, cart_id, malt)

        response = client.post(
            f"/cart/{cart_id}/checkout",
            json={"shipping_address": {"name": "Wanjiku Kamau"}},
            headers=USER,
        )

        assert response.status_code == 400
