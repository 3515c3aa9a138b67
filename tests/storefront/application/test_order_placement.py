"""Application tests for order placement and checkout: stock is withdrawn with the order or not at all."""

import json

import pytest
from protean import current_domain
from protean.exceptions import ExpectedVersionError, ObjectNotFoundError, ValidationError

from storefront.cart.cart import Cart
from storefront.cart.checkout import CheckoutCart
from storefront.cart.items import AddCartItem
from storefront.order.order import Order, OrderStatus
from storefront.order.placement import PlaceOrder
from storefront.product.product import Product


def _line(product, quantity):
    return {"product_id": str(product.id), "name": product.name, "price": product.price, "quantity": quantity}


def _place(lines, shipping_address, user_id="user-1", total=None):
    return current_domain.process(
        PlaceOrder(
            user_id=user_id,
            items=json.dumps(lines),
            shipping_address=json.dumps(shipping_address),
            total=total,
        ),
        asynchronous=False,
    )


def _quantity(product):
    return current_domain.repository_for(Product).get(product.id).quantity


class TestPlaceOrder:
    def test_order_persists_as_pending(self, add_product, shipping_address):
        malt = add_product(name="Single Malt", price=1000.0, quantity=5)
        gin = add_product(name="Dry Gin", price=500.0, quantity=5)

        order_id = _place([_line(malt, 2), _line(gin, 1)], shipping_address, total=2500)

        order = current_domain.repository_for(Order).get(order_id)
        assert order.status == OrderStatus.PENDING.value
        assert order.total == 2500.0
        assert order.user_id == "user-1"
        assert order.shipping_address.city == "Nairobi"
        assert len(order.items) == 2

    def test_stock_is_withdrawn(self, add_product, shipping_address):
        malt = add_product(quantity=5)

        _place([_line(malt, 2)], shipping_address)

        assert _quantity(malt) == 3

    def test_last_units_mark_product_out_of_stock(self, add_product, shipping_address):
        malt = add_product(quantity=2)

        _place([_line(malt, 2)], shipping_address)

        product = current_domain.repository_for(Product).get(malt.id)
        assert product.quantity == 0
        assert product.in_stock is False

    def test_insufficient_stock_rejects_whole_order(self, add_product, shipping_address):
        malt = add_product(name="Single Malt", quantity=5)
        gin = add_product(name="Dry Gin", quantity=1)

        with pytest.raises(ValidationError) as exc:
            _place([_line(malt, 2), _line(gin, 2)], shipping_address)

        assert "items" in exc.value.messages
        assert _quantity(malt) == 5
        assert _quantity(gin) == 1
        assert current_domain.repository_for(Order).query.count() == 0

    def test_removed_product_rejected(self, add_product, shipping_address):
        malt = add_product()
        line = _line(malt, 1)
        line["product_id"] = "discontinued"

        with pytest.raises(ValidationError):
            _place([line], shipping_address)

    def test_mismatched_total_rejected(self, add_product, shipping_address):
        malt = add_product(price=1000.0)

        with pytest.raises(ValidationError) as exc:
            _place([_line(malt, 2)], shipping_address, total=1500)

        assert "total" in exc.value.messages
        assert _quantity(malt) == 5

    def test_tampered_price_rejected(self, add_product, shipping_address):
        malt = add_product(price=1000.0)

        with pytest.raises(ValidationError) as exc:
            _place([dict(_line(malt, 2), price=1.0)], shipping_address)

        assert "items" in exc.value.messages
        assert _quantity(malt) == 5
        assert current_domain.repository_for(Order).query.count() == 0

    def test_repriced_product_rejects_old_price(self, add_product, shipping_address):
        from storefront.product.details import UpdateProduct

        malt = add_product(price=1000.0)
        current_domain.process(UpdateProduct(product_id=str(malt.id), price=1200.0), asynchronous=False)

        with pytest.raises(ValidationError):
            _place([_line(malt, 1)], shipping_address)

    def test_billing_address_recorded(self, add_product, shipping_address):
        malt = add_product()
        billing = dict(shipping_address, address="PO Box 4410", city="Mombasa")

        order_id = current_domain.process(
            PlaceOrder(
                user_id="user-1",
                items=json.dumps([_line(malt, 1)]),
                shipping_address=json.dumps(shipping_address),
                billing_address=json.dumps(billing),
            ),
            asynchronous=False,
        )

        order = current_domain.repository_for(Order).get(order_id)
        assert order.billing_address.city == "Mombasa"
        assert order.shipping_address.city == "Nairobi"


class TestConcurrentPlacement:
    def test_stale_product_copy_cannot_be_saved(self, add_product, shipping_address):
        repo = current_domain.repository_for(Product)
        stale = repo.get(add_product(quantity=5).id)

        _place([_line(stale, 2)], shipping_address)

        stale.withdraw_stock(2)
        with pytest.raises(ExpectedVersionError):
            repo.add(stale)

        assert _quantity(stale) == 3

    def test_placement_holding_stale_version_conflicts(self, add_product, shipping_address, monkeypatch):
        repo = current_domain.repository_for(Product)
        stale = repo.get(add_product(quantity=5).id)
        _place([_line(stale, 2)], shipping_address)

        monkeypatch.setattr(type(repo), "get_or_none", lambda self, identifier: stale)
        with pytest.raises(ExpectedVersionError):
            _place([_line(stale, 1)], shipping_address)

        monkeypatch.undo()
        assert _quantity(stale) == 3
        assert current_domain.repository_for(Order).query.count() == 1


class TestCheckout:
    def _cart_with(self, new_cart, *lines):
        cart_id = new_cart()
        for product, quantity in lines:
            current_domain.process(
                AddCartItem(cart_id=cart_id, product_id=str(product.id), quantity=quantity),
                asynchronous=False,
            )
        return cart_id

    def _checkout(self, cart_id, shipping_address, user_id="user-1"):
        return current_domain.process(
            CheckoutCart(cart_id=cart_id, user_id=user_id, shipping_address=json.dumps(shipping_address)),
            asynchronous=False,
        )

    def test_checkout_places_order_and_clears_cart(self, new_cart, add_product, shipping_address):
        malt = add_product(price=1000.0, quantity=5)
        cart_id = self._cart_with(new_cart, (malt, 2))

        order_id = self._checkout(cart_id, shipping_address)

        order = current_domain.repository_for(Order).get(order_id)
        assert order.total == 2000.0
        assert order.items[0].name == "Single Malt"
        assert current_domain.repository_for(Cart).get(cart_id).items == []
        assert _quantity(malt) == 3

    def test_failed_checkout_leaves_cart_untouched(self, new_cart, add_product, shipping_address):
        from storefront.product.stock import SetStock

        malt = add_product(quantity=5)
        cart_id = self._cart_with(new_cart, (malt, 4))
        # Stock sold elsewhere after the line went into the cart
        current_domain.process(SetStock(product_id=str(malt.id), quantity=2), asynchronous=False)

        with pytest.raises(ValidationError):
            self._checkout(cart_id, shipping_address)

        cart = current_domain.repository_for(Cart).get(cart_id)
        assert cart.items[0].quantity == 4
        assert _quantity(malt) == 2
        assert current_domain.repository_for(Order).query.count() == 0

    def test_empty_cart_cannot_check_out(self, new_cart, shipping_address):
        cart_id = new_cart()

        with pytest.raises(ValidationError) as exc:
            self._checkout(cart_id, shipping_address)

        assert exc.value.messages["items"] == ["Cart is empty"]

    def test_unknown_cart(self, shipping_address):
        with pytest.raises(ObjectNotFoundError):
            self._checkout("no-such-cart", shipping_address)
