"""Tests for the Product aggregate: creation, detail edits and stock levels."""

import pytest
from protean.exceptions import ValidationError

from storefront.product.events import ProductAdded, ProductDetailsUpdated, StockLevelChanged
from storefront.product.product import Product


def _make_product(**overrides):
    fields = {
        "name": "Single Malt",
        "description": "12 year old Speyside single malt whisky",
        "price": 1000.0,
        "category": "Whiskey",
        "image_url": "https://cdn.example.com/products/single-malt.jpg",
        "quantity": 5,
    }
    fields.update(overrides)
    return Product.create(**fields)


class TestProductCreation:
    def test_in_stock_follows_quantity(self):
        assert _make_product(quantity=5).in_stock is True
        assert _make_product(quantity=0).in_stock is False

    def test_quantity_defaults_to_zero(self):
        product = _make_product(quantity=None)
        assert product.quantity == 0
        assert product.in_stock is False

    def test_raises_product_added(self):
        product = _make_product()
        assert len(product._events) == 1
        event = product._events[0]
        assert isinstance(event, ProductAdded)
        assert event.name == "Single Malt"
        assert event.quantity == 5

    def test_timestamps_are_set(self):
        product = _make_product()
        assert product.created_at is not None
        assert product.updated_at == product.created_at

    def test_rejects_in_stock_without_quantity(self):
        with pytest.raises(ValidationError) as exc:
            _make_product(quantity=0, in_stock=True)
        assert "in_stock" in exc.value.messages

    def test_rejects_out_of_stock_with_quantity(self):
        with pytest.raises(ValidationError):
            _make_product(quantity=3, in_stock=False)

    def test_rejects_negative_price(self):
        with pytest.raises(ValidationError) as exc:
            _make_product(price=-1.0)
        assert "price" in exc.value.messages

    def test_missing_name_rejected(self):
        with pytest.raises(ValidationError) as exc:
            _make_product(name=None)
        assert "name" in exc.value.messages


class TestStockFlagInvariant:
    def test_flag_cannot_be_flipped_directly(self):
        product = _make_product(quantity=0)
        with pytest.raises(ValidationError) as exc:
            product.in_stock = True
        assert "in_stock" in exc.value.messages


class TestUpdateDetails:
    def test_changes_supplied_fields(self):
        product = _make_product()
        product._events.clear()

        changed = product.update_details(price=1200.0, featured=True)

        assert sorted(changed) == ["featured", "price"]
        assert product.price == 1200.0
        assert product.featured is True

    def test_none_means_not_supplied(self):
        product = _make_product()
        product.update_details(name=None, price=900.0)
        assert product.name == "Single Malt"
        assert product.price == 900.0

    def test_raises_details_updated(self):
        product = _make_product()
        product._events.clear()

        product.update_details(category="Spirits")

        assert len(product._events) == 1
        event = product._events[0]
        assert isinstance(event, ProductDetailsUpdated)
        assert event.changed_fields == "category"

    def test_no_change_raises_nothing(self):
        product = _make_product()
        product._events.clear()

        assert product.update_details(name="Single Malt") == []
        assert product._events == []

    def test_unknown_field_rejected(self):
        product = _make_product()
        with pytest.raises(ValidationError) as exc:
            product.update_details(quantity=10)
        assert "quantity" in exc.value.messages


class TestSetStock:
    def test_zero_marks_out_of_stock(self):
        product = _make_product(quantity=5)
        product.set_stock(0)
        assert product.quantity == 0
        assert product.in_stock is False

    def test_raises_stock_level_changed(self):
        product = _make_product(quantity=5)
        product._events.clear()

        product.set_stock(8)

        event = product._events[0]
        assert isinstance(event, StockLevelChanged)
        assert event.previous_quantity == 5
        assert event.new_quantity == 8
        assert event.reason == "adjustment"

    def test_unchanged_quantity_is_a_no_op(self):
        product = _make_product(quantity=5)
        product._events.clear()

        product.set_stock(5)

        assert product._events == []

    def test_negative_rejected(self):
        product = _make_product()
        with pytest.raises(ValidationError):
            product.set_stock(-1)

    def test_contradicting_flag_rejected(self):
        product = _make_product(quantity=5)
        with pytest.raises(ValidationError):
            product.set_stock(0, in_stock=True)
        assert product.quantity == 5


class TestWithdrawAndRestock:
    def test_withdraw_reduces_quantity(self):
        product = _make_product(quantity=5)
        product.withdraw_stock(3, order_id="ord-1")

        assert product.quantity == 2
        assert product._events[-1].reason == "order_placed"
        assert product._events[-1].order_id == "ord-1"

    def test_withdrawing_everything_marks_out_of_stock(self):
        product = _make_product(quantity=2)
        product.withdraw_stock(2)
        assert product.in_stock is False

    def test_cannot_withdraw_more_than_on_hand(self):
        product = _make_product(quantity=2)
        with pytest.raises(ValidationError) as exc:
            product.withdraw_stock(3)
        assert "quantity" in exc.value.messages
        assert product.quantity == 2

    def test_restock_brings_product_back(self):
        product = _make_product(quantity=0)
        product.restock(4, order_id="ord-1")

        assert product.quantity == 4
        assert product.in_stock is True
        assert product._events[-1].reason == "order_cancelled"

    def test_can_supply(self):
        product = _make_product(quantity=3)
        assert product.can_supply(3) is True
        assert product.can_supply(4) is False
