"""Cart ledger: the shopper's session-scoped collection of lines before checkout.

The cart lives on the ``sessions`` provider, which is never durable: it is
created when a browsing session starts and cleared once checkout places the
order. Lines snapshot name, price and image when they are added.
"""

from datetime import UTC, datetime

from protean.exceptions import ValidationError
from protean.fields import DateTime, Float, HasMany, Identifier, Integer, String

from storefront.domain import storefront


@storefront.entity(part_of="Cart", provider="sessions")
class CartItem:
    product_id = Identifier(required=True)
    name = String(required=True, max_length=255)
    price = Float(required=True, min_value=0.0)
    quantity = Integer(required=True, min_value=1)
    image_url = String(max_length=1024)

    @property
    def line_total(self):
        return round(self.price * self.quantity, 2)


@storefront.aggregate(provider="sessions")
class Cart:
    items = HasMany(CartItem)
    created_at = DateTime()
    updated_at = DateTime()

    @classmethod
    def create(cls, cart_id=None):
        now = datetime.now(UTC)
        kwargs = {"id": cart_id} if cart_id else {}
        return cls(created_at=now, updated_at=now, **kwargs)

    # -------------------------------------------------------------------
    # Derived values (never stored)
    # -------------------------------------------------------------------
    @property
    def total(self):
        return round(sum(item.price * item.quantity for item in self.items), 2)

    @property
    def item_count(self):
        return sum(item.quantity for item in self.items)

    def line_for(self, product_id):
        return next((i for i in self.items if str(i.product_id) == str(product_id)), None)

    # -------------------------------------------------------------------
    # Line management
    # -------------------------------------------------------------------
    def add_item(self, product, quantity):
        """Add ``quantity`` of ``product``, merging into an existing line.

        The resulting line may never exceed the product's current stock; an
        over-quantity request is rejected and the line is left as it was.
        """
        if quantity is None or quantity < 1:
            raise ValidationError({"quantity": ["Quantity must be at least 1"]})
        if not product.in_stock:
            raise ValidationError({"product_id": [f"{product.name} is out of stock"]})

        existing = self.line_for(product.id)
        requested = quantity + (existing.quantity if existing else 0)
        if requested > product.quantity:
            raise ValidationError(
                {"quantity": [f"Only {product.quantity} of {product.name} available, {requested} requested"]}
            )

        if existing:
            # Topping up a line refreshes its snapshot of the product
            existing.quantity = requested
            existing.name = product.name
            existing.price = product.price
            existing.image_url = product.image_url
        else:
            self.add_items(
                CartItem(
                    product_id=str(product.id),
                    name=product.name,
                    price=product.price,
                    quantity=quantity,
                    image_url=product.image_url,
                )
            )
        self.updated_at = datetime.now(UTC)

    def update_quantity(self, product_id, quantity):
        """Set a line's quantity outright. Zero removes the line; stock is not re-checked."""
        if quantity is None or quantity < 0:
            raise ValidationError({"quantity": ["Quantity cannot be negative"]})

        item = self.line_for(product_id)
        if item is None:
            raise ValidationError({"product_id": ["Item not found in cart"]})

        if quantity == 0:
            self.remove_items(item)
        else:
            item.quantity = quantity
        self.updated_at = datetime.now(UTC)

    def remove_item(self, product_id):
        item = self.line_for(product_id)
        if item is None:
            raise ValidationError({"product_id": ["Item not found in cart"]})

        self.remove_items(item)
        self.updated_at = datetime.now(UTC)

    def clear(self):
        for item in list(self.items):
            self.remove_items(item)
        self.updated_at = datetime.now(UTC)

    def to_order_lines(self):
        """Line snapshots in the shape order placement expects."""
        if not self.items:
            raise ValidationError({"items": ["Cart is empty"]})
        return [
            {
                "product_id": str(item.product_id),
                "name": item.name,
                "price": item.price,
                "quantity": item.quantity,
                "image_url": item.image_url,
            }
            for item in self.items
        ]
