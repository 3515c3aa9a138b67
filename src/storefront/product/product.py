"""Product aggregate root and its catalog repository.

``in_stock`` is derived from ``quantity``: every change keeps
``in_stock == (quantity > 0)`` and an explicit ``in_stock`` that disagrees
with the quantity is rejected.
"""

from datetime import UTC, datetime

from protean import atomic_change, invariant
from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Float, Integer, String, Text
from protean.utils.query import Q

from storefront.domain import storefront
from storefront.product.events import (
    ProductAdded,
    ProductDetailsUpdated,
    StockLevelChanged,
)
from storefront.shared.pagination import check_page

# Fields an admin may merge into an existing product
EDITABLE_FIELDS = ("name", "description", "price", "category", "image_url", "featured")


def _check_stock_flag(quantity, in_stock):
    if in_stock is not None and bool(in_stock) != (quantity > 0):
        state = "in stock" if in_stock else "out of stock"
        raise ValidationError({"in_stock": [f"Cannot mark product {state} with quantity {quantity}"]})


@storefront.aggregate
class Product:
    name: String(required=True, max_length=255)
    description: Text(required=True)
    price: Float(required=True, min_value=0.0)
    category: String(required=True, max_length=100)
    image_url: String(required=True, max_length=1024)
    quantity: Integer(min_value=0, default=0)
    in_stock: Boolean(default=False)
    featured: Boolean(default=False)
    created_at: DateTime()
    updated_at: DateTime()

    @invariant.post
    def in_stock_reflects_quantity(self):
        if bool(self.in_stock) != ((self.quantity or 0) > 0):
            raise ValidationError({"in_stock": ["Stock flag must match the quantity on hand"]})

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def create(
        cls,
        name,
        description,
        price,
        category,
        image_url,
        quantity=0,
        in_stock=None,
        featured=False,
    ):
        quantity = quantity or 0
        _check_stock_flag(quantity, in_stock)

        now = datetime.now(UTC)
        product = cls(
            name=name,
            description=description,
            price=price,
            category=category,
            image_url=image_url,
            quantity=quantity,
            in_stock=quantity > 0,
            featured=bool(featured),
            created_at=now,
            updated_at=now,
        )
        product.raise_(
            ProductAdded(
                product_id=product.id,
                name=product.name,
                category=product.category,
                price=product.price,
                quantity=product.quantity,
                created_at=now,
            )
        )
        return product

    # -------------------------------------------------------------------
    # Catalog details
    # -------------------------------------------------------------------
    def update_details(self, **changes):
        """Merge the supplied catalog fields into this product.

        Only keys in ``EDITABLE_FIELDS`` are accepted; ``None`` values are
        treated as "not supplied". Returns the names of the fields that
        actually changed.
        """
        unknown = sorted(set(changes) - set(EDITABLE_FIELDS))
        if unknown:
            raise ValidationError({field: ["Field cannot be updated"] for field in unknown})

        changed = []
        with atomic_change(self):
            for field, value in changes.items():
                if value is None or getattr(self, field) == value:
                    continue
                setattr(self, field, value)
                changed.append(field)

        if not changed:
            return changed

        self.updated_at = datetime.now(UTC)
        self.raise_(
            ProductDetailsUpdated(
                product_id=self.id,
                name=self.name,
                category=self.category,
                price=self.price,
                featured=self.featured,
                changed_fields=",".join(changed),
            )
        )
        return changed

    # -------------------------------------------------------------------
    # Stock
    # -------------------------------------------------------------------
    def can_supply(self, quantity):
        return bool(self.in_stock) and quantity <= (self.quantity or 0)

    def set_stock(self, quantity, in_stock=None, reason="adjustment", order_id=None):
        """Overwrite the quantity on hand; ``in_stock`` follows it."""
        if quantity is None or quantity < 0:
            raise ValidationError({"quantity": ["Quantity cannot be negative"]})
        _check_stock_flag(quantity, in_stock)

        previous = self.quantity or 0
        if previous == quantity:
            return

        with atomic_change(self):
            self.quantity = quantity
            self.in_stock = quantity > 0
            self.updated_at = datetime.now(UTC)

        self.raise_(
            StockLevelChanged(
                product_id=self.id,
                previous_quantity=previous,
                new_quantity=quantity,
                reason=reason,
                order_id=order_id,
                changed_at=self.updated_at,
            )
        )

    def withdraw_stock(self, quantity, order_id=None):
        """Take ``quantity`` units out of stock for an order."""
        if quantity < 1:
            raise ValidationError({"quantity": ["Quantity must be at least 1"]})
        if not self.can_supply(quantity):
            raise ValidationError(
                {"quantity": [f"Only {self.quantity or 0} of {self.name} in stock, {quantity} requested"]}
            )
        self.set_stock(self.quantity - quantity, reason="order_placed", order_id=order_id)

    def restock(self, quantity, order_id=None):
        """Return ``quantity`` units to stock, e.g. from a cancelled order."""
        if quantity < 1:
            raise ValidationError({"quantity": ["Quantity must be at least 1"]})
        self.set_stock((self.quantity or 0) + quantity, reason="order_cancelled", order_id=order_id)


@storefront.repository(part_of=Product)
class ProductRepository:
    def list_page(self, category=None, featured=None, page=1, page_size=10):
        """Newest-first page of the catalog, optionally narrowed by category or curation flag."""
        check_page(page, page_size)

        query = self.query
        if category:
            query = query.filter(category__iexact=category)
        if featured is not None:
            query = query.filter(featured=featured)

        return query.order_by("-created_at").offset((page - 1) * page_size).limit(page_size).all()

    def search(self, term):
        """Products whose name, description or category contains ``term``, ignoring case."""
        term = (term or "").strip()
        if not term:
            raise ValidationError({"q": ["Search query is required"]})

        criteria = Q(name__icontains=term) | Q(description__icontains=term) | Q(category__icontains=term)
        return self.query.filter(criteria).order_by("name").limit(None).all().items

    def count(self):
        return self.query.count()

