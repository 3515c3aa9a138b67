"""Domain events for the Product aggregate."""

from protean.fields import Boolean, DateTime, Float, Identifier, Integer, String

from storefront.domain import storefront


@storefront.event(part_of="Product")
class ProductAdded:
    """A new product was added to the catalog."""

    __version__ = 1

    product_id: Identifier(required=True)
    name: String(required=True)
    category: String(required=True)
    price: Float(required=True)
    quantity: Integer(required=True)
    created_at: DateTime(required=True)


@storefront.event(part_of="Product")
class ProductDetailsUpdated:
    """Catalog fields of a product were edited by an admin."""

    __version__ = 1

    product_id: Identifier(required=True)
    name: String(required=True)
    category: String(required=True)
    price: Float(required=True)
    featured: Boolean()
    changed_fields: String()  # comma-separated field names


@storefront.event(part_of="Product")
class StockLevelChanged:
    """Quantity on hand moved, through an admin edit or an order."""

    __version__ = 1

    product_id: Identifier(required=True)
    previous_quantity: Integer(required=True)
    new_quantity: Integer(required=True)
    reason: String(required=True)  # adjustment | order_placed | order_cancelled
    order_id: Identifier()
    changed_at: DateTime(required=True)
