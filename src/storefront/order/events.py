"""Domain events for the Order aggregate.

Line items travel as JSON text (a list of dicts with product_id, name,
price and quantity) so read models and the restock handler do not need to
load the order.
"""

from protean.fields import DateTime, Float, Identifier, String, Text

from storefront.domain import storefront


@storefront.event(part_of="Order")
class OrderPlaced:
    """A shopper checked out; stock for every line has been withdrawn."""

    __version__ = 1

    order_id = Identifier(required=True)
    user_id = Identifier()
    customer_name = String(required=True)
    items = Text(required=True)  # JSON: list of item dicts
    total = Float(required=True)
    placed_at = DateTime(required=True)


@storefront.event(part_of="Order")
class OrderStatusChanged:
    """An admin moved the order along the status workflow."""

    __version__ = 1

    order_id = Identifier(required=True)
    previous_status = String(required=True)
    new_status = String(required=True)
    total = Float(required=True)
    placed_at = DateTime(required=True)
    changed_at = DateTime(required=True)


@storefront.event(part_of="Order")
class OrderCancelled:
    """The order was cancelled before delivery; its lines go back to stock."""

    __version__ = 1

    order_id = Identifier(required=True)
    previous_status = String(required=True)
    items = Text(required=True)  # JSON: list of item dicts
    total = Float(required=True)
    placed_at = DateTime(required=True)
    cancelled_at = DateTime(required=True)


@storefront.event(part_of="Order")
class OrderOwnerAssigned:
    """A legacy order without an owner was attributed to a user."""

    __version__ = 1

    order_id = Identifier(required=True)
    user_id = Identifier(required=True)
