"""Order placement: command, handler and the stock-withdrawing unit of work."""

import json

import structlog
from protean import handle
from protean.fields import Float, Identifier, Text
from protean.utils.globals import current_domain

from storefront.domain import storefront
from storefront.order.allocation import StockAllocation
from storefront.order.order import Order
from storefront.product.product import Product

logger = structlog.get_logger(__name__)


@storefront.command(part_of="Order")
class PlaceOrder:
    user_id = Identifier()
    items = Text(required=True)  # JSON: list of item dicts
    shipping_address = Text(required=True)  # JSON: address dict
    billing_address = Text()  # JSON: address dict
    total = Float()  # Optional client-side total, checked against the lines


def _loads(value):
    return json.loads(value) if isinstance(value, str) else value


def place_order(items, shipping_address, user_id=None, total=None, billing_address=None):
    """Place an order and withdraw stock for each of its lines.

    Must run inside a unit of work (any command handler provides one): the
    order and every touched product are committed together or not at all.
    Each line must be priced at its product's current catalog price. A
    product changed concurrently fails the commit on its version check.
    """
    order = Order.place(
        items=items,
        shipping_address=shipping_address,
        billing_address=billing_address,
        user_id=user_id,
        total=total,
    )

    product_repo = current_domain.repository_for(Product)
    products = {str(line.product_id): product_repo.get_or_none(str(line.product_id)) for line in order.items}

    for product in StockAllocation(order, products)():
        product_repo.add(product)
    current_domain.repository_for(Order).add(order)

    logger.info(
        "Order placed",
        order_id=str(order.id),
        user_id=user_id,
        lines=len(order.items),
        total=order.total,
    )
    return order


@storefront.command_handler(part_of=Order)
class PlaceOrderHandler:
    @handle(PlaceOrder)
    def place_order(self, command):
        order = place_order(
            items=_loads(command.items),
            shipping_address=_loads(command.shipping_address),
            billing_address=_loads(command.billing_address),
            user_id=command.user_id,
            total=command.total,
        )
        return str(order.id)
