"""Checkout: turns a cart into a placed order and clears the cart."""

import json

import structlog
from protean import handle
from protean.fields import Identifier, Text
from protean.utils.globals import current_domain

from storefront.cart.cart import Cart
from storefront.domain import storefront
from storefront.order.placement import place_order

logger = structlog.get_logger(__name__)


@storefront.command(part_of="Cart")
class CheckoutCart:
    cart_id = Identifier(required=True)
    user_id = Identifier()
    shipping_address = Text(required=True)  # JSON: address dict
    billing_address = Text()  # JSON: address dict


@storefront.command_handler(part_of=Cart)
class CheckoutHandler:
    @handle(CheckoutCart)
    def checkout(self, command):
        repo = current_domain.repository_for(Cart)
        cart = repo.get(command.cart_id)

        order = place_order(
            items=cart.to_order_lines(),
            shipping_address=json.loads(command.shipping_address),
            billing_address=json.loads(command.billing_address) if command.billing_address else None,
            user_id=command.user_id,
        )

        # Only reached when placement succeeded; a failure leaves the cart as it was
        cart.clear()
        repo.add(cart)

        logger.info("Cart checked out", cart_id=command.cart_id, order_id=str(order.id))
        return str(order.id)
