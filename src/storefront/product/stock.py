"""Direct stock overrides from the back-office."""

import structlog
from protean import handle
from protean.fields import Boolean, Identifier, Integer
from protean.utils.globals import current_domain

from storefront.domain import storefront
from storefront.product.product import Product

logger = structlog.get_logger(__name__)


@storefront.command(part_of="Product")
class SetStock:
    product_id: Identifier(required=True)
    quantity: Integer(required=True, min_value=0)
    in_stock: Boolean()  # optional; must agree with quantity when given


@storefront.command_handler(part_of=Product)
class SetStockHandler:
    @handle(SetStock)
    def set_stock(self, command):
        repo = current_domain.repository_for(Product)
        product = repo.get(command.product_id)
        previous = product.quantity
        product.set_stock(command.quantity, in_stock=command.in_stock)
        repo.add(product)

        logger.info(
            "Stock set",
            product_id=command.product_id,
            previous_quantity=previous,
            quantity=product.quantity,
        )
