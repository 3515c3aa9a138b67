"""Product detail edits and removal: commands and handler."""

import structlog
from protean import handle
from protean.fields import Boolean, Float, Identifier, Integer, String, Text
from protean.utils.globals import current_domain

from storefront.domain import storefront
from storefront.product.product import EDITABLE_FIELDS, Product

logger = structlog.get_logger(__name__)


@storefront.command(part_of="Product")
class UpdateProduct:
    """Partial update: fields left as ``None`` keep their current value."""

    product_id: Identifier(required=True)
    name: String(max_length=255)
    description: Text()
    price: Float(min_value=0.0)
    category: String(max_length=100)
    image_url: String(max_length=1024)
    featured: Boolean()
    quantity: Integer(min_value=0)
    in_stock: Boolean()


@storefront.command(part_of="Product")
class RemoveProduct:
    product_id: Identifier(required=True)


@storefront.command_handler(part_of=Product)
class ManageProductDetailsHandler:
    @handle(UpdateProduct)
    def update_product(self, command):
        repo = current_domain.repository_for(Product)
        product = repo.get(command.product_id)

        changed = product.update_details(**{field: getattr(command, field) for field in EDITABLE_FIELDS})

        if command.quantity is not None or command.in_stock is not None:
            quantity = command.quantity if command.quantity is not None else product.quantity
            product.set_stock(quantity, in_stock=command.in_stock)

        repo.add(product)
        logger.info("Product updated", product_id=command.product_id, changed=changed)

    @handle(RemoveProduct)
    def remove_product(self, command):
        repo = current_domain.repository_for(Product)
        product = repo.get(command.product_id)
        repo._dao.delete(product)
        logger.info("Product removed", product_id=command.product_id)
