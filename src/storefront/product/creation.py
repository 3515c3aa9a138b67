"""Product creation: command and handler."""

import structlog
from protean import handle
from protean.fields import Boolean, Float, Integer, String, Text
from protean.utils.globals import current_domain

from storefront.domain import storefront
from storefront.product.product import Product

logger = structlog.get_logger(__name__)


@storefront.command(part_of="Product")
class AddProduct:
    name: String(required=True, max_length=255)
    description: Text(required=True)
    price: Float(required=True, min_value=0.0)
    category: String(required=True, max_length=100)
    image_url: String(required=True, max_length=1024)
    quantity: Integer(min_value=0, default=0)
    in_stock: Boolean()
    featured: Boolean(default=False)


@storefront.command_handler(part_of=Product)
class AddProductHandler:
    @handle(AddProduct)
    def add_product(self, command):
        product = Product.create(
            name=command.name,
            description=command.description,
            price=command.price,
            category=command.category,
            image_url=command.image_url,
            quantity=command.quantity,
            in_stock=command.in_stock,
            featured=command.featured,
        )
        current_domain.repository_for(Product).add(product)

        logger.info("Product added", product_id=str(product.id), category=product.category)
        return str(product.id)
