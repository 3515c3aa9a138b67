"""Returns the stock of a cancelled order to the catalog."""

import json

import structlog
from protean.utils.globals import current_domain
from protean.utils.mixins import handle

from storefront.domain import storefront
from storefront.order.events import OrderCancelled
from storefront.product.product import Product

logger = structlog.get_logger(__name__)


@storefront.event_handler(part_of=Product, stream_category="storefront::order")
class RestockOnCancellationHandler:
    @handle(OrderCancelled)
    def on_order_cancelled(self, event: OrderCancelled) -> None:
        returned = {}
        for line in json.loads(event.items):
            returned[line["product_id"]] = returned.get(line["product_id"], 0) + line["quantity"]

        repo = current_domain.repository_for(Product)
        for product_id, quantity in returned.items():
            product = repo.get_or_none(product_id)
            if product is None:
                logger.warning(
                    "Skipping restock for removed product",
                    order_id=str(event.order_id),
                    product_id=product_id,
                )
                continue

            product.restock(quantity, order_id=str(event.order_id))
            repo.add(product)

        logger.info("Restocked cancelled order", order_id=str(event.order_id), products=len(returned))
