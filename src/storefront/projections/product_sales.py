"""Units sold per product, net of cancellations. Backs the dashboard's top products."""

import json

from protean.core.projector import on
from protean.exceptions import ObjectNotFoundError
from protean.fields import Float, Identifier, Integer, String
from protean.utils.globals import current_domain

from storefront.domain import storefront
from storefront.order.events import OrderCancelled, OrderPlaced
from storefront.order.order import Order


@storefront.projection
class ProductSales:
    product_id = Identifier(identifier=True, required=True)
    name = String(required=True, max_length=255)
    units_sold = Integer(default=0)
    revenue = Float(default=0.0)


def _apply_lines(items_json, sign):
    repo = current_domain.repository_for(ProductSales)
    for line in json.loads(items_json):
        try:
            record = repo.get(line["product_id"])
        except ObjectNotFoundError:
            record = ProductSales(product_id=line["product_id"], name=line["name"], units_sold=0, revenue=0.0)

        record.units_sold = (record.units_sold or 0) + sign * line["quantity"]
        record.revenue = round((record.revenue or 0.0) + sign * line["price"] * line["quantity"], 2)
        repo.add(record)


@storefront.projector(projector_for=ProductSales, aggregates=[Order])
class ProductSalesProjector:
    @on(OrderPlaced)
    def on_order_placed(self, event):
        _apply_lines(event.items, 1)

    @on(OrderCancelled)
    def on_order_cancelled(self, event):
        _apply_lines(event.items, -1)
