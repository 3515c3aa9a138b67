"""Distinct customers, identified the way the back-office counts them: by shipping name."""

from protean.core.projector import on
from protean.exceptions import ObjectNotFoundError
from protean.fields import DateTime, Integer, String
from protean.utils.globals import current_domain

from storefront.domain import storefront
from storefront.order.events import OrderPlaced
from storefront.order.order import Order


@storefront.projection
class Customer:
    name = String(identifier=True, required=True, max_length=255)
    orders_placed = Integer(default=0)
    last_order_at = DateTime()


@storefront.projector(projector_for=Customer, aggregates=[Order])
class CustomerProjector:
    @on(OrderPlaced)
    def on_order_placed(self, event):
        repo = current_domain.repository_for(Customer)
        try:
            record = repo.get(event.customer_name)
        except ObjectNotFoundError:
            record = Customer(name=event.customer_name, orders_placed=0)

        record.orders_placed = (record.orders_placed or 0) + 1
        record.last_order_at = event.placed_at
        repo.add(record)
