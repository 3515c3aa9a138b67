"""Number of orders currently sitting in each workflow status."""

from protean.core.projector import on
from protean.exceptions import ObjectNotFoundError
from protean.fields import Integer, String
from protean.utils.globals import current_domain

from storefront.domain import storefront
from storefront.order.events import OrderPlaced, OrderStatusChanged
from storefront.order.order import Order, OrderStatus


@storefront.projection
class OrderStatusCount:
    status = String(identifier=True, required=True, max_length=20)
    count = Integer(default=0)


def _bump(status, delta):
    repo = current_domain.repository_for(OrderStatusCount)
    try:
        record = repo.get(status)
    except ObjectNotFoundError:
        record = OrderStatusCount(status=status, count=0)
    record.count = max((record.count or 0) + delta, 0)
    repo.add(record)


@storefront.projector(projector_for=OrderStatusCount, aggregates=[Order])
class OrderStatusCountProjector:
    @on(OrderPlaced)
    def on_order_placed(self, event):
        _bump(OrderStatus.PENDING.value, 1)

    @on(OrderStatusChanged)
    def on_status_changed(self, event):
        _bump(event.previous_status, -1)
        _bump(event.new_status, 1)
