"""Daily sales projection: feeds the dashboard's monthly chart and the order-stats series.

Keyed by the UTC date an order was placed (YYYY-MM-DD). Cancellations are
booked against the day the order was placed, so ``net_revenue`` for a day
only counts orders that are still standing.
"""

from protean.core.projector import on
from protean.exceptions import ObjectNotFoundError
from protean.fields import Float, Integer, String
from protean.utils.globals import current_domain

from storefront.domain import storefront
from storefront.order.events import OrderCancelled, OrderPlaced
from storefront.order.order import Order


@storefront.projection
class DailySales:
    date = String(identifier=True, required=True, max_length=10)  # YYYY-MM-DD
    month = String(required=True, max_length=7)  # YYYY-MM
    orders_placed = Integer(default=0)
    orders_cancelled = Integer(default=0)
    revenue = Float(default=0.0)
    cancelled_revenue = Float(default=0.0)

    @property
    def net_revenue(self):
        return round((self.revenue or 0.0) - (self.cancelled_revenue or 0.0), 2)


def _get_or_create(placed_at):
    date_key = placed_at.date().isoformat()
    repo = current_domain.repository_for(DailySales)
    try:
        return repo.get(date_key)
    except ObjectNotFoundError:
        return DailySales(
            date=date_key,
            month=date_key[:7],
            orders_placed=0,
            orders_cancelled=0,
            revenue=0.0,
            cancelled_revenue=0.0,
        )


@storefront.projector(projector_for=DailySales, aggregates=[Order])
class DailySalesProjector:
    @on(OrderPlaced)
    def on_order_placed(self, event):
        record = _get_or_create(event.placed_at)
        record.orders_placed = (record.orders_placed or 0) + 1
        record.revenue = round((record.revenue or 0.0) + event.total, 2)
        current_domain.repository_for(DailySales).add(record)

    @on(OrderCancelled)
    def on_order_cancelled(self, event):
        record = _get_or_create(event.placed_at)
        record.orders_cancelled = (record.orders_cancelled or 0) + 1
        record.cancelled_revenue = round((record.cancelled_revenue or 0.0) + event.total, 2)
        current_domain.repository_for(DailySales).add(record)
