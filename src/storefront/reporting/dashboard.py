"""Read-only back-office reporting assembled from the projections and the order store."""

from datetime import UTC, datetime, timedelta

from protean.exceptions import ValidationError
from protean.utils.globals import current_domain

from storefront.order.order import Order, OrderStatus
from storefront.product.product import Product
from storefront.projections.customers import Customer
from storefront.projections.daily_sales import DailySales
from storefront.projections.order_status_counts import OrderStatusCount
from storefront.projections.product_sales import ProductSales

RECENT_ORDERS = 5
TOP_PRODUCTS = 5
SALES_MONTHS = 6
MAX_STATS_DAYS = 365


def _last_months(today, count):
    """(YYYY-MM, "Mon YYYY") pairs for the ``count`` calendar months ending with ``today``'s."""
    year, month = today.year, today.month
    months = []
    for _ in range(count):
        months.append((f"{year:04d}-{month:02d}", datetime(year, month, 1).strftime("%b %Y")))
        month -= 1
        if month == 0:
            year, month = year - 1, 12
    return list(reversed(months))


def _daily_sales(**filters):
    query = current_domain.repository_for(DailySales)._dao.query
    if filters:
        query = query.filter(**filters)
    return query.limit(None).all().items


def order_summary(order):
    return {
        "order_id": str(order.id),
        "customer_name": order.shipping_address.name if order.shipping_address else None,
        "total": order.total,
        "status": order.status,
        "created_at": order.created_at,
    }


def monthly_sales(today=None, months=SALES_MONTHS):
    """Net revenue and order counts per month, oldest first, zero-filled."""
    today = today or datetime.now(UTC).date()
    window = _last_months(today, months)

    totals = {key: {"month": label, "orders": 0, "revenue": 0.0} for key, label in window}
    for record in _daily_sales(month__in=list(totals)):
        bucket = totals[record.month]
        bucket["orders"] += (record.orders_placed or 0) - (record.orders_cancelled or 0)
        bucket["revenue"] = round(bucket["revenue"] + record.net_revenue, 2)

    return [totals[key] for key, _ in window]


def top_products(limit=TOP_PRODUCTS):
    records = (
        current_domain.repository_for(ProductSales)
        ._dao.query.filter(units_sold__gt=0)
        .order_by("-units_sold")
        .limit(limit)
        .all()
        .items
    )
    return [
        {
            "product_id": str(record.product_id),
            "name": record.name,
            "units_sold": record.units_sold,
            "revenue": record.revenue,
        }
        for record in records
    ]


def dashboard_summary(today=None):
    """Headline numbers for the admin dashboard."""
    order_repo = current_domain.repository_for(Order)

    total_revenue = round(sum(record.net_revenue for record in _daily_sales()), 2)

    return {
        "total_orders": order_repo.query.count(),
        "total_products": current_domain.repository_for(Product).count(),
        "total_revenue": total_revenue,
        "total_customers": current_domain.repository_for(Customer)._dao.query.count(),
        "recent_orders": [order_summary(order) for order in order_repo.recent(RECENT_ORDERS)],
        "monthly_sales": monthly_sales(today=today),
        "top_products": top_products(),
    }


def order_stats(days=30, today=None):
    """Orders per status and a daily placed/revenue series for the last ``days`` days."""
    if days < 1 or days > MAX_STATS_DAYS:
        raise ValidationError({"days": [f"Days must be between 1 and {MAX_STATS_DAYS}"]})

    today = today or datetime.now(UTC).date()
    start = today - timedelta(days=days - 1)

    by_status = {status.value: 0 for status in OrderStatus}
    for record in current_domain.repository_for(OrderStatusCount)._dao.query.limit(None).all().items:
        by_status[record.status] = record.count or 0

    recorded = {record.date: record for record in _daily_sales(date__gte=start.isoformat())}
    daily = []
    for offset in range(days):
        day = (start + timedelta(days=offset)).isoformat()
        record = recorded.get(day)
        daily.append(
            {
                "date": day,
                "orders": record.orders_placed if record else 0,
                "cancelled": record.orders_cancelled if record else 0,
                "revenue": record.net_revenue if record else 0.0,
            }
        )

    return {"by_status": by_status, "daily": daily}
