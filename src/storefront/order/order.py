"""Order aggregate: a placed checkout and its fulfillment status.

State machine:
    PENDING → PROCESSING → SHIPPED → DELIVERED
    CANCELLED from any non-terminal state

DELIVERED and CANCELLED are terminal. Items, address and total are fixed
once the order is placed; only the status (and, for legacy orders, the
owner) may change afterwards.
"""

import json
from datetime import UTC, datetime, timedelta
from enum import Enum

from protean.exceptions import ValidationError
from protean.fields import DateTime, Float, HasMany, Identifier, Integer, String, ValueObject
from protean.utils.query import Q

from storefront.domain import storefront
from storefront.order.events import (
    OrderCancelled,
    OrderOwnerAssigned,
    OrderPlaced,
    OrderStatusChanged,
)
from storefront.shared.pagination import check_page


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class OrderStatus(Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


_VALID_TRANSITIONS = {
    OrderStatus.PENDING: {OrderStatus.PROCESSING, OrderStatus.CANCELLED},
    OrderStatus.PROCESSING: {OrderStatus.SHIPPED, OrderStatus.CANCELLED},
    OrderStatus.SHIPPED: {OrderStatus.DELIVERED, OrderStatus.CANCELLED},
    OrderStatus.DELIVERED: set(),  # Terminal
    OrderStatus.CANCELLED: set(),  # Terminal
}

TERMINAL_STATUSES = frozenset(status for status, targets in _VALID_TRANSITIONS.items() if not targets)

# Orders placed before sign-in existed are attributed to this owner
LEGACY_OWNER_ID = "legacy_user"


def allowed_transitions(status):
    """Statuses reachable from ``status`` in one step."""
    return _VALID_TRANSITIONS.get(OrderStatus(status), set())


# ---------------------------------------------------------------------------
# Value Objects
# ---------------------------------------------------------------------------
@storefront.value_object(part_of="Order")
class ShippingAddress:
    """A shipping or billing address, captured at checkout and never edited."""

    name = String(required=True, max_length=255)
    address = String(required=True, max_length=255)
    city = String(required=True, max_length=100)
    state = String(max_length=100)
    postal_code = String(required=True, max_length=20)
    country = String(required=True, max_length=100)


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------
@storefront.entity(part_of="Order")
class OrderItem:
    """Snapshot of a cart line at the moment of checkout."""

    product_id = Identifier(required=True)
    name = String(required=True, max_length=255)
    price = Float(required=True, min_value=0.0)
    quantity = Integer(required=True, min_value=1)
    image_url = String(max_length=1024)

    @property
    def line_total(self):
        return round(self.price * self.quantity, 2)


# ---------------------------------------------------------------------------
# Aggregate Root
# ---------------------------------------------------------------------------
@storefront.aggregate
class Order:
    user_id = Identifier()  # Empty on orders placed before sign-in existed
    items = HasMany(OrderItem)
    total = Float(required=True, min_value=0.0)
    shipping_address = ValueObject(ShippingAddress, required=True)
    billing_address = ValueObject(ShippingAddress)
    status = String(choices=OrderStatus, default=OrderStatus.PENDING.value)
    created_at = DateTime()
    updated_at = DateTime()

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def place(cls, items, shipping_address, user_id=None, total=None, billing_address=None):
        """Create a pending order from cart line snapshots.

        ``items`` is a list of dicts with product_id, name, price, quantity
        and optionally image_url. The total is computed from the lines; a
        caller-supplied ``total`` that differs from it is rejected. Without a
        ``billing_address`` the order is billed to the shipping address.
        """
        if not items:
            raise ValidationError({"items": ["Order must contain at least one item"]})

        lines = [OrderItem(**item) for item in items]
        computed = round(sum(line.price * line.quantity for line in lines), 2)
        if total is not None and round(float(total), 2) != computed:
            raise ValidationError({"total": [f"Total {total} does not match the sum of the items ({computed})"]})

        if isinstance(shipping_address, dict):
            shipping_address = ShippingAddress(**shipping_address)
        if isinstance(billing_address, dict):
            billing_address = ShippingAddress(**billing_address)

        now = datetime.now(UTC)
        order = cls(
            user_id=user_id,
            items=lines,
            total=computed,
            shipping_address=shipping_address,
            billing_address=billing_address or shipping_address,
            status=OrderStatus.PENDING.value,
            created_at=now,
            updated_at=now,
        )
        order.raise_(
            OrderPlaced(
                order_id=str(order.id),
                user_id=user_id,
                customer_name=shipping_address.name,
                items=order.items_json(),
                total=computed,
                placed_at=now,
            )
        )
        return order

    # -------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------
    @property
    def is_terminal(self):
        return OrderStatus(self.status) in TERMINAL_STATUSES

    def items_json(self):
        return json.dumps(
            [
                {
                    "product_id": str(item.product_id),
                    "name": item.name,
                    "price": item.price,
                    "quantity": item.quantity,
                }
                for item in self.items
            ]
        )

    # -------------------------------------------------------------------
    # Status workflow
    # -------------------------------------------------------------------
    def _assert_can_transition(self, target_status):
        """Validate that the current state allows transition to target."""
        current = OrderStatus(self.status)
        if target_status not in _VALID_TRANSITIONS.get(current, set()):
            raise ValidationError({"status": [f"Cannot transition from {current.value} to {target_status.value}"]})

    def change_status(self, new_status):
        """Move the order along the workflow. Re-applying the current status is a no-op."""
        try:
            target = OrderStatus(new_status.value if isinstance(new_status, OrderStatus) else new_status)
        except ValueError:
            raise ValidationError({"status": [f"Unknown status {new_status}"]}) from None

        current = OrderStatus(self.status)
        if target == current:
            return False

        self._assert_can_transition(target)

        now = datetime.now(UTC)
        self.status = target.value
        self.updated_at = now

        self.raise_(
            OrderStatusChanged(
                order_id=str(self.id),
                previous_status=current.value,
                new_status=target.value,
                total=self.total,
                placed_at=self.created_at,
                changed_at=now,
            )
        )
        if target == OrderStatus.CANCELLED:
            self.raise_(
                OrderCancelled(
                    order_id=str(self.id),
                    previous_status=current.value,
                    items=self.items_json(),
                    total=self.total,
                    placed_at=self.created_at,
                    cancelled_at=now,
                )
            )
        return True

    def cancel(self):
        return self.change_status(OrderStatus.CANCELLED)

    # -------------------------------------------------------------------
    # Maintenance
    # -------------------------------------------------------------------
    def assign_owner(self, user_id):
        """Attribute an ownerless (pre sign-in) order to ``user_id``."""
        if self.user_id:
            raise ValidationError({"user_id": ["Order already has an owner"]})

        self.user_id = user_id
        self.updated_at = datetime.now(UTC)
        self.raise_(OrderOwnerAssigned(order_id=str(self.id), user_id=user_id))


@storefront.repository(part_of=Order)
class OrderRepository:
    def list_page(
        self,
        user_id=None,
        status=None,
        date_from=None,
        date_to=None,
        search_term=None,
        page=1,
        page_size=10,
    ):
        """Newest-first page of orders narrowed by the given filters.

        ``date_from`` and ``date_to`` are inclusive calendar dates (UTC);
        ``search_term`` matches anywhere in the order id, ignoring case.
        """
        check_page(page, page_size)

        query = self.query
        if user_id:
            query = query.filter(user_id=user_id)
        if status:
            try:
                query = query.filter(status=OrderStatus(status).value)
            except ValueError:
                raise ValidationError({"status": [f"Unknown status {status}"]}) from None
        if date_from:
            query = query.filter(created_at__gte=_day_start(date_from))
        if date_to:
            query = query.filter(created_at__lt=_day_start(date_to, offset_days=1))
        if search_term and search_term.strip():
            query = query.filter(id__icontains=search_term.strip())

        return query.order_by("-created_at").offset((page - 1) * page_size).limit(page_size).all()

    def recent(self, limit=5):
        return self.query.order_by("-created_at").limit(limit).all().items

    def ownerless(self):
        criteria = Q(user_id__isnull=True) | Q(user_id="")
        return self.query.filter(criteria).limit(None).all().items


def _day_start(day, offset_days=0):
    start = datetime(day.year, day.month, day.day, tzinfo=UTC)
    return start + timedelta(days=offset_days)
