"""One-off maintenance: attribute ownerless legacy orders to a placeholder user."""

import structlog
from protean import handle
from protean.fields import Identifier
from protean.utils.globals import current_domain

from storefront.domain import storefront
from storefront.order.order import LEGACY_OWNER_ID, Order

logger = structlog.get_logger(__name__)


@storefront.command(part_of="Order")
class BackfillOrderOwners:
    owner_id = Identifier(default=LEGACY_OWNER_ID)


@storefront.command_handler(part_of=Order)
class OrderMaintenanceHandler:
    @handle(BackfillOrderOwners)
    def backfill_owners(self, command):
        repo = current_domain.repository_for(Order)
        orders = repo.ownerless()

        for order in orders:
            order.assign_owner(command.owner_id)
            repo.add(order)

        logger.info("Backfilled order owners", owner_id=command.owner_id, updated=len(orders))
        return len(orders)
