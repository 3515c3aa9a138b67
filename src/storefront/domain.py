"""Storefront bounded context: catalog, cart ledger, orders and back-office.

A single domain so that order placement can touch products and orders in
one unit of work.
"""

from protean.domain import Domain

from storefront.utils.logging import configure_logging, get_logger

configure_logging()

logger = get_logger(__name__)

storefront = Domain(name="storefront")
