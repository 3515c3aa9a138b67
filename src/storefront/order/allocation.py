"""Stock allocation: withdraws stock from the catalog for a freshly placed order."""

from protean import invariant
from protean.exceptions import ValidationError

from storefront.domain import storefront
from storefront.order.order import Order
from storefront.product.product import Product


@storefront.domain_service(part_of=[Order, Product])
class StockAllocation:
    """Checks every line of ``order`` against ``products`` and withdraws the stock.

    ``products`` maps product id to the loaded Product; a missing entry means
    the product no longer exists. A line must be priced at the product's
    current catalog price. Lines for the same product are withdrawn as one
    quantity.
    """

    def __init__(self, order, products):
        self._aggregates = (order, *products.values())
        self.order = order
        self.products = products

    @property
    def demand(self):
        wanted = {}
        for line in self.order.items:
            wanted[str(line.product_id)] = wanted.get(str(line.product_id), 0) + line.quantity
        return wanted

    @invariant.pre
    def every_product_must_exist(self):
        missing = [product_id for product_id in self.demand if self.products.get(product_id) is None]
        if missing:
            raise ValidationError({"items": [f"Product {product_id} is no longer available" for product_id in missing]})

    @invariant.pre
    def every_line_must_carry_the_catalog_price(self):
        stale = [
            f"Price of {product.name} is {product.price}, not {line.price}"
            for line in self.order.items
            if (product := self.products.get(str(line.product_id))) is not None
            and round(line.price, 2) != round(product.price, 2)
        ]
        if stale:
            raise ValidationError({"items": stale})

    @invariant.pre
    def every_line_must_be_in_stock(self):
        short = [
            f"Only {product.quantity or 0} of {product.name} in stock, {quantity} requested"
            for product_id, quantity in self.demand.items()
            if (product := self.products.get(product_id)) is not None and not product.can_supply(quantity)
        ]
        if short:
            raise ValidationError({"items": short})

    def __call__(self):
        order_id = str(self.order.id)
        for product_id, quantity in self.demand.items():
            self.products[product_id].withdraw_stock(quantity, order_id=order_id)
        return list(self.products.values())
