"""Cart session lifecycle: commands and handler."""

from protean import handle
from protean.fields import Identifier
from protean.utils.globals import current_domain

from storefront.cart.cart import Cart
from storefront.domain import storefront


@storefront.command(part_of="Cart")
class CreateCart:
    cart_id = Identifier()  # Reuse the session id when the caller has one


@storefront.command(part_of="Cart")
class ClearCart:
    cart_id = Identifier(required=True)


@storefront.command(part_of="Cart")
class DiscardCart:
    cart_id = Identifier(required=True)


@storefront.command_handler(part_of=Cart)
class ManageCartHandler:
    @handle(CreateCart)
    def create_cart(self, command):
        cart = Cart.create(cart_id=command.cart_id)
        current_domain.repository_for(Cart).add(cart)
        return str(cart.id)

    @handle(ClearCart)
    def clear_cart(self, command):
        repo = current_domain.repository_for(Cart)
        cart = repo.get(command.cart_id)
        cart.clear()
        repo.add(cart)

    @handle(DiscardCart)
    def discard_cart(self, command):
        repo = current_domain.repository_for(Cart)
        cart = repo.get(command.cart_id)
        cart.clear()
        repo.add(cart)
        repo._dao.delete(cart)
