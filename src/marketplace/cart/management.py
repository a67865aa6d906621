"""Cart management — commands and handler."""

from protean import handle
from protean.fields import Identifier, Integer
from protean.utils.globals import current_domain

from marketplace.cart.cart import Cart, cart_of
from marketplace.domain import marketplace
from marketplace.product.ledger import load_product
from marketplace.shared.errors import NotFoundError


@marketplace.command(part_of="Cart")
class AddToCart:
    buyer_id = Identifier(required=True)
    product_id = Identifier(required=True)
    quantity = Integer(required=True, min_value=1)


@marketplace.command(part_of="Cart")
class UpdateCartItem:
    buyer_id = Identifier(required=True)
    product_id = Identifier(required=True)
    quantity = Integer(required=True, min_value=1)


@marketplace.command(part_of="Cart")
class RemoveFromCart:
    buyer_id = Identifier(required=True)
    product_id = Identifier(required=True)


@marketplace.command(part_of="Cart")
class ClearCart:
    buyer_id = Identifier(required=True)


def _existing_cart(buyer_id: str) -> Cart:
    cart = cart_of(buyer_id)
    if cart is None:
        raise NotFoundError(f"Buyer {buyer_id} has no cart")
    return cart


@marketplace.command_handler(part_of=Cart)
class CartCommandHandler:
    @handle(AddToCart)
    def add_to_cart(self, command):
        product = load_product(command.product_id)
        cart = cart_of(command.buyer_id) or Cart.create(buyer_id=command.buyer_id)
        cart.add_item(product, command.quantity)
        current_domain.repository_for(Cart).add(cart)
        return str(cart.id)

    @handle(UpdateCartItem)
    def update_cart_item(self, command):
        cart = _existing_cart(command.buyer_id)
        cart.update_quantity(command.product_id, command.quantity)
        current_domain.repository_for(Cart).add(cart)

    @handle(RemoveFromCart)
    def remove_from_cart(self, command):
        cart = _existing_cart(command.buyer_id)
        cart.remove_item(command.product_id)
        current_domain.repository_for(Cart).add(cart)

    @handle(ClearCart)
    def clear_cart(self, command):
        cart = cart_of(command.buyer_id)
        if cart is None:
            return
        cart.clear()
        current_domain.repository_for(Cart).add(cart)
