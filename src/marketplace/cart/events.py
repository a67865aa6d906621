"""Domain events for the Cart aggregate."""

from protean.fields import DateTime, Identifier, Integer, String

from marketplace.domain import marketplace


@marketplace.event(part_of="Cart")
class ItemAddedToCart:
    """A buyer put units of a product in their cart."""

    __version__ = 1

    cart_id = Identifier(required=True)
    buyer_id = Identifier(required=True)
    product_id = Identifier(required=True)
    seller_id = Identifier(required=True)
    product_name = String(required=True)
    quantity = Integer(required=True)
    added_at = DateTime(required=True)


@marketplace.event(part_of="Cart")
class CartCleared:
    """All items were removed from a cart, usually after checkout."""

    __version__ = 1

    cart_id = Identifier(required=True)
    buyer_id = Identifier(required=True)
    cleared_at = DateTime(required=True)
