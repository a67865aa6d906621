"""Cart aggregate (CQRS) — the buyer's pending selection before checkout.

One cart per buyer. Adding a product that is already in the cart increases
its quantity instead of adding a second line.
"""

from datetime import UTC, datetime

from protean.exceptions import ValidationError
from protean.fields import DateTime, HasMany, Identifier, Integer
from protean.utils.globals import current_domain

from marketplace.cart.events import CartCleared, ItemAddedToCart
from marketplace.domain import marketplace


@marketplace.entity(part_of="Cart")
class CartItem:
    product_id = Identifier(required=True)
    quantity = Integer(required=True, min_value=1)


@marketplace.aggregate
class Cart:
    buyer_id = Identifier(required=True)
    items = HasMany(CartItem)
    updated_at = DateTime()

    @classmethod
    def create(cls, buyer_id: str):
        return cls(buyer_id=buyer_id, updated_at=datetime.now(UTC))

    def add_item(self, product, quantity: int) -> None:
        """Add ``quantity`` units of ``product``. The product must be in stock."""
        if quantity < 1:
            raise ValidationError({"quantity": ["Quantity must be at least 1"]})
        if not product.in_stock:
            raise ValidationError({"product_id": ["Product is out of stock"]})

        existing = next((i for i in (self.items or []) if str(i.product_id) == str(product.id)), None)
        if existing:
            existing.quantity = existing.quantity + quantity
        else:
            self.add_items(CartItem(product_id=str(product.id), quantity=quantity))

        now = datetime.now(UTC)
        self.updated_at = now
        self.raise_(
            ItemAddedToCart(
                cart_id=str(self.id),
                buyer_id=str(self.buyer_id),
                product_id=str(product.id),
                seller_id=str(product.seller_id),
                product_name=product.name,
                quantity=quantity,
                added_at=now,
            )
        )

    def update_quantity(self, product_id: str, quantity: int) -> None:
        """Replace the quantity of a line already in the cart."""
        if quantity < 1:
            raise ValidationError({"quantity": ["Quantity must be at least 1"]})
        item = next((i for i in (self.items or []) if str(i.product_id) == str(product_id)), None)
        if item is None:
            raise ValidationError({"product_id": ["Product is not in the cart"]})
        item.quantity = quantity
        self.updated_at = datetime.now(UTC)

    def remove_item(self, product_id: str) -> None:
        item = next((i for i in (self.items or []) if str(i.product_id) == str(product_id)), None)
        if item is None:
            raise ValidationError({"product_id": ["Product is not in the cart"]})
        self.remove_items(item)
        self.updated_at = datetime.now(UTC)

    def clear(self) -> None:
        for item in list(self.items or []):
            self.remove_items(item)
        now = datetime.now(UTC)
        self.updated_at = now
        self.raise_(CartCleared(cart_id=str(self.id), buyer_id=str(self.buyer_id), cleared_at=now))


def cart_of(buyer_id: str) -> Cart | None:
    return current_domain.repository_for(Cart)._dao.query.filter(buyer_id=buyer_id).all().first
