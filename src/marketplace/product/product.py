"""Product aggregate (CQRS) — a seller's listing and its inventory counter.

``available_quantity`` is the ledger balance for the product and ``in_stock``
is derived from it. Every mutation goes through ``decrement`` or
``restock`` so the two never disagree.
"""

from datetime import UTC, datetime
from enum import Enum

from protean import atomic_change, invariant
from protean.exceptions import ValidationError
from protean.fields import Boolean, Date, DateTime, Float, Identifier, Integer, String, Text

from marketplace.domain import marketplace
from marketplace.product.events import ProductDonated, ProductListed, ProductViewed


class ProductPriority(Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


@marketplace.aggregate
class Product:
    seller_id = Identifier(required=True)
    name = String(required=True, max_length=255)
    description = Text()
    price = Float(required=True, min_value=0.0)
    category = String(max_length=100)
    available_quantity = Integer(default=0, min_value=0)
    in_stock = Boolean(default=False)
    perishable = Boolean(default=False)
    expiry_date = Date()
    priority = String(choices=ProductPriority, default=ProductPriority.MEDIUM.value)
    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def in_stock_tracks_available_quantity(self):
        if self.available_quantity is not None and self.available_quantity < 0:
            raise ValidationError({"available_quantity": ["Available quantity cannot be negative"]})
        if self.in_stock != ((self.available_quantity or 0) > 0):
            raise ValidationError({"in_stock": ["In-stock flag must match available quantity"]})

    # -------------------------------------------------------------------
    # Factory method
    # -------------------------------------------------------------------
    @classmethod
    def create(
        cls,
        seller_id: str,
        name: str,
        price: float,
        available_quantity: int = 0,
        description: str | None = None,
        category: str | None = None,
        perishable: bool = False,
        expiry_date=None,
        priority: str = ProductPriority.MEDIUM.value,
    ):
        now = datetime.now(UTC)
        product = cls(
            seller_id=seller_id,
            name=name,
            price=price,
            available_quantity=available_quantity,
            in_stock=available_quantity > 0,
            description=description,
            category=category,
            perishable=perishable,
            expiry_date=expiry_date,
            priority=priority,
            created_at=now,
            updated_at=now,
        )
        product.raise_(
            ProductListed(
                product_id=str(product.id),
                seller_id=seller_id,
                name=name,
                available_quantity=available_quantity,
                listed_at=now,
            )
        )
        return product

    # -------------------------------------------------------------------
    # Ledger
    # -------------------------------------------------------------------
    def has_available(self, amount: int) -> bool:
        return self.available_quantity >= amount

    def decrement(self, amount: int) -> int:
        """Take ``amount`` units off the balance, flooring at zero.

        Returns the new balance.
        """
        if amount <= 0:
            raise ValidationError({"quantity": ["Quantity must be positive"]})
        new_quantity = max(0, self.available_quantity - amount)
        self._set_quantity(new_quantity)
        return new_quantity

    def restock(self, quantity: int) -> None:
        """Set the balance outright. Used by the owning seller when editing a listing."""
        if quantity < 0:
            raise ValidationError({"available_quantity": ["Available quantity cannot be negative"]})
        self._set_quantity(quantity)

    def _set_quantity(self, quantity: int) -> None:
        # Both fields change together so the post-invariant sees a consistent pair
        with atomic_change(self):
            self.available_quantity = quantity
            self.in_stock = quantity > 0
        self.updated_at = datetime.now(UTC)

    # -------------------------------------------------------------------
    # Listing details
    # -------------------------------------------------------------------
    def update_details(self, **changes) -> None:
        for field_name in ("name", "description", "price", "category", "perishable", "expiry_date", "priority"):
            if field_name in changes and changes[field_name] is not None:
                setattr(self, field_name, changes[field_name])
        self.updated_at = datetime.now(UTC)

    def record_view(self, viewer_id: str | None = None) -> None:
        self.raise_(
            ProductViewed(
                product_id=str(self.id),
                seller_id=str(self.seller_id),
                product_name=self.name,
                viewer_id=viewer_id,
                viewed_at=datetime.now(UTC),
            )
        )

    def record_donation(self, quantity: int, donation_id: str) -> None:
        """Take donated units off the balance. Donations, unlike orders, never floor."""
        if not self.has_available(quantity):
            raise ValidationError({"quantity": ["Not enough quantity available"]})
        self.decrement(quantity)
        self.raise_(
            ProductDonated(
                product_id=str(self.id),
                seller_id=str(self.seller_id),
                product_name=self.name,
                quantity=quantity,
                donation_id=donation_id,
                donated_at=datetime.now(UTC),
            )
        )
