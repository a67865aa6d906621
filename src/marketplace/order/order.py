"""Order aggregate (CQRS) — one buyer checkout and its lifecycle.

State Machine:
    PENDING → PROCESSING → READY_FOR_PICKUP → DISPATCHED → DELIVERED
    {PENDING, PROCESSING} → CANCELLED

PROCESSING is reached through payment confirmation. The two fulfillment steps
(READY_FOR_PICKUP, DISPATCHED) are taken by a seller whose products are in
the order; DELIVERED is recorded by logistics. CANCELLED and DELIVERED are
terminal.

The total is fixed at creation from the unit prices captured on each line and
is never recomputed.
"""

import json
from datetime import UTC, datetime
from enum import Enum

from protean.exceptions import ValidationError
from protean.fields import DateTime, Float, HasMany, Identifier, Integer, String, ValueObject

from marketplace.domain import marketplace
from marketplace.order.events import OrderCancelled, OrderPlaced, OrderStatusChanged
from marketplace.shared.errors import InvalidTransitionError


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class OrderStatus(Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    READY_FOR_PICKUP = "ready_for_pickup"
    DISPATCHED = "dispatched"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


class PaymentStatus(Enum):
    PENDING = "pending"
    PAID = "paid"
    FAILED = "failed"


_VALID_TRANSITIONS = {
    OrderStatus.PENDING: {OrderStatus.PROCESSING, OrderStatus.CANCELLED},
    OrderStatus.PROCESSING: {OrderStatus.READY_FOR_PICKUP, OrderStatus.CANCELLED},
    OrderStatus.READY_FOR_PICKUP: {OrderStatus.DISPATCHED},
    OrderStatus.DISPATCHED: {OrderStatus.DELIVERED},
    OrderStatus.DELIVERED: set(),  # terminal
    OrderStatus.CANCELLED: set(),  # terminal
}

_CANCELLABLE_STATUSES = {OrderStatus.PENDING, OrderStatus.PROCESSING}

FULFILLMENT_STATUSES = {OrderStatus.READY_FOR_PICKUP, OrderStatus.DISPATCHED}

_FULFILLMENT_NOTES = {
    OrderStatus.READY_FOR_PICKUP: "Order marked as ready for pickup by seller",
    OrderStatus.DISPATCHED: "Order marked as dispatched by seller",
}

DEFAULT_PAYMENT_METHOD = "credit-card"


# ---------------------------------------------------------------------------
# Value Objects
# ---------------------------------------------------------------------------
@marketplace.value_object(part_of="Order")
class DeliveryAddress:
    """Where the order goes, copied from the buyer's address book at checkout.

    Later edits to the address book do not reach orders already placed.
    """

    name = String(max_length=100)
    line1 = String(required=True, max_length=255)
    line2 = String(max_length=255)
    city = String(required=True, max_length=100)
    state = String(max_length=100)
    postal_code = String(required=True, max_length=20)
    country = String(required=True, max_length=100)


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------
@marketplace.entity(part_of="Order")
class OrderItem:
    """One product line. Name and unit price are snapshots from checkout time."""

    product_id = Identifier(required=True)
    product_name = String(required=True, max_length=255)
    seller_id = Identifier(required=True)
    quantity = Integer(required=True, min_value=1)
    unit_price = Float(required=True, min_value=0.0)

    @property
    def line_total(self) -> float:
        return self.unit_price * self.quantity


# ---------------------------------------------------------------------------
# Aggregate Root (CQRS)
# ---------------------------------------------------------------------------
@marketplace.aggregate
class Order:
    buyer_id = Identifier(required=True)
    address_id = Identifier(required=True)
    delivery_address = ValueObject(DeliveryAddress)
    status = String(choices=OrderStatus, default=OrderStatus.PENDING.value)
    total = Float(required=True, min_value=0.0)
    payment_method = String(max_length=50, default=DEFAULT_PAYMENT_METHOD)
    payment_status = String(choices=PaymentStatus, default=PaymentStatus.PENDING.value)
    items = HasMany(OrderItem)
    created_at = DateTime()
    updated_at = DateTime()

    # -------------------------------------------------------------------
    # Factory method
    # -------------------------------------------------------------------
    @classmethod
    def create(
        cls,
        buyer_id: str,
        address_id: str,
        delivery_address: dict,
        items_data: list[dict],
        payment_method: str | None = None,
    ):
        """Create a pending order from checked-out line items."""
        if not items_data:
            raise ValidationError({"items": ["Your cart is empty"]})
        for item_data in items_data:
            if (item_data.get("quantity") or 0) <= 0:
                raise ValidationError({"quantity": ["Each item needs a positive quantity"]})

        now = datetime.now(UTC)
        total = round(sum(item["unit_price"] * item["quantity"] for item in items_data), 2)
        order = cls(
            buyer_id=buyer_id,
            address_id=address_id,
            delivery_address=DeliveryAddress(**delivery_address),
            status=OrderStatus.PENDING.value,
            total=total,
            payment_method=payment_method or DEFAULT_PAYMENT_METHOD,
            payment_status=PaymentStatus.PENDING.value,
            created_at=now,
            updated_at=now,
        )
        for item_data in items_data:
            order.add_items(OrderItem(**item_data))

        order.raise_(
            OrderPlaced(
                order_id=str(order.id),
                buyer_id=buyer_id,
                address_id=address_id,
                items=json.dumps(items_data),
                item_count=len(items_data),
                total=total,
                placed_at=now,
            )
        )
        return order

    # -------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------
    @property
    def seller_ids(self) -> list[str]:
        """Sellers with items in this order, in line order, without repeats."""
        seen: list[str] = []
        for item in self.items or []:
            if str(item.seller_id) not in seen:
                seen.append(str(item.seller_id))
        return seen

    def has_items_from(self, seller_id: str) -> bool:
        return str(seller_id) in self.seller_ids

    # -------------------------------------------------------------------
    # State transition helper
    # -------------------------------------------------------------------
    def assert_can_transition(self, target_status: OrderStatus) -> None:
        current = OrderStatus(self.status)
        if target_status not in _VALID_TRANSITIONS.get(current, set()):
            raise InvalidTransitionError(f"Cannot transition from {current.value} to {target_status.value}")

    def _move_to(self, target_status: OrderStatus, changed_by: str, notes: str | None = None) -> None:
        self.assert_can_transition(target_status)
        previous = self.status
        now = datetime.now(UTC)
        self.status = target_status.value
        self.updated_at = now
        self.raise_(
            OrderStatusChanged(
                order_id=str(self.id),
                buyer_id=str(self.buyer_id),
                previous_status=previous,
                new_status=target_status.value,
                changed_by=changed_by,
                notes=notes,
                changed_at=now,
            )
        )

    # -------------------------------------------------------------------
    # Transitions
    # -------------------------------------------------------------------
    def confirm_payment(self, confirmed_by: str) -> None:
        self._move_to(OrderStatus.PROCESSING, confirmed_by, notes="Payment confirmed")
        self.payment_status = PaymentStatus.PAID.value

    def advance_fulfillment(self, target_status: OrderStatus, changed_by: str) -> None:
        """Seller-driven step: processing → ready_for_pickup → dispatched."""
        if target_status not in FULFILLMENT_STATUSES:
            raise ValidationError({"status": [f"Sellers cannot set status {target_status.value}"]})
        self._move_to(target_status, changed_by, notes=_FULFILLMENT_NOTES[target_status])

    def mark_delivered(self, delivered_by: str) -> None:
        self._move_to(OrderStatus.DELIVERED, delivered_by, notes="Order delivered")

    def cancel(self, cancelled_by: str) -> None:
        current = OrderStatus(self.status)
        if current not in _CANCELLABLE_STATUSES:
            raise InvalidTransitionError(f"Cannot cancel an order that is {current.value}")

        now = datetime.now(UTC)
        self.status = OrderStatus.CANCELLED.value
        self.updated_at = now
        self.raise_(
            OrderCancelled(
                order_id=str(self.id),
                buyer_id=str(self.buyer_id),
                previous_status=current.value,
                cancelled_by=cancelled_by,
                notes="Order cancelled by user",
                cancelled_at=now,
            )
        )
