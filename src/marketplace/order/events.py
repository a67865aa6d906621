"""Domain events for the Order aggregate.

Handlers react to these after the order's unit of work commits: seller
notifications, cart clearing, tracking cleanup, history and the seller order
view are all driven from here.
"""

from protean.fields import DateTime, Float, Identifier, Integer, String, Text

from marketplace.domain import marketplace


@marketplace.event(part_of="Order")
class OrderPlaced:
    """A buyer checked out and the order was created in pending status."""

    __version__ = 1

    order_id = Identifier(required=True)
    buyer_id = Identifier(required=True)
    address_id = Identifier(required=True)
    items = Text(required=True)  # JSON: list of item dicts incl. seller_id
    item_count = Integer(required=True)
    total = Float(required=True)
    placed_at = DateTime(required=True)


@marketplace.event(part_of="Order")
class OrderStatusChanged:
    """An order moved forward: payment confirmed, fulfillment step or delivery."""

    __version__ = 1

    order_id = Identifier(required=True)
    buyer_id = Identifier(required=True)
    previous_status = String(required=True)
    new_status = String(required=True)
    changed_by = Identifier(required=True)
    notes = String(max_length=500)
    changed_at = DateTime(required=True)


@marketplace.event(part_of="Order")
class OrderCancelled:
    """An order was cancelled before reaching fulfillment."""

    __version__ = 1

    order_id = Identifier(required=True)
    buyer_id = Identifier(required=True)
    previous_status = String(required=True)
    cancelled_by = Identifier(required=True)
    notes = String(max_length=500)
    cancelled_at = DateTime(required=True)
