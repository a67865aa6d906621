"""History reacts to order status changes and cancellations."""

from protean.utils.mixins import handle

from marketplace.domain import marketplace
from marketplace.history.history import OrderHistoryEntry, record_history
from marketplace.order.events import OrderCancelled, OrderStatusChanged
from marketplace.order.order import OrderStatus


@marketplace.event_handler(part_of=OrderHistoryEntry, stream_category="marketplace::order")
class OrderHistoryEventHandler:
    @handle(OrderStatusChanged)
    def on_status_changed(self, event: OrderStatusChanged) -> None:
        record_history(
            order_id=str(event.order_id),
            status=event.new_status,
            notes=event.notes,
            changed_by=str(event.changed_by),
        )

    @handle(OrderCancelled)
    def on_order_cancelled(self, event: OrderCancelled) -> None:
        record_history(
            order_id=str(event.order_id),
            status=OrderStatus.CANCELLED.value,
            notes=event.notes,
            changed_by=str(event.cancelled_by),
        )
