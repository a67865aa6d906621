"""Tracking reacts to order cancellation.

Removing the tracking record is best-effort: a failure is logged and the
cancellation stands.
"""

import structlog
from protean.utils.mixins import handle

from marketplace.domain import marketplace
from marketplace.order.events import OrderCancelled
from marketplace.tracking.coordinator import remove_for_order
from marketplace.tracking.tracking import LogisticsTracking

logger = structlog.get_logger(__name__)


@marketplace.event_handler(part_of=LogisticsTracking, stream_category="marketplace::order")
class OrderCancellationTrackingHandler:
    @handle(OrderCancelled)
    def on_order_cancelled(self, event: OrderCancelled) -> None:
        try:
            removed = remove_for_order(str(event.order_id))
        except Exception:
            logger.exception("Failed to remove logistics tracking", order_id=str(event.order_id))
            return

        if not removed:
            logger.debug("No logistics tracking to remove", order_id=str(event.order_id))
