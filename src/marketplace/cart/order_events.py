"""Cart reacts to checkout.

The buyer's cart is emptied once their order is placed. Clearing is
best-effort: if it fails the order still stands and the failure is logged.
"""

import structlog
from protean.utils.globals import current_domain
from protean.utils.mixins import handle

from marketplace.cart.cart import Cart, cart_of
from marketplace.domain import marketplace
from marketplace.order.events import OrderPlaced

logger = structlog.get_logger(__name__)


@marketplace.event_handler(part_of=Cart, stream_category="marketplace::order")
class CheckoutCartHandler:
    @handle(OrderPlaced)
    def on_order_placed(self, event: OrderPlaced) -> None:
        try:
            cart = cart_of(str(event.buyer_id))
            if cart is None:
                return
            cart.clear()
            current_domain.repository_for(Cart).add(cart)
        except Exception:
            logger.exception(
                "Failed to clear cart after checkout",
                buyer_id=str(event.buyer_id),
                order_id=str(event.order_id),
            )
            return

        logger.info("Cart cleared after checkout", buyer_id=str(event.buyer_id), order_id=str(event.order_id))
