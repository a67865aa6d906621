"""Notification fan-out reacts to marketplace activity.

Sellers hear about views, cart additions, purchases and donations of their
products. Every handler goes through ``notify``, which never raises, so a
failed notification leaves the triggering operation intact.
"""

import json

import structlog
from protean.utils.mixins import handle

from marketplace.cart.events import ItemAddedToCart
from marketplace.domain import marketplace
from marketplace.notification.fanout import notify
from marketplace.notification.notification import Notification, NotificationType
from marketplace.order.events import OrderPlaced
from marketplace.product.events import ProductDonated, ProductViewed

logger = structlog.get_logger(__name__)


@marketplace.event_handler(part_of=Notification, stream_category="marketplace::order")
class OrderNotificationHandler:
    @handle(OrderPlaced)
    def on_order_placed(self, event: OrderPlaced) -> None:
        """One 'purchase' notification per line item, to that item's seller."""
        try:
            items = json.loads(event.items) if isinstance(event.items, str) else event.items
        except (TypeError, ValueError):
            logger.exception("Unreadable order items on OrderPlaced", order_id=str(event.order_id))
            return

        for item in items:
            notify(
                recipient_id=item["seller_id"],
                notification_type=NotificationType.PURCHASE.value,
                product_id=item["product_id"],
                from_user_id=str(event.buyer_id),
                context={
                    "product_name": item.get("product_name"),
                    "quantity": item.get("quantity"),
                    "order_id": str(event.order_id),
                },
            )


@marketplace.event_handler(part_of=Notification, stream_category="marketplace::cart")
class CartNotificationHandler:
    @handle(ItemAddedToCart)
    def on_item_added_to_cart(self, event: ItemAddedToCart) -> None:
        notify(
            recipient_id=str(event.seller_id),
            notification_type=NotificationType.CART.value,
            product_id=str(event.product_id),
            from_user_id=str(event.buyer_id),
            context={"product_name": event.product_name, "quantity": event.quantity},
        )


@marketplace.event_handler(part_of=Notification, stream_category="marketplace::product")
class ProductNotificationHandler:
    @handle(ProductViewed)
    def on_product_viewed(self, event: ProductViewed) -> None:
        notify(
            recipient_id=str(event.seller_id),
            notification_type=NotificationType.VIEW.value,
            product_id=str(event.product_id),
            from_user_id=str(event.viewer_id) if event.viewer_id else None,
            context={"product_name": event.product_name},
        )

    @handle(ProductDonated)
    def on_product_donated(self, event: ProductDonated) -> None:
        notify(
            recipient_id=str(event.seller_id),
            notification_type=NotificationType.DONATION.value,
            product_id=str(event.product_id),
            from_user_id=str(event.seller_id),
            context={"product_name": event.product_name, "quantity": event.quantity},
        )
