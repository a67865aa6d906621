"""Notification aggregate (CQRS) — one message in a user's inbox.

Notifications are created by the fan-out with a pre-rendered message and only
ever change by being marked read. Delivery is by polling: clients re-fetch
the inbox, there is no push channel.
"""

from datetime import UTC, datetime
from enum import Enum

from protean.fields import Boolean, DateTime, Identifier, String

from marketplace.domain import marketplace


class NotificationType(Enum):
    VIEW = "view"
    CART = "cart"
    PURCHASE = "purchase"
    DONATION = "donation"


@marketplace.aggregate
class Notification:
    recipient_id: Identifier(required=True)
    notification_type: String(required=True, max_length=50)
    product_id: Identifier()
    from_user_id: Identifier()
    message: String(required=True, max_length=500)
    is_read: Boolean(default=False)
    created_at: DateTime()
    read_at: DateTime()

    @classmethod
    def create(
        cls,
        recipient_id: str,
        notification_type: str,
        message: str,
        product_id: str | None = None,
        from_user_id: str | None = None,
    ):
        return cls(
            recipient_id=recipient_id,
            notification_type=notification_type,
            product_id=product_id,
            from_user_id=from_user_id,
            message=message,
            is_read=False,
            created_at=datetime.now(UTC),
        )

    def mark_read(self) -> bool:
        """Mark as read. Returns False when it already was."""
        if self.is_read:
            return False
        self.is_read = True
        self.read_at = datetime.now(UTC)
        return True
