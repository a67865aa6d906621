"""Notification fan-out.

``notify`` is the single entry point other components use to tell a user
about activity on their products. It is best-effort: any failure is logged
and swallowed, so a notification problem never blocks or rolls back the
business operation that triggered it.
"""

import structlog
from protean.utils.globals import current_domain

from marketplace.notification.notification import Notification
from marketplace.notification.templates import render_message

logger = structlog.get_logger(__name__)


def notify(
    recipient_id: str,
    notification_type: str,
    product_id: str | None = None,
    from_user_id: str | None = None,
    context: dict | None = None,
) -> str | None:
    """Render and store a notification for ``recipient_id``.

    Returns the notification id, or None when it could not be created.
    """
    try:
        message = render_message(notification_type, context or {})
        notification = Notification.create(
            recipient_id=recipient_id,
            notification_type=notification_type,
            message=message,
            product_id=product_id,
            from_user_id=from_user_id,
        )
        current_domain.repository_for(Notification).add(notification)
    except Exception:
        logger.exception(
            "Failed to create notification",
            recipient_id=recipient_id,
            notification_type=notification_type,
            product_id=product_id,
        )
        return None

    logger.info(
        "Notification created",
        notification_id=str(notification.id),
        recipient_id=recipient_id,
        notification_type=notification_type,
    )
    return str(notification.id)
