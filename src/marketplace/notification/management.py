"""Inbox management — read-state commands and inbox queries.

Both commands are idempotent and scoped to the requesting user: a user can
only touch notifications addressed to them.
"""

from protean import handle
from protean.fields import Identifier
from protean.utils.globals import current_domain

from marketplace.domain import marketplace
from marketplace.notification.notification import Notification
from marketplace.shared.errors import NotFoundError

INBOX_LIMIT = 20


@marketplace.command(part_of="Notification")
class MarkNotificationRead:
    notification_id = Identifier(required=True)
    user_id = Identifier(required=True)


@marketplace.command(part_of="Notification")
class MarkAllNotificationsRead:
    user_id = Identifier(required=True)


@marketplace.command_handler(part_of=Notification)
class NotificationCommandHandler:
    @handle(MarkNotificationRead)
    def mark_read(self, command):
        repo = current_domain.repository_for(Notification)
        notification = repo.get_or_none(command.notification_id)
        # Someone else's notification is reported as missing, not forbidden
        if notification is None or str(notification.recipient_id) != str(command.user_id):
            raise NotFoundError(f"Notification {command.notification_id} does not exist")
        if notification.mark_read():
            repo.add(notification)

    @handle(MarkAllNotificationsRead)
    def mark_all_read(self, command):
        repo = current_domain.repository_for(Notification)
        unread = repo._dao.query.filter(recipient_id=command.user_id, is_read=False).all().items
        for notification in unread:
            notification.mark_read()
            repo.add(notification)
        return len(unread)


def list_notifications(user_id: str, limit: int = INBOX_LIMIT) -> list[Notification]:
    """A user's notifications, newest first."""
    return (
        current_domain.repository_for(Notification)
        ._dao.query.filter(recipient_id=user_id)
        .order_by("-created_at")
        .limit(limit)
        .all()
        .items
    )


def unread_count(user_id: str) -> int:
    return (
        current_domain.repository_for(Notification)._dao.query.filter(recipient_id=user_id, is_read=False).all().total
    )
