"""Application tests for notification fan-out and inbox commands."""

import pytest
from marketplace.cart.management import AddToCart
from marketplace.notification.fanout import notify
from marketplace.notification.management import (
    MarkAllNotificationsRead,
    MarkNotificationRead,
    list_notifications,
    unread_count,
)
from marketplace.notification.notification import Notification
from marketplace.product.management import RecordProductView
from marketplace.shared.errors import NotFoundError
from protean import current_domain


def _mark_read(notification_id, user_id):
    current_domain.process(
        MarkNotificationRead(notification_id=notification_id, user_id=user_id),
        asynchronous=False,
    )


class TestNotify:
    def test_notify_stores_rendered_unread_notification(self):
        notification_id = notify(
            "seller-1", "cart", product_id="prod-1", from_user_id="buyer-1", context={"product_name": "Kale", "quantity": 2}
        )
        notification = current_domain.repository_for(Notification).get(notification_id)
        assert notification.message == "Someone added 2 units of Kale to their cart"
        assert notification.is_read is False

    def test_notify_never_raises(self, monkeypatch):
        def _boom(*args, **kwargs):
            raise RuntimeError("store down")

        monkeypatch.setattr("marketplace.notification.fanout.render_message", _boom)
        assert notify("seller-1", "view", context={}) is None

    def test_unknown_type_uses_generic_message(self):
        notification_id = notify("seller-1", "review", context={"product_name": "Kale"})
        notification = current_domain.repository_for(Notification).get(notification_id)
        assert notification.message == "Activity on Kale"


class TestActivityFanOut:
    def test_product_view_notifies_seller(self, seller, product_id):
        current_domain.process(RecordProductView(product_id=product_id, viewer_id="buyer-1"), asynchronous=False)
        assert [n.message for n in list_notifications(seller)] == ["Someone viewed Tomatoes"]

    def test_seller_viewing_own_product_is_silent(self, seller, product_id):
        current_domain.process(RecordProductView(product_id=product_id, viewer_id=seller), asynchronous=False)
        assert list_notifications(seller) == []

    def test_add_to_cart_notifies_seller(self, seller, product_id):
        current_domain.process(AddToCart(buyer_id="buyer-1", product_id=product_id, quantity=1), asynchronous=False)
        assert [n.message for n in list_notifications(seller)] == ["Someone added 1 unit of Tomatoes to their cart"]


class TestInbox:
    def test_newest_first_and_limited(self):
        for i in range(25):
            notify("seller-1", "view", context={"product_name": f"Item {i}"})
        inbox = list_notifications("seller-1")
        assert len(inbox) == 20
        assert inbox[0].message == "Someone viewed Item 24"

    def test_unread_count(self):
        notify("seller-1", "view", context={})
        notify("seller-1", "view", context={})
        notify("seller-2", "view", context={})
        assert unread_count("seller-1") == 2


class TestMarkRead:
    def test_mark_read(self):
        notification_id = notify("seller-1", "view", context={})
        _mark_read(notification_id, "seller-1")
        assert current_domain.repository_for(Notification).get(notification_id).is_read is True
        assert unread_count("seller-1") == 0

    def test_mark_read_is_idempotent(self):
        notification_id = notify("seller-1", "view", context={})
        _mark_read(notification_id, "seller-1")
        _mark_read(notification_id, "seller-1")
        assert current_domain.repository_for(Notification).get(notification_id).is_read is True

    def test_other_users_notification_is_not_found(self):
        notification_id = notify("seller-1", "view", context={})
        with pytest.raises(NotFoundError):
            _mark_read(notification_id, "seller-2")
        assert current_domain.repository_for(Notification).get(notification_id).is_read is False

    def test_mark_all_read_returns_count(self):
        notify("seller-1", "view", context={})
        notify("seller-1", "view", context={})
        notify("seller-2", "view", context={})

        updated = current_domain.process(MarkAllNotificationsRead(user_id="seller-1"), asynchronous=False)
        assert updated == 2
        assert unread_count("seller-1") == 0
        assert unread_count("seller-2") == 1

        again = current_domain.process(MarkAllNotificationsRead(user_id="seller-1"), asynchronous=False)
        assert again == 0
