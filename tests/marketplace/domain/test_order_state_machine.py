"""Tests for Order state machine — valid and invalid transitions."""

import json

import pytest
from marketplace.order.events import OrderCancelled, OrderPlaced, OrderStatusChanged
from marketplace.order.order import Order, OrderStatus, PaymentStatus
from marketplace.shared.errors import InvalidTransitionError
from protean.exceptions import ValidationError

_ADDRESS = {
    "name": "Home",
    "line1": "1 Main Street",
    "city": "Springfield",
    "state": "IL",
    "postal_code": "62701",
    "country": "US",
}


def _make_items():
    return [
        {"product_id": "prod-1", "product_name": "Tomatoes", "seller_id": "seller-1", "quantity": 2, "unit_price": 5.0},
        {"product_id": "prod-2", "product_name": "Basil", "seller_id": "seller-2", "quantity": 1, "unit_price": 2.5},
    ]


def _make_order():
    return Order.create(
        buyer_id="buyer-1",
        address_id="addr-1",
        delivery_address=_ADDRESS,
        items_data=_make_items(),
    )


def _advance_to_processing(order):
    order.confirm_payment("buyer-1")
    return order


def _advance_to_ready(order):
    _advance_to_processing(order)
    order.advance_fulfillment(OrderStatus.READY_FOR_PICKUP, "seller-1")
    return order


def _advance_to_dispatched(order):
    _advance_to_ready(order)
    order.advance_fulfillment(OrderStatus.DISPATCHED, "seller-1")
    return order


class TestOrderCreation:
    def test_new_order_is_pending(self):
        order = _make_order()
        assert order.status == OrderStatus.PENDING.value
        assert order.payment_status == PaymentStatus.PENDING.value
        assert order.payment_method == "credit-card"

    def test_total_is_sum_of_lines(self):
        order = _make_order()
        assert order.total == 12.5

    def test_delivery_address_is_copied(self):
        order = _make_order()
        assert order.delivery_address.line1 == "1 Main Street"
        assert order.delivery_address.city == "Springfield"

    def test_seller_ids_in_line_order(self):
        order = _make_order()
        assert order.seller_ids == ["seller-1", "seller-2"]
        assert order.has_items_from("seller-2")
        assert not order.has_items_from("seller-3")

    def test_order_placed_event_carries_items(self):
        order = _make_order()
        event = order._events[-1]
        assert isinstance(event, OrderPlaced)
        assert event.item_count == 2
        assert json.loads(event.items)[0]["seller_id"] == "seller-1"

    def test_empty_items_rejected(self):
        with pytest.raises(ValidationError) as exc:
            Order.create(buyer_id="buyer-1", address_id="addr-1", delivery_address=_ADDRESS, items_data=[])
        assert "Your cart is empty" in str(exc.value.messages)

    def test_zero_quantity_rejected(self):
        items = _make_items()
        items[0]["quantity"] = 0
        with pytest.raises(ValidationError):
            Order.create(buyer_id="buyer-1", address_id="addr-1", delivery_address=_ADDRESS, items_data=items)


class TestValidTransitions:
    def test_payment_moves_to_processing(self):
        order = _advance_to_processing(_make_order())
        assert order.status == OrderStatus.PROCESSING.value
        assert order.payment_status == PaymentStatus.PAID.value

    def test_processing_to_ready_for_pickup(self):
        order = _advance_to_ready(_make_order())
        assert order.status == OrderStatus.READY_FOR_PICKUP.value

    def test_ready_to_dispatched(self):
        order = _advance_to_dispatched(_make_order())
        assert order.status == OrderStatus.DISPATCHED.value

    def test_dispatched_to_delivered(self):
        order = _advance_to_dispatched(_make_order())
        order.mark_delivered("courier-1")
        assert order.status == OrderStatus.DELIVERED.value

    def test_status_change_raises_event_with_note(self):
        order = _advance_to_processing(_make_order())
        order.advance_fulfillment(OrderStatus.READY_FOR_PICKUP, "seller-1")
        event = order._events[-1]
        assert isinstance(event, OrderStatusChanged)
        assert event.previous_status == "processing"
        assert event.new_status == "ready_for_pickup"
        assert event.notes == "Order marked as ready for pickup by seller"


class TestInvalidTransitions:
    def test_pending_cannot_skip_to_ready(self):
        order = _make_order()
        with pytest.raises(InvalidTransitionError) as exc:
            order.advance_fulfillment(OrderStatus.READY_FOR_PICKUP, "seller-1")
        assert str(exc.value) == "Cannot transition from pending to ready_for_pickup"
        assert order.status == OrderStatus.PENDING.value

    def test_processing_cannot_jump_to_dispatched(self):
        order = _advance_to_processing(_make_order())
        with pytest.raises(InvalidTransitionError):
            order.advance_fulfillment(OrderStatus.DISPATCHED, "seller-1")

    def test_ready_cannot_be_marked_ready_again(self):
        order = _advance_to_ready(_make_order())
        with pytest.raises(InvalidTransitionError):
            order.advance_fulfillment(OrderStatus.READY_FOR_PICKUP, "seller-1")

    def test_payment_only_from_pending(self):
        order = _advance_to_processing(_make_order())
        with pytest.raises(InvalidTransitionError):
            order.confirm_payment("buyer-1")

    def test_delivery_requires_dispatch(self):
        order = _advance_to_ready(_make_order())
        with pytest.raises(InvalidTransitionError):
            order.mark_delivered("courier-1")

    def test_sellers_cannot_set_delivered(self):
        order = _advance_to_dispatched(_make_order())
        with pytest.raises(ValidationError):
            order.advance_fulfillment(OrderStatus.DELIVERED, "seller-1")


class TestCancellation:
    def test_cancel_pending(self):
        order = _make_order()
        order.cancel("buyer-1")
        assert order.status == OrderStatus.CANCELLED.value
        event = order._events[-1]
        assert isinstance(event, OrderCancelled)
        assert event.previous_status == "pending"
        assert event.notes == "Order cancelled by user"

    def test_cancel_processing(self):
        order = _advance_to_processing(_make_order())
        order.cancel("buyer-1")
        assert order.status == OrderStatus.CANCELLED.value

    @pytest.mark.parametrize("advance", [_advance_to_ready, _advance_to_dispatched])
    def test_cannot_cancel_after_fulfillment_started(self, advance):
        order = advance(_make_order())
        with pytest.raises(InvalidTransitionError) as exc:
            order.cancel("buyer-1")
        assert "Cannot cancel an order that is" in str(exc.value)

    def test_cancelled_is_terminal(self):
        order = _make_order()
        order.cancel("buyer-1")
        with pytest.raises(InvalidTransitionError):
            order.confirm_payment("buyer-1")
        with pytest.raises(InvalidTransitionError):
            order.cancel("buyer-1")

    def test_delivered_is_terminal(self):
        order = _advance_to_dispatched(_make_order())
        order.mark_delivered("courier-1")
        with pytest.raises(InvalidTransitionError):
            order.cancel("buyer-1")
