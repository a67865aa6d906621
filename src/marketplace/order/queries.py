"""Read helpers for orders."""

from protean.utils.globals import current_domain

from marketplace.order.order import Order
from marketplace.shared.access import assert_owner
from marketplace.shared.errors import NotFoundError


def load_order(order_id: str) -> Order:
    order = current_domain.repository_for(Order).get_or_none(order_id)
    if order is None:
        raise NotFoundError(f"Order {order_id} does not exist")
    return order


def get_order(order_id: str, caller_id: str, caller_role: str | None) -> Order:
    """Fetch an order for its buyer or an admin."""
    order = load_order(order_id)
    assert_owner(order.buyer_id, caller_id, caller_role, "Unauthorized access to order")
    return order


def list_buyer_orders(buyer_id: str) -> list[Order]:
    """A buyer's orders, newest first."""
    return (
        current_domain.repository_for(Order)
        ._dao.query.filter(buyer_id=buyer_id)
        .order_by("-created_at")
        .all()
        .items
    )
