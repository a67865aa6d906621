"""Seller fulfillment transitions — command and handler.

A seller with at least one item in the order moves it
processing → ready_for_pickup → dispatched. Every guard runs before anything
is written: seller ownership, then the current status, then the seller's
address. The logistics tracking record is created or advanced in the same
unit of work as the status change.
"""

from enum import Enum

import structlog
from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from marketplace.domain import marketplace
from marketplace.order.order import Order, OrderStatus
from marketplace.order.queries import load_order
from marketplace.shared.access import is_admin
from marketplace.shared.errors import UnauthorizedError
from marketplace.tracking.coordinator import (
    TRACKING_STATUS_FOR_ORDER,
    create_or_advance,
    resolve_seller_address,
)

logger = structlog.get_logger(__name__)


class FulfillmentTarget(Enum):
    READY_FOR_PICKUP = OrderStatus.READY_FOR_PICKUP.value
    DISPATCHED = OrderStatus.DISPATCHED.value


@marketplace.command(part_of="Order")
class UpdateOrderStatus:
    """Seller marks an order ready for pickup or dispatched."""

    order_id = Identifier(required=True)
    status = String(required=True, choices=FulfillmentTarget)
    caller_id = Identifier(required=True)
    caller_role = String(max_length=20)


def _acting_seller(order: Order, caller_id: str, caller_role: str | None) -> str:
    """The seller whose address starts the shipment.

    Admins act on behalf of the first seller in the order.
    """
    if order.has_items_from(caller_id):
        return str(caller_id)
    if is_admin(caller_role) and order.seller_ids:
        return order.seller_ids[0]
    raise UnauthorizedError("You can only update orders that contain your products")


@marketplace.command_handler(part_of=Order)
class UpdateOrderStatusHandler:
    @handle(UpdateOrderStatus)
    def update_order_status(self, command):
        order = load_order(command.order_id)
        target = OrderStatus(command.status)

        seller_id = _acting_seller(order, command.caller_id, command.caller_role)
        order.assert_can_transition(target)
        seller_address = resolve_seller_address(seller_id)

        order.advance_fulfillment(target, changed_by=command.caller_id)
        current_domain.repository_for(Order).add(order)

        create_or_advance(
            order,
            seller_address,
            TRACKING_STATUS_FOR_ORDER[target],
            created_by=seller_id,
        )
        logger.info(
            "Order status updated",
            order_id=str(order.id),
            status=order.status,
            seller_id=seller_id,
        )
