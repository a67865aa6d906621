"""Logistics tracking coordinator.

Keeps the single tracking record of an order in step with the order's
fulfillment status. All functions run inside the caller's unit of work, so
the tracking change commits together with the order status change that
triggered it.
"""

import structlog
from protean.utils.globals import current_domain

from marketplace.address.address import Address, addresses_of
from marketplace.order.order import OrderStatus
from marketplace.order.queries import load_order
from marketplace.shared.access import Role
from marketplace.shared.errors import NoAddressError, NotFoundError, UnauthorizedError
from marketplace.tracking.tracking import LogisticsTracking, TrackingStatus, tracking_for_order

logger = structlog.get_logger(__name__)

TRACKING_STATUS_FOR_ORDER = {
    OrderStatus.READY_FOR_PICKUP: TrackingStatus.WAITING_PICKUP,
    OrderStatus.DISPATCHED: TrackingStatus.IN_TRANSIT,
    OrderStatus.DELIVERED: TrackingStatus.DELIVERED,
}


def resolve_seller_address(seller_id: str) -> Address:
    """The seller's default address, else any address on file."""
    addresses = addresses_of(seller_id)
    if not addresses:
        raise NoAddressError("Seller must have an address to update order status")
    return addresses[0]


def create_or_advance(order, seller_address: Address, target_status: TrackingStatus, created_by: str):
    """Create the order's tracking record if missing, then move it toward ``target_status``."""
    repo = current_domain.repository_for(LogisticsTracking)
    tracking = tracking_for_order(order.id)

    if tracking is None:
        tracking = LogisticsTracking.create(
            order_id=str(order.id),
            start_location=seller_address.as_snapshot(),
            end_location=order.delivery_address.to_dict(),
            created_by=created_by,
        )
        tracking.advance_to(target_status)
        repo.add(tracking)
        logger.info(
            "Logistics tracking created",
            order_id=str(order.id),
            tracking_id=str(tracking.id),
            status=tracking.status,
        )
        return tracking

    if tracking.advance_to(target_status):
        repo.add(tracking)
        logger.info(
            "Logistics tracking advanced",
            order_id=str(order.id),
            tracking_id=str(tracking.id),
            status=tracking.status,
        )
    return tracking


def advance_existing(order_id: str, target_status: TrackingStatus):
    """Advance the order's tracking record if there is one."""
    tracking = tracking_for_order(order_id)
    if tracking is None:
        logger.warning("No logistics tracking for order", order_id=str(order_id))
        return None
    if tracking.advance_to(target_status):
        current_domain.repository_for(LogisticsTracking).add(tracking)
    return tracking


def remove_for_order(order_id: str) -> bool:
    """Delete the order's tracking record. Returns False when there was none."""
    tracking = tracking_for_order(order_id)
    if tracking is None:
        return False
    current_domain.repository_for(LogisticsTracking)._dao.delete(tracking)
    logger.info("Logistics tracking removed", order_id=str(order_id), tracking_id=str(tracking.id))
    return True


def get_tracking(order_id: str, caller_id: str, caller_role: str | None) -> LogisticsTracking:
    """The order's tracking record, for its buyer, its sellers, logistics staff and admins."""
    order = load_order(order_id)
    if caller_role not in (Role.ADMIN.value, Role.LOGISTICS.value):
        if str(order.buyer_id) != str(caller_id) and not order.has_items_from(caller_id):
            raise UnauthorizedError("Unauthorized access to order tracking")

    tracking = tracking_for_order(order_id)
    if tracking is None:
        raise NotFoundError(f"No tracking for order {order_id}")
    return tracking
