"""Delivery recording — command and handler.

Logistics staff (or an admin) record that a dispatched order arrived. The
tracking record moves to delivered in the same unit of work.
"""

from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from marketplace.domain import marketplace
from marketplace.order.order import Order
from marketplace.order.queries import load_order
from marketplace.shared.access import Role, assert_role
from marketplace.tracking.coordinator import advance_existing
from marketplace.tracking.tracking import TrackingStatus


@marketplace.command(part_of="Order")
class RecordDelivery:
    order_id = Identifier(required=True)
    caller_id = Identifier(required=True)
    caller_role = String(max_length=20)


@marketplace.command_handler(part_of=Order)
class RecordDeliveryHandler:
    @handle(RecordDelivery)
    def record_delivery(self, command):
        assert_role(command.caller_role, {Role.LOGISTICS}, "Only logistics staff can record deliveries")
        order = load_order(command.order_id)
        order.mark_delivered(delivered_by=command.caller_id)
        current_domain.repository_for(Order).add(order)
        advance_existing(str(order.id), TrackingStatus.DELIVERED)
