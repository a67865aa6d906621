"""Order cancellation — command and handler.

Only the buyer (or an admin) may cancel, and only while the order is pending
or processing. Decremented inventory is not given back. Tracking cleanup and
the history entry react to ``OrderCancelled``.
"""

from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from marketplace.domain import marketplace
from marketplace.order.order import Order
from marketplace.order.queries import load_order
from marketplace.shared.access import assert_owner


@marketplace.command(part_of="Order")
class CancelOrder:
    order_id = Identifier(required=True)
    caller_id = Identifier(required=True)
    caller_role = String(max_length=20)


@marketplace.command_handler(part_of=Order)
class CancelOrderHandler:
    @handle(CancelOrder)
    def cancel_order(self, command):
        order = load_order(command.order_id)
        assert_owner(order.buyer_id, command.caller_id, command.caller_role, "Unauthorized access to order")
        order.cancel(cancelled_by=command.caller_id)
        current_domain.repository_for(Order).add(order)
