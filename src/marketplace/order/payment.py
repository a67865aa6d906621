"""Payment confirmation — command and handler.

The payment step itself happens outside the marketplace. Confirming it moves
a pending order to processing, where sellers can start fulfillment.
"""

from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from marketplace.domain import marketplace
from marketplace.order.order import Order
from marketplace.order.queries import load_order
from marketplace.shared.access import assert_owner


@marketplace.command(part_of="Order")
class ConfirmPayment:
    order_id = Identifier(required=True)
    caller_id = Identifier(required=True)
    caller_role = String(max_length=20)


@marketplace.command_handler(part_of=Order)
class ConfirmPaymentHandler:
    @handle(ConfirmPayment)
    def confirm_payment(self, command):
        order = load_order(command.order_id)
        assert_owner(order.buyer_id, command.caller_id, command.caller_role, "Unauthorized access to order")
        order.confirm_payment(confirmed_by=command.caller_id)
        current_domain.repository_for(Order).add(order)
