"""Order placement — command and handler.

Validates the delivery address and every line, checks stock, creates the
order and takes the ordered units off the inventory ledger, all in one unit
of work. Seller notifications and cart clearing react to ``OrderPlaced``
after the commit and cannot undo the order.
"""

import json
from collections import Counter

import structlog
from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Identifier, String, Text
from protean.utils.globals import current_domain

from marketplace.address.address import Address
from marketplace.domain import marketplace
from marketplace.order.order import DEFAULT_PAYMENT_METHOD, Order
from marketplace.product import ledger

logger = structlog.get_logger(__name__)


@marketplace.command(part_of="Order")
class PlaceOrder:
    """Check out a buyer's selection as a new pending order."""

    buyer_id = Identifier(required=True)
    address_id = Identifier(required=True)
    items = Text(required=True)  # JSON: [{product_id, quantity, unit_price, product_name?}]
    payment_method = String(max_length=50, default=DEFAULT_PAYMENT_METHOD)


def _parse_items(raw) -> list[dict]:
    items = json.loads(raw) if isinstance(raw, str) else raw
    if not items:
        raise ValidationError({"items": ["Your cart is empty"]})
    for item in items:
        if not item.get("product_id"):
            raise ValidationError({"product_id": ["Each item needs a product"]})
        if (item.get("quantity") or 0) <= 0:
            raise ValidationError({"quantity": ["Each item needs a positive quantity"]})
        if item.get("unit_price") is None:
            raise ValidationError({"unit_price": ["Each item needs a unit price"]})
    return items


def _delivery_address(address_id: str, buyer_id: str) -> Address:
    address = current_domain.repository_for(Address).get_or_none(address_id)
    if address is None or str(address.user_id) != str(buyer_id):
        raise ValidationError({"address_id": ["Delivery address not found for this buyer"]})
    return address


@marketplace.command_handler(part_of=Order)
class PlaceOrderHandler:
    @handle(PlaceOrder)
    def place_order(self, command):
        items = _parse_items(command.items)
        address = _delivery_address(command.address_id, command.buyer_id)

        requested = Counter()
        for item in items:
            requested[str(item["product_id"])] += int(item["quantity"])

        products = {}
        for product_id, quantity in requested.items():
            available = ledger.check_availability(product_id, quantity)
            product = ledger.load_product(product_id)
            if not available:
                raise ValidationError(
                    {
                        "quantity": [
                            f"Insufficient stock for {product.name}: "
                            f"requested {quantity}, available {product.available_quantity}"
                        ]
                    }
                )
            products[product_id] = product

        items_data = []
        for item in items:
            product = products[str(item["product_id"])]
            items_data.append(
                {
                    "product_id": str(product.id),
                    "product_name": item.get("product_name") or product.name,
                    "seller_id": str(product.seller_id),
                    "quantity": int(item["quantity"]),
                    "unit_price": float(item["unit_price"]),
                }
            )

        order = Order.create(
            buyer_id=command.buyer_id,
            address_id=command.address_id,
            delivery_address=address.as_snapshot(),
            items_data=items_data,
            payment_method=command.payment_method,
        )
        current_domain.repository_for(Order).add(order)

        for product_id, quantity in requested.items():
            ledger.decrement(product_id, quantity)

        logger.info(
            "Order placed",
            order_id=str(order.id),
            buyer_id=str(command.buyer_id),
            item_count=len(items_data),
            total=order.total,
        )
        return str(order.id)
