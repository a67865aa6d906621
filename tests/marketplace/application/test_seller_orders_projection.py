"""Application tests for the seller orders projection."""

import json

from marketplace.order.cancellation import CancelOrder
from marketplace.order.fulfillment import UpdateOrderStatus
from marketplace.order.placement import PlaceOrder
from marketplace.product.management import AddProduct
from marketplace.projections.seller_orders import orders_for_seller
from protean import current_domain


def _add_product(seller_id, name, price):
    return current_domain.process(
        AddProduct(seller_id=seller_id, caller_role="seller", name=name, price=price, available_quantity=10),
        asynchronous=False,
    )


class TestSellerOrders:
    def test_one_row_per_seller(self, buyer, seller):
        tomatoes = _add_product(seller, "Tomatoes", 5.0)
        pears = _add_product("seller-2", "Pears", 2.0)
        items = [
            {"product_id": tomatoes, "quantity": 2, "unit_price": 5.0},
            {"product_id": pears, "quantity": 3, "unit_price": 2.0},
        ]
        order_id = current_domain.process(
            PlaceOrder(buyer_id=buyer["id"], address_id=buyer["address_id"], items=json.dumps(items)),
            asynchronous=False,
        )

        mine = orders_for_seller(seller)
        assert len(mine) == 1
        assert mine[0].order_id == order_id
        assert mine[0].item_count == 2
        assert mine[0].seller_total == 10.0
        assert mine[0].status == "pending"

        theirs = orders_for_seller("seller-2")
        assert theirs[0].seller_total == 6.0

    def test_status_follows_order(self, seller, processing_order):
        current_domain.process(
            UpdateOrderStatus(order_id=processing_order, status="ready_for_pickup", caller_id=seller, caller_role="seller"),
            asynchronous=False,
        )
        assert orders_for_seller(seller)[0].status == "ready_for_pickup"
        assert orders_for_seller(seller, status="ready_for_pickup")[0].order_id == processing_order
        assert orders_for_seller(seller, status="pending") == []

    def test_cancellation_reflected(self, buyer, seller, pending_order):
        current_domain.process(
            CancelOrder(order_id=pending_order, caller_id=buyer["id"], caller_role="buyer"),
            asynchronous=False,
        )
        assert orders_for_seller(seller)[0].status == "cancelled"

    def test_other_sellers_see_nothing(self, pending_order):
        assert orders_for_seller("seller-2") == []
