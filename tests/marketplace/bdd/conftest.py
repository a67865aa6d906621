"""Shared BDD fixtures and step definitions for the order lifecycle."""

import pytest
from marketplace.address.management import AddAddress
from marketplace.notification.management import list_notifications
from marketplace.order.order import Order
from marketplace.order.payment import ConfirmPayment
from marketplace.product.management import AddProduct
from marketplace.product.product import Product
from marketplace.tracking.tracking import LogisticsTracking, tracking_for_order
from protean import current_domain
from pytest_bdd import given, parsers, then


@pytest.fixture()
def market():
    """Ids created by the steps of one scenario."""
    return {
        "seller_id": "seller-bdd",
        "buyer_id": "buyer-bdd",
        "products": {},
        "order_id": None,
        "address_id": None,
        "error": None,
    }


def _add_address(user_id, line1):
    return current_domain.process(
        AddAddress(user_id=user_id, name="Main", line1=line1, city="Springfield", postal_code="62701", country="US"),
        asynchronous=False,
    )


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given(parsers.cfparse('a seller with a default address at "{line1}"'))
def seller_with_address(market, line1):
    _add_address(market["seller_id"], line1)


@given(parsers.cfparse('the seller lists "{name}" at {price:f} with {quantity:d} units available'))
def seller_lists_product(market, name, price, quantity):
    market["products"][name] = current_domain.process(
        AddProduct(seller_id=market["seller_id"], caller_role="seller", name=name, price=price, available_quantity=quantity),
        asynchronous=False,
    )


@given(parsers.cfparse('a buyer with a delivery address at "{line1}"'))
def buyer_with_address(market, line1):
    market["address_id"] = _add_address(market["buyer_id"], line1)


@given("the payment for the order is confirmed")
def payment_confirmed(market):
    current_domain.process(
        ConfirmPayment(order_id=market["order_id"], caller_id=market["buyer_id"], caller_role="buyer"),
        asynchronous=False,
    )


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse('the order status is "{status}"'))
def order_status_is(market, status):
    assert current_domain.repository_for(Order).get(market["order_id"]).status == status


@then(parsers.cfparse("the order total is {total:f}"))
def order_total_is(market, total):
    assert current_domain.repository_for(Order).get(market["order_id"]).total == total


@then(parsers.cfparse('"{name}" has {quantity:d} units available'))
def product_quantity_is(market, name, quantity):
    product = current_domain.repository_for(Product).get(market["products"][name])
    assert product.available_quantity == quantity


@then(parsers.cfparse('the seller has {count:d} "{notification_type}" notification'))
def seller_notification_count(market, count, notification_type):
    matching = [n for n in list_notifications(market["seller_id"]) if n.notification_type == notification_type]
    assert len(matching) == count


@then("the order has no logistics tracking")
def no_tracking(market):
    assert tracking_for_order(market["order_id"]) is None


@then(parsers.cfparse('the logistics tracking status is "{status}"'))
def tracking_status_is(market, status):
    assert tracking_for_order(market["order_id"]).status == status


@then(parsers.cfparse("the order has exactly {count:d} logistics tracking record"))
def tracking_record_count(market, count):
    rows = current_domain.repository_for(LogisticsTracking)._dao.query.filter(order_id=market["order_id"]).all()
    assert rows.total == count


@then(parsers.cfparse('the tracking starts at "{start}" and ends at "{end}"'))
def tracking_locations(market, start, end):
    tracking = tracking_for_order(market["order_id"])
    assert tracking.start_location.line1 == start
    assert tracking.end_location.line1 == end
