import json

import pytest
from protean import current_domain
from protean.integrations.pytest import DomainFixture


@pytest.fixture(scope="session")
def marketplace_bed():
    from marketplace.domain import marketplace

    bed = DomainFixture(marketplace)
    bed.setup()
    yield bed
    bed.teardown()


@pytest.fixture(autouse=True)
def _ctx(marketplace_bed):
    with marketplace_bed.domain_context():
        yield


def _add_address(user_id, **overrides):
    from marketplace.address.management import AddAddress

    fields = {
        "name": "Home",
        "line1": "1 Main Street",
        "city": "Springfield",
        "state": "IL",
        "postal_code": "62701",
        "country": "US",
    }
    fields.update(overrides)
    return current_domain.process(AddAddress(user_id=user_id, **fields), asynchronous=False)


@pytest.fixture()
def seller():
    """A seller with a warehouse address on file."""
    _add_address("seller-1", name="Warehouse", line1="9 Depot Road", city="Shelbyville", postal_code="62565")
    return "seller-1"


@pytest.fixture()
def buyer():
    """A buyer with a default delivery address."""
    return {"id": "buyer-1", "address_id": _add_address("buyer-1")}


@pytest.fixture()
def product_id(seller):
    """Ten units of Tomatoes at 5.00, listed by ``seller``."""
    from marketplace.product.management import AddProduct

    return current_domain.process(
        AddProduct(seller_id=seller, caller_role="seller", name="Tomatoes", price=5.0, available_quantity=10),
        asynchronous=False,
    )


@pytest.fixture()
def pending_order(buyer, product_id):
    """A pending order for 2 Tomatoes at 5.00."""
    from marketplace.order.placement import PlaceOrder

    items = [{"product_id": product_id, "quantity": 2, "unit_price": 5.0}]
    return current_domain.process(
        PlaceOrder(buyer_id=buyer["id"], address_id=buyer["address_id"], items=json.dumps(items)),
        asynchronous=False,
    )


@pytest.fixture()
def processing_order(pending_order, buyer):
    """The pending order after its payment was confirmed."""
    from marketplace.order.payment import ConfirmPayment

    current_domain.process(
        ConfirmPayment(order_id=pending_order, caller_id=buyer["id"], caller_role="buyer"),
        asynchronous=False,
    )
    return pending_order
