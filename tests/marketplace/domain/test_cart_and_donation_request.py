"""Tests for the Cart and DonationRequest aggregates."""

import pytest
from marketplace.cart.cart import Cart
from marketplace.cart.events import CartCleared, ItemAddedToCart
from marketplace.donation.donation import Donation, DonationRequest, DonationRequestStatus
from marketplace.product.product import Product
from marketplace.shared.errors import InvalidTransitionError
from protean.exceptions import ValidationError


def _make_product(quantity=5):
    return Product.create(seller_id="seller-1", name="Tomatoes", price=2.5, available_quantity=quantity)


def _make_request():
    return DonationRequest.create(
        requester_id="org-1",
        organization_name="Food Bank",
        contact_name="Sam",
        contact_email="sam@foodbank.example",
    )


class TestCart:
    def test_add_item(self):
        cart = Cart.create(buyer_id="buyer-1")
        cart.add_item(_make_product(), 2)
        assert len(cart.items) == 1
        assert cart.items[0].quantity == 2
        event = cart._events[-1]
        assert isinstance(event, ItemAddedToCart)
        assert event.seller_id == "seller-1"

    def test_adding_same_product_merges_lines(self):
        cart = Cart.create(buyer_id="buyer-1")
        product = _make_product()
        cart.add_item(product, 1)
        cart.add_item(product, 2)
        assert len(cart.items) == 1
        assert cart.items[0].quantity == 3

    def test_out_of_stock_product_rejected(self):
        cart = Cart.create(buyer_id="buyer-1")
        with pytest.raises(ValidationError) as exc:
            cart.add_item(_make_product(0), 1)
        assert "Product is out of stock" in str(exc.value.messages)

    def test_remove_unknown_item_rejected(self):
        cart = Cart.create(buyer_id="buyer-1")
        with pytest.raises(ValidationError):
            cart.remove_item("prod-x")

    def test_update_quantity_replaces_it(self):
        cart = Cart.create(buyer_id="buyer-1")
        product = _make_product()
        cart.add_item(product, 1)
        cart.update_quantity(str(product.id), 4)
        assert cart.items[0].quantity == 4

    def test_update_quantity_of_missing_item_rejected(self):
        cart = Cart.create(buyer_id="buyer-1")
        with pytest.raises(ValidationError) as exc:
            cart.update_quantity("prod-x", 2)
        assert "Product is not in the cart" in str(exc.value.messages)

    def test_update_quantity_below_one_rejected(self):
        cart = Cart.create(buyer_id="buyer-1")
        product = _make_product()
        cart.add_item(product, 1)
        with pytest.raises(ValidationError):
            cart.update_quantity(str(product.id), 0)

    def test_clear_empties_cart(self):
        cart = Cart.create(buyer_id="buyer-1")
        cart.add_item(_make_product(), 1)
        cart.clear()
        assert len(cart.items) == 0
        assert isinstance(cart._events[-1], CartCleared)


class TestDonation:
    def test_value_defaults_to_price_times_quantity(self):
        donation = Donation.create(_make_product(), 4, destination="Food Bank")
        assert donation.value == 10.0
        assert donation.seller_id == "seller-1"


class TestDonationRequest:
    def test_new_request_is_pending(self):
        assert _make_request().status == DonationRequestStatus.PENDING.value

    def test_fulfil_from_pending(self):
        request = _make_request()
        request.fulfil("seller-1")
        assert request.status == DonationRequestStatus.FULFILLED.value
        assert request.fulfilled_by == "seller-1"

    def test_fulfil_from_approved(self):
        request = _make_request()
        request.approve()
        request.fulfil("seller-1")
        assert request.status == DonationRequestStatus.FULFILLED.value

    def test_fulfilled_request_cannot_be_fulfilled_again(self):
        request = _make_request()
        request.fulfil("seller-1")
        with pytest.raises(InvalidTransitionError):
            request.fulfil("seller-2")

    def test_rejected_request_cannot_be_fulfilled(self):
        request = _make_request()
        request.reject()
        with pytest.raises(InvalidTransitionError):
            request.fulfil("seller-1")
