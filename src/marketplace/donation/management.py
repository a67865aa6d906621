"""Donation workflows — commands and handler.

``DonateProduct``: a seller gives away units of their own product.
``DonateNewProduct``: a seller lists a product and gives part of it away in
one step.
``SubmitDonationRequest``: an organisation asks for donations.
``ApproveDonationRequest`` and ``RejectDonationRequest``: admin review.
``AcceptDonationRequest``: a seller fulfils a pending or approved request
from their stock. Every product is checked before any quantity moves, and
all the decrements and the status change commit together or not at all.
"""

import json
from collections import Counter

import structlog
from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Boolean, Date, Float, Identifier, Integer, String, Text
from protean.utils.globals import current_domain

from marketplace.domain import marketplace
from marketplace.donation.donation import Donation, DonationRequest, UrgencyLevel
from marketplace.product.ledger import load_product
from marketplace.product.product import Product, ProductPriority
from marketplace.shared.access import Role, assert_owner, assert_role
from marketplace.shared.errors import NotFoundError

logger = structlog.get_logger(__name__)


@marketplace.command(part_of="Donation")
class DonateProduct:
    product_id = Identifier(required=True)
    caller_id = Identifier(required=True)
    caller_role = String(max_length=20)
    quantity = Integer(required=True, min_value=1)
    destination = String(required=True, max_length=255)
    notes = Text()
    value = Float(min_value=0.0)


@marketplace.command(part_of="Donation")
class DonateNewProduct:
    """List a new product with ``available_quantity`` units and donate ``quantity`` of them."""

    caller_id = Identifier(required=True)
    caller_role = String(max_length=20)
    name = String(required=True, max_length=255)
    description = Text()
    price = Float(required=True, min_value=0.0)
    category = String(max_length=100)
    available_quantity = Integer(required=True, min_value=1)
    perishable = Boolean(default=False)
    expiry_date = Date()
    priority = String(choices=ProductPriority, default=ProductPriority.MEDIUM.value)
    quantity = Integer(required=True, min_value=1)
    destination = String(required=True, max_length=255)
    notes = Text()


@marketplace.command(part_of="DonationRequest")
class SubmitDonationRequest:
    requester_id = Identifier()
    organization_name = String(required=True, max_length=255)
    contact_name = String(required=True, max_length=255)
    contact_email = String(required=True, max_length=255)
    urgency_level = String(choices=UrgencyLevel, default=UrgencyLevel.MEDIUM.value)
    quantity_required = String(max_length=255)
    usage_purpose = Text()
    description = Text()


@marketplace.command(part_of="DonationRequest")
class ApproveDonationRequest:
    request_id = Identifier(required=True)
    caller_role = String(max_length=20)


@marketplace.command(part_of="DonationRequest")
class AcceptDonationRequest:
    request_id = Identifier(required=True)
    caller_id = Identifier(required=True)
    caller_role = String(max_length=20)
    products = Text(required=True)  # JSON: [{product_id, quantity}]
    notes = Text()


@marketplace.command(part_of="DonationRequest")
class RejectDonationRequest:
    request_id = Identifier(required=True)
    caller_role = String(max_length=20)


def load_request(request_id: str) -> DonationRequest:
    request = current_domain.repository_for(DonationRequest).get_or_none(request_id)
    if request is None:
        raise NotFoundError(f"Donation request {request_id} does not exist")
    return request


def _requested_quantities(raw) -> Counter:
    """Quantities per product, with repeated products summed."""
    lines = json.loads(raw) if isinstance(raw, str) else raw
    if not lines:
        raise ValidationError({"products": ["Choose at least one product to donate"]})

    requested = Counter()
    for line in lines:
        quantity = int(line.get("quantity") or 0)
        if quantity <= 0:
            raise ValidationError({"quantity": ["Each product needs a positive quantity"]})
        requested[str(line["product_id"])] += quantity
    return requested


@marketplace.command_handler(part_of=Donation)
class DonationCommandHandler:
    @handle(DonateProduct)
    def donate_product(self, command):
        product = load_product(command.product_id)
        assert_owner(product.seller_id, command.caller_id, command.caller_role, "You can only donate your own products")
        if not product.has_available(command.quantity):
            raise ValidationError({"quantity": ["Not enough quantity available"]})

        donation = Donation.create(
            product,
            command.quantity,
            destination=command.destination,
            notes=command.notes,
            value=command.value,
        )
        product.record_donation(command.quantity, str(donation.id))
        current_domain.repository_for(Donation).add(donation)
        current_domain.repository_for(Product).add(product)

        logger.info(
            "Product donated",
            donation_id=str(donation.id),
            product_id=str(product.id),
            quantity=command.quantity,
        )
        return str(donation.id)

    @handle(DonateNewProduct)
    def donate_new_product(self, command):
        assert_role(command.caller_role, {Role.SELLER}, "Only sellers can donate products")
        if command.quantity > command.available_quantity:
            raise ValidationError({"quantity": ["Cannot donate more than the listed quantity"]})

        product = Product.create(
            seller_id=command.caller_id,
            name=command.name,
            price=command.price,
            available_quantity=command.available_quantity,
            description=command.description,
            category=command.category,
            perishable=command.perishable,
            expiry_date=command.expiry_date,
            priority=command.priority,
        )
        donation = Donation.create(
            product,
            command.quantity,
            destination=command.destination,
            notes=command.notes,
        )
        product.record_donation(command.quantity, str(donation.id))
        current_domain.repository_for(Product).add(product)
        current_domain.repository_for(Donation).add(donation)

        logger.info(
            "New product donated",
            donation_id=str(donation.id),
            product_id=str(product.id),
            quantity=command.quantity,
        )
        return {"product_id": str(product.id), "donation_id": str(donation.id)}


@marketplace.command_handler(part_of=DonationRequest)
class DonationRequestCommandHandler:
    @handle(SubmitDonationRequest)
    def submit_request(self, command):
        request = DonationRequest.create(
            requester_id=command.requester_id,
            organization_name=command.organization_name,
            contact_name=command.contact_name,
            contact_email=command.contact_email,
            urgency_level=command.urgency_level,
            quantity_required=command.quantity_required,
            usage_purpose=command.usage_purpose,
            description=command.description,
        )
        current_domain.repository_for(DonationRequest).add(request)
        return str(request.id)

    @handle(ApproveDonationRequest)
    def approve_request(self, command):
        assert_role(command.caller_role, {Role.ADMIN}, "Only admins can approve donation requests")
        request = load_request(command.request_id)
        request.approve()
        current_domain.repository_for(DonationRequest).add(request)
        logger.info("Donation request approved", request_id=str(request.id))

    @handle(AcceptDonationRequest)
    def accept_request(self, command):
        assert_role(command.caller_role, {Role.SELLER}, "Only sellers can fulfil donation requests")
        request = load_request(command.request_id)
        requested = _requested_quantities(command.products)

        products = {}
        for product_id, quantity in requested.items():
            product = current_domain.repository_for(Product).get_or_none(product_id)
            if product is None or str(product.seller_id) != str(command.caller_id):
                raise NotFoundError(f"Product with ID {product_id} not found")
            if not product.has_available(quantity):
                raise ValidationError({"quantity": [f"Not enough quantity available for product {product_id}"]})
            products[product_id] = product

        request.fulfil(seller_id=command.caller_id)
        current_domain.repository_for(DonationRequest).add(request)

        for product_id, quantity in requested.items():
            product = products[product_id]
            donation = Donation.create(
                product,
                quantity,
                destination=request.organization_name,
                notes=command.notes,
                request_id=str(request.id),
            )
            product.record_donation(quantity, str(donation.id))
            current_domain.repository_for(Donation).add(donation)
            current_domain.repository_for(Product).add(product)

        logger.info(
            "Donation request fulfilled",
            request_id=str(request.id),
            seller_id=str(command.caller_id),
            product_count=len(products),
        )

    @handle(RejectDonationRequest)
    def reject_request(self, command):
        assert_role(command.caller_role, {Role.ADMIN}, "Only admins can reject donation requests")
        request = load_request(command.request_id)
        request.reject()
        current_domain.repository_for(DonationRequest).add(request)
