"""Donation aggregates (CQRS).

A ``Donation`` records units of a product a seller gave away, either on their
own initiative or to fulfil a ``DonationRequest`` from an organisation.

DonationRequest State Machine (admins approve or reject, sellers fulfil):
    PENDING → {APPROVED, FULFILLED, REJECTED}
    APPROVED → {FULFILLED, REJECTED}
"""

from datetime import UTC, datetime
from enum import Enum

from protean.fields import DateTime, Float, Identifier, Integer, String, Text
from protean.utils.globals import current_domain

from marketplace.domain import marketplace
from marketplace.shared.errors import InvalidTransitionError


class DonationRequestStatus(Enum):
    PENDING = "pending"
    APPROVED = "approved"
    FULFILLED = "fulfilled"
    REJECTED = "rejected"


class UrgencyLevel(Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


_VALID_TRANSITIONS = {
    DonationRequestStatus.PENDING: {
        DonationRequestStatus.APPROVED,
        DonationRequestStatus.FULFILLED,
        DonationRequestStatus.REJECTED,
    },
    DonationRequestStatus.APPROVED: {DonationRequestStatus.FULFILLED, DonationRequestStatus.REJECTED},
    DonationRequestStatus.FULFILLED: set(),  # terminal
    DonationRequestStatus.REJECTED: set(),  # terminal
}


@marketplace.aggregate
class Donation:
    product_id = Identifier(required=True)
    seller_id = Identifier(required=True)
    quantity = Integer(required=True, min_value=1)
    destination = String(max_length=255)
    notes = Text()
    value = Float(min_value=0.0)
    request_id = Identifier()
    created_at = DateTime()

    @classmethod
    def create(
        cls,
        product,
        quantity: int,
        destination: str | None = None,
        notes: str | None = None,
        value: float | None = None,
        request_id: str | None = None,
    ):
        return cls(
            product_id=str(product.id),
            seller_id=str(product.seller_id),
            quantity=quantity,
            destination=destination,
            notes=notes,
            value=value if value is not None else round(product.price * quantity, 2),
            request_id=request_id,
            created_at=datetime.now(UTC),
        )


@marketplace.aggregate
class DonationRequest:
    requester_id = Identifier()
    organization_name = String(required=True, max_length=255)
    contact_name = String(required=True, max_length=255)
    contact_email = String(required=True, max_length=255)
    urgency_level = String(choices=UrgencyLevel, default=UrgencyLevel.MEDIUM.value)
    quantity_required = String(max_length=255)
    usage_purpose = Text()
    description = Text()
    status = String(choices=DonationRequestStatus, default=DonationRequestStatus.PENDING.value)
    fulfilled_by = Identifier()
    created_at = DateTime()
    updated_at = DateTime()

    @classmethod
    def create(cls, **details):
        now = datetime.now(UTC)
        return cls(
            **details,
            status=DonationRequestStatus.PENDING.value,
            created_at=now,
            updated_at=now,
        )

    def _move_to(self, target: DonationRequestStatus) -> None:
        current = DonationRequestStatus(self.status)
        if target not in _VALID_TRANSITIONS[current]:
            raise InvalidTransitionError(f"Cannot move donation request from {current.value} to {target.value}")
        self.status = target.value
        self.updated_at = datetime.now(UTC)

    def approve(self) -> None:
        self._move_to(DonationRequestStatus.APPROVED)

    def fulfil(self, seller_id: str) -> None:
        self._move_to(DonationRequestStatus.FULFILLED)
        self.fulfilled_by = seller_id

    def reject(self) -> None:
        self._move_to(DonationRequestStatus.REJECTED)


def donations_of(seller_id: str) -> list[Donation]:
    """A seller's donations, newest first."""
    return (
        current_domain.repository_for(Donation)
        ._dao.query.filter(seller_id=seller_id)
        .order_by("-created_at")
        .all()
        .items
    )


def list_donation_requests(status: str | None = None, urgency_level: str | None = None) -> list[DonationRequest]:
    """Donation requests, newest first.

    Filtering by urgency alone lists approved requests only, the ones sellers
    are invited to fulfil.
    """
    filters = {}
    if urgency_level:
        filters["urgency_level"] = urgency_level
        filters["status"] = status or DonationRequestStatus.APPROVED.value
    elif status:
        filters["status"] = status

    query = current_domain.repository_for(DonationRequest)._dao.query
    if filters:
        query = query.filter(**filters)
    return query.order_by("-created_at").all().items
