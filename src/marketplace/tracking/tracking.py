"""LogisticsTracking aggregate (CQRS) — the shipment record for one order.

Status only moves forward:
    WAITING_PICKUP → IN_TRANSIT → DELIVERED

Start and end locations are copied from the seller's and buyer's addresses
when the record is created and are never re-taken, so later address book
edits do not move a shipment that is already under way.
"""

from datetime import UTC, datetime
from enum import Enum

from protean.fields import DateTime, Identifier, String, ValueObject
from protean.utils.globals import current_domain

from marketplace.domain import marketplace


class TrackingStatus(Enum):
    WAITING_PICKUP = "waiting_pickup"
    IN_TRANSIT = "in_transit"
    DELIVERED = "delivered"


_PROGRESSION = [
    TrackingStatus.WAITING_PICKUP,
    TrackingStatus.IN_TRANSIT,
    TrackingStatus.DELIVERED,
]


@marketplace.value_object(part_of="LogisticsTracking")
class Location:
    """Postal snapshot of one end of the shipment."""

    name = String(max_length=100)
    line1 = String(required=True, max_length=255)
    line2 = String(max_length=255)
    city = String(required=True, max_length=100)
    state = String(max_length=100)
    postal_code = String(required=True, max_length=20)
    country = String(required=True, max_length=100)


@marketplace.aggregate
class LogisticsTracking:
    order_id = Identifier(required=True, unique=True)
    start_location = ValueObject(Location)
    end_location = ValueObject(Location)
    status = String(choices=TrackingStatus, default=TrackingStatus.WAITING_PICKUP.value)
    created_by = Identifier(required=True)
    created_at = DateTime()
    updated_at = DateTime()

    @classmethod
    def create(cls, order_id: str, start_location: dict, end_location: dict, created_by: str):
        now = datetime.now(UTC)
        return cls(
            order_id=order_id,
            start_location=Location(**start_location),
            end_location=Location(**end_location),
            status=TrackingStatus.WAITING_PICKUP.value,
            created_by=created_by,
            created_at=now,
            updated_at=now,
        )

    def advance_to(self, target_status: TrackingStatus) -> bool:
        """Move forward to ``target_status``.

        Returns False, leaving the record untouched, when the target is the
        current status or behind it.
        """
        current = TrackingStatus(self.status)
        if _PROGRESSION.index(target_status) <= _PROGRESSION.index(current):
            return False
        self.status = target_status.value
        self.updated_at = datetime.now(UTC)
        return True


def tracking_for_order(order_id: str) -> LogisticsTracking | None:
    return (
        current_domain.repository_for(LogisticsTracking)._dao.query.filter(order_id=str(order_id)).all().first
    )
