"""Order history — an append-only audit trail of order status changes.

Entries are bookkeeping: they are written after the status change commits
and a failure to write one never affects the order.
"""

from datetime import UTC, datetime

import structlog
from protean.fields import DateTime, Identifier, String
from protean.utils.globals import current_domain

from marketplace.domain import marketplace

logger = structlog.get_logger(__name__)


@marketplace.aggregate
class OrderHistoryEntry:
    order_id = Identifier(required=True)
    status = String(required=True, max_length=50)
    notes = String(max_length=500)
    changed_by = Identifier()
    created_at = DateTime()


def record_history(order_id: str, status: str, notes: str | None = None, changed_by: str | None = None) -> str | None:
    """Append a history entry. Returns its id, or None when the write failed."""
    try:
        entry = OrderHistoryEntry(
            order_id=order_id,
            status=status,
            notes=notes,
            changed_by=changed_by,
            created_at=datetime.now(UTC),
        )
        current_domain.repository_for(OrderHistoryEntry).add(entry)
    except Exception:
        logger.exception("Failed to record order history", order_id=order_id, status=status)
        return None
    return str(entry.id)


def history_for_order(order_id: str) -> list[OrderHistoryEntry]:
    """History entries of an order, oldest first."""
    return (
        current_domain.repository_for(OrderHistoryEntry)
        ._dao.query.filter(order_id=order_id)
        .order_by("created_at")
        .all()
        .items
    )
