"""Seller orders — one row per (order, seller) for the seller dashboard.

Rows are keyed by the denormalized ``seller_id`` captured on each order line
at checkout, so a seller's orders are found with a single lookup.
"""

import json
from collections import defaultdict

from protean.core.projector import on
from protean.fields import DateTime, Float, Identifier, Integer, String
from protean.utils.globals import current_domain

from marketplace.domain import marketplace
from marketplace.order.events import OrderCancelled, OrderPlaced, OrderStatusChanged
from marketplace.order.order import Order, OrderStatus


def _entry_id(order_id, seller_id) -> str:
    return f"{order_id}:{seller_id}"


@marketplace.projection
class SellerOrders:
    entry_id = Identifier(identifier=True, required=True)
    order_id = Identifier(required=True)
    seller_id = Identifier(required=True)
    buyer_id = Identifier(required=True)
    status = String(required=True)
    item_count = Integer(default=0)
    seller_total = Float(default=0.0)
    created_at = DateTime()
    updated_at = DateTime()


@marketplace.projector(projector_for=SellerOrders, aggregates=[Order])
class SellerOrdersProjector:
    @on(OrderPlaced)
    def on_order_placed(self, event):
        items = json.loads(event.items) if isinstance(event.items, str) else event.items
        per_seller = defaultdict(lambda: {"count": 0, "total": 0.0})
        for item in items:
            summary = per_seller[item["seller_id"]]
            summary["count"] += int(item["quantity"])
            summary["total"] += float(item["unit_price"]) * int(item["quantity"])

        repo = current_domain.repository_for(SellerOrders)
        for seller_id, summary in per_seller.items():
            repo.add(
                SellerOrders(
                    entry_id=_entry_id(event.order_id, seller_id),
                    order_id=event.order_id,
                    seller_id=seller_id,
                    buyer_id=event.buyer_id,
                    status=OrderStatus.PENDING.value,
                    item_count=summary["count"],
                    seller_total=round(summary["total"], 2),
                    created_at=event.placed_at,
                    updated_at=event.placed_at,
                )
            )

    def _update_status(self, order_id, status, updated_at):
        repo = current_domain.repository_for(SellerOrders)
        for record in repo._dao.query.filter(order_id=str(order_id)).all().items:
            record.status = status
            record.updated_at = updated_at
            repo.add(record)

    @on(OrderStatusChanged)
    def on_status_changed(self, event):
        self._update_status(event.order_id, event.new_status, event.changed_at)

    @on(OrderCancelled)
    def on_order_cancelled(self, event):
        self._update_status(event.order_id, OrderStatus.CANCELLED.value, event.cancelled_at)


def orders_for_seller(seller_id: str, status: str | None = None) -> list[SellerOrders]:
    """A seller's order rows, newest first, optionally narrowed to one status."""
    filters = {"seller_id": seller_id}
    if status:
        filters["status"] = status
    return (
        current_domain.repository_for(SellerOrders)
        ._dao.query.filter(**filters)
        .order_by("-created_at")
        .all()
        .items
    )
