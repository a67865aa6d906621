"""SavedProduct aggregate (CQRS) — a product a user bookmarked for later.

A user saves a product at most once; saving it again is a no-op.
"""

from datetime import UTC, datetime

from protean.fields import DateTime, Identifier
from protean.utils.globals import current_domain

from marketplace.domain import marketplace


@marketplace.aggregate
class SavedProduct:
    user_id = Identifier(required=True)
    product_id = Identifier(required=True)
    created_at = DateTime()

    @classmethod
    def create(cls, user_id: str, product_id: str):
        return cls(user_id=user_id, product_id=product_id, created_at=datetime.now(UTC))


def saved_entry(user_id: str, product_id: str) -> SavedProduct | None:
    return (
        current_domain.repository_for(SavedProduct)
        ._dao.query.filter(user_id=user_id, product_id=product_id)
        .all()
        .first
    )


def saved_products_of(user_id: str) -> list[SavedProduct]:
    """A user's saved products, most recently saved first."""
    return (
        current_domain.repository_for(SavedProduct)
        ._dao.query.filter(user_id=user_id)
        .order_by("-created_at")
        .all()
        .items
    )


def is_product_saved(user_id: str, product_id: str) -> bool:
    return saved_entry(user_id, product_id) is not None
