"""Read helpers for the product catalogue."""

from protean.utils.globals import current_domain

from marketplace.product.product import Product

ALL_CATEGORIES = "all"


def list_products(category: str | None = None) -> list[Product]:
    """The catalogue, newest listings first, optionally narrowed to one category.

    Category matching ignores case, and ``"all"`` means no filter.
    """
    products = current_domain.repository_for(Product)._dao.query.order_by("-created_at").all().items
    if not category or category.lower() == ALL_CATEGORIES:
        return products
    return [p for p in products if (p.category or "").lower() == category.lower()]


def products_of_seller(seller_id: str) -> list[Product]:
    """A seller's own listings, newest first."""
    return (
        current_domain.repository_for(Product)
        ._dao.query.filter(seller_id=seller_id)
        .order_by("-created_at")
        .all()
        .items
    )


def product_or_none(product_id: str) -> Product | None:
    return current_domain.repository_for(Product).get_or_none(product_id)
