"""Inventory ledger — the operations other components use to move stock.

These helpers run inside the caller's unit of work. They load the product
through the repository and stage the change with ``repo.add``, so the
decrement commits (or rolls back) together with whatever the caller writes.
The provider checks aggregate versions at commit time, so two concurrent
decrements cannot both commit from the same stale read.
"""

import structlog
from protean.utils.globals import current_domain

from marketplace.product.product import Product
from marketplace.shared.errors import NotFoundError

logger = structlog.get_logger(__name__)


def load_product(product_id: str) -> Product:
    product = current_domain.repository_for(Product).get_or_none(product_id)
    if product is None:
        raise NotFoundError(f"Product {product_id} does not exist")
    return product


def check_availability(product_id: str, amount: int) -> bool:
    """True when the product currently holds at least ``amount`` units."""
    return load_product(product_id).has_available(amount)


def decrement(product_id: str, amount: int) -> Product:
    """Take ``amount`` units off the product, flooring at zero."""
    product = load_product(product_id)
    previous = product.available_quantity
    remaining = product.decrement(amount)
    current_domain.repository_for(Product).add(product)

    if amount > previous:
        logger.warning(
            "Decrement exceeded available quantity; floored at zero",
            product_id=str(product_id),
            requested=amount,
            available=previous,
        )
    logger.info(
        "Inventory decremented",
        product_id=str(product_id),
        amount=amount,
        remaining=remaining,
    )
    return product
