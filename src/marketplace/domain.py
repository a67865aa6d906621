"""Marketplace bounded context — Orders, Inventory, Logistics and Notifications.

A single domain shared by buyers, sellers, logistics staff and admins. The
order lifecycle drives the inventory ledger, the per-order logistics tracking
record and the seller notification fan-out. Addresses, carts, donations,
saved products and order history support that core.
"""

from protean.domain import Domain

from marketplace.utils.logging import configure_logging, get_logger

# Configure logging for the application
configure_logging()

logger = get_logger(__name__)

# Domain Composition Root
marketplace = Domain(name="marketplace")
