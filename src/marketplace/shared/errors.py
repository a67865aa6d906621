"""Error taxonomy for the marketplace.

Each error extends the protean exception that carries the same meaning, so
the standard protean FastAPI handlers already map them to sensible status
codes. The API layer registers narrower handlers for the classes below.
"""

from protean.exceptions import (
    DatabaseError,
    InvalidOperationError,
    InvalidStateError,
    ObjectNotFoundError,
    ValidationError,
)

__all__ = [
    "DependencyError",
    "InvalidTransitionError",
    "NoAddressError",
    "NotFoundError",
    "UnauthorizedError",
    "ValidationError",
]


class NotFoundError(ObjectNotFoundError):
    """A referenced order, product, address or notification does not exist."""


class UnauthorizedError(InvalidOperationError):
    """The caller lacks the ownership or role the operation requires."""


class InvalidTransitionError(InvalidStateError):
    """The requested status change is not legal from the current status."""


class NoAddressError(InvalidStateError):
    """A seller has no address on file but fulfillment needs one."""


class DependencyError(DatabaseError):
    """The persistent store is unreachable or failed unexpectedly."""
