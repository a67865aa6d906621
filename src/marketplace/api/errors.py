"""HTTP error mapping for the marketplace API.

Protean's standard handlers cover validation (400), not found (404), invalid
state (409) and invalid operation (422). The handlers here sit on the
narrower marketplace errors and answer with a short category instead of
internal detail. Store failures never expose their cause.
"""

import structlog
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from protean.exceptions import DatabaseError, TransactionError
from protean.integrations.fastapi import register_exception_handlers
from protean.utils.globals import current_domain

from marketplace.shared.errors import (
    DependencyError,
    InvalidTransitionError,
    NoAddressError,
    NotFoundError,
    UnauthorizedError,
)

logger = structlog.get_logger(__name__)

_CATEGORIES = {
    NotFoundError: (404, "not found"),
    UnauthorizedError: (403, "not allowed"),
    InvalidTransitionError: (409, "could not update order status"),
    NoAddressError: (409, "seller address required"),
}


def process(command):
    """Process a command synchronously, reporting store failures as ``DependencyError``."""
    try:
        return current_domain.process(command, asynchronous=False)
    except DependencyError:
        raise
    except (DatabaseError, TransactionError) as exc:
        logger.error(
            "Persistent store failure",
            command=command.__class__.__name__,
            error=str(exc),
        )
        raise DependencyError("Persistent store failure", original_exception=exc) from exc


def register_error_handlers(app: FastAPI) -> None:
    register_exception_handlers(app)

    for error_cls, (status_code, category) in _CATEGORIES.items():
        app.add_exception_handler(error_cls, _category_handler(status_code, category))

    @app.exception_handler(DependencyError)
    async def dependency_error_handler(request: Request, exc: DependencyError) -> JSONResponse:
        return JSONResponse(status_code=503, content={"error": "service temporarily unavailable"})


def _category_handler(status_code: int, category: str):
    async def handler(request: Request, exc: Exception) -> JSONResponse:
        return JSONResponse(status_code=status_code, content={"error": category, "detail": str(exc)})

    return handler
