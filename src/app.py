"""Marketplace FastAPI application.

Web server that processes commands synchronously via HTTP. Every request runs
inside the marketplace domain context, with the caller bound to the log
context for the duration of the request.

Usage:
    uvicorn app:app --app-dir src --host 0.0.0.0 --port 8000 --reload
"""

import os
import uuid

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

# ---------------------------------------------------------------------------
# Domain initialization
# ---------------------------------------------------------------------------
# The domain is initialized at module level so uvicorn workers share it.
# PROTEAN_ENV selects the config overlay in domain.toml:
#   - unset / "test" → in-memory stores
#   - "production"   → PostgreSQL from DATABASE_URL
from marketplace.domain import marketplace  # noqa: E402
from marketplace.utils.logging import add_context, clear_context, get_logger  # noqa: E402

marketplace.init()

logger = get_logger(__name__)
logger.info("Marketplace domain initialized", domain=marketplace.name)


def _allowed_origins() -> list[str]:
    origins = os.getenv("CORS_ALLOWED_ORIGINS", "*")
    return [origin.strip() for origin in origins.split(",") if origin.strip()]


# ---------------------------------------------------------------------------
# FastAPI app
# ---------------------------------------------------------------------------
app = FastAPI(
    title="Marketplace API",
    description="Multi-role marketplace — orders, inventory, logistics tracking and notifications",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=_allowed_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def domain_context_middleware(request: Request, call_next):
    """Push the marketplace domain context and bind request details to the log context."""
    clear_context()
    add_context(
        request_id=request.headers.get("x-request-id", str(uuid.uuid4())),
        user_id=request.headers.get("x-user-id"),
        path=request.url.path,
    )
    try:
        with marketplace.domain_context():
            response = await call_next(request)
        return response
    finally:
        clear_context()


# ---------------------------------------------------------------------------
# Routers
# ---------------------------------------------------------------------------
from marketplace.api import (  # noqa: E402
    address_router,
    cart_router,
    donation_request_router,
    donation_router,
    notification_router,
    order_router,
    product_router,
    saved_product_router,
    tracking_router,
)
from marketplace.api.errors import register_error_handlers  # noqa: E402

app.include_router(order_router)
app.include_router(tracking_router)
app.include_router(product_router)
app.include_router(address_router)
app.include_router(cart_router)
app.include_router(notification_router)
app.include_router(donation_router)
app.include_router(donation_request_router)
app.include_router(saved_product_router)

register_error_handlers(app)


# ---------------------------------------------------------------------------
# Health / root
# ---------------------------------------------------------------------------
@app.get("/health")
async def health():
    return JSONResponse(content={"status": "ok", "domain": {"name": marketplace.name}})
