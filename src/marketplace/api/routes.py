"""FastAPI routes for the marketplace.

Thin adapters that translate HTTP requests into domain commands and read
models into responses. The authentication provider in front of the service
supplies the caller's identity and role as ``X-User-Id`` and ``X-User-Role``.
"""

import json

from fastapi import APIRouter, Header

from marketplace.address.address import addresses_of
from marketplace.address.management import AddAddress, RemoveAddress, SetDefaultAddress, UpdateAddress
from marketplace.api.errors import process
from marketplace.api.schemas import (
    AcceptDonationRequestBody,
    AddProductRequest,
    AddressIdResponse,
    AddressListResponse,
    AddressRequest,
    AddressResponse,
    AddToCartRequest,
    CartIdResponse,
    CartItemResponse,
    CartResponse,
    DonateNewProductRequest,
    DonateProductRequest,
    DonationIdResponse,
    DonationListResponse,
    DonationRequestIdResponse,
    DonationRequestListResponse,
    DonationRequestResponse,
    DonationRequestSubmission,
    DonationResponse,
    HistoryEntryResponse,
    LocationResponse,
    MarkAllReadResponse,
    NewProductDonationResponse,
    NotificationListResponse,
    NotificationResponse,
    OrderHistoryResponse,
    OrderIdResponse,
    OrderItemResponse,
    OrderListResponse,
    OrderResponse,
    PlaceOrderRequest,
    ProductIdResponse,
    ProductListResponse,
    ProductResponse,
    SavedProductIdResponse,
    SavedProductListResponse,
    SavedProductResponse,
    SavedStatusResponse,
    SaveProductRequest,
    SellerOrderListResponse,
    SellerOrderResponse,
    StatusResponse,
    TrackingResponse,
    UpdateAddressRequest,
    UpdateCartItemRequest,
    UpdateOrderStatusRequest,
    UpdateProductRequest,
)
from marketplace.cart.cart import cart_of
from marketplace.cart.management import AddToCart, ClearCart, RemoveFromCart, UpdateCartItem
from marketplace.donation.donation import donations_of, list_donation_requests
from marketplace.donation.management import (
    AcceptDonationRequest,
    ApproveDonationRequest,
    DonateNewProduct,
    DonateProduct,
    RejectDonationRequest,
    SubmitDonationRequest,
    load_request,
)
from marketplace.history.history import history_for_order
from marketplace.notification.management import (
    MarkAllNotificationsRead,
    MarkNotificationRead,
    list_notifications,
    unread_count,
)
from marketplace.order.cancellation import CancelOrder
from marketplace.order.delivery import RecordDelivery
from marketplace.order.fulfillment import UpdateOrderStatus
from marketplace.order.payment import ConfirmPayment
from marketplace.order.placement import PlaceOrder
from marketplace.order.queries import get_order, list_buyer_orders
from marketplace.product.ledger import load_product
from marketplace.product.management import AddProduct, RecordProductView, RemoveProduct, UpdateProduct
from marketplace.product.queries import list_products, product_or_none, products_of_seller
from marketplace.projections.seller_orders import orders_for_seller
from marketplace.saved.management import RemoveSavedProduct, SaveProduct
from marketplace.saved.saved import is_product_saved, saved_products_of
from marketplace.tracking.coordinator import get_tracking


def _iso(value) -> str | None:
    return value.isoformat() if value else None


def _location(value) -> LocationResponse | None:
    return LocationResponse(**value.to_dict()) if value else None


def _order_response(order) -> OrderResponse:
    return OrderResponse(
        order_id=str(order.id),
        buyer_id=str(order.buyer_id),
        address_id=str(order.address_id),
        status=order.status,
        total=order.total,
        payment_method=order.payment_method,
        payment_status=order.payment_status,
        delivery_address=_location(order.delivery_address),
        items=[
            OrderItemResponse(
                product_id=str(item.product_id),
                product_name=item.product_name,
                seller_id=str(item.seller_id),
                quantity=item.quantity,
                unit_price=item.unit_price,
            )
            for item in order.items or []
        ],
        created_at=_iso(order.created_at),
    )


def _product_response(product) -> ProductResponse:
    return ProductResponse(
        product_id=str(product.id),
        seller_id=str(product.seller_id),
        name=product.name,
        price=product.price,
        available_quantity=product.available_quantity,
        in_stock=product.in_stock,
        category=product.category,
        perishable=bool(product.perishable),
        priority=product.priority,
    )


# ---------------------------------------------------------------------------
# Order Router
# ---------------------------------------------------------------------------
order_router = APIRouter(prefix="/orders", tags=["orders"])


@order_router.post("", status_code=201, response_model=OrderIdResponse)
async def place_order(body: PlaceOrderRequest, x_user_id: str = Header(...)) -> OrderIdResponse:
    """Check out: create a pending order and take the units off inventory."""
    command = PlaceOrder(
        buyer_id=x_user_id,
        address_id=body.address_id,
        items=json.dumps([item.model_dump() for item in body.items]),
        payment_method=body.payment_method,
    )
    order_id = process(command)
    return OrderIdResponse(order_id=order_id)


@order_router.get("", response_model=OrderListResponse)
async def list_my_orders(x_user_id: str = Header(...)) -> OrderListResponse:
    """The caller's orders as a buyer, newest first."""
    return OrderListResponse(orders=[_order_response(o) for o in list_buyer_orders(x_user_id)])


@order_router.get("/seller", response_model=SellerOrderListResponse)
async def list_seller_orders(status: str | None = None, x_user_id: str = Header(...)) -> SellerOrderListResponse:
    """Orders containing the calling seller's products."""
    return SellerOrderListResponse(
        orders=[
            SellerOrderResponse(
                order_id=str(row.order_id),
                buyer_id=str(row.buyer_id),
                status=row.status,
                item_count=row.item_count,
                seller_total=row.seller_total,
                created_at=_iso(row.created_at),
            )
            for row in orders_for_seller(x_user_id, status=status)
        ]
    )


@order_router.get("/{order_id}", response_model=OrderResponse)
async def get_order_details(
    order_id: str,
    x_user_id: str = Header(...),
    x_user_role: str = Header(default="buyer"),
) -> OrderResponse:
    return _order_response(get_order(order_id, x_user_id, x_user_role))


@order_router.get("/{order_id}/history", response_model=OrderHistoryResponse)
async def get_order_history(
    order_id: str,
    x_user_id: str = Header(...),
    x_user_role: str = Header(default="buyer"),
) -> OrderHistoryResponse:
    get_order(order_id, x_user_id, x_user_role)
    return OrderHistoryResponse(
        entries=[
            HistoryEntryResponse(
                status=entry.status,
                notes=entry.notes,
                changed_by=str(entry.changed_by) if entry.changed_by else None,
                created_at=_iso(entry.created_at),
            )
            for entry in history_for_order(order_id)
        ]
    )


@order_router.put("/{order_id}/cancel", response_model=StatusResponse)
async def cancel_order(
    order_id: str,
    x_user_id: str = Header(...),
    x_user_role: str = Header(default="buyer"),
) -> StatusResponse:
    process(CancelOrder(order_id=order_id, caller_id=x_user_id, caller_role=x_user_role))
    return StatusResponse(status="cancelled")


@order_router.put("/{order_id}/payment", response_model=StatusResponse)
async def confirm_payment(
    order_id: str,
    x_user_id: str = Header(...),
    x_user_role: str = Header(default="buyer"),
) -> StatusResponse:
    """Record the payment provider's confirmation; the order moves to processing."""
    process(ConfirmPayment(order_id=order_id, caller_id=x_user_id, caller_role=x_user_role))
    return StatusResponse(status="processing")


@order_router.put("/{order_id}/status", response_model=StatusResponse)
async def update_order_status(
    order_id: str,
    body: UpdateOrderStatusRequest,
    x_user_id: str = Header(...),
    x_user_role: str = Header(default="seller"),
) -> StatusResponse:
    """Seller marks the order ready for pickup or dispatched."""
    command = UpdateOrderStatus(
        order_id=order_id,
        status=body.status,
        caller_id=x_user_id,
        caller_role=x_user_role,
    )
    process(command)
    return StatusResponse(status=body.status)


@order_router.put("/{order_id}/delivery", response_model=StatusResponse)
async def record_delivery(
    order_id: str,
    x_user_id: str = Header(...),
    x_user_role: str = Header(default="logistics"),
) -> StatusResponse:
    process(RecordDelivery(order_id=order_id, caller_id=x_user_id, caller_role=x_user_role))
    return StatusResponse(status="delivered")


# ---------------------------------------------------------------------------
# Tracking Router
# ---------------------------------------------------------------------------
tracking_router = APIRouter(prefix="/tracking", tags=["tracking"])


@tracking_router.get("/{order_id}", response_model=TrackingResponse)
async def get_order_tracking(
    order_id: str,
    x_user_id: str = Header(...),
    x_user_role: str = Header(default="buyer"),
) -> TrackingResponse:
    tracking = get_tracking(order_id, x_user_id, x_user_role)
    return TrackingResponse(
        tracking_id=str(tracking.id),
        order_id=str(tracking.order_id),
        status=tracking.status,
        start_location=_location(tracking.start_location),
        end_location=_location(tracking.end_location),
        created_by=str(tracking.created_by),
        created_at=_iso(tracking.created_at),
        updated_at=_iso(tracking.updated_at),
    )


# ---------------------------------------------------------------------------
# Product Router
# ---------------------------------------------------------------------------
product_router = APIRouter(prefix="/products", tags=["products"])


@product_router.post("", status_code=201, response_model=ProductIdResponse)
async def add_product(
    body: AddProductRequest,
    x_user_id: str = Header(...),
    x_user_role: str = Header(default="seller"),
) -> ProductIdResponse:
    command = AddProduct(seller_id=x_user_id, caller_role=x_user_role, **body.model_dump())
    product_id = process(command)
    return ProductIdResponse(product_id=product_id)


@product_router.get("", response_model=ProductListResponse)
async def list_catalogue(category: str | None = None) -> ProductListResponse:
    """The catalogue, optionally narrowed to one category."""
    return ProductListResponse(products=[_product_response(p) for p in list_products(category)])


@product_router.get("/seller", response_model=ProductListResponse)
async def list_my_products(x_user_id: str = Header(...)) -> ProductListResponse:
    """The calling seller's own listings."""
    return ProductListResponse(products=[_product_response(p) for p in products_of_seller(x_user_id)])


@product_router.get("/{product_id}", response_model=ProductResponse)
async def get_product(product_id: str) -> ProductResponse:
    return _product_response(load_product(product_id))


@product_router.put("/{product_id}", response_model=StatusResponse)
async def update_product(
    product_id: str,
    body: UpdateProductRequest,
    x_user_id: str = Header(...),
    x_user_role: str = Header(default="seller"),
) -> StatusResponse:
    command = UpdateProduct(
        product_id=product_id,
        caller_id=x_user_id,
        caller_role=x_user_role,
        **body.model_dump(exclude_none=True),
    )
    process(command)
    return StatusResponse(status="updated")


@product_router.delete("/{product_id}", response_model=StatusResponse)
async def remove_product(
    product_id: str,
    x_user_id: str = Header(...),
    x_user_role: str = Header(default="seller"),
) -> StatusResponse:
    process(RemoveProduct(product_id=product_id, caller_id=x_user_id, caller_role=x_user_role))
    return StatusResponse(status="deleted")


@product_router.post("/{product_id}/views", response_model=StatusResponse)
async def record_product_view(product_id: str, x_user_id: str | None = Header(default=None)) -> StatusResponse:
    """Called by the storefront when a product page is opened."""
    process(RecordProductView(product_id=product_id, viewer_id=x_user_id))
    return StatusResponse(status="recorded")


# ---------------------------------------------------------------------------
# Address Router
# ---------------------------------------------------------------------------
address_router = APIRouter(prefix="/addresses", tags=["addresses"])


@address_router.post("", status_code=201, response_model=AddressIdResponse)
async def add_address(body: AddressRequest, x_user_id: str = Header(...)) -> AddressIdResponse:
    address_id = process(AddAddress(user_id=x_user_id, **body.model_dump()))
    return AddressIdResponse(address_id=address_id)


@address_router.get("", response_model=AddressListResponse)
async def list_addresses(x_user_id: str = Header(...)) -> AddressListResponse:
    """The caller's address book, default address first."""
    return AddressListResponse(
        addresses=[
            AddressResponse(address_id=str(address.id), **address.as_snapshot(), is_default=address.is_default)
            for address in addresses_of(x_user_id)
        ]
    )


@address_router.put("/{address_id}", response_model=StatusResponse)
async def update_address(
    address_id: str,
    body: UpdateAddressRequest,
    x_user_id: str = Header(...),
    x_user_role: str = Header(default="buyer"),
) -> StatusResponse:
    command = UpdateAddress(
        address_id=address_id,
        caller_id=x_user_id,
        caller_role=x_user_role,
        **body.model_dump(exclude_none=True),
    )
    process(command)
    return StatusResponse(status="updated")


@address_router.put("/{address_id}/default", response_model=StatusResponse)
async def set_default_address(
    address_id: str,
    x_user_id: str = Header(...),
    x_user_role: str = Header(default="buyer"),
) -> StatusResponse:
    process(SetDefaultAddress(address_id=address_id, caller_id=x_user_id, caller_role=x_user_role))
    return StatusResponse(status="updated")


@address_router.delete("/{address_id}", response_model=StatusResponse)
async def remove_address(
    address_id: str,
    x_user_id: str = Header(...),
    x_user_role: str = Header(default="buyer"),
) -> StatusResponse:
    process(RemoveAddress(address_id=address_id, caller_id=x_user_id, caller_role=x_user_role))
    return StatusResponse(status="deleted")


# ---------------------------------------------------------------------------
# Cart Router
# ---------------------------------------------------------------------------
cart_router = APIRouter(prefix="/cart", tags=["cart"])


@cart_router.get("", response_model=CartResponse)
async def get_cart(x_user_id: str = Header(...)) -> CartResponse:
    cart = cart_of(x_user_id)
    items = cart.items if cart else []
    return CartResponse(
        buyer_id=x_user_id,
        items=[CartItemResponse(product_id=str(item.product_id), quantity=item.quantity) for item in items],
    )


@cart_router.post("/items", status_code=201, response_model=CartIdResponse)
async def add_to_cart(body: AddToCartRequest, x_user_id: str = Header(...)) -> CartIdResponse:
    cart_id = process(AddToCart(buyer_id=x_user_id, product_id=body.product_id, quantity=body.quantity))
    return CartIdResponse(cart_id=cart_id)


@cart_router.put("/items/{product_id}", response_model=StatusResponse)
async def update_cart_item(
    product_id: str,
    body: UpdateCartItemRequest,
    x_user_id: str = Header(...),
) -> StatusResponse:
    process(UpdateCartItem(buyer_id=x_user_id, product_id=product_id, quantity=body.quantity))
    return StatusResponse(status="updated")


@cart_router.delete("/items/{product_id}", response_model=StatusResponse)
async def remove_from_cart(product_id: str, x_user_id: str = Header(...)) -> StatusResponse:
    process(RemoveFromCart(buyer_id=x_user_id, product_id=product_id))
    return StatusResponse(status="removed")


@cart_router.delete("", response_model=StatusResponse)
async def clear_cart(x_user_id: str = Header(...)) -> StatusResponse:
    process(ClearCart(buyer_id=x_user_id))
    return StatusResponse(status="cleared")


# ---------------------------------------------------------------------------
# Notification Router
# ---------------------------------------------------------------------------
notification_router = APIRouter(prefix="/notifications", tags=["notifications"])


@notification_router.get("", response_model=NotificationListResponse)
async def get_notifications(x_user_id: str = Header(...)) -> NotificationListResponse:
    """The caller's most recent notifications plus their unread count."""
    return NotificationListResponse(
        notifications=[
            NotificationResponse(
                notification_id=str(n.id),
                notification_type=n.notification_type,
                product_id=str(n.product_id) if n.product_id else None,
                from_user_id=str(n.from_user_id) if n.from_user_id else None,
                message=n.message,
                is_read=n.is_read,
                created_at=_iso(n.created_at),
            )
            for n in list_notifications(x_user_id)
        ],
        unread_count=unread_count(x_user_id),
    )


@notification_router.put("/read", response_model=MarkAllReadResponse)
async def mark_all_notifications_read(x_user_id: str = Header(...)) -> MarkAllReadResponse:
    updated = process(MarkAllNotificationsRead(user_id=x_user_id))
    return MarkAllReadResponse(updated=updated or 0)


@notification_router.put("/{notification_id}/read", response_model=StatusResponse)
async def mark_notification_read(notification_id: str, x_user_id: str = Header(...)) -> StatusResponse:
    process(MarkNotificationRead(notification_id=notification_id, user_id=x_user_id))
    return StatusResponse(status="read")


# ---------------------------------------------------------------------------
# Donation Routers
# ---------------------------------------------------------------------------
donation_router = APIRouter(prefix="/donations", tags=["donations"])


@donation_router.post("", status_code=201, response_model=DonationIdResponse)
async def donate_product(
    body: DonateProductRequest,
    x_user_id: str = Header(...),
    x_user_role: str = Header(default="seller"),
) -> DonationIdResponse:
    command = DonateProduct(caller_id=x_user_id, caller_role=x_user_role, **body.model_dump())
    donation_id = process(command)
    return DonationIdResponse(donation_id=donation_id)


@donation_router.post("/new-product", status_code=201, response_model=NewProductDonationResponse)
async def donate_new_product(
    body: DonateNewProductRequest,
    x_user_id: str = Header(...),
    x_user_role: str = Header(default="seller"),
) -> NewProductDonationResponse:
    """List a new product and donate part of it in one step."""
    result = process(DonateNewProduct(caller_id=x_user_id, caller_role=x_user_role, **body.model_dump()))
    return NewProductDonationResponse(**result)


@donation_router.get("", response_model=DonationListResponse)
async def list_donations(x_user_id: str = Header(...)) -> DonationListResponse:
    """The calling seller's donations, newest first."""
    return DonationListResponse(
        donations=[
            DonationResponse(
                donation_id=str(d.id),
                product_id=str(d.product_id),
                quantity=d.quantity,
                destination=d.destination,
                notes=d.notes,
                value=d.value,
                request_id=str(d.request_id) if d.request_id else None,
                created_at=_iso(d.created_at),
            )
            for d in donations_of(x_user_id)
        ]
    )


donation_request_router = APIRouter(prefix="/donation-requests", tags=["donations"])


def _donation_request_response(request) -> DonationRequestResponse:
    return DonationRequestResponse(
        request_id=str(request.id),
        organization_name=request.organization_name,
        contact_name=request.contact_name,
        contact_email=request.contact_email,
        urgency_level=request.urgency_level,
        quantity_required=request.quantity_required,
        usage_purpose=request.usage_purpose,
        description=request.description,
        status=request.status,
        fulfilled_by=str(request.fulfilled_by) if request.fulfilled_by else None,
        created_at=_iso(request.created_at),
    )


@donation_request_router.post("", status_code=201, response_model=DonationRequestIdResponse)
async def submit_donation_request(
    body: DonationRequestSubmission,
    x_user_id: str | None = Header(default=None),
) -> DonationRequestIdResponse:
    request_id = process(SubmitDonationRequest(requester_id=x_user_id, **body.model_dump()))
    return DonationRequestIdResponse(request_id=request_id)


@donation_request_router.get("", response_model=DonationRequestListResponse)
async def list_requests(status: str | None = None, urgency_level: str | None = None) -> DonationRequestListResponse:
    """Donation requests, filtered by status or urgency. An urgency filter lists approved requests only."""
    return DonationRequestListResponse(
        requests=[_donation_request_response(r) for r in list_donation_requests(status, urgency_level)]
    )


@donation_request_router.get("/{request_id}", response_model=DonationRequestResponse)
async def get_donation_request(request_id: str) -> DonationRequestResponse:
    return _donation_request_response(load_request(request_id))


@donation_request_router.put("/{request_id}/approve", response_model=StatusResponse)
async def approve_donation_request(
    request_id: str,
    x_user_role: str = Header(default="buyer"),
) -> StatusResponse:
    process(ApproveDonationRequest(request_id=request_id, caller_role=x_user_role))
    return StatusResponse(status="approved")


@donation_request_router.put("/{request_id}/accept", response_model=StatusResponse)
async def accept_donation_request(
    request_id: str,
    body: AcceptDonationRequestBody,
    x_user_id: str = Header(...),
    x_user_role: str = Header(default="seller"),
) -> StatusResponse:
    """A seller fulfils the request from their own stock."""
    command = AcceptDonationRequest(
        request_id=request_id,
        caller_id=x_user_id,
        caller_role=x_user_role,
        products=json.dumps([line.model_dump() for line in body.products]),
        notes=body.notes,
    )
    process(command)
    return StatusResponse(status="fulfilled")


@donation_request_router.put("/{request_id}/reject", response_model=StatusResponse)
async def reject_donation_request(
    request_id: str,
    x_user_role: str = Header(default="buyer"),
) -> StatusResponse:
    process(RejectDonationRequest(request_id=request_id, caller_role=x_user_role))
    return StatusResponse(status="rejected")


# ---------------------------------------------------------------------------
# Saved Products Router
# ---------------------------------------------------------------------------
saved_product_router = APIRouter(prefix="/saved-products", tags=["saved-products"])


@saved_product_router.get("", response_model=SavedProductListResponse)
async def list_saved_products(x_user_id: str = Header(...)) -> SavedProductListResponse:
    """The caller's saved products, most recent first. Products removed since are skipped."""
    entries = []
    for saved in saved_products_of(x_user_id):
        product = product_or_none(saved.product_id)
        if product is None:
            continue
        entries.append(
            SavedProductResponse(
                saved_id=str(saved.id),
                product=_product_response(product),
                saved_at=_iso(saved.created_at),
            )
        )
    return SavedProductListResponse(saved_products=entries)


@saved_product_router.post("", status_code=201, response_model=SavedProductIdResponse)
async def save_product(body: SaveProductRequest, x_user_id: str = Header(...)) -> SavedProductIdResponse:
    saved_id = process(SaveProduct(user_id=x_user_id, product_id=body.product_id))
    return SavedProductIdResponse(saved_id=saved_id)


@saved_product_router.get("/products/{product_id}", response_model=SavedStatusResponse)
async def get_saved_status(product_id: str, x_user_id: str = Header(...)) -> SavedStatusResponse:
    return SavedStatusResponse(product_id=product_id, saved=is_product_saved(x_user_id, product_id))


@saved_product_router.delete("/{saved_id}", response_model=StatusResponse)
async def remove_saved_product(
    saved_id: str,
    x_user_id: str = Header(...),
    x_user_role: str = Header(default="buyer"),
) -> StatusResponse:
    process(RemoveSavedProduct(saved_id=saved_id, caller_id=x_user_id, caller_role=x_user_role))
    return StatusResponse(status="deleted")
