"""Pydantic API schemas for the marketplace.

These are the external API contracts (anti-corruption layer), kept separate
from domain commands. Routes translate between the two.
"""

from datetime import date

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------
class OrderItemRequest(BaseModel):
    product_id: str
    quantity: int = Field(ge=1)
    unit_price: float = Field(ge=0.0)
    product_name: str | None = None


class PlaceOrderRequest(BaseModel):
    address_id: str
    items: list[OrderItemRequest]
    payment_method: str = "credit-card"


class UpdateOrderStatusRequest(BaseModel):
    status: str = Field(..., examples=["ready_for_pickup", "dispatched"])


class AddProductRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    price: float = Field(ge=0.0)
    available_quantity: int = Field(default=0, ge=0)
    description: str | None = None
    category: str | None = None
    perishable: bool = False
    expiry_date: date | None = None
    priority: str = "medium"


class UpdateProductRequest(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=255)
    price: float | None = Field(default=None, ge=0.0)
    available_quantity: int | None = Field(default=None, ge=0)
    description: str | None = None
    category: str | None = None
    perishable: bool | None = None
    expiry_date: date | None = None
    priority: str | None = None


class DonateProductRequest(BaseModel):
    product_id: str
    quantity: int = Field(ge=1)
    destination: str = Field(..., min_length=1, max_length=255)
    notes: str | None = None
    value: float | None = Field(default=None, ge=0.0)


class DonateNewProductRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    price: float = Field(ge=0.0)
    available_quantity: int = Field(ge=1)
    description: str | None = None
    category: str | None = None
    perishable: bool = False
    expiry_date: date | None = None
    priority: str = "medium"
    quantity: int = Field(ge=1)
    destination: str = Field(..., min_length=1, max_length=255)
    notes: str | None = None


class AddressRequest(BaseModel):
    name: str
    line1: str
    line2: str | None = None
    city: str
    state: str | None = None
    postal_code: str
    country: str
    is_default: bool = False


class UpdateAddressRequest(BaseModel):
    name: str | None = None
    line1: str | None = None
    line2: str | None = None
    city: str | None = None
    state: str | None = None
    postal_code: str | None = None
    country: str | None = None
    is_default: bool | None = None


class AddToCartRequest(BaseModel):
    product_id: str
    quantity: int = Field(default=1, ge=1)


class UpdateCartItemRequest(BaseModel):
    quantity: int = Field(ge=1)


class SaveProductRequest(BaseModel):
    product_id: str


class DonationRequestSubmission(BaseModel):
    organization_name: str
    contact_name: str
    contact_email: str
    urgency_level: str = "medium"
    quantity_required: str | None = None
    usage_purpose: str | None = None
    description: str | None = None


class DonatedProduct(BaseModel):
    product_id: str
    quantity: int = Field(ge=1)


class AcceptDonationRequestBody(BaseModel):
    products: list[DonatedProduct]
    notes: str | None = None


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------
class StatusResponse(BaseModel):
    status: str = "ok"


class OrderIdResponse(BaseModel):
    order_id: str


class ProductIdResponse(BaseModel):
    product_id: str


class AddressIdResponse(BaseModel):
    address_id: str


class CartIdResponse(BaseModel):
    cart_id: str


class DonationIdResponse(BaseModel):
    donation_id: str


class DonationRequestIdResponse(BaseModel):
    request_id: str


class LocationResponse(BaseModel):
    name: str | None = None
    line1: str
    line2: str | None = None
    city: str
    state: str | None = None
    postal_code: str
    country: str


class OrderItemResponse(BaseModel):
    product_id: str
    product_name: str
    seller_id: str
    quantity: int
    unit_price: float


class OrderResponse(BaseModel):
    order_id: str
    buyer_id: str
    address_id: str
    status: str
    total: float
    payment_method: str
    payment_status: str
    delivery_address: LocationResponse | None = None
    items: list[OrderItemResponse] = []
    created_at: str | None = None


class OrderListResponse(BaseModel):
    orders: list[OrderResponse]


class SellerOrderResponse(BaseModel):
    order_id: str
    buyer_id: str
    status: str
    item_count: int
    seller_total: float
    created_at: str | None = None


class SellerOrderListResponse(BaseModel):
    orders: list[SellerOrderResponse]


class HistoryEntryResponse(BaseModel):
    status: str
    notes: str | None = None
    changed_by: str | None = None
    created_at: str | None = None


class OrderHistoryResponse(BaseModel):
    entries: list[HistoryEntryResponse]


class TrackingResponse(BaseModel):
    tracking_id: str
    order_id: str
    status: str
    start_location: LocationResponse
    end_location: LocationResponse
    created_by: str
    created_at: str | None = None
    updated_at: str | None = None


class ProductResponse(BaseModel):
    product_id: str
    seller_id: str
    name: str
    price: float
    available_quantity: int
    in_stock: bool
    category: str | None = None
    perishable: bool = False
    priority: str | None = None


class AddressResponse(BaseModel):
    address_id: str
    name: str
    line1: str
    line2: str | None = None
    city: str
    state: str | None = None
    postal_code: str
    country: str
    is_default: bool


class AddressListResponse(BaseModel):
    addresses: list[AddressResponse]


class CartItemResponse(BaseModel):
    product_id: str
    quantity: int


class CartResponse(BaseModel):
    buyer_id: str
    items: list[CartItemResponse]


class NotificationResponse(BaseModel):
    notification_id: str
    notification_type: str
    product_id: str | None = None
    from_user_id: str | None = None
    message: str
    is_read: bool
    created_at: str | None = None


class NotificationListResponse(BaseModel):
    notifications: list[NotificationResponse]
    unread_count: int


class MarkAllReadResponse(BaseModel):
    updated: int


class ProductListResponse(BaseModel):
    products: list[ProductResponse]


class NewProductDonationResponse(BaseModel):
    product_id: str
    donation_id: str


class DonationResponse(BaseModel):
    donation_id: str
    product_id: str
    quantity: int
    destination: str | None = None
    notes: str | None = None
    value: float | None = None
    request_id: str | None = None
    created_at: str | None = None


class DonationListResponse(BaseModel):
    donations: list[DonationResponse]


class DonationRequestResponse(BaseModel):
    request_id: str
    organization_name: str
    contact_name: str
    contact_email: str
    urgency_level: str
    quantity_required: str | None = None
    usage_purpose: str | None = None
    description: str | None = None
    status: str
    fulfilled_by: str | None = None
    created_at: str | None = None


class DonationRequestListResponse(BaseModel):
    requests: list[DonationRequestResponse]


class SavedProductIdResponse(BaseModel):
    saved_id: str


class SavedProductResponse(BaseModel):
    saved_id: str
    product: ProductResponse
    saved_at: str | None = None


class SavedProductListResponse(BaseModel):
    saved_products: list[SavedProductResponse]


class SavedStatusResponse(BaseModel):
    product_id: str
    saved: bool
