from pydantic import BaseModel, Field, ConfigDict
from typing import List, Literal, Optional
from datetime import datetime


OrderStatus = Literal[
    "pending", "confirmed", "packed", "shipped", "out for delivery",
    "delivered", "cancelled", "returned", "refunded",
]
PaymentMethod = Literal["Card", "UPI", "Wallet", "NetBanking", "COD"]
RefundMethod = Literal["Original Payment Method", "Wallet"]


class ShippingAddress(BaseModel):
    name: str = Field(..., min_length=1)
    phone: str = Field(..., pattern=r"^[0-9]{10}$")
    street: str = Field(..., min_length=1)
    city: str = Field(..., min_length=1)
    state: str = Field(..., min_length=1)
    pincode: str = Field(..., pattern=r"^[0-9]{6}$")
    country: str = "India"


# Request schemas
class CheckoutItem(BaseModel):
    product_id: int = Field(..., gt=0)
    quantity: int = Field(..., gt=0)
    size: str = Field(..., min_length=1)
    # accepted for client compatibility, never used for pricing
    price: Optional[float] = None


class CheckoutRequest(BaseModel):
    items: List[CheckoutItem] = Field(..., min_length=1)
    address: ShippingAddress
    payment_method: PaymentMethod = "Card"
    payment_method_id: Optional[str] = None
    coupon_code: Optional[str] = None


class CancelRequest(BaseModel):
    reason: Optional[str] = None
    refund_method: RefundMethod = "Original Payment Method"


class ReturnRequest(BaseModel):
    reason: str = Field(..., min_length=1)


class StatusUpdateRequest(BaseModel):
    status: OrderStatus
    tracking_number: Optional[str] = None
    admin_notes: Optional[str] = None


class ApplyCouponRequest(BaseModel):
    code: str = Field(..., min_length=1)
    order_amount: float = Field(..., ge=0)


# Response schemas
class OrderItemResponse(BaseModel):
    product_id: int
    name: str
    size: str
    quantity: int
    price: float

    model_config = ConfigDict(from_attributes=True)


class TimelineEntry(BaseModel):
    status: str
    timestamp: datetime
    message: str

    model_config = ConfigDict(from_attributes=True)


class CancellationInfo(BaseModel):
    reason: Optional[str] = None
    cancelled_at: Optional[datetime] = None


class ReturnRequestInfo(BaseModel):
    reason: Optional[str] = None
    status: str
    requested_at: Optional[datetime] = None


class RefundInfo(BaseModel):
    amount: float
    method: str
    status: str
    processed_at: Optional[datetime] = None


class OrderResponse(BaseModel):
    id: int
    user_id: int
    items: List[OrderItemResponse]
    subtotal: float
    discount: float
    gst: float
    delivery_charges: float
    total_amount: float
    coupon_code: Optional[str] = None
    payment_status: str
    payment_method: str
    payment_id: Optional[str] = None
    address: ShippingAddress
    status: str
    timeline: List[TimelineEntry]
    expected_delivery_date: Optional[datetime] = None
    delivered_date: Optional[datetime] = None
    tracking_number: Optional[str] = None
    admin_notes: Optional[str] = None
    cancellation: Optional[CancellationInfo] = None
    return_request: Optional[ReturnRequestInfo] = None
    refund: Optional[RefundInfo] = None
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class OrderActionResponse(BaseModel):
    message: str
    order: OrderResponse
