
from fastapi import APIRouter, BackgroundTasks, Depends
from sqlalchemy.orm import Session
from typing import List, Optional
from app.auth import get_current_user, require_admin
from app.database import get_db
from app.errors import NotFoundError
from app.models.user import User
from app.schemas.coupon import ApplyCouponResponse
from app.schemas.order import (
    CheckoutRequest, CancelRequest, ReturnRequest, StatusUpdateRequest, ApplyCouponRequest,
    OrderResponse, OrderActionResponse,
)
from app.services.coupon_service import CouponService
from app.services.discount_calculator import DiscountCalculator
from app.services.notifications import EmailSender
from app.services.order_service import OrderService
from app.services.payment_gateway import PaymentGateway, get_payment_gateway

router = APIRouter(prefix="/api/orders", tags=["orders"])


@router.post("/checkout", response_model=OrderResponse, status_code=201)
def checkout(
    body: CheckoutRequest,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
    gateway: PaymentGateway = Depends(get_payment_gateway),
):
    email, name = user.email, user.name
    order = OrderService.checkout(db, user, body, gateway)
    background_tasks.add_task(EmailSender.order_placed, email, name, order.id, order.total_amount)
    return order


@router.post("/apply-coupon", response_model=ApplyCouponResponse)
def apply_coupon(body: ApplyCouponRequest, db: Session = Depends(get_db), _: User = Depends(get_current_user)):
    coupon = CouponService.get_by_code(db, body.code)
    if not coupon:
        raise NotFoundError("Coupon")
    discount = DiscountCalculator.calculate_discount(coupon, body.order_amount)
    return ApplyCouponResponse(
        valid=True,
        code=coupon.code,
        description=coupon.description,
        discount=float(discount),
    )


@router.get("/user", response_model=List[OrderResponse])
def list_my_orders(db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    return OrderService.list_user_orders(db, user.id)


@router.get("/admin", response_model=List[OrderResponse])
def list_all_orders(status: Optional[str] = None, db: Session = Depends(get_db), _: User = Depends(require_admin)):
    return OrderService.list_all_orders(db, status)


@router.get("/{order_id}", response_model=OrderResponse)
def get_order(order_id: int, db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    return OrderService.get_order_for_viewer(db, user, order_id)


@router.put("/{order_id}/cancel", response_model=OrderActionResponse)
def cancel_order(
    order_id: int,
    background_tasks: BackgroundTasks,
    body: Optional[CancelRequest] = None,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    email, name = user.email, user.name
    order = OrderService.cancel_order(db, user, order_id, body or CancelRequest())
    background_tasks.add_task(EmailSender.order_cancelled, email, name, order.id, order.refund_status)
    return OrderActionResponse(message="Order cancelled successfully", order=OrderResponse.model_validate(order))


@router.put("/{order_id}/return", response_model=OrderActionResponse)
def request_return(order_id: int, body: ReturnRequest, db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    order = OrderService.request_return(db, user, order_id, body.reason)
    return OrderActionResponse(message="Return request submitted successfully", order=OrderResponse.model_validate(order))


@router.put("/{order_id}/status", response_model=OrderActionResponse)
def update_order_status(order_id: int, body: StatusUpdateRequest, db: Session = Depends(get_db), _: User = Depends(require_admin)):
    order = OrderService.update_status(db, order_id, body.status, body.tracking_number, body.admin_notes)
    return OrderActionResponse(message="Order status updated", order=OrderResponse.model_validate(order))
