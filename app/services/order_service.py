
import logging
from datetime import datetime, timedelta
from decimal import Decimal, ROUND_HALF_UP
from typing import List, NamedTuple, Optional, Tuple
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError
from app.config import settings
from app.errors import (
    ConflictError, ForbiddenError, InvalidCoupon, InvalidTransition, NotFoundError,
    ReturnWindowExpired, ValidationError,
)
from app.models.coupon import Coupon
from app.models.order import Order, OrderItem
from app.models.product import Product
from app.models.user import User
from app.schemas.order import CheckoutItem, CheckoutRequest, CancelRequest
from app.services.cart_service import CartService
from app.services.coupon_service import CouponService
from app.services.discount_calculator import DiscountCalculator, D
from app.services.payment_gateway import PaymentAuthorization, PaymentGateway
from app.services.pricing import PriceBreakdown, PricingCalculator
from app.services.product_service import ProductService
from app.services.saga import Saga
from app.services.user_service import UserService
from app.utils import utcnow, as_utc

logger = logging.getLogger(__name__)

RETURN_WINDOW_DAYS = 7
EXPECTED_DELIVERY_DAYS = 7
CANCELLABLE_STATUSES = ("pending", "confirmed")


class ResolvedLine(NamedTuple):
    product_id: int
    name: str
    size: str
    quantity: int
    unit_price: Decimal


class OrderService:
    """Checkout and the order status lifecycle"""

    @staticmethod
    def resolve_lines(db: Session, items: List[CheckoutItem]) -> List[ResolvedLine]:
        """Price every line from the catalog; client-sent prices are ignored."""
        lines = []
        for item in items:
            product = db.query(Product).filter(Product.id == item.product_id).first()
            if not product:
                raise NotFoundError("Product", item.product_id)
            if not product.is_active:
                raise ValidationError(f"{product.name} is no longer available")
            if product.sizes and item.size not in product.sizes:
                raise ValidationError(f"Size {item.size} is not available for {product.name}")
            lines.append(ResolvedLine(
                product_id=product.id,
                name=product.name,
                size=item.size,
                quantity=item.quantity,
                unit_price=product.unit_price,
            ))
        return lines

    @staticmethod
    def evaluate_coupon(db: Session, code: str, order_amount, now: Optional[datetime] = None) -> Tuple[Coupon, Decimal]:
        coupon = CouponService.get_by_code(db, code)
        if not coupon:
            raise InvalidCoupon("Invalid coupon code")
        return coupon, DiscountCalculator.calculate_discount(coupon, order_amount, now)

    @staticmethod
    def quote(db: Session, items: List[CheckoutItem], coupon_code: Optional[str] = None) -> Tuple[List[ResolvedLine], Optional[Coupon], PriceBreakdown]:
        lines = OrderService.resolve_lines(db, items)
        subtotal = PricingCalculator.calculate_subtotal((l.unit_price, l.quantity) for l in lines)
        coupon = None
        discount = D(0)
        if coupon_code:
            coupon, discount = OrderService.evaluate_coupon(db, coupon_code, subtotal)
        return lines, coupon, PricingCalculator.calculate(subtotal, discount)

    @staticmethod
    def checkout(db: Session, user: User, data: CheckoutRequest, gateway: PaymentGateway) -> Order:
        lines, coupon, prices = OrderService.quote(db, data.items, data.coupon_code)
        paid_online = data.payment_method != "COD"
        if paid_online and not data.payment_method_id:
            raise ValidationError(f"payment_method_id is required for {data.payment_method} payments")

        user_id = user.id
        coupon_id = coupon.id if coupon else None
        coupon_code = coupon.code if coupon else None
        logger.info("Checkout for user %s: %d lines, total %s", user_id, len(lines), prices.total)

        def reserve_stock():
            for line in lines:
                ProductService.decrement_stock(db, line.product_id, line.quantity, line.name)
            db.commit()
            return [(line.product_id, line.quantity) for line in lines]

        def release_stock(reserved):
            for product_id, quantity in reserved:
                ProductService.increment_stock(db, product_id, quantity)
            db.commit()

        def void_payment(auth: PaymentAuthorization):
            if auth.succeeded:
                gateway.refund(auth.id)

        with Saga(f"checkout user={user_id}", on_abort=db.rollback) as saga:
            saga.step("reserve_stock", reserve_stock, compensate=release_stock)
            if coupon is not None:
                saga.step(
                    "consume_coupon",
                    lambda: CouponService.consume_usage(db, coupon),
                    compensate=lambda _: CouponService.release_usage(db, coupon_id),
                )
            payment = None
            if paid_online:
                payment = saga.step(
                    "charge",
                    lambda: gateway.authorize_and_capture(
                        amount_minor=int((prices.total * 100).to_integral_value(rounding=ROUND_HALF_UP)),
                        currency=settings.payment_currency,
                        payment_method_id=data.payment_method_id,
                        metadata={"user_id": str(user_id)},
                    ),
                    compensate=void_payment,
                )
            order = saga.step(
                "persist_order",
                lambda: OrderService._persist_order(db, user_id, data, lines, prices, coupon_code, payment),
            )

        try:
            CartService.clear(db, user_id)
        except SQLAlchemyError:
            db.rollback()
            logger.warning("Order %s placed but cart of user %s was not cleared", order.id, user_id, exc_info=True)

        logger.info("Order %s placed: %s, payment %s", order.id, order.status, order.payment_status)
        return order

    @staticmethod
    def _persist_order(db: Session, user_id: int, data: CheckoutRequest, lines: List[ResolvedLine],
                       prices: PriceBreakdown, coupon_code: Optional[str],
                       payment: Optional[PaymentAuthorization]) -> Order:
        paid = payment is not None and payment.succeeded
        order = Order(
            user_id=user_id,
            subtotal=prices.subtotal,
            discount=prices.discount,
            gst=prices.gst,
            delivery_charges=prices.delivery_charges,
            total_amount=prices.total,
            coupon_code=coupon_code,
            payment_status="Paid" if paid else "Pending",
            payment_method=data.payment_method,
            payment_id=payment.id if payment else None,
            address=data.address.model_dump(),
            expected_delivery_date=utcnow() + timedelta(days=EXPECTED_DELIVERY_DAYS),
            items=[
                OrderItem(
                    product_id=line.product_id,
                    name=line.name,
                    size=line.size,
                    quantity=line.quantity,
                    price=line.unit_price,
                )
                for line in lines
            ],
        )
        order.set_status("pending", "Order placed successfully")
        if paid:
            order.set_status("confirmed")
        db.add(order)
        db.commit()
        db.refresh(order)
        return order

    @staticmethod
    def _commit(db: Session) -> None:
        try:
            db.commit()
        except StaleDataError:
            db.rollback()
            raise ConflictError("Order was modified by another request, please retry")

    @staticmethod
    def get_order(db: Session, order_id: int) -> Order:
        order = db.query(Order).filter(Order.id == order_id).first()
        if not order:
            raise NotFoundError("Order")
        return order

    @staticmethod
    def get_order_for_viewer(db: Session, user: User, order_id: int) -> Order:
        order = OrderService.get_order(db, order_id)
        if order.user_id != user.id and user.role != "admin":
            raise ForbiddenError("Not authorized to view this order")
        return order

    @staticmethod
    def _get_owned_order(db: Session, user: User, order_id: int) -> Order:
        order = OrderService.get_order(db, order_id)
        if order.user_id != user.id:
            raise ForbiddenError()
        return order

    @staticmethod
    def list_user_orders(db: Session, user_id: int) -> List[Order]:
        return (
            db.query(Order)
            .filter(Order.user_id == user_id)
            .order_by(Order.created_at.desc(), Order.id.desc())
            .all()
        )

    @staticmethod
    def list_all_orders(db: Session, status: Optional[str] = None) -> List[Order]:
        q = db.query(Order)
        if status:
            q = q.filter(Order.status == status)
        return q.order_by(Order.created_at.desc(), Order.id.desc()).all()

    @staticmethod
    def cancel_order(db: Session, user: User, order_id: int, data: CancelRequest) -> Order:
        order = OrderService._get_owned_order(db, user, order_id)
        if order.status not in CANCELLABLE_STATUSES:
            raise InvalidTransition(order.status, "cancelled")

        now = utcnow()
        order.set_status("cancelled")
        order.is_cancelled = True
        order.cancellation_reason = data.reason or "Cancelled by user"
        order.cancelled_at = now

        if order.payment_status == "Paid":
            order.payment_status = "Refunded"
            order.refund_amount = order.total_amount
            order.refund_method = data.refund_method
            order.refund_status = "pending"
            if data.refund_method == "Wallet":
                UserService.credit_wallet(
                    db, user.id, D(order.total_amount),
                    f"Refund for cancelled order #{order.id}", order.id,
                )
                order.refund_status = "completed"
                order.refund_processed_at = now

        for item in order.items:
            ProductService.increment_stock(db, item.product_id, item.quantity)

        OrderService._commit(db)
        db.refresh(order)
        logger.info("Order %s cancelled by user %s (refund %s)", order.id, user.id, order.refund_status)
        return order

    @staticmethod
    def request_return(db: Session, user: User, order_id: int, reason: str, now: Optional[datetime] = None) -> Order:
        order = OrderService._get_owned_order(db, user, order_id)
        if order.status != "delivered":
            raise InvalidTransition(order.status, "returned")
        if order.delivered_date is None:
            raise ValidationError("Order has no recorded delivery date")

        now = now or utcnow()
        days_since_delivery = (now - as_utc(order.delivered_date)).days
        if days_since_delivery > RETURN_WINDOW_DAYS:
            raise ReturnWindowExpired(RETURN_WINDOW_DAYS)

        order.return_requested = True
        order.return_reason = reason
        order.return_status = "pending"
        order.return_requested_at = now
        order.set_status("returned")

        OrderService._commit(db)
        db.refresh(order)
        return order

    @staticmethod
    def update_status(db: Session, order_id: int, status: str, tracking_number: Optional[str] = None,
                      admin_notes: Optional[str] = None) -> Order:
        order = OrderService.get_order(db, order_id)
        order.set_status(status)
        if status == "delivered":
            order.delivered_date = utcnow()
        if tracking_number:
            order.tracking_number = tracking_number
        if admin_notes is not None:
            order.admin_notes = admin_notes

        OrderService._commit(db)
        db.refresh(order)
        logger.info("Order %s status set to %s", order.id, order.status)
        return order
