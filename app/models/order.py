
from sqlalchemy import Column, Integer, String, Text, Boolean, Enum, Numeric, JSON, DateTime, ForeignKey, Index, func
from sqlalchemy.orm import relationship
from app.database import Base
from app.utils import utcnow

OrderStatuses = (
    "pending",
    "confirmed",
    "packed",
    "shipped",
    "out for delivery",
    "delivered",
    "cancelled",
    "returned",
    "refunded",
)
PaymentStatuses = ("Pending", "Paid", "Failed", "Refunded")
PaymentMethods = ("Card", "UPI", "Wallet", "NetBanking", "COD")
RefundMethods = ("Original Payment Method", "Wallet")
RefundStatuses = ("pending", "processed", "completed")
ReturnStatuses = ("pending", "approved", "rejected", "picked up", "completed")


class Order(Base):
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    subtotal = Column(Numeric(12, 2), nullable=False)
    discount = Column(Numeric(12, 2), nullable=False, default=0)
    gst = Column(Numeric(12, 2), nullable=False, default=0)
    delivery_charges = Column(Numeric(12, 2), nullable=False, default=0)
    total_amount = Column(Numeric(12, 2), nullable=False)
    coupon_code = Column(String(64), nullable=True)

    payment_status = Column(Enum(*PaymentStatuses, name="payment_status"), nullable=False, default="Pending")
    payment_method = Column(Enum(*PaymentMethods, name="payment_method"), nullable=False, default="Card")
    payment_id = Column(String(255), nullable=True)

    # snapshot of the shipping address at checkout time
    address = Column(JSON, nullable=False)

    status = Column(Enum(*OrderStatuses, name="order_status"), nullable=False, default="pending", index=True)
    expected_delivery_date = Column(DateTime(timezone=True), nullable=True)
    delivered_date = Column(DateTime(timezone=True), nullable=True)
    tracking_number = Column(String(120), nullable=True)
    admin_notes = Column(Text, nullable=True)

    is_cancelled = Column(Boolean, nullable=False, default=False)
    cancellation_reason = Column(String(255), nullable=True)
    cancelled_at = Column(DateTime(timezone=True), nullable=True)

    return_requested = Column(Boolean, nullable=False, default=False)
    return_reason = Column(String(255), nullable=True)
    return_status = Column(Enum(*ReturnStatuses, name="return_status"), nullable=True)
    return_requested_at = Column(DateTime(timezone=True), nullable=True)

    refund_amount = Column(Numeric(12, 2), nullable=True)
    refund_method = Column(Enum(*RefundMethods, name="refund_method"), nullable=True)
    refund_status = Column(Enum(*RefundStatuses, name="refund_status"), nullable=True)
    refund_processed_at = Column(DateTime(timezone=True), nullable=True)

    version = Column(Integer, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)

    items = relationship(
        "OrderItem",
        order_by="OrderItem.id",
        lazy="selectin",
        cascade="all, delete-orphan",
    )
    timeline = relationship(
        "OrderEvent",
        order_by="OrderEvent.id",
        lazy="selectin",
        cascade="all, delete-orphan",
    )

    __mapper_args__ = {"version_id_col": version}

    __table_args__ = (
        Index("ix_orders_user_created", "user_id", "created_at"),
    )

    def set_status(self, status: str, message: str = None) -> bool:
        """Move to ``status`` and record it on the timeline; no-op when unchanged."""
        if status == self.status:
            return False
        self.status = status
        self.timeline.append(OrderEvent(
            status=status,
            timestamp=utcnow(),
            message=message or f"Order {status}",
        ))
        return True

    @property
    def cancellation(self):
        if not self.is_cancelled:
            return None
        return {"reason": self.cancellation_reason, "cancelled_at": self.cancelled_at}

    @property
    def return_request(self):
        if not self.return_requested:
            return None
        return {
            "reason": self.return_reason,
            "status": self.return_status,
            "requested_at": self.return_requested_at,
        }

    @property
    def refund(self):
        if self.refund_status is None:
            return None
        return {
            "amount": self.refund_amount,
            "method": self.refund_method,
            "status": self.refund_status,
            "processed_at": self.refund_processed_at,
        }


class OrderItem(Base):
    """Immutable line item snapshot; product_id is not a foreign key so orders outlive products"""
    __tablename__ = "order_items"

    id = Column(Integer, primary_key=True, index=True)
    order_id = Column(Integer, ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True)
    product_id = Column(Integer, nullable=False, index=True)
    name = Column(String(200), nullable=False)
    size = Column(String(20), nullable=False)
    quantity = Column(Integer, nullable=False)
    price = Column(Numeric(12, 2), nullable=False)


class OrderEvent(Base):
    __tablename__ = "order_events"

    id = Column(Integer, primary_key=True, index=True)
    order_id = Column(Integer, ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True)
    status = Column(String(40), nullable=False)
    timestamp = Column(DateTime(timezone=True), nullable=False)
    message = Column(String(255), nullable=False)
