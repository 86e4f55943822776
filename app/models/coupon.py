
from sqlalchemy import Column, Integer, String, Enum, Boolean, Numeric, DateTime, ForeignKey, Index, func
from app.database import Base

DiscountTypes = ("percentage", "fixed")


class Coupon(Base):
    __tablename__ = "coupons"

    id = Column(Integer, primary_key=True, index=True)
    code = Column(String(64), unique=True, nullable=False, index=True)
    description = Column(String(255), nullable=False, default="")
    discount_type = Column(Enum(*DiscountTypes, name="discount_type"), nullable=False)
    discount_value = Column(Numeric(12, 2), nullable=False)
    min_order_value = Column(Numeric(12, 2), default=0, nullable=False)
    max_discount = Column(Numeric(12, 2), nullable=True)
    # null means unlimited
    usage_limit = Column(Integer, nullable=True)
    used_count = Column(Integer, default=0, nullable=False)
    valid_from = Column(DateTime(timezone=True), nullable=False)
    valid_until = Column(DateTime(timezone=True), nullable=False)
    is_active = Column(Boolean, default=True, nullable=False, index=True)
    created_by = Column(Integer, ForeignKey("users.id"), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    __table_args__ = (
        Index("ix_coupons_active_window", "is_active", "valid_from", "valid_until"),
    )
