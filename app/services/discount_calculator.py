
from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP, getcontext
from typing import Optional
from app.errors import InvalidCoupon, CouponExpired, MinimumOrderNotMet
from app.models.coupon import Coupon
from app.utils import utcnow, as_utc

getcontext().prec = 28


def D(x) -> Decimal:
    return Decimal(str(x))


def round2(x: Decimal) -> Decimal:
    return x.quantize(Decimal('0.01'), rounding=ROUND_HALF_UP)


class DiscountCalculator:
    """Coupon validity and discount rules; pure over the coupon's stored state"""

    @staticmethod
    def is_valid(coupon: Coupon, now: Optional[datetime] = None) -> bool:
        now = now or utcnow()
        return (
            bool(coupon.is_active)
            and as_utc(coupon.valid_from) <= now <= as_utc(coupon.valid_until)
            and (coupon.usage_limit is None or coupon.used_count < coupon.usage_limit)
        )

    @staticmethod
    def calculate_discount(coupon: Coupon, order_amount, now: Optional[datetime] = None) -> Decimal:
        now = now or utcnow()
        if not DiscountCalculator.is_valid(coupon, now):
            if coupon.is_active and now > as_utc(coupon.valid_until):
                raise CouponExpired(coupon.code)
            raise InvalidCoupon()

        amount = D(order_amount)
        min_order_value = D(coupon.min_order_value or 0)
        if amount < min_order_value:
            raise MinimumOrderNotMet(min_order_value)

        if coupon.discount_type == 'percentage':
            discount = (amount * D(coupon.discount_value)) / D(100)
            # a zero or missing cap means uncapped
            if coupon.max_discount and discount > D(coupon.max_discount):
                discount = D(coupon.max_discount)
        else:
            discount = D(coupon.discount_value)

        discount = min(discount, amount)
        return round2(max(discount, D(0)))
