from datetime import timedelta
from decimal import Decimal

import pytest

from app.errors import CouponExpired, InvalidCoupon, MinimumOrderNotMet
from app.models.coupon import Coupon
from app.services.discount_calculator import DiscountCalculator, D, round2
from app.services.pricing import PricingCalculator
from app.utils import utcnow


def make_coupon(**overrides) -> Coupon:
    now = utcnow()
    fields = {
        "code": "TEST",
        "description": "",
        "discount_type": "fixed",
        "discount_value": Decimal("100"),
        "min_order_value": Decimal("0"),
        "max_discount": None,
        "usage_limit": None,
        "used_count": 0,
        "valid_from": now - timedelta(days=1),
        "valid_until": now + timedelta(days=30),
        "is_active": True,
    }
    fields.update(overrides)
    return Coupon(**fields)


@pytest.mark.parametrize("subtotal, expected", [(998, 99), (999, 0), (1000, 0)])
def test_delivery_charge_boundary(subtotal, expected):
    prices = PricingCalculator.calculate(D(subtotal))
    assert prices.delivery_charges == D(expected)


def test_subtotal_from_lines():
    subtotal = PricingCalculator.calculate_subtotal([(D(500), 2), (D("199.50"), 1)])
    assert subtotal == D("1199.50")


def test_order_without_coupon():
    subtotal = PricingCalculator.calculate_subtotal([(D(500), 2)])
    prices = PricingCalculator.calculate(subtotal)
    assert prices.subtotal == D(1000)
    assert prices.delivery_charges == D(0)
    assert prices.gst == D(180)
    assert prices.total == D(1180)


def test_order_with_fixed_coupon():
    coupon = make_coupon(discount_value=Decimal("100"), min_order_value=Decimal("500"))
    discount = DiscountCalculator.calculate_discount(coupon, D(1000))
    prices = PricingCalculator.calculate(D(1000), discount)
    assert prices.discount == D(100)
    assert prices.gst == D(162)
    assert prices.total == D(1062)


def test_delivery_charge_uses_subtotal_before_discount():
    prices = PricingCalculator.calculate(D(1000), D(200))
    assert prices.delivery_charges == D(0)
    assert prices.total == D("944.00")


@pytest.mark.parametrize("subtotal", ["50", "99.99", "333.33", "998", "999", "1234.56", "10001.01"])
@pytest.mark.parametrize("discount", ["0", "0.01", "33.33", "1"])
def test_total_matches_rounded_formula(subtotal, discount):
    prices = PricingCalculator.calculate(D(subtotal), D(discount))
    expected = round2((D(subtotal) - D(discount)) * D("1.18") + prices.delivery_charges)
    assert prices.total == expected
    assert prices.gst == round2((D(subtotal) - D(discount)) * D("0.18"))


def test_gst_rounds_half_up():
    # 0.25 * 0.18 = 0.045
    prices = PricingCalculator.calculate(D("0.25"))
    assert prices.gst == D("0.05")


def test_percentage_discount():
    coupon = make_coupon(discount_type="percentage", discount_value=Decimal("10"))
    assert DiscountCalculator.calculate_discount(coupon, D(1500)) == D("150.00")


def test_percentage_discount_capped():
    coupon = make_coupon(discount_type="percentage", discount_value=Decimal("50"), max_discount=Decimal("200"))
    assert DiscountCalculator.calculate_discount(coupon, D(1000)) == D(200)


def test_zero_cap_means_uncapped():
    coupon = make_coupon(discount_type="percentage", discount_value=Decimal("50"), max_discount=Decimal("0"))
    assert DiscountCalculator.calculate_discount(coupon, D(1000)) == D(500)


def test_fixed_discount_never_exceeds_amount():
    coupon = make_coupon(discount_value=Decimal("500"))
    assert DiscountCalculator.calculate_discount(coupon, D(300)) == D(300)


def test_full_percentage_discount_equals_amount():
    coupon = make_coupon(discount_type="percentage", discount_value=Decimal("100"))
    assert DiscountCalculator.calculate_discount(coupon, D("249.99")) == D("249.99")


def test_discount_on_zero_amount():
    coupon = make_coupon()
    assert DiscountCalculator.calculate_discount(coupon, D(0)) == D(0)


def test_minimum_order_not_met():
    coupon = make_coupon(min_order_value=Decimal("500"))
    with pytest.raises(MinimumOrderNotMet):
        DiscountCalculator.calculate_discount(coupon, D("499.99"))
    assert DiscountCalculator.calculate_discount(coupon, D(500)) == D(100)


def test_expired_coupon():
    now = utcnow()
    coupon = make_coupon(valid_from=now - timedelta(days=10), valid_until=now - timedelta(seconds=1))
    with pytest.raises(CouponExpired):
        DiscountCalculator.calculate_discount(coupon, D(1000))


def test_expired_coupon_is_an_invalid_coupon():
    now = utcnow()
    coupon = make_coupon(valid_from=now - timedelta(days=10), valid_until=now - timedelta(days=1))
    with pytest.raises(InvalidCoupon):
        DiscountCalculator.calculate_discount(coupon, D(1000))


def test_not_yet_valid_coupon():
    now = utcnow()
    coupon = make_coupon(valid_from=now + timedelta(days=1), valid_until=now + timedelta(days=10))
    with pytest.raises(InvalidCoupon) as exc_info:
        DiscountCalculator.calculate_discount(coupon, D(1000))
    assert not isinstance(exc_info.value, CouponExpired)


def test_inactive_coupon():
    coupon = make_coupon(is_active=False)
    assert not DiscountCalculator.is_valid(coupon)
    with pytest.raises(InvalidCoupon):
        DiscountCalculator.calculate_discount(coupon, D(1000))


def test_usage_limit_rejects_fourth_use():
    coupon = make_coupon(usage_limit=3, used_count=2)
    assert DiscountCalculator.calculate_discount(coupon, D(1000)) == D(100)
    coupon.used_count = 3
    with pytest.raises(InvalidCoupon):
        DiscountCalculator.calculate_discount(coupon, D(1000))


def test_validity_window_is_inclusive():
    now = utcnow()
    coupon = make_coupon(valid_from=now, valid_until=now + timedelta(days=1))
    assert DiscountCalculator.is_valid(coupon, now)
    assert DiscountCalculator.is_valid(coupon, now + timedelta(days=1))
    assert not DiscountCalculator.is_valid(coupon, now + timedelta(days=1, seconds=1))
