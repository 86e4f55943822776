
from decimal import Decimal
from typing import Iterable, NamedTuple, Tuple
from app.services.discount_calculator import D, round2

# GST Rate (18%)
GST_RATE = D("0.18")
FREE_DELIVERY_THRESHOLD = D(999)
DELIVERY_CHARGES = D(99)


class PriceBreakdown(NamedTuple):
    subtotal: Decimal
    discount: Decimal
    delivery_charges: Decimal
    gst: Decimal
    total: Decimal


class PricingCalculator:
    """Derives order money fields from resolved (unit_price, quantity) lines"""

    @staticmethod
    def calculate_subtotal(lines: Iterable[Tuple[Decimal, int]]) -> Decimal:
        return round2(sum((D(price) * D(quantity) for price, quantity in lines), D(0)))

    @staticmethod
    def delivery_charges_for(subtotal: Decimal) -> Decimal:
        return D(0) if subtotal >= FREE_DELIVERY_THRESHOLD else DELIVERY_CHARGES

    @staticmethod
    def calculate(subtotal: Decimal, discount: Decimal = D(0)) -> PriceBreakdown:
        subtotal = D(subtotal)
        discount = D(discount)
        delivery_charges = PricingCalculator.delivery_charges_for(subtotal)
        amount_after_discount = subtotal - discount
        gst = round2(amount_after_discount * GST_RATE)
        total = round2(amount_after_discount + gst + delivery_charges)
        return PriceBreakdown(
            subtotal=subtotal,
            discount=discount,
            delivery_charges=delivery_charges,
            gst=gst,
            total=total,
        )
