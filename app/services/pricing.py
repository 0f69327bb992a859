# app/services/pricing.py
"""
Course price evaluation.

Pure functions only: no database access, no date checks. Callers decide
whether a coupon may be used before asking for the discounted price.
"""

from decimal import ROUND_HALF_UP, Decimal
from typing import Optional, Tuple

from app.models.coupon import CouponType

CENT = Decimal("0.01")


def to_money(value) -> Decimal:
    """Coerce a number to a two-place Decimal, rounding half up."""
    if not isinstance(value, Decimal):
        value = Decimal(str(value))
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def calculate_discount(course_price, coupon_type: str, coupon_value) -> Decimal:
    price = to_money(course_price)
    value = Decimal(str(coupon_value))

    if coupon_type == CouponType.PERCENTAGE.value:
        return to_money(price * value / Decimal(100))
    if coupon_type == CouponType.FIXED.value:
        return to_money(value)

    raise ValueError(f"Unknown coupon type: {coupon_type}")


def evaluate_price(course_price, coupon: Optional[object] = None) -> Tuple[Decimal, Decimal]:
    """
    Compute what the buyer pays for a course.

    Args:
        course_price: List price of the course
        coupon: Anything with ``type`` and ``value`` attributes, or None

    Returns:
        Tuple of (final_amount, discount_amount). The final amount never
        drops below zero.
    """
    price = to_money(course_price)

    if coupon is None:
        return price, Decimal("0.00")

    discount = calculate_discount(price, coupon.type, coupon.value)
    final_amount = max(Decimal("0.00"), price - discount)
    return to_money(final_amount), discount
