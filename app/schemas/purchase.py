# app/schemas/purchase.py
import datetime
from typing import Optional

from pydantic import Field, field_validator

from app.schemas.common import CamelModel, Money


class CreateOrderRequest(CamelModel):
    """Start a purchase for a course, optionally with a coupon code"""

    course_id: int = Field(..., description="Course to purchase")
    coupon_code: Optional[str] = Field(None, max_length=50, description="Coupon code")

    @field_validator("coupon_code", mode="before")
    @classmethod
    def blank_code_is_none(cls, value):
        if isinstance(value, str):
            value = value.strip()
            return value or None
        return value


class CreateOrderResponse(CamelModel):
    sale_id: int
    gateway_order_id: str
    amount: Money
    currency: str
    gateway_key: str


class VerifyPaymentRequest(CamelModel):
    sale_id: int
    gateway_payment_id: str = Field(..., min_length=1, max_length=255)
    gateway_order_id: str = Field(..., min_length=1, max_length=255)
    gateway_signature: str = Field(..., min_length=1, max_length=255)


class SaleHistoryItem(CamelModel):
    id: int
    amount: Money
    status: str
    date: datetime.date
    course_id: int
    course_title: str
