# app/schemas/coupon.py
from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import Field, field_validator, model_validator

from app.models.coupon import CouponType
from app.schemas.common import CamelModel, Money


class CouponBase(CamelModel):
    code: str = Field(..., min_length=1, max_length=50)
    type: CouponType = Field(default=CouponType.PERCENTAGE)
    value: Decimal = Field(..., ge=0, max_digits=10, decimal_places=2)
    start_date: date
    end_date: date
    usage_limit: Optional[int] = Field(None, ge=1, description="NULL = unlimited")
    course_ids: List[int] = Field(default_factory=list)
    first_time_buyer_only: bool = False

    @field_validator("code")
    @classmethod
    def normalize_code(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Coupon code cannot be blank")
        return value

    @model_validator(mode="after")
    def check_window(self):
        if self.end_date < self.start_date:
            raise ValueError("end_date must not be before start_date")
        if self.type == CouponType.PERCENTAGE and self.value > 100:
            raise ValueError("Percentage discount cannot exceed 100")
        return self


class CouponCreate(CouponBase):
    pass


class CouponUpdate(CouponBase):
    """Full replacement of a coupon, including its course list"""


class CouponResponse(CamelModel):
    id: int
    code: str
    type: str
    value: Money
    start_date: date
    end_date: date
    usage_limit: Optional[int]
    first_time_buyer_only: bool
    created_at: datetime
    usage_count: int = 0
    course_ids: List[int] = []
