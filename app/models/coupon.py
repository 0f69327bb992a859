# app/models/coupon.py
import enum

from sqlalchemy import (
    Boolean,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Table,
    UniqueConstraint,
)
from sqlalchemy.sql import func

from app.core.database import Base


class CouponType(str, enum.Enum):
    PERCENTAGE = "Percentage"
    FIXED = "Fixed Amount"


# Courses a coupon is restricted to. No rows means any course.
coupon_courses = Table(
    "coupon_courses",
    Base.metadata,
    Column(
        "coupon_id",
        Integer,
        ForeignKey("coupons.id", ondelete="CASCADE"),
        nullable=False,
    ),
    Column(
        "course_id",
        Integer,
        ForeignKey("courses.id", ondelete="CASCADE"),
        nullable=False,
    ),
    UniqueConstraint("coupon_id", "course_id", name="uq_coupon_courses_pair"),
)


class Coupon(Base):
    __tablename__ = "coupons"

    id = Column(Integer, primary_key=True, index=True)
    code = Column(String(50), unique=True, index=True, nullable=False)
    type = Column(String(20), nullable=False, default=CouponType.PERCENTAGE.value)
    value = Column(Numeric(10, 2), nullable=False)

    # Validity window, inclusive on both calendar days
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)

    usage_limit = Column(Integer, nullable=True)  # NULL = unlimited
    first_time_buyer_only = Column(Boolean, default=False, nullable=False)

    created_at = Column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    def is_active_on(self, day) -> bool:
        return self.start_date <= day <= self.end_date

    def __repr__(self):
        return f"<Coupon(id={self.id}, code='{self.code}', type='{self.type}', value={self.value})>"
