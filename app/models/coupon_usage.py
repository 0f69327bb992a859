# app/models/coupon_usage.py
from sqlalchemy import Column, DateTime, ForeignKey, Integer
from sqlalchemy.sql import func

from app.core.database import Base


class CouponUsage(Base):
    """
    One row per redeemed coupon.
    Rows are only appended; usage counts are always COUNT(*) over this table.
    """

    __tablename__ = "coupon_usage"

    id = Column(Integer, primary_key=True, index=True)
    coupon_id = Column(Integer, ForeignKey("coupons.id"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    sale_id = Column(Integer, ForeignKey("sales.id"), nullable=False, unique=True)

    used_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    def __repr__(self):
        return f"<CouponUsage(id={self.id}, coupon_id={self.coupon_id}, sale_id={self.sale_id})>"
