# app/models/sale.py
import enum

from sqlalchemy import Column, DateTime, ForeignKey, Integer, Numeric, String
from sqlalchemy.sql import func

from app.core.database import Base


class SaleStatus(str, enum.Enum):
    PENDING = "Pending"
    PAID = "Paid"
    FAILED = "Failed"


class Sale(Base):
    """
    A single purchase attempt.
    Created as Pending and settled exactly once to Paid or Failed.
    """

    __tablename__ = "sales"

    id = Column(Integer, primary_key=True, index=True)

    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    course_id = Column(Integer, ForeignKey("courses.id"), nullable=False, index=True)

    # Amounts
    original_amount = Column(Numeric(10, 2), nullable=False)
    discount_amount = Column(Numeric(10, 2), nullable=False, default=0)
    amount = Column(Numeric(10, 2), nullable=False)

    status = Column(
        String(20), nullable=False, default=SaleStatus.PENDING.value, index=True
    )
    coupon_id = Column(Integer, ForeignKey("coupons.id"), nullable=True)

    # Payment gateway references
    payment_gateway = Column(String(50), nullable=True)
    gateway_order_id = Column(String(255), unique=True, nullable=True)
    gateway_payment_id = Column(String(255), nullable=True)
    gateway_signature = Column(String(255), nullable=True)

    sale_date = Column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )

    def __repr__(self):
        return f"<Sale(id={self.id}, user_id={self.user_id}, course_id={self.course_id}, status='{self.status}')>"
