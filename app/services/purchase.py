# app/services/purchase.py
import logging
from datetime import datetime
from typing import List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.database import transaction
from app.core.exceptions import (
    AlreadyEnrolled,
    CourseNotFound,
    InvalidCoupon,
    OrderNotFound,
    PaymentVerificationFailed,
)
from app.models.coupon_usage import CouponUsage
from app.models.course import Course
from app.models.course_enrollment import CourseEnrollment
from app.models.sale import Sale, SaleStatus
from app.schemas.purchase import CreateOrderRequest, VerifyPaymentRequest
from app.services.coupon import CouponService
from app.services.course_enrollment import CourseEnrollmentService
from app.services.payment_gateway import PaymentGateway, payment_gateway
from app.services.pricing import evaluate_price

logger = logging.getLogger(__name__)


class PurchaseService:
    def __init__(self, db: Session, gateway: Optional[PaymentGateway] = None):
        self.db = db
        self.gateway = gateway or payment_gateway
        self.coupons = CouponService(db)
        self.enrollments = CourseEnrollmentService(db)

    def create_order(self, user_id: int, order_in: CreateOrderRequest) -> dict:
        """
        Open a Pending sale for a course.

        Every check runs before the single insert, so a rejected order
        leaves no trace.

        Raises:
            CourseNotFound, AlreadyEnrolled, InvalidCoupon (or a subclass)
        """
        course = self.db.query(Course).filter(Course.id == order_in.course_id).first()
        if not course:
            raise CourseNotFound()

        if self.enrollments.is_user_enrolled(user_id, course.id):
            raise AlreadyEnrolled()

        coupon = None
        if order_in.coupon_code:
            coupon = self.coupons.get_redeemable_coupon(
                order_in.coupon_code, user_id, course.id
            )

        final_amount, discount_amount = evaluate_price(course.price, coupon)

        sale = Sale(
            user_id=user_id,
            course_id=course.id,
            original_amount=course.price,
            discount_amount=discount_amount,
            amount=final_amount,
            status=SaleStatus.PENDING.value,
            coupon_id=coupon.id if coupon else None,
            payment_gateway=self.gateway.name,
            gateway_order_id=self.gateway.create_order_id(),
        )
        with transaction(self.db):
            self.db.add(sale)
        self.db.refresh(sale)

        logger.info(
            f"Order created: sale={sale.id} user={user_id} course={course.id} "
            f"amount={final_amount} coupon={coupon.code if coupon else None}"
        )

        return {
            "sale_id": sale.id,
            "gateway_order_id": sale.gateway_order_id,
            "amount": sale.amount,
            "currency": self.gateway.currency,
            "gateway_key": self.gateway.public_key,
        }

    def _get_pending_sale(self, user_id: int, sale_id: int) -> Sale:
        sale = (
            self.db.query(Sale)
            .filter(
                Sale.id == sale_id,
                Sale.user_id == user_id,
                Sale.status == SaleStatus.PENDING.value,
            )
            .with_for_update()
            .first()
        )
        if not sale:
            raise OrderNotFound()
        return sale

    def _mark_failed(
        self, sale: Sale, verify_in: VerifyPaymentRequest, reason: str
    ) -> None:
        with transaction(self.db):
            sale.status = SaleStatus.FAILED.value
            sale.gateway_payment_id = verify_in.gateway_payment_id
            sale.gateway_signature = verify_in.gateway_signature
        logger.warning(f"Sale {sale.id} marked Failed: {reason}")

    def verify_payment(
        self, user_id: int, verify_in: VerifyPaymentRequest
    ) -> CourseEnrollment:
        """
        Settle a Pending sale.

        A bad signature (or an order id that does not belong to the sale)
        moves the sale to Failed. A good one marks it Paid, enrolls the buyer
        and records coupon usage in a single transaction: either all of it
        is stored or none of it is.

        Raises:
            OrderNotFound: no Pending sale with this id for this user
            PaymentVerificationFailed: signature check failed
            AlreadyEnrolled: an enrollment appeared since the order was made
            InvalidCoupon: the coupon's usage limit or first-purchase rule no
                longer holds; the sale is marked Failed
        """
        sale = self._get_pending_sale(user_id, verify_in.sale_id)

        signature_ok = (
            sale.gateway_order_id == verify_in.gateway_order_id
            and self.gateway.verify_signature(
                verify_in.gateway_order_id,
                verify_in.gateway_payment_id,
                verify_in.gateway_signature,
            )
        )
        if not signature_ok:
            self._mark_failed(sale, verify_in, "signature mismatch")
            raise PaymentVerificationFailed()

        course = self.db.query(Course).filter(Course.id == sale.course_id).first()
        if not course:
            raise CourseNotFound()

        if sale.coupon_id:
            # Row lock held until the settlement commits
            coupon = self.coupons.lock_coupon(sale.coupon_id)
            try:
                self.coupons.check_redemption_limits(coupon, user_id)
            except InvalidCoupon as e:
                self._mark_failed(sale, verify_in, e.message)
                raise

        try:
            with transaction(self.db):
                sale.status = SaleStatus.PAID.value
                sale.gateway_payment_id = verify_in.gateway_payment_id
                sale.gateway_signature = verify_in.gateway_signature
                self.db.flush()

                enrollment = self.enrollments.add_enrollment(
                    user_id, course, now=datetime.utcnow()
                )

                if sale.coupon_id:
                    self.db.add(
                        CouponUsage(
                            coupon_id=sale.coupon_id,
                            user_id=user_id,
                            sale_id=sale.id,
                        )
                    )
                    self.db.flush()
        except IntegrityError:
            logger.warning(
                f"Sale {verify_in.sale_id} not settled: user {user_id} already enrolled"
            )
            raise AlreadyEnrolled()

        self.db.refresh(enrollment)
        logger.info(
            f"Payment settled: sale={sale.id} user={user_id} course={course.id}"
        )
        return enrollment

    def get_sales_history(self, user_id: int) -> List[dict]:
        rows = (
            self.db.query(Sale, Course.title)
            .join(Course, Sale.course_id == Course.id)
            .filter(Sale.user_id == user_id)
            .order_by(Sale.sale_date.desc(), Sale.id.desc())
            .all()
        )
        return [
            {
                "id": sale.id,
                "amount": sale.amount,
                "status": sale.status,
                "date": sale.sale_date.date(),
                "course_id": sale.course_id,
                "course_title": title,
            }
            for sale, title in rows
        ]
