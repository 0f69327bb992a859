# app/services/coupon.py
import logging
from datetime import date, datetime
from typing import Dict, List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session, selectinload

from app.core.database import transaction
from app.core.decorator import db_exception
from app.core.exceptions import (
    CouponFirstPurchaseOnly,
    CouponInUse,
    CouponNotApplicable,
    CouponNotFound,
    CouponUsageLimitReached,
    CourseNotFound,
    DuplicateCouponCode,
    InvalidCoupon,
)
from app.models.coupon import Coupon
from app.models.coupon_usage import CouponUsage
from app.models.course import Course
from app.models.sale import Sale, SaleStatus
from app.schemas.coupon import CouponCreate, CouponUpdate

logger = logging.getLogger(__name__)


class CouponService:
    def __init__(self, db: Session):
        self.db = db

    # ==================== Redemption ====================

    def count_usage(self, coupon_id: int) -> int:
        return (
            self.db.query(func.count(CouponUsage.id))
            .filter(CouponUsage.coupon_id == coupon_id)
            .scalar()
            or 0
        )

    def has_paid_purchase(self, user_id: int) -> bool:
        return (
            self.db.query(Sale.id)
            .filter(Sale.user_id == user_id, Sale.status == SaleStatus.PAID.value)
            .first()
            is not None
        )

    def get_redeemable_coupon(
        self,
        code: str,
        user_id: int,
        course_id: int,
        today: Optional[date] = None,
    ) -> Coupon:
        """
        Resolve a coupon code for a purchase, enforcing every restriction.

        Raises:
            InvalidCoupon: unknown code or today outside the validity window
            CouponUsageLimitReached: usage rows already reach the limit
            CouponNotApplicable: the coupon is limited to other courses
            CouponFirstPurchaseOnly: the buyer already has a paid sale
        """
        today = today or datetime.utcnow().date()

        coupon = (
            self.db.query(Coupon)
            .options(selectinload(Coupon.courses))
            .filter(Coupon.code == code)
            .first()
        )
        if not coupon or not coupon.is_active_on(today):
            raise InvalidCoupon()

        if coupon.courses and course_id not in {c.id for c in coupon.courses}:
            raise CouponNotApplicable()

        self.check_redemption_limits(coupon, user_id)
        return coupon

    def check_redemption_limits(self, coupon: Coupon, user_id: int) -> None:
        """Usage limit and first-time-buyer rules, checked at order time and again at settlement."""
        if coupon.usage_limit is not None:
            if self.count_usage(coupon.id) >= coupon.usage_limit:
                raise CouponUsageLimitReached()

        if coupon.first_time_buyer_only and self.has_paid_purchase(user_id):
            raise CouponFirstPurchaseOnly()

    def lock_coupon(self, coupon_id: int) -> Coupon:
        """Load a coupon with a row lock held until the current transaction ends."""
        coupon = (
            self.db.query(Coupon).filter(Coupon.id == coupon_id).with_for_update().first()
        )
        if not coupon:
            raise InvalidCoupon()
        return coupon

    # ==================== Admin management ====================

    def _usage_counts(self) -> Dict[int, int]:
        rows = (
            self.db.query(CouponUsage.coupon_id, func.count(CouponUsage.id))
            .group_by(CouponUsage.coupon_id)
            .all()
        )
        return {coupon_id: count for coupon_id, count in rows}

    def to_response(self, coupon: Coupon, usage_count: int = None) -> dict:
        if usage_count is None:
            usage_count = self.count_usage(coupon.id)
        return {
            "id": coupon.id,
            "code": coupon.code,
            "type": coupon.type,
            "value": coupon.value,
            "start_date": coupon.start_date,
            "end_date": coupon.end_date,
            "usage_limit": coupon.usage_limit,
            "first_time_buyer_only": coupon.first_time_buyer_only,
            "created_at": coupon.created_at,
            "usage_count": usage_count,
            "course_ids": sorted(c.id for c in coupon.courses),
        }

    def list_coupons(self) -> List[dict]:
        coupons = (
            self.db.query(Coupon)
            .options(selectinload(Coupon.courses))
            .order_by(Coupon.created_at.desc(), Coupon.id.desc())
            .all()
        )
        usage = self._usage_counts()
        return [self.to_response(c, usage.get(c.id, 0)) for c in coupons]

    def get_coupon(self, coupon_id: int) -> Coupon:
        coupon = (
            self.db.query(Coupon)
            .options(selectinload(Coupon.courses))
            .filter(Coupon.id == coupon_id)
            .first()
        )
        if not coupon:
            raise CouponNotFound()
        return coupon

    def _resolve_courses(self, course_ids: List[int]) -> List[Course]:
        if not course_ids:
            return []
        wanted = set(course_ids)
        courses = self.db.query(Course).filter(Course.id.in_(wanted)).all()
        missing = wanted - {c.id for c in courses}
        if missing:
            raise CourseNotFound(
                f"Course not found: {', '.join(str(i) for i in sorted(missing))}"
            )
        return courses

    def _ensure_unique_code(self, code: str, exclude_id: int = None) -> None:
        query = self.db.query(Coupon.id).filter(Coupon.code == code)
        if exclude_id is not None:
            query = query.filter(Coupon.id != exclude_id)
        if query.first():
            raise DuplicateCouponCode()

    @db_exception
    def create_coupon(self, coupon_in: CouponCreate) -> Coupon:
        """Create a coupon and its course restrictions in one transaction."""
        self._ensure_unique_code(coupon_in.code)
        courses = self._resolve_courses(coupon_in.course_ids)

        coupon = Coupon(
            **coupon_in.model_dump(exclude={"course_ids", "type"}),
            type=coupon_in.type.value,
        )
        with transaction(self.db):
            coupon.courses = courses
            self.db.add(coupon)

        self.db.refresh(coupon)
        logger.info(f"Coupon created: {coupon.code} (id={coupon.id})")
        return coupon

    @db_exception
    def update_coupon(self, coupon_id: int, coupon_in: CouponUpdate) -> Coupon:
        """Replace a coupon's fields and its course restrictions atomically."""
        coupon = self.get_coupon(coupon_id)
        self._ensure_unique_code(coupon_in.code, exclude_id=coupon.id)
        courses = self._resolve_courses(coupon_in.course_ids)

        with transaction(self.db):
            for field, value in coupon_in.model_dump(
                exclude={"course_ids", "type"}
            ).items():
                setattr(coupon, field, value)
            coupon.type = coupon_in.type.value
            coupon.courses = courses

        self.db.refresh(coupon)
        logger.info(f"Coupon updated: {coupon.code} (id={coupon.id})")
        return coupon

    def delete_coupon(self, coupon_id: int) -> None:
        """Delete a coupon no order has used. Sales and usage rows are kept as history."""
        coupon = self.get_coupon(coupon_id)
        if self.db.query(Sale.id).filter(Sale.coupon_id == coupon.id).first():
            raise CouponInUse()

        with transaction(self.db):
            self.db.delete(coupon)
        logger.info(f"Coupon deleted: id={coupon_id}")
