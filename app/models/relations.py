# app/models/relations.py

from sqlalchemy.orm import relationship

from .certificate import Certificate
from .coupon import Coupon, coupon_courses
from .coupon_usage import CouponUsage
from .course import Course, CourseModule
from .course_enrollment import CourseEnrollment
from .lesson import Lesson
from .sale import Sale
from .user import User
from .watch_history import WatchHistory


def setup_relationships():
    """
    Configure all SQLAlchemy relationships between models.
    """

    # --- Catalog ---

    # 1. Course to Modules (One-to-Many)
    Course.modules = relationship(
        "CourseModule",
        back_populates="course",
        cascade="all, delete-orphan",
        order_by="CourseModule.order_index",
    )
    CourseModule.course = relationship("Course", back_populates="modules")

    # 2. Module to Lessons (One-to-Many)
    CourseModule.lessons = relationship(
        "Lesson",
        back_populates="module",
        cascade="all, delete-orphan",
        order_by="Lesson.order_index",
    )
    Lesson.module = relationship("CourseModule", back_populates="lessons")

    # --- Coupons ---

    # 3. Coupon <-> Course restriction list (Many-to-Many)
    Coupon.courses = relationship("Course", secondary=coupon_courses)

    # 4. Coupon to Usage rows (One-to-Many, append-only)
    Coupon.usages = relationship("CouponUsage", back_populates="coupon")
    CouponUsage.coupon = relationship("Coupon", back_populates="usages")

    # --- Purchases ---

    # 5. Sale to User / Course / Coupon
    Sale.user = relationship("User")
    Sale.course = relationship("Course")
    Sale.coupon = relationship("Coupon")

    # --- Enrollments ---

    # 6. Enrollment to User / Course
    CourseEnrollment.user = relationship("User", backref="enrollments")
    CourseEnrollment.course = relationship("Course")

    # 7. Watch history to Lesson
    WatchHistory.lesson = relationship("Lesson")

    # 8. Certificate to User / Course
    Certificate.user = relationship("User")
    Certificate.course = relationship("Course")
