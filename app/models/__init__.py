"""
Models package initialization
Import all models and setup relationships
"""

from .certificate import Certificate
from .coupon import Coupon, CouponType, coupon_courses
from .coupon_usage import CouponUsage
from .course import AccessType, Course, CourseModule
from .course_enrollment import CourseEnrollment
from .lesson import Lesson

# Import and setup relationships
from .relations import setup_relationships
from .sale import Sale, SaleStatus
from .user import User, UserRole
from .watch_history import WatchHistory

# Setup all relationships after models are imported
setup_relationships()

# Make models available at package level
__all__ = [
    "AccessType",
    "Certificate",
    "Coupon",
    "CouponType",
    "CouponUsage",
    "Course",
    "CourseEnrollment",
    "CourseModule",
    "Lesson",
    "Sale",
    "SaleStatus",
    "User",
    "UserRole",
    "WatchHistory",
    "coupon_courses",
]
