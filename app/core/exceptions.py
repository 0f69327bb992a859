"""
Domain errors raised by the service layer.

Each error carries the message shown to the client and the HTTP status it
maps to. They are rendered by the ServiceError handler in main.py as
{"message": ...}.
"""

from fastapi import status


class ServiceError(Exception):
    status_code: int = status.HTTP_400_BAD_REQUEST
    message: str = "Request could not be processed."

    def __init__(self, message: str = None):
        if message is not None:
            self.message = message
        super().__init__(self.message)


# ==================== Lookups ====================


class CourseNotFound(ServiceError):
    status_code = status.HTTP_404_NOT_FOUND
    message = "Course not found."


class LessonNotFound(ServiceError):
    status_code = status.HTTP_404_NOT_FOUND
    message = "Lesson not found."


class OrderNotFound(ServiceError):
    status_code = status.HTTP_404_NOT_FOUND
    message = "Pending order not found."


class SaleNotFound(ServiceError):
    status_code = status.HTTP_404_NOT_FOUND
    message = "Sale not found."


class CouponNotFound(ServiceError):
    status_code = status.HTTP_404_NOT_FOUND
    message = "Coupon not found."


class CertificateNotFound(ServiceError):
    status_code = status.HTTP_404_NOT_FOUND
    message = "Certificate not found."


# ==================== Purchase ====================


class AlreadyEnrolled(ServiceError):
    message = "You are already enrolled in this course."


class InvalidCoupon(ServiceError):
    message = "Invalid or expired coupon code."


class CouponUsageLimitReached(InvalidCoupon):
    message = "This coupon has reached its usage limit."


class CouponNotApplicable(InvalidCoupon):
    message = "This coupon cannot be applied to this course."


class CouponFirstPurchaseOnly(InvalidCoupon):
    message = "This coupon is only valid on your first purchase."


class PaymentVerificationFailed(ServiceError):
    message = "Payment verification failed."


# ==================== Enrollment & certificates ====================


class NotEnrolled(ServiceError):
    status_code = status.HTTP_403_FORBIDDEN
    message = "You are not enrolled in this course."


class CourseNotCompleted(ServiceError):
    message = "You must complete the course to claim a certificate."


class CertificatesNotOffered(ServiceError):
    message = "This course does not offer a certificate."


class AlreadyClaimed(ServiceError):
    status_code = status.HTTP_409_CONFLICT
    message = "Certificate already claimed for this course."


# ==================== Admin ====================


class DuplicateCouponCode(ServiceError):
    status_code = status.HTTP_409_CONFLICT
    message = "A coupon with this code already exists."


class CouponInUse(ServiceError):
    status_code = status.HTTP_409_CONFLICT
    message = "This coupon has orders against it and cannot be deleted."


class SaleAlreadySettled(ServiceError):
    message = "Only pending sales can be changed."


class SaleStatusNotAllowed(ServiceError):
    message = "Pending sales can only be marked as Failed."


class EmailAlreadyRegistered(ServiceError):
    message = "User with this email already exists."


class InvalidCredentials(ServiceError):
    status_code = status.HTTP_401_UNAUTHORIZED
    message = "Invalid email or password."
