"""
Shared fixtures.

The app reads its settings at import time, so the environment is pinned
to an in-memory SQLite database before anything from `app` is imported.
"""

import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["PAYMENT_GATEWAY_SECRET"] = "test-gateway-secret"
os.environ["DEBUG"] = "false"

from datetime import date, timedelta
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

from app.core.database import Base, SessionLocal, engine
from app.core.hasher import PasswordHelper
from app.core.security import jwt_manager
from app.models import (
    AccessType,
    Coupon,
    CouponType,
    Course,
    CourseEnrollment,
    CourseModule,
    Lesson,
    User,
    UserRole,
)
from app.services.payment_gateway import payment_gateway
from main import app

PASSWORD = "Secret@123"


@pytest.fixture(autouse=True)
def setup_database():
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client():
    # No context manager: the startup hook (default admin) stays out of the way
    return TestClient(app)


# ==================== Users ====================


def make_user(db, email, role=UserRole.STUDENT.value, name="Test User"):
    user = User(
        name=name,
        email=email,
        hashed_password=PasswordHelper.hash_password(PASSWORD),
        role=role,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def auth_headers(user):
    return {"Authorization": f"Bearer {jwt_manager.create_access_token(user)}"}


@pytest.fixture
def student(db):
    return make_user(db, "student@example.com", name="Alice Student")


@pytest.fixture
def other_student(db):
    return make_user(db, "other@example.com", name="Bob Student")


@pytest.fixture
def admin(db):
    return make_user(db, "admin@example.com", role=UserRole.ADMIN.value, name="Admin")


@pytest.fixture
def student_headers(student):
    return auth_headers(student)


@pytest.fixture
def admin_headers(admin):
    return auth_headers(admin)


# ==================== Catalog ====================


def make_course(
    db,
    title="Python Basics",
    price="1000.00",
    lessons=3,
    access_type=AccessType.LIFETIME.value,
    access_duration_days=None,
    certificate_enabled=True,
):
    course = Course(
        title=title,
        price=Decimal(price),
        access_type=access_type,
        access_duration_days=access_duration_days,
        certificate_enabled=certificate_enabled,
    )
    db.add(course)
    db.flush()

    if lessons:
        module = CourseModule(course_id=course.id, title="Module 1", order_index=1)
        db.add(module)
        db.flush()
        for i in range(lessons):
            db.add(
                Lesson(
                    module_id=module.id,
                    title=f"Lesson {i + 1}",
                    type="video",
                    order_index=i + 1,
                )
            )

    db.commit()
    db.refresh(course)
    return course


def course_lessons(db, course):
    return (
        db.query(Lesson)
        .join(CourseModule, Lesson.module_id == CourseModule.id)
        .filter(CourseModule.course_id == course.id)
        .order_by(Lesson.order_index)
        .all()
    )


@pytest.fixture
def course(db):
    return make_course(db)


def make_coupon(
    db,
    code="SUMMER25",
    coupon_type=CouponType.PERCENTAGE.value,
    value="25",
    start_date=None,
    end_date=None,
    usage_limit=None,
    courses=None,
    first_time_buyer_only=False,
):
    today = date.today()
    coupon = Coupon(
        code=code,
        type=coupon_type,
        value=Decimal(value),
        start_date=start_date or today - timedelta(days=1),
        end_date=end_date or today + timedelta(days=30),
        usage_limit=usage_limit,
        first_time_buyer_only=first_time_buyer_only,
    )
    coupon.courses = courses or []
    db.add(coupon)
    db.commit()
    db.refresh(coupon)
    return coupon


@pytest.fixture
def coupon(db):
    return make_coupon(db)


# ==================== Purchase helpers ====================


def initiate(client, headers, course_id, coupon_code=None):
    payload = {"courseId": course_id}
    if coupon_code is not None:
        payload["couponCode"] = coupon_code
    return client.post("/student/purchase/initiate", json=payload, headers=headers)


def verify(client, headers, order, payment_id="pay_test_001", signature=None):
    if signature is None:
        signature = payment_gateway.sign(order["gatewayOrderId"], payment_id)
    return client.post(
        "/student/purchase/verify",
        json={
            "saleId": order["saleId"],
            "gatewayOrderId": order["gatewayOrderId"],
            "gatewayPaymentId": payment_id,
            "gatewaySignature": signature,
        },
        headers=headers,
    )


def purchase(client, headers, course_id, coupon_code=None):
    """Run the full initiate + verify flow and return the order payload."""
    response = initiate(client, headers, course_id, coupon_code)
    assert response.status_code == 200, response.text
    order = response.json()["data"]
    response = verify(client, headers, order)
    assert response.status_code == 200, response.text
    return order


def enroll(db, user, course, completion=0):
    """Grant access directly, bypassing the purchase flow."""
    enrollment = CourseEnrollment(
        user_id=user.id,
        course_id=course.id,
        completion_percentage=completion,
    )
    db.add(enrollment)
    db.commit()
    db.refresh(enrollment)
    return enrollment
