"""Order creation and payment verification."""

from datetime import date, datetime, timedelta
from decimal import Decimal

import pytest

from app.core.exceptions import AlreadyEnrolled
from app.models import AccessType, CouponType, CouponUsage, CourseEnrollment, Sale, SaleStatus
from app.schemas.purchase import CreateOrderRequest, VerifyPaymentRequest
from app.services.course_enrollment import CourseEnrollmentService
from app.services.payment_gateway import payment_gateway
from app.services.purchase import PurchaseService
from conftest import auth_headers, initiate, make_coupon, make_course, purchase, verify


def get_sale(db, sale_id):
    db.expire_all()
    return db.query(Sale).filter(Sale.id == sale_id).one()


def signed(order, payment_id):
    return VerifyPaymentRequest(
        sale_id=order["sale_id"],
        gateway_order_id=order["gateway_order_id"],
        gateway_payment_id=payment_id,
        gateway_signature=payment_gateway.sign(order["gateway_order_id"], payment_id),
    )


def enrollments_for(db, user, course):
    db.expire_all()
    return (
        db.query(CourseEnrollment)
        .filter(
            CourseEnrollment.user_id == user.id,
            CourseEnrollment.course_id == course.id,
        )
        .all()
    )


# ==================== Create order ====================


def test_summer25_scenario(client, db, student, student_headers, course, coupon):
    response = initiate(client, student_headers, course.id, "SUMMER25")
    assert response.status_code == 200
    body = response.json()
    order = body["data"]
    assert body["message"]
    assert order["amount"] == 750.0
    assert order["currency"] == "INR"
    assert order["gatewayOrderId"].startswith("order_mock_")

    sale = get_sale(db, order["saleId"])
    assert sale.status == SaleStatus.PENDING.value
    assert sale.original_amount == Decimal("1000.00")
    assert sale.discount_amount == Decimal("250.00")
    assert sale.amount == Decimal("750.00")
    assert sale.coupon_id == coupon.id

    response = verify(client, student_headers, order)
    assert response.status_code == 200
    assert response.json()["message"]

    sale = get_sale(db, order["saleId"])
    assert sale.status == SaleStatus.PAID.value
    assert sale.gateway_payment_id == "pay_test_001"

    [enrollment] = enrollments_for(db, student, course)
    assert enrollment.expiry_date is None
    assert enrollment.completion_percentage == 0

    usages = db.query(CouponUsage).filter(CouponUsage.coupon_id == coupon.id).all()
    assert len(usages) == 1
    assert usages[0].sale_id == sale.id
    assert usages[0].user_id == student.id


def test_order_without_coupon_charges_full_price(client, db, student_headers, course):
    response = initiate(client, student_headers, course.id)
    assert response.status_code == 200
    order = response.json()["data"]
    assert order["amount"] == 1000.0

    sale = get_sale(db, order["saleId"])
    assert sale.coupon_id is None
    assert sale.discount_amount == Decimal("0.00")


def test_blank_coupon_code_is_ignored(client, db, student_headers, course):
    response = initiate(client, student_headers, course.id, "   ")
    assert response.status_code == 200
    assert response.json()["data"]["amount"] == 1000.0


def test_unknown_course(client, student_headers):
    response = initiate(client, student_headers, 9999)
    assert response.status_code == 404
    assert response.json() == {"message": "Course not found."}


def test_already_enrolled_cannot_order_again(client, db, student_headers, course):
    purchase(client, student_headers, course.id)

    response = initiate(client, student_headers, course.id)
    assert response.status_code == 400
    assert "already enrolled" in response.json()["message"]
    assert db.query(Sale).count() == 1


def test_unknown_coupon_rejected_without_writing(client, db, student_headers, course):
    response = initiate(client, student_headers, course.id, "NOPE")
    assert response.status_code == 400
    assert response.json()["message"] == "Invalid or expired coupon code."
    assert db.query(Sale).count() == 0


def test_expired_coupon(client, db, student_headers, course):
    today = date.today()
    make_coupon(
        db,
        code="OLD",
        start_date=today - timedelta(days=30),
        end_date=today - timedelta(days=2),
    )
    response = initiate(client, student_headers, course.id, "OLD")
    assert response.status_code == 400
    assert response.json()["message"] == "Invalid or expired coupon code."


def test_coupon_not_started_yet(client, db, student_headers, course):
    today = date.today()
    make_coupon(
        db,
        code="SOON",
        start_date=today + timedelta(days=2),
        end_date=today + timedelta(days=10),
    )
    response = initiate(client, student_headers, course.id, "SOON")
    assert response.status_code == 400


def test_coupon_usage_limit(client, db, student, other_student, course):
    make_coupon(db, code="ONCE", usage_limit=1)
    purchase(client, auth_headers(student), course.id, "ONCE")

    response = initiate(client, auth_headers(other_student), course.id, "ONCE")
    assert response.status_code == 400
    assert response.json()["message"] == "This coupon has reached its usage limit."


def test_pending_orders_do_not_consume_usage(client, db, student, other_student, course):
    make_coupon(db, code="ONCE", usage_limit=1)
    assert initiate(client, auth_headers(student), course.id, "ONCE").status_code == 200
    assert initiate(client, auth_headers(other_student), course.id, "ONCE").status_code == 200


def test_usage_limit_rechecked_at_settlement(client, db, student, other_student, course):
    coupon = make_coupon(db, code="ONCE", usage_limit=1)
    first = initiate(client, auth_headers(student), course.id, "ONCE").json()["data"]
    second = initiate(client, auth_headers(other_student), course.id, "ONCE").json()["data"]

    assert verify(client, auth_headers(student), first).status_code == 200

    response = verify(client, auth_headers(other_student), second)
    assert response.status_code == 400
    assert response.json()["message"] == "This coupon has reached its usage limit."

    assert get_sale(db, second["saleId"]).status == SaleStatus.FAILED.value
    assert enrollments_for(db, other_student, course) == []
    assert db.query(CouponUsage).filter(CouponUsage.coupon_id == coupon.id).count() == 1


def test_first_purchase_rule_rechecked_at_settlement(client, db, student, student_headers, course):
    second_course = make_course(db, title="Advanced Python")
    make_coupon(db, code="WELCOME", first_time_buyer_only=True)
    first = initiate(client, student_headers, course.id, "WELCOME").json()["data"]
    second = initiate(client, student_headers, second_course.id, "WELCOME").json()["data"]

    assert verify(client, student_headers, first).status_code == 200

    response = verify(client, student_headers, second, payment_id="pay_test_002")
    assert response.status_code == 400
    assert response.json()["message"] == "This coupon is only valid on your first purchase."

    assert get_sale(db, second["saleId"]).status == SaleStatus.FAILED.value
    assert enrollments_for(db, student, second_course) == []
    assert db.query(CouponUsage).count() == 1


def test_coupon_restricted_to_other_course(client, db, student_headers, course):
    other_course = make_course(db, title="Data Science")
    make_coupon(db, code="DS10", courses=[other_course])

    response = initiate(client, student_headers, course.id, "DS10")
    assert response.status_code == 400
    assert response.json()["message"] == "This coupon cannot be applied to this course."

    response = initiate(client, student_headers, other_course.id, "DS10")
    assert response.status_code == 200
    assert response.json()["data"]["amount"] == 750.0


def test_first_time_buyer_coupon(client, db, student_headers, course):
    second_course = make_course(db, title="Advanced Python")
    make_coupon(db, code="WELCOME", first_time_buyer_only=True)

    purchase(client, student_headers, course.id)

    response = initiate(client, student_headers, second_course.id, "WELCOME")
    assert response.status_code == 400
    assert response.json()["message"] == "This coupon is only valid on your first purchase."


def test_fixed_coupon_larger_than_price(client, db, student_headers):
    cheap = make_course(db, title="Mini Course", price="100.00")
    make_coupon(db, code="BIGFIX", coupon_type=CouponType.FIXED.value, value="150")

    response = initiate(client, student_headers, cheap.id, "BIGFIX")
    assert response.status_code == 200
    order = response.json()["data"]
    assert order["amount"] == 0.0

    sale = get_sale(db, order["saleId"])
    assert sale.discount_amount == Decimal("150.00")


# ==================== Verify payment ====================


def test_expiry_course_sets_expiry_date(client, db, student, student_headers):
    course = make_course(
        db,
        title="Bootcamp",
        access_type=AccessType.EXPIRY.value,
        access_duration_days=30,
    )
    before = datetime.utcnow()
    purchase(client, student_headers, course.id)

    [enrollment] = enrollments_for(db, student, course)
    expiry = enrollment.expiry_date.replace(tzinfo=None)
    assert before + timedelta(days=30) - timedelta(minutes=1) <= expiry
    assert expiry <= datetime.utcnow() + timedelta(days=30)


def test_bad_signature_marks_sale_failed(client, db, student, student_headers, course, coupon):
    order = initiate(client, student_headers, course.id, "SUMMER25").json()["data"]

    response = verify(client, student_headers, order, signature="0" * 64)
    assert response.status_code == 400
    assert response.json()["message"] == "Payment verification failed."

    sale = get_sale(db, order["saleId"])
    assert sale.status == SaleStatus.FAILED.value
    assert enrollments_for(db, student, course) == []
    assert db.query(CouponUsage).count() == 0


def test_order_id_must_match_sale(client, db, student_headers, course):
    order = initiate(client, student_headers, course.id).json()["data"]
    forged = dict(order, gatewayOrderId="order_mock_someone_else")

    response = verify(client, student_headers, forged)
    assert response.status_code == 400
    assert get_sale(db, order["saleId"]).status == SaleStatus.FAILED.value


def test_verification_replay_is_rejected(client, db, student, student_headers, course, coupon):
    order = purchase(client, student_headers, course.id, "SUMMER25")

    response = verify(client, student_headers, order)
    assert response.status_code == 404
    assert response.json()["message"] == "Pending order not found."

    assert len(enrollments_for(db, student, course)) == 1
    assert db.query(CouponUsage).count() == 1


def test_cannot_verify_someone_elses_order(client, db, student_headers, other_student, course):
    order = initiate(client, student_headers, course.id).json()["data"]
    response = verify(client, auth_headers(other_student), order)
    assert response.status_code == 404
    assert get_sale(db, order["saleId"]).status == SaleStatus.PENDING.value


def test_second_pending_order_cannot_double_enroll(client, db, student, student_headers, course):
    first = initiate(client, student_headers, course.id).json()["data"]
    second = initiate(client, student_headers, course.id).json()["data"]

    assert verify(client, student_headers, first).status_code == 200

    response = verify(client, student_headers, second, payment_id="pay_test_002")
    assert response.status_code == 400
    assert "already enrolled" in response.json()["message"]

    assert len(enrollments_for(db, student, course)) == 1
    assert get_sale(db, second["saleId"]).status == SaleStatus.PENDING.value


def test_enrollment_failure_rolls_back_everything(db, student, course, coupon, monkeypatch):
    service = PurchaseService(db)
    order = service.create_order(
        student.id, CreateOrderRequest(course_id=course.id, coupon_code="SUMMER25")
    )

    def explode(self, user_id, course, now=None):
        raise RuntimeError("storage went away")

    monkeypatch.setattr(CourseEnrollmentService, "add_enrollment", explode)

    with pytest.raises(RuntimeError):
        service.verify_payment(student.id, signed(order, "pay_test_fault"))

    sale = get_sale(db, order["sale_id"])
    assert sale.status == SaleStatus.PENDING.value
    assert sale.gateway_payment_id is None
    assert enrollments_for(db, student, course) == []
    assert db.query(CouponUsage).count() == 0


def test_duplicate_enrollment_surfaces_as_already_enrolled(db, student, course):
    service = PurchaseService(db)
    first = service.create_order(student.id, CreateOrderRequest(course_id=course.id))
    second = service.create_order(student.id, CreateOrderRequest(course_id=course.id))

    service.verify_payment(student.id, signed(first, "pay_a"))
    with pytest.raises(AlreadyEnrolled):
        service.verify_payment(student.id, signed(second, "pay_b"))

    assert get_sale(db, second["sale_id"]).status == SaleStatus.PENDING.value


# ==================== History ====================


def test_sales_history_lists_own_sales_newest_first(
    client, db, student_headers, other_student, course
):
    second_course = make_course(db, title="Advanced Python")
    purchase(client, student_headers, course.id)
    initiate(client, student_headers, second_course.id)
    initiate(client, auth_headers(other_student), course.id)

    response = client.get("/student/purchase/history", headers=student_headers)
    assert response.status_code == 200
    history = response.json()["data"]
    assert [h["courseTitle"] for h in history] == ["Advanced Python", "Python Basics"]
    assert [h["status"] for h in history] == ["Pending", "Paid"]
    assert history[1]["amount"] == 1000.0


def test_purchase_requires_student_role(client, admin_headers, course):
    response = initiate(client, admin_headers, course.id)
    assert response.status_code == 403


def test_purchase_requires_token(client, course):
    response = client.post("/student/purchase/initiate", json={"courseId": course.id})
    assert response.status_code == 401
    assert response.json() == {"message": "Not authorized, no token"}
