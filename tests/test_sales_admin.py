"""Admin sales listing, status overrides and analytics."""

from app.models import CourseEnrollment, Sale, SaleStatus
from conftest import initiate, make_course, purchase


def test_list_sales(client, db, student, student_headers, admin_headers, course, coupon):
    purchase(client, student_headers, course.id, "SUMMER25")

    response = client.get("/sales/", headers=admin_headers)
    assert response.status_code == 200
    [sale] = response.json()["data"]
    assert sale["originalAmount"] == 1000.0
    assert sale["discountAmount"] == 250.0
    assert sale["amount"] == 750.0
    assert sale["status"] == "Paid"
    assert sale["user"] == {"id": student.id, "name": "Alice Student"}
    assert sale["course"] == {"id": course.id, "title": "Python Basics"}


def test_analytics_counts_paid_sales_only(client, db, student_headers, admin_headers, course, coupon):
    second = make_course(db, title="Advanced Python", price="500.00")
    purchase(client, student_headers, course.id, "SUMMER25")
    initiate(client, student_headers, second.id)

    response = client.get("/sales/analytics", headers=admin_headers)
    assert response.status_code == 200
    assert response.json()["data"] == {"totalRevenue": 750.0, "totalSales": 1}


def test_analytics_with_no_sales(client, admin_headers):
    response = client.get("/sales/analytics", headers=admin_headers)
    assert response.json()["data"] == {"totalRevenue": 0.0, "totalSales": 0}


def test_pending_sale_can_be_marked_failed(client, db, student_headers, admin_headers, course):
    order = initiate(client, student_headers, course.id).json()["data"]

    response = client.put(
        f"/sales/{order['saleId']}/status",
        json={"status": "Failed"},
        headers=admin_headers,
    )
    assert response.status_code == 200
    assert response.json()["data"]["status"] == "Failed"


def test_pending_sale_cannot_be_marked_paid(client, db, student_headers, admin_headers, course):
    order = initiate(client, student_headers, course.id).json()["data"]

    response = client.put(
        f"/sales/{order['saleId']}/status",
        json={"status": "Paid"},
        headers=admin_headers,
    )
    assert response.status_code == 400
    assert response.json()["message"] == "Pending sales can only be marked as Failed."

    db.expire_all()
    assert db.query(Sale).one().status == SaleStatus.PENDING.value
    assert db.query(CourseEnrollment).count() == 0


def test_settled_sale_is_final(client, db, student_headers, admin_headers, course):
    order = purchase(client, student_headers, course.id)

    for status in ("Pending", "Failed"):
        response = client.put(
            f"/sales/{order['saleId']}/status",
            json={"status": status},
            headers=admin_headers,
        )
        assert response.status_code == 400
        assert response.json()["message"] == "Only pending sales can be changed."

    db.expire_all()
    assert db.query(Sale).one().status == SaleStatus.PAID.value
    assert db.query(CourseEnrollment).count() == 1


def test_update_status_rejects_unknown_value(client, student_headers, admin_headers, course):
    order = initiate(client, student_headers, course.id).json()["data"]
    response = client.put(
        f"/sales/{order['saleId']}/status",
        json={"status": "Refunded"},
        headers=admin_headers,
    )
    assert response.status_code == 422


def test_update_unknown_sale(client, admin_headers):
    response = client.put("/sales/9999/status", json={"status": "Paid"}, headers=admin_headers)
    assert response.status_code == 404
    assert response.json()["message"] == "Sale not found."


def test_sales_are_admin_only(client, student_headers):
    assert client.get("/sales/", headers=student_headers).status_code == 403
