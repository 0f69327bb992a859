"""Registration, login and role checks."""

from datetime import datetime, timedelta, timezone

from jose import jwt

from app.core.security import jwt_manager
from app.models import User, UserRole
from conftest import PASSWORD, make_user


def test_register_student(client, db):
    response = client.post(
        "/auth/register",
        json={"name": "Carol", "email": "Carol@Example.com", "password": "hunter22"},
    )
    assert response.status_code == 201
    data = response.json()["data"]
    assert data["token"]
    assert data["tokenType"] == "bearer"
    assert data["user"]["email"] == "carol@example.com"
    assert data["user"]["role"] == UserRole.STUDENT.value

    user = db.query(User).filter(User.email == "carol@example.com").one()
    assert user.hashed_password != "hunter22"


def test_register_duplicate_email(client, student):
    response = client.post(
        "/auth/register",
        json={"name": "Again", "email": "student@example.com", "password": "hunter22"},
    )
    assert response.status_code == 400
    assert response.json()["message"] == "User with this email already exists."


def test_register_validates_payload(client):
    response = client.post(
        "/auth/register", json={"name": "X", "email": "not-an-email", "password": "1"}
    )
    assert response.status_code == 422


def test_student_login(client, student):
    response = client.post(
        "/auth/login", json={"email": "student@example.com", "password": PASSWORD}
    )
    assert response.status_code == 200
    token = response.json()["data"]["token"]

    response = client.get(
        "/student/my-courses", headers={"Authorization": f"Bearer {token}"}
    )
    assert response.status_code == 200
    assert response.json()["data"] == []


def test_wrong_password(client, student):
    response = client.post(
        "/auth/login", json={"email": "student@example.com", "password": "wrong"}
    )
    assert response.status_code == 401
    assert response.json() == {"message": "Invalid email or password."}


def test_admin_cannot_use_student_login(client, admin):
    response = client.post(
        "/auth/login", json={"email": "admin@example.com", "password": PASSWORD}
    )
    assert response.status_code == 401


def test_admin_login(client, admin):
    response = client.post(
        "/auth/admin/login", json={"email": "admin@example.com", "password": PASSWORD}
    )
    assert response.status_code == 200
    assert response.json()["data"]["user"]["role"] == UserRole.ADMIN.value


def test_student_cannot_use_admin_login(client, student):
    response = client.post(
        "/auth/admin/login", json={"email": "student@example.com", "password": PASSWORD}
    )
    assert response.status_code == 401


def test_gold_member_is_a_student(client, db):
    gold = make_user(db, "gold@example.com", role=UserRole.GOLD_MEMBER.value)
    response = client.post(
        "/auth/login", json={"email": "gold@example.com", "password": PASSWORD}
    )
    assert response.status_code == 200
    assert response.json()["data"]["user"]["id"] == gold.id


def test_invalid_token(client):
    response = client.get(
        "/student/my-courses", headers={"Authorization": "Bearer not.a.token"}
    )
    assert response.status_code == 401
    assert response.json() == {"message": "Invalid or expired token"}


def test_expired_token(client, student):
    issued = datetime.now(timezone.utc) - timedelta(hours=2)
    token = jwt.encode(
        {
            "sub": str(student.id),
            "user_id": student.id,
            "role": student.role,
            "exp": int((issued + timedelta(hours=1)).timestamp()),
            "iat": int(issued.timestamp()),
            "iss": jwt_manager.issuer,
            "type": "access",
        },
        jwt_manager.secret_key,
        algorithm=jwt_manager.algorithm,
    )
    response = client.get(
        "/student/my-courses", headers={"Authorization": f"Bearer {token}"}
    )
    assert response.status_code == 401


def test_inactive_user(client, db, student, student_headers):
    student.is_active = False
    db.commit()

    response = client.get("/student/my-courses", headers=student_headers)
    assert response.status_code == 403


def test_admin_cannot_use_student_routes(client, admin_headers):
    response = client.get("/student/my-courses", headers=admin_headers)
    assert response.status_code == 403
    assert response.json() == {"message": "Not authorized as a student"}


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["database"] == "healthy"
