# app/routers/auth.py
from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.database import get_db
from app.core.limiter import limiter
from app.schemas.auth import LoginRequest, RegisterRequest, TokenResponse
from app.schemas.common import APIResponse
from app.services.auth import AuthService

router = APIRouter(
    prefix="/auth",
    tags=["Authentication"],
)


@router.post("/register", response_model=APIResponse[TokenResponse], status_code=201)
@limiter.limit(settings.login_rate_limit)
def register(
    request: Request,
    register_in: RegisterRequest,
    db: Session = Depends(get_db),
):
    """Create a student account and sign it in"""
    service = AuthService(db)
    return {"message": "Registration successful.", "data": service.register_student(register_in)}


@router.post("/login", response_model=APIResponse[TokenResponse])
@limiter.limit(settings.login_rate_limit)
def login(
    request: Request,
    login_in: LoginRequest,
    db: Session = Depends(get_db),
):
    service = AuthService(db)
    return {"message": "Login successful.", "data": service.login(login_in)}


@router.post("/admin/login", response_model=APIResponse[TokenResponse])
@limiter.limit(settings.login_rate_limit)
def admin_login(
    request: Request,
    login_in: LoginRequest,
    db: Session = Depends(get_db),
):
    service = AuthService(db)
    return {"message": "Admin login successful.", "data": service.login(login_in, admin=True)}
