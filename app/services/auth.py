# app/services/auth.py
import logging

from sqlalchemy.orm import Session

from app.core.database import transaction
from app.core.exceptions import EmailAlreadyRegistered, InvalidCredentials
from app.core.hasher import PasswordHelper
from app.core.security import jwt_manager
from app.models.user import STUDENT_ROLES, User, UserRole
from app.schemas.auth import LoginRequest, RegisterRequest

logger = logging.getLogger(__name__)


class AuthService:
    def __init__(self, db: Session):
        self.db = db

    def _issue(self, user: User) -> dict:
        return {"token": jwt_manager.create_access_token(user), "user": user}

    def register_student(self, register_in: RegisterRequest) -> dict:
        email = register_in.email.lower()
        if self.db.query(User.id).filter(User.email == email).first():
            raise EmailAlreadyRegistered()

        user = User(
            name=register_in.name,
            email=email,
            hashed_password=PasswordHelper.hash_password(register_in.password),
            role=UserRole.STUDENT.value,
        )
        with transaction(self.db):
            self.db.add(user)
        self.db.refresh(user)

        logger.info(f"Student registered: id={user.id}")
        return self._issue(user)

    def login(self, login_in: LoginRequest, admin: bool = False) -> dict:
        """
        Password login. Students and gold members use the portal login,
        admins use the admin login; a valid account on the wrong door is
        rejected like a wrong password.
        """
        user = self.db.query(User).filter(User.email == login_in.email.lower()).first()

        if not user or not PasswordHelper.check_password(
            login_in.password, user.hashed_password
        ):
            raise InvalidCredentials()

        allowed = (UserRole.ADMIN.value,) if admin else STUDENT_ROLES
        if user.role not in allowed or not user.is_active:
            raise InvalidCredentials()

        logger.info(f"Login successful: user={user.id} role={user.role}")
        return self._issue(user)
