import enum

from sqlalchemy import Boolean, Column, DateTime, Integer, String
from sqlalchemy.sql import func

from app.core.database import Base


class UserRole(str, enum.Enum):
    STUDENT = "Student"
    GOLD_MEMBER = "Gold Member"
    ADMIN = "Admin"


STUDENT_ROLES = (UserRole.STUDENT.value, UserRole.GOLD_MEMBER.value)


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)

    # Authentication fields
    email = Column(String(100), unique=True, index=True, nullable=False)
    hashed_password = Column(String(255), nullable=True)

    # Profile information
    name = Column(String(100), nullable=False)
    phone_number = Column(String(20), nullable=True)

    # Account status
    role = Column(String(20), default=UserRole.STUDENT.value, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)

    # Timestamps
    joined_at = Column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )

    def __repr__(self):
        return f"<User(id={self.id}, email='{self.email}', role='{self.role}')>"
