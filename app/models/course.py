# app/models/course.py
import enum

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
)
from sqlalchemy.sql import func

from app.core.database import Base


class AccessType(str, enum.Enum):
    LIFETIME = "lifetime"
    EXPIRY = "expiry"


class Course(Base):
    __tablename__ = "courses"

    id = Column(Integer, primary_key=True, index=True)

    # Basic Info
    title = Column(String(255), nullable=False, index=True)
    description = Column(Text, nullable=True)

    # Pricing
    price = Column(Numeric(10, 2), nullable=False, default=0.00)

    # Access policy
    access_type = Column(String(20), nullable=False, default=AccessType.LIFETIME.value)
    access_duration_days = Column(Integer, nullable=True)  # only for "expiry"

    # Course Settings/Flags
    certificate_enabled = Column(Boolean, default=False, nullable=False)

    # Timestamps
    created_at = Column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )

    def __repr__(self):
        return f"<Course(id={self.id}, title='{self.title}', price={self.price})>"


class CourseModule(Base):
    __tablename__ = "modules"

    id = Column(Integer, primary_key=True, index=True)
    course_id = Column(
        Integer, ForeignKey("courses.id", ondelete="CASCADE"), nullable=False, index=True
    )
    title = Column(String(255), nullable=False)
    order_index = Column(Integer, default=0, nullable=False)

    def __repr__(self):
        return f"<CourseModule(id={self.id}, course_id={self.course_id}, title='{self.title}')>"
