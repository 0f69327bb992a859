# app/models/course_enrollment.py
from datetime import datetime

from sqlalchemy import Column, DateTime, ForeignKey, Integer, UniqueConstraint
from sqlalchemy.sql import func

from app.core.database import Base


class CourseEnrollment(Base):
    """
    Durable grant of course access for a user.
    At most one row per (user, course); created when a sale is paid.
    """

    __tablename__ = "enrollments"
    __table_args__ = (
        UniqueConstraint("user_id", "course_id", name="uq_enrollments_user_course"),
    )

    id = Column(Integer, primary_key=True, index=True)

    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    course_id = Column(Integer, ForeignKey("courses.id"), nullable=False, index=True)

    enrollment_date = Column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    expiry_date = Column(DateTime(timezone=True), nullable=True)  # NULL = lifetime

    # Cached projection of watch history, 0-100
    completion_percentage = Column(Integer, default=0, nullable=False)

    @property
    def is_expired(self) -> bool:
        if self.expiry_date is None:
            return False
        expiry = self.expiry_date.replace(tzinfo=None)
        return expiry < datetime.utcnow()

    def __repr__(self):
        return f"<CourseEnrollment(id={self.id}, user_id={self.user_id}, course_id={self.course_id})>"
