# app/services/course_enrollment.py
import logging
from datetime import datetime, timedelta
from typing import List, Optional

from sqlalchemy import and_, func
from sqlalchemy.orm import Session, joinedload, selectinload

from app.core.database import transaction
from app.core.exceptions import CourseNotFound, LessonNotFound, NotEnrolled
from app.models.course import AccessType, Course, CourseModule
from app.models.course_enrollment import CourseEnrollment
from app.models.lesson import Lesson
from app.models.watch_history import WatchHistory

logger = logging.getLogger(__name__)

COMPLETE = 100


def compute_expiry_date(course: Course, now: datetime) -> Optional[datetime]:
    """Lifetime courses never expire; expiry courses run for their duration."""
    # An expiry course without a positive duration grants lifetime access
    if course.access_type == AccessType.EXPIRY.value and course.access_duration_days:
        return now + timedelta(days=course.access_duration_days)
    return None


def completion_percentage(completed: int, total: int) -> int:
    """Share of completed lessons, rounded half up. Zero when there are no lessons."""
    if total <= 0:
        return 0
    return (200 * completed + total) // (2 * total)


class CourseEnrollmentService:
    def __init__(self, db: Session):
        self.db = db

    # ==================== Lookups ====================

    def get_enrollment(
        self, user_id: int, course_id: int
    ) -> Optional[CourseEnrollment]:
        """Get specific enrollment for a user and course"""
        return (
            self.db.query(CourseEnrollment)
            .filter(
                and_(
                    CourseEnrollment.user_id == user_id,
                    CourseEnrollment.course_id == course_id,
                )
            )
            .first()
        )

    def is_user_enrolled(self, user_id: int, course_id: int) -> bool:
        """Check if user is enrolled in a course"""
        return self.get_enrollment(user_id, course_id) is not None

    def require_enrollment(self, user_id: int, course_id: int) -> CourseEnrollment:
        enrollment = self.get_enrollment(user_id, course_id)
        if not enrollment:
            raise NotEnrolled()
        return enrollment

    # ==================== Enrollment ====================

    def add_enrollment(
        self, user_id: int, course: Course, now: Optional[datetime] = None
    ) -> CourseEnrollment:
        """
        Stage a new enrollment in the current transaction.
        The caller owns the commit; nothing is persisted until it commits.
        """
        now = now or datetime.utcnow()
        enrollment = CourseEnrollment(
            user_id=user_id,
            course_id=course.id,
            enrollment_date=now,
            expiry_date=compute_expiry_date(course, now),
            completion_percentage=0,
        )
        self.db.add(enrollment)
        self.db.flush()
        return enrollment

    def get_enrolled_courses(self, user_id: int) -> List[dict]:
        enrollments = (
            self.db.query(CourseEnrollment)
            .options(joinedload(CourseEnrollment.course))
            .filter(CourseEnrollment.user_id == user_id)
            .order_by(CourseEnrollment.enrollment_date.desc(), CourseEnrollment.id.desc())
            .all()
        )
        return [
            {
                "course_id": e.course_id,
                "course_title": e.course.title,
                "course_price": e.course.price,
                "certificate_enabled": e.course.certificate_enabled,
                "enrollment_date": e.enrollment_date,
                "expiry_date": e.expiry_date,
                "completion_percentage": e.completion_percentage,
                "is_expired": e.is_expired,
            }
            for e in enrollments
        ]

    def get_enrolled_course_details(self, user_id: int, course_id: int) -> dict:
        """Course outline plus the caller's watch history for that course."""
        enrollment = self.require_enrollment(user_id, course_id)

        course = (
            self.db.query(Course)
            .options(selectinload(Course.modules).selectinload(CourseModule.lessons))
            .filter(Course.id == course_id)
            .first()
        )
        if not course:
            raise CourseNotFound()

        history = (
            self.db.query(WatchHistory)
            .join(Lesson, WatchHistory.lesson_id == Lesson.id)
            .join(CourseModule, Lesson.module_id == CourseModule.id)
            .filter(
                WatchHistory.user_id == user_id,
                CourseModule.course_id == course_id,
            )
            .all()
        )

        return {
            "course": course,
            "completion_percentage": enrollment.completion_percentage,
            "expiry_date": enrollment.expiry_date,
            "watch_history": [
                {
                    "lesson_id": h.lesson_id,
                    "progress": h.progress_percentage,
                    "watched_at": h.watched_at,
                }
                for h in history
            ],
        }

    # ==================== Progress ====================

    def count_course_lessons(self, course_id: int) -> int:
        return (
            self.db.query(func.count(Lesson.id))
            .join(CourseModule, Lesson.module_id == CourseModule.id)
            .filter(CourseModule.course_id == course_id)
            .scalar()
            or 0
        )

    def count_completed_lessons(self, user_id: int, course_id: int) -> int:
        return (
            self.db.query(func.count(WatchHistory.id))
            .join(Lesson, WatchHistory.lesson_id == Lesson.id)
            .join(CourseModule, Lesson.module_id == CourseModule.id)
            .filter(
                WatchHistory.user_id == user_id,
                WatchHistory.progress_percentage >= COMPLETE,
                CourseModule.course_id == course_id,
            )
            .scalar()
            or 0
        )

    def calculate_completion(self, user_id: int, course_id: int) -> int:
        return completion_percentage(
            self.count_completed_lessons(user_id, course_id),
            self.count_course_lessons(course_id),
        )

    def update_lesson_progress(self, user_id: int, lesson_id: int, progress: int) -> int:
        """
        Record watch progress for a lesson and refresh the course completion.

        The latest reported progress replaces the stored one, even when it is
        lower. Completion is always recomputed from watch history.

        Returns:
            The new completion percentage of the lesson's course
        """
        lesson = (
            self.db.query(Lesson)
            .options(joinedload(Lesson.module))
            .filter(Lesson.id == lesson_id)
            .first()
        )
        if not lesson:
            raise LessonNotFound()

        course_id = lesson.module.course_id
        enrollment = self.require_enrollment(user_id, course_id)

        with transaction(self.db):
            history = (
                self.db.query(WatchHistory)
                .filter(
                    WatchHistory.user_id == user_id,
                    WatchHistory.lesson_id == lesson_id,
                )
                .first()
            )
            if history:
                history.progress_percentage = progress
                history.watched_at = datetime.utcnow()
            else:
                self.db.add(
                    WatchHistory(
                        user_id=user_id,
                        lesson_id=lesson_id,
                        progress_percentage=progress,
                    )
                )
            self.db.flush()

            enrollment.completion_percentage = self.calculate_completion(
                user_id, course_id
            )

        logger.debug(
            f"Progress user={user_id} lesson={lesson_id} -> {progress}%, "
            f"course {course_id} at {enrollment.completion_percentage}%"
        )
        return enrollment.completion_percentage
