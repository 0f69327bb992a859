# app/schemas/student.py
from datetime import datetime
from typing import List, Optional

from pydantic import Field

from app.schemas.common import CamelModel, Money

# ==================== Progress ====================


class LessonProgressUpdate(CamelModel):
    lesson_id: int = Field(..., description="Lesson being watched")
    progress: int = Field(..., ge=0, le=100, description="Watch progress, 0-100")


class LessonProgressResponse(CamelModel):
    new_completion_percentage: int


# ==================== Enrolled courses ====================


class EnrolledCourseResponse(CamelModel):
    course_id: int
    course_title: str
    course_price: Money
    certificate_enabled: bool
    enrollment_date: datetime
    expiry_date: Optional[datetime]
    completion_percentage: int
    is_expired: bool


class LessonResponse(CamelModel):
    id: int
    title: str
    description: Optional[str] = None
    type: str
    content_url: Optional[str] = None
    duration_minutes: Optional[int] = None


class ModuleResponse(CamelModel):
    id: int
    title: str
    lessons: List[LessonResponse] = []


class CourseOutline(CamelModel):
    id: int
    title: str
    description: Optional[str] = None
    price: Money
    access_type: str
    access_duration_days: Optional[int] = None
    certificate_enabled: bool
    modules: List[ModuleResponse] = []


class WatchHistoryItem(CamelModel):
    lesson_id: int
    progress: int
    watched_at: datetime


class EnrolledCourseDetails(CamelModel):
    course: CourseOutline
    completion_percentage: int
    expiry_date: Optional[datetime]
    watch_history: List[WatchHistoryItem]


# ==================== Certificates ====================


class CertificateResponse(CamelModel):
    id: int
    certificate_code: str
    issue_date: datetime


class CertificateListItem(CertificateResponse):
    course_id: int
    course_title: str
