# app/routers/student.py
from typing import List

from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.core.dependencies import get_current_student
from app.models.user import User
from app.schemas.common import APIResponse
from app.schemas.student import (
    CertificateListItem,
    CertificateResponse,
    EnrolledCourseDetails,
    EnrolledCourseResponse,
    LessonProgressResponse,
    LessonProgressUpdate,
)
from app.services.certificate import CertificateService
from app.services.course_enrollment import CourseEnrollmentService

router = APIRouter(
    prefix="/student",
    tags=["Student"],
    responses={404: {"description": "Not found"}},
)


# ==================== Enrolled Courses ====================


@router.get("/my-courses", response_model=APIResponse[List[EnrolledCourseResponse]])
def get_enrolled_courses(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_student),
):
    """Get all courses the current student is enrolled in"""
    service = CourseEnrollmentService(db)
    return {
        "message": "Successfully fetched enrolled courses.",
        "data": service.get_enrolled_courses(current_user.id),
    }


@router.post("/my-courses/progress", response_model=APIResponse[LessonProgressResponse])
def update_lesson_progress(
    progress_in: LessonProgressUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_student),
):
    """
    Record watch progress for a lesson.
    Returns the recalculated completion percentage of its course.
    """
    service = CourseEnrollmentService(db)
    completion = service.update_lesson_progress(
        current_user.id, progress_in.lesson_id, progress_in.progress
    )
    return {
        "message": "Lesson progress updated successfully.",
        "data": {"new_completion_percentage": completion},
    }


@router.get("/my-courses/{course_id}", response_model=APIResponse[EnrolledCourseDetails])
def get_enrolled_course_details(
    course_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_student),
):
    """Course outline with the student's watch history. Enrolled students only."""
    service = CourseEnrollmentService(db)
    return {
        "message": "Successfully fetched enrolled course details.",
        "data": service.get_enrolled_course_details(current_user.id, course_id),
    }


# ==================== Certificates ====================


@router.post(
    "/my-courses/{course_id}/claim-certificate",
    response_model=APIResponse[CertificateResponse],
    status_code=201,
)
def claim_certificate(
    course_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_student),
):
    service = CertificateService(db)
    certificate = service.claim_certificate(current_user.id, course_id)
    return {"message": "Certificate claimed successfully.", "data": certificate}


@router.get("/my-certificates", response_model=APIResponse[List[CertificateListItem]])
def get_my_certificates(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_student),
):
    service = CertificateService(db)
    return {
        "message": "Successfully fetched your certificates.",
        "data": service.get_user_certificates(current_user.id),
    }


@router.get("/my-certificates/{certificate_id}/download")
def download_certificate(
    certificate_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_student),
):
    """Download one of the student's certificates as a PDF"""
    service = CertificateService(db)
    certificate = service.get_owned_certificate(current_user.id, certificate_id)
    return Response(
        content=service.render_pdf(certificate),
        media_type="application/pdf",
        headers={
            "Content-Disposition": f'attachment; filename="{certificate.certificate_code}.pdf"'
        },
    )
