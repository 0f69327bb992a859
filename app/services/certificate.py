# app/services/certificate.py
import io
import logging
import secrets
from typing import List

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4, landscape
from reportlab.lib.units import mm
from reportlab.pdfgen import canvas
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from app.core.config import settings
from app.core.database import transaction
from app.core.exceptions import (
    AlreadyClaimed,
    CertificateNotFound,
    CertificatesNotOffered,
    CourseNotCompleted,
    CourseNotFound,
)
from app.models.certificate import Certificate
from app.models.course import Course
from app.services.course_enrollment import COMPLETE, CourseEnrollmentService

logger = logging.getLogger(__name__)


def generate_certificate_code(course_id: int, user_id: int) -> str:
    """Human-readable code, e.g. CERT-0012-0345-9F3A1C2B. Not a secret."""
    return f"CERT-{course_id:04d}-{user_id:04d}-{secrets.token_hex(4).upper()}"


class CertificateService:
    def __init__(self, db: Session):
        self.db = db
        self.enrollments = CourseEnrollmentService(db)

    def get_certificate(self, user_id: int, course_id: int):
        return (
            self.db.query(Certificate)
            .filter(Certificate.user_id == user_id, Certificate.course_id == course_id)
            .first()
        )

    def claim_certificate(self, user_id: int, course_id: int) -> Certificate:
        """
        Issue the completion certificate for a course.

        Checks, each with its own error: enrolled, fully completed,
        course offers certificates, not claimed before.
        """
        enrollment = self.enrollments.require_enrollment(user_id, course_id)

        if enrollment.completion_percentage < COMPLETE:
            raise CourseNotCompleted()

        course = self.db.query(Course).filter(Course.id == course_id).first()
        if not course:
            raise CourseNotFound()
        if not course.certificate_enabled:
            raise CertificatesNotOffered()

        if self.get_certificate(user_id, course_id):
            raise AlreadyClaimed()

        certificate = Certificate(
            user_id=user_id,
            course_id=course_id,
            certificate_code=generate_certificate_code(course_id, user_id),
        )
        try:
            with transaction(self.db):
                self.db.add(certificate)
        except IntegrityError:
            # Lost a race with a concurrent claim
            raise AlreadyClaimed()

        self.db.refresh(certificate)
        logger.info(
            f"Certificate issued: {certificate.certificate_code} "
            f"(user={user_id}, course={course_id})"
        )
        return certificate

    def get_user_certificates(self, user_id: int) -> List[dict]:
        certificates = (
            self.db.query(Certificate)
            .options(joinedload(Certificate.course))
            .filter(Certificate.user_id == user_id)
            .order_by(Certificate.issue_date.desc(), Certificate.id.desc())
            .all()
        )
        return [
            {
                "id": c.id,
                "certificate_code": c.certificate_code,
                "issue_date": c.issue_date,
                "course_id": c.course_id,
                "course_title": c.course.title,
            }
            for c in certificates
        ]

    def get_owned_certificate(self, user_id: int, certificate_id: int) -> Certificate:
        certificate = (
            self.db.query(Certificate)
            .options(joinedload(Certificate.course), joinedload(Certificate.user))
            .filter(Certificate.id == certificate_id, Certificate.user_id == user_id)
            .first()
        )
        if not certificate:
            raise CertificateNotFound()
        return certificate

    def render_pdf(self, certificate: Certificate) -> bytes:
        """Draw a one-page landscape certificate and return the PDF bytes."""
        buffer = io.BytesIO()
        width, height = landscape(A4)
        pdf = canvas.Canvas(buffer, pagesize=(width, height))
        pdf.setTitle(f"Certificate {certificate.certificate_code}")

        # Border
        pdf.setStrokeColor(colors.HexColor("#1F3A5F"))
        pdf.setLineWidth(4)
        pdf.rect(12 * mm, 12 * mm, width - 24 * mm, height - 24 * mm)

        pdf.setFillColor(colors.HexColor("#1F3A5F"))
        pdf.setFont("Helvetica-Bold", 34)
        pdf.drawCentredString(width / 2, height - 55 * mm, "Certificate of Completion")

        pdf.setFillColor(colors.black)
        pdf.setFont("Helvetica", 16)
        pdf.drawCentredString(width / 2, height - 80 * mm, "This certifies that")

        pdf.setFont("Helvetica-Bold", 26)
        pdf.drawCentredString(width / 2, height - 97 * mm, certificate.user.name)

        pdf.setFont("Helvetica", 16)
        pdf.drawCentredString(
            width / 2, height - 114 * mm, "has successfully completed the course"
        )

        pdf.setFont("Helvetica-Bold", 20)
        pdf.drawCentredString(width / 2, height - 130 * mm, certificate.course.title)

        pdf.setFont("Helvetica", 11)
        issued = certificate.issue_date.strftime("%Y-%m-%d")
        pdf.drawString(25 * mm, 25 * mm, f"Issued: {issued}")
        pdf.drawRightString(
            width - 25 * mm, 25 * mm, f"Code: {certificate.certificate_code}"
        )
        pdf.drawCentredString(width / 2, 25 * mm, settings.certificate_issuer_name)

        pdf.showPage()
        pdf.save()
        return buffer.getvalue()
