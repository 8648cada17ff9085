"""QR enrollment code registry.

Issuance side of QR enrollment: teachers create codes for the sections they
teach, switch them on and off, delete them and read their usage logs.
"""

import logging
import uuid
from datetime import datetime
from typing import List, Optional, Tuple

from sqlalchemy.orm import Session, joinedload

from config import PRIVILEGED_ROLES, QR_CODE_MAX_ATTEMPTS, get_current_school_year
from core.exceptions import (
    CodeGenerationError,
    PermissionDeniedError,
    QRCodeNotFoundError,
    ValidationError,
)
from models.enrollment_qr_code import EnrollmentQRCodeModel
from models.qr_enrollment_log import QREnrollmentLogModel
from models.section import SectionModel
from models.user import UserModel
from schemas.qr_code import QRCodeInfo, QREnrollmentLogInfo
from schemas.user import User
from utils.qr_utils import (
    build_enrollment_url,
    build_qr_image_url,
    generate_code_value,
    status_of,
)
from utils.school_manager import SchoolManager
from utils.time_utils import to_utc_iso, utc_now_iso

logger = logging.getLogger(__name__)


class QRCodeManager:
    """Manages the enrollment code registry using SQLAlchemy."""

    def __init__(self, db: Session):
        self.db = db

    def generate_code(self) -> str:
        """Return a code value not yet present in the registry.

        Raises:
            CodeGenerationError: If every attempt collided.
        """
        for _ in range(QR_CODE_MAX_ATTEMPTS):
            code = generate_code_value()
            taken = (
                self.db.query(EnrollmentQRCodeModel.id)
                .filter(EnrollmentQRCodeModel.qr_code == code)
                .first()
            )
            if not taken:
                return code
        raise CodeGenerationError("Could not generate a unique QR code")

    def create_code(
        self,
        teacher_id: str,
        section_id: str,
        title: str,
        description: Optional[str] = None,
        max_uses: Optional[int] = None,
        expires_at: Optional[datetime] = None,
    ) -> EnrollmentQRCodeModel:
        """Create an enrollment code for one of the teacher's sections.

        The code starts active with no uses and is filed under the current
        school year.

        Args:
            teacher_id: Issuing teacher.
            section_id: Section students will be enrolled in.
            title: Human-readable title.
            description: Optional longer text.
            max_uses: Optional use cap (at least 1); None means unlimited.
            expires_at: Optional expiry; naive values are taken as UTC.

        Returns:
            The created EnrollmentQRCodeModel.

        Raises:
            ValidationError: If the title is blank or max_uses is below 1.
            PermissionDeniedError: If the teacher is not assigned to the
                section for the current school year.
        """
        title = (title or "").strip()
        if not title:
            raise ValidationError("Title cannot be empty")
        if max_uses is not None and max_uses < 1:
            raise ValidationError("max_uses must be at least 1")

        school_year = get_current_school_year()
        if not SchoolManager(self.db).teaches_section(teacher_id, section_id, school_year):
            raise PermissionDeniedError(
                "You can only create QR codes for sections you teach this school year."
            )

        model = EnrollmentQRCodeModel(
            id=str(uuid.uuid4()),
            qr_code=self.generate_code(),
            teacher_id=teacher_id,
            section_id=section_id,
            school_year=school_year,
            title=title,
            description=(description or "").strip() or None,
            max_uses=max_uses,
            current_uses=0,
            expires_at=to_utc_iso(expires_at),
            is_active=True,
            created_at=utc_now_iso(),
        )
        self.db.add(model)
        self.db.commit()
        logger.info(
            "Created QR code %s for section %s by teacher %s",
            model.qr_code,
            section_id,
            teacher_id,
        )
        return self.get_code(model.id)

    def get_code(self, qr_code_id: str) -> EnrollmentQRCodeModel:
        model = (
            self.db.query(EnrollmentQRCodeModel)
            .options(
                joinedload(EnrollmentQRCodeModel.section).joinedload(SectionModel.level)
            )
            .filter(EnrollmentQRCodeModel.id == qr_code_id)
            .first()
        )
        if not model:
            raise QRCodeNotFoundError(qr_code_id)
        return model

    def list_codes(
        self, teacher_id: Optional[str] = None, section_id: Optional[str] = None
    ) -> List[EnrollmentQRCodeModel]:
        """List codes, newest first, optionally filtered by issuer or section."""
        query = self.db.query(EnrollmentQRCodeModel).options(
            joinedload(EnrollmentQRCodeModel.section).joinedload(SectionModel.level)
        )
        if teacher_id:
            query = query.filter(EnrollmentQRCodeModel.teacher_id == teacher_id)
        if section_id:
            query = query.filter(EnrollmentQRCodeModel.section_id == section_id)
        return query.order_by(EnrollmentQRCodeModel.created_at.desc()).all()

    def ensure_can_manage(self, model: EnrollmentQRCodeModel, user: User) -> None:
        """Raise PermissionDeniedError unless the user issued the code or is privileged."""
        if user.role in PRIVILEGED_ROLES:
            return
        if user.role == "teacher" and model.teacher_id == user.user_id:
            return
        raise PermissionDeniedError("You can only manage QR codes you created.")

    def toggle_active(self, qr_code_id: str) -> EnrollmentQRCodeModel:
        """Flip the active flag; the use count is left alone."""
        model = self.get_code(qr_code_id)
        model.is_active = not model.is_active
        self.db.commit()
        self.db.refresh(model)
        logger.info("QR code %s is_active set to %s", model.qr_code, model.is_active)
        return model

    def delete_code(self, qr_code_id: str) -> None:
        """Delete a code. This cannot be undone; its logs are kept."""
        model = self.get_code(qr_code_id)
        code = model.qr_code
        self.db.delete(model)
        self.db.commit()
        logger.info("Deleted QR code: %s", code)

    def list_logs(
        self, qr_code_id: str
    ) -> List[Tuple[QREnrollmentLogModel, Optional[UserModel]]]:
        """List redemption attempts for a code, newest first."""
        self.get_code(qr_code_id)
        return (
            self.db.query(QREnrollmentLogModel, UserModel)
            .outerjoin(UserModel, UserModel.user_id == QREnrollmentLogModel.student_id)
            .filter(QREnrollmentLogModel.qr_code_id == qr_code_id)
            .order_by(QREnrollmentLogModel.scanned_at.desc())
            .all()
        )

    def count_active(self) -> int:
        return (
            self.db.query(EnrollmentQRCodeModel)
            .filter(EnrollmentQRCodeModel.is_active.is_(True))
            .count()
        )


def build_qr_code_info(
    model: EnrollmentQRCodeModel, now: Optional[datetime] = None
) -> QRCodeInfo:
    """Convert a registry row to its API form, deriving status at call time."""
    section = model.section
    level = section.level if section is not None else None
    return QRCodeInfo(
        id=model.id,
        qr_code=model.qr_code,
        teacher_id=model.teacher_id,
        section_id=model.section_id,
        section_name=section.name if section is not None else None,
        level_name=level.name if level is not None else None,
        school_year=model.school_year,
        title=model.title,
        description=model.description,
        max_uses=model.max_uses,
        current_uses=model.current_uses or 0,
        expires_at=model.expires_at,
        is_active=bool(model.is_active),
        created_at=model.created_at,
        status=status_of(model, now=now),
        enrollment_url=build_enrollment_url(model.qr_code),
        qr_image_url=build_qr_image_url(model.qr_code),
    )


def build_log_info(
    log: QREnrollmentLogModel, student: Optional[UserModel]
) -> QREnrollmentLogInfo:
    return QREnrollmentLogInfo(
        id=log.id,
        qr_code_id=log.qr_code_id,
        scanned_code=log.scanned_code,
        student_id=log.student_id,
        first_name=student.first_name if student else None,
        last_name=student.last_name if student else None,
        email=student.email if student else None,
        scanned_at=log.scanned_at,
        success=bool(log.success),
        error_message=log.error_message,
    )
