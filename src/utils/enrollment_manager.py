"""Enrollment management utilities.

Redemption side of QR enrollment. A student submits a scanned code; the code
is validated against the registry and, in one transaction, the enrollment is
written, the code's use count is bumped and a log entry is appended. Failed
attempts are logged too, so every attempt leaves exactly one log entry.
"""

import logging
import uuid
from datetime import datetime
from typing import Dict, List, Optional

from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, joinedload

from config import get_current_school_year
from models.enrollment import EnrollmentModel
from models.enrollment_qr_code import EnrollmentQRCodeModel
from models.qr_enrollment_log import QREnrollmentLogModel
from models.section import SectionModel
from schemas.enrollment import (
    EnrollmentInfo,
    RedemptionError,
    RedemptionResult,
    SectionDetail,
)
from schemas.qr_code import QRCodeStatus
from utils.qr_utils import extract_code, status_of
from utils.school_manager import SchoolManager
from utils.time_utils import utc_now, utc_now_iso

logger = logging.getLogger(__name__)

REDEMPTION_MESSAGES: Dict[RedemptionError, str] = {
    RedemptionError.NOT_FOUND: "Invalid QR code",
    RedemptionError.INACTIVE: "This QR code is no longer active",
    RedemptionError.EXPIRED: "This QR code has expired",
    RedemptionError.LIMIT_REACHED: "This QR code has reached its usage limit",
    RedemptionError.ALREADY_ENROLLED: "You are already enrolled in this class",
}

_STATUS_ERRORS: Dict[QRCodeStatus, RedemptionError] = {
    QRCodeStatus.INACTIVE: RedemptionError.INACTIVE,
    QRCodeStatus.EXPIRED: RedemptionError.EXPIRED,
    QRCodeStatus.LIMIT_REACHED: RedemptionError.LIMIT_REACHED,
}


class _RedemptionFailed(Exception):
    """Aborts a redemption transaction with a reason code."""

    def __init__(self, reason: RedemptionError, qr_code_id: Optional[str] = None):
        self.reason = reason
        self.qr_code_id = qr_code_id
        super().__init__(REDEMPTION_MESSAGES[reason])


class EnrollmentManager:
    """Manages QR redemption and student enrollments using SQLAlchemy."""

    def __init__(self, db: Session):
        self.db = db

    def redeem(
        self, raw_code: str, student_id: str, now: Optional[datetime] = None
    ) -> RedemptionResult:
        """Redeem a scanned code for a student.

        Args:
            raw_code: Bare code or a link containing /enroll/<code>.
            student_id: The redeeming student.
            now: Reference time for the expiry check; defaults to now (UTC).

        Returns:
            RedemptionResult: success with the enrollment and section IDs, or
            failure with a reason code. Either way ``log_id`` names the log
            entry written for this attempt.
        """
        code = extract_code(raw_code)
        now = now or utc_now()
        try:
            return self._redeem(code, student_id, now)
        except SQLAlchemyError:
            self.db.rollback()
            logger.exception("Redemption of %r by student %s failed", code, student_id)
            raise
        except _RedemptionFailed as failure:
            self.db.rollback()
            log = self._append_log(
                code,
                student_id,
                qr_code_id=failure.qr_code_id,
                success=False,
                error_message=str(failure),
            )
            self.db.commit()
            logger.info(
                "Redemption of %r by student %s failed: %s",
                code,
                student_id,
                failure.reason.value,
            )
            return RedemptionResult(
                success=False,
                error=failure.reason,
                message=str(failure),
                log_id=log.id,
            )

    def _redeem(self, code: str, student_id: str, now: datetime) -> RedemptionResult:
        model = (
            self.db.query(EnrollmentQRCodeModel)
            .filter(EnrollmentQRCodeModel.qr_code == code)
            .with_for_update()
            .first()
        )
        if not model:
            raise _RedemptionFailed(RedemptionError.NOT_FOUND)

        status = status_of(model, now=now)
        if status in _STATUS_ERRORS:
            raise _RedemptionFailed(_STATUS_ERRORS[status], model.id)

        enrollment = self._find_enrollment(student_id, model.section_id, model.school_year)
        if enrollment is not None and enrollment.is_active:
            raise _RedemptionFailed(RedemptionError.ALREADY_ENROLLED, model.id)

        # Guarded increment: a concurrent redemption that took the last use makes this a no-op
        claimed = (
            self.db.query(EnrollmentQRCodeModel)
            .filter(
                EnrollmentQRCodeModel.id == model.id,
                EnrollmentQRCodeModel.is_active.is_(True),
                or_(
                    EnrollmentQRCodeModel.max_uses.is_(None),
                    EnrollmentQRCodeModel.current_uses < EnrollmentQRCodeModel.max_uses,
                ),
            )
            .update(
                {EnrollmentQRCodeModel.current_uses: EnrollmentQRCodeModel.current_uses + 1},
                synchronize_session=False,
            )
        )
        if claimed == 0:
            raise self._lost_claim(model.id, now)

        today = now.isoformat()
        if enrollment is None:
            enrollment = EnrollmentModel(
                id=str(uuid.uuid4()),
                student_id=student_id,
                section_id=model.section_id,
                school_year=model.school_year,
                enrollment_date=today,
                is_active=True,
                created_at=today,
            )
            self.db.add(enrollment)
        else:
            enrollment.is_active = True
            enrollment.enrollment_date = today

        try:
            self.db.flush()
        except IntegrityError:
            # Another request enrolled this student between our check and insert
            raise _RedemptionFailed(RedemptionError.ALREADY_ENROLLED, model.id)

        log = self._append_log(code, student_id, qr_code_id=model.id, success=True)
        self.db.commit()
        logger.info(
            "Student %s enrolled in section %s via QR code %s",
            student_id,
            model.section_id,
            code,
        )
        return RedemptionResult(
            success=True,
            enrollment_id=enrollment.id,
            section_id=model.section_id,
            log_id=log.id,
        )

    def _find_enrollment(
        self, student_id: str, section_id: str, school_year: str
    ) -> Optional[EnrollmentModel]:
        return (
            self.db.query(EnrollmentModel)
            .filter(
                EnrollmentModel.student_id == student_id,
                EnrollmentModel.section_id == section_id,
                EnrollmentModel.school_year == school_year,
            )
            .first()
        )

    def _lost_claim(self, qr_code_id: str, now: datetime) -> _RedemptionFailed:
        """Explain why the guarded increment matched no row.

        The code changed after its status was read: it was switched off,
        deleted, or another redemption took its last use.
        """
        current = (
            self.db.query(EnrollmentQRCodeModel)
            .populate_existing()
            .filter(EnrollmentQRCodeModel.id == qr_code_id)
            .first()
        )
        if current is None:
            return _RedemptionFailed(RedemptionError.NOT_FOUND)
        reason = _STATUS_ERRORS.get(status_of(current, now=now), RedemptionError.LIMIT_REACHED)
        return _RedemptionFailed(reason, qr_code_id)

    def _append_log(
        self,
        code: str,
        student_id: str,
        qr_code_id: Optional[str],
        success: bool,
        error_message: Optional[str] = None,
    ) -> QREnrollmentLogModel:
        log = QREnrollmentLogModel(
            id=str(uuid.uuid4()),
            qr_code_id=qr_code_id,
            scanned_code=code,
            student_id=student_id,
            scanned_at=utc_now_iso(),
            success=success,
            error_message=error_message,
        )
        self.db.add(log)
        self.db.flush()
        return log

    def list_student_enrollments(
        self, student_id: str, active_only: bool = True
    ) -> List[EnrollmentModel]:
        """List a student's enrollments, newest first."""
        query = (
            self.db.query(EnrollmentModel)
            .options(joinedload(EnrollmentModel.section).joinedload(SectionModel.level))
            .filter(EnrollmentModel.student_id == student_id)
        )
        if active_only:
            query = query.filter(EnrollmentModel.is_active.is_(True))
        return query.order_by(EnrollmentModel.created_at.desc()).all()

    def is_enrolled(self, student_id: str, section_id: str) -> bool:
        return (
            self.db.query(EnrollmentModel.id)
            .filter(
                EnrollmentModel.student_id == student_id,
                EnrollmentModel.section_id == section_id,
                EnrollmentModel.is_active.is_(True),
            )
            .first()
            is not None
        )

    def get_section_detail(self, section_id: str) -> SectionDetail:
        """Section name, level and the names of its current teachers.

        Raises:
            SectionNotFoundError: If the section does not exist.
        """
        school_manager = SchoolManager(self.db)
        section = school_manager.get_section(section_id)
        assignments = school_manager.list_assignments(
            section_id, school_year=get_current_school_year()
        )
        teachers = []
        for assignment in assignments:
            teacher = assignment.teacher
            if teacher is None:
                continue
            name = f"{teacher.first_name} {teacher.last_name}".strip()
            if name not in teachers:
                teachers.append(name)
        return SectionDetail(
            id=section.id,
            name=section.name,
            level_name=section.level.name if section.level else None,
            teachers=teachers,
        )

    def count_enrollments(self) -> int:
        return self.db.query(EnrollmentModel).count()


def build_enrollment_info(model: EnrollmentModel) -> EnrollmentInfo:
    section = model.section
    level = section.level if section is not None else None
    return EnrollmentInfo(
        id=model.id,
        student_id=model.student_id,
        section_id=model.section_id,
        section_name=section.name if section is not None else None,
        level_name=level.name if level is not None else None,
        school_year=model.school_year,
        enrollment_date=model.enrollment_date,
        is_active=bool(model.is_active),
    )
