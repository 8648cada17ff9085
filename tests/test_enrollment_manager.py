from datetime import datetime, timedelta

import pytz

from core.database import SessionLocal
from models.enrollment import EnrollmentModel
from models.enrollment_qr_code import EnrollmentQRCodeModel
from models.qr_enrollment_log import QREnrollmentLogModel
from schemas.enrollment import RedemptionError
from utils import enrollment_manager as enrollment_manager_module
from utils.enrollment_manager import REDEMPTION_MESSAGES, EnrollmentManager
from utils.qr_code_manager import QRCodeManager


def _uses(db, qr_code_id):
    return QRCodeManager(db).get_code(qr_code_id).current_uses


def _logs(db, student_id):
    return (
        db.query(QREnrollmentLogModel)
        .filter(QREnrollmentLogModel.student_id == student_id)
        .all()
    )


def test_redeem_enrolls_student(db, qr_code, student, section):
    result = EnrollmentManager(db).redeem(qr_code.qr_code, student.user_id)

    assert result.success
    assert result.error is None
    assert result.section_id == section.id

    enrollment = db.query(EnrollmentModel).filter(EnrollmentModel.id == result.enrollment_id).one()
    assert enrollment.student_id == student.user_id
    assert enrollment.school_year == "2025"
    assert enrollment.is_active
    assert _uses(db, qr_code.id) == 1

    logs = _logs(db, student.user_id)
    assert len(logs) == 1
    assert logs[0].id == result.log_id
    assert logs[0].success
    assert logs[0].qr_code_id == qr_code.id


def test_redeem_accepts_enrollment_link(db, qr_code, student, section):
    link = f"https://school.example.com/enroll/{qr_code.qr_code}?from=poster"
    result = EnrollmentManager(db).redeem(link, student.user_id)

    assert result.success
    assert result.section_id == section.id
    assert _logs(db, student.user_id)[0].scanned_code == qr_code.qr_code


def test_unknown_code_is_logged_without_registry_link(db, student):
    result = EnrollmentManager(db).redeem("NOPE2345", student.user_id)

    assert not result.success
    assert result.error == RedemptionError.NOT_FOUND
    assert result.message == REDEMPTION_MESSAGES[RedemptionError.NOT_FOUND]
    logs = _logs(db, student.user_id)
    assert len(logs) == 1
    assert logs[0].qr_code_id is None
    assert logs[0].scanned_code == "NOPE2345"
    assert not logs[0].success
    assert logs[0].error_message == "Invalid QR code"


def test_inactive_code_is_rejected(db, qr_code, student):
    QRCodeManager(db).toggle_active(qr_code.id)
    result = EnrollmentManager(db).redeem(qr_code.qr_code, student.user_id)

    assert result.error == RedemptionError.INACTIVE
    assert _uses(db, qr_code.id) == 0
    assert db.query(EnrollmentModel).count() == 0


def test_expired_code_is_rejected(db, teacher, section, student):
    model = QRCodeManager(db).create_code(
        teacher_id=teacher.user_id,
        section_id=section.id,
        title="Week one",
        expires_at=datetime(2025, 1, 10, tzinfo=pytz.utc),
    )
    manager = EnrollmentManager(db)

    late = datetime(2025, 1, 10, tzinfo=pytz.utc) + timedelta(seconds=1)
    result = manager.redeem(model.qr_code, student.user_id, now=late)
    assert result.error == RedemptionError.EXPIRED
    assert _logs(db, student.user_id)[0].qr_code_id == model.id

    early = datetime(2025, 1, 9, tzinfo=pytz.utc)
    assert manager.redeem(model.qr_code, student.user_id, now=early).success


def test_single_use_code_admits_only_first_student(db, teacher, section, make_user, school):
    model = QRCodeManager(db).create_code(
        teacher_id=teacher.user_id, section_id=section.id, title="One seat", max_uses=1
    )
    first = make_user("student", email="first@example.com", school_id=school.id)
    second = make_user("student", email="second@example.com", school_id=school.id)
    manager = EnrollmentManager(db)

    assert manager.redeem(model.qr_code, first.user_id).success
    result = manager.redeem(model.qr_code, second.user_id)

    assert result.error == RedemptionError.LIMIT_REACHED
    assert result.message == "This QR code has reached its usage limit"
    assert _uses(db, model.id) == 1
    assert not manager.is_enrolled(second.user_id, section.id)


def test_code_admits_exactly_max_uses_students(db, teacher, section, make_user, school):
    model = QRCodeManager(db).create_code(
        teacher_id=teacher.user_id, section_id=section.id, title="Small group", max_uses=3
    )
    manager = EnrollmentManager(db)
    students = [
        make_user("student", email=f"s{i}@example.com", school_id=school.id) for i in range(4)
    ]

    results = [manager.redeem(model.qr_code, s.user_id) for s in students]

    assert [r.success for r in results] == [True, True, True, False]
    assert results[-1].error == RedemptionError.LIMIT_REACHED
    assert _uses(db, model.id) == 3


def test_already_enrolled_student_does_not_consume_a_use(db, qr_code, student):
    manager = EnrollmentManager(db)
    assert manager.redeem(qr_code.qr_code, student.user_id).success

    result = manager.redeem(qr_code.qr_code, student.user_id)
    assert result.error == RedemptionError.ALREADY_ENROLLED
    assert _uses(db, qr_code.id) == 1
    assert db.query(EnrollmentModel).count() == 1


def test_inactive_enrollment_is_reactivated(db, qr_code, student, section):
    manager = EnrollmentManager(db)
    first = manager.redeem(qr_code.qr_code, student.user_id)

    enrollment = db.query(EnrollmentModel).filter(EnrollmentModel.id == first.enrollment_id).one()
    enrollment.is_active = False
    db.commit()
    assert not manager.is_enrolled(student.user_id, section.id)

    second = manager.redeem(qr_code.qr_code, student.user_id)
    assert second.success
    assert second.enrollment_id == first.enrollment_id
    assert manager.is_enrolled(student.user_id, section.id)
    assert _uses(db, qr_code.id) == 2


def test_every_attempt_leaves_exactly_one_log(db, qr_code, student):
    manager = EnrollmentManager(db)
    attempts = [qr_code.qr_code, "MISSING9", qr_code.qr_code, f"/enroll/{qr_code.qr_code}"]
    results = [manager.redeem(code, student.user_id) for code in attempts]

    logs = _logs(db, student.user_id)
    assert len(logs) == len(attempts)
    assert {log.id for log in logs} == {r.log_id for r in results}
    assert [r.success for r in results] == [True, False, False, False]


def test_student_enrollments_and_section_detail(db, qr_code, student, section, teacher):
    manager = EnrollmentManager(db)
    manager.redeem(qr_code.qr_code, student.user_id)

    enrollments = manager.list_student_enrollments(student.user_id)
    assert [e.section_id for e in enrollments] == [section.id]
    assert enrollments[0].section.name == "Section B"

    detail = manager.get_section_detail(section.id)
    assert detail.name == "Section B"
    assert detail.level_name == "Grade 3"
    assert detail.teachers == ["Maria Lopez"]


def _change_code_after_status_check(monkeypatch, qr_code_id, **changes):
    """Commit a change to the code from another session once its status was read."""
    real_status_of = enrollment_manager_module.status_of

    def status_then_change(model, now=None):
        status = real_status_of(model, now=now)
        monkeypatch.setattr(enrollment_manager_module, "status_of", real_status_of)
        other = SessionLocal()
        try:
            other.query(EnrollmentQRCodeModel).filter(
                EnrollmentQRCodeModel.id == qr_code_id
            ).update(changes, synchronize_session=False)
            other.commit()
        finally:
            other.close()
        return status

    monkeypatch.setattr(enrollment_manager_module, "status_of", status_then_change)


def test_last_use_taken_concurrently_reports_limit_reached(
    db, teacher, section, make_user, school, monkeypatch
):
    model = QRCodeManager(db).create_code(
        teacher_id=teacher.user_id, section_id=section.id, title="Two seats", max_uses=2
    )
    first = make_user("student", email="first@example.com", school_id=school.id)
    late = make_user("student", email="late@example.com", school_id=school.id)
    manager = EnrollmentManager(db)
    assert manager.redeem(model.qr_code, first.user_id).success

    _change_code_after_status_check(monkeypatch, model.id, current_uses=2)
    result = manager.redeem(model.qr_code, late.user_id)

    assert result.error == RedemptionError.LIMIT_REACHED
    assert _uses(db, model.id) == 2
    assert not manager.is_enrolled(late.user_id, section.id)
    logs = _logs(db, late.user_id)
    assert len(logs) == 1
    assert not logs[0].success
    assert logs[0].qr_code_id == model.id


def test_code_switched_off_concurrently_reports_inactive(db, qr_code, student, monkeypatch):
    _change_code_after_status_check(monkeypatch, qr_code.id, is_active=False)
    result = EnrollmentManager(db).redeem(qr_code.qr_code, student.user_id)

    assert result.error == RedemptionError.INACTIVE
    assert result.message == "This QR code is no longer active"
    assert _uses(db, qr_code.id) == 0
    assert len(_logs(db, student.user_id)) == 1


def test_enrollment_inserted_concurrently_reports_already_enrolled(
    db, qr_code, student, section, monkeypatch
):
    # The other request's enrollment lands after this one checked for it
    db.add(
        EnrollmentModel(
            id="concurrent-enrollment",
            student_id=student.user_id,
            section_id=section.id,
            school_year="2025",
            enrollment_date="2025-01-01T00:00:00+00:00",
            is_active=True,
            created_at="2025-01-01T00:00:00+00:00",
        )
    )
    db.commit()
    monkeypatch.setattr(EnrollmentManager, "_find_enrollment", lambda self, *args: None)

    result = EnrollmentManager(db).redeem(qr_code.qr_code, student.user_id)

    assert result.error == RedemptionError.ALREADY_ENROLLED
    assert _uses(db, qr_code.id) == 0
    assert [e.id for e in db.query(EnrollmentModel).all()] == ["concurrent-enrollment"]
    logs = _logs(db, student.user_id)
    assert len(logs) == 1
    assert not logs[0].success
    assert logs[0].error_message == "You are already enrolled in this class"
