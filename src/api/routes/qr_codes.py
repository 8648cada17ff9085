"""QR enrollment code routes.

Teacher-facing issuance: create codes for taught sections, list them with
usage stats, toggle and delete them, and read their enrollment logs.
"""

import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query, status

from api.routes.auth import get_current_user
from config import PRIVILEGED_ROLES, get_current_school_year
from core.dependencies import QRCodeManagerDep, SchoolManagerDep
from core.exceptions import (
    CodeGenerationError,
    PermissionDeniedError,
    QRCodeNotFoundError,
    ValidationError,
)
from schemas.qr_code import (
    CreateQRCodeRequest,
    QRCodeInfo,
    QRCodeListResponse,
    QREnrollmentLogListResponse,
    TeacherSectionInfo,
)
from schemas.user import User
from utils.qr_code_manager import build_log_info, build_qr_code_info

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/qr-codes", tags=["QR Enrollment"])


def _require_teacher(current_user: User, action: str) -> None:
    if current_user.role != "teacher" and current_user.role not in PRIVILEGED_ROLES:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=f"Only teachers can {action}.",
        )


def _get_managed_code(qr_code_manager, qr_code_id: str, current_user: User):
    """Load a code the current user may manage, or raise 404/403."""
    try:
        model = qr_code_manager.get_code(qr_code_id)
    except QRCodeNotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="QR code not found",
        )
    try:
        qr_code_manager.ensure_can_manage(model, current_user)
    except PermissionDeniedError as e:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=str(e),
        )
    return model


@router.get(
    "/sections",
    response_model=List[TeacherSectionInfo],
    summary="List sections the teacher can issue codes for",
)
def list_teacher_sections(
    school_manager: SchoolManagerDep,
    current_user: User = Depends(get_current_user),
) -> List[TeacherSectionInfo]:
    if current_user.role != "teacher":
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Only teachers have assigned sections.",
        )
    assignments = school_manager.list_teacher_sections(
        current_user.user_id, get_current_school_year()
    )
    results = []
    for assignment in assignments:
        section = assignment.section
        results.append(
            TeacherSectionInfo(
                id=section.id,
                name=section.name,
                level_name=section.level.name if section.level else None,
                school_year=assignment.school_year,
            )
        )
    return results


@router.post(
    "",
    response_model=QRCodeInfo,
    status_code=status.HTTP_201_CREATED,
    summary="Create QR enrollment code",
)
def create_qr_code(
    req: CreateQRCodeRequest,
    qr_code_manager: QRCodeManagerDep,
    current_user: User = Depends(get_current_user),
) -> QRCodeInfo:
    """Create a code for one of the teacher's sections this school year.

    Raises:
        HTTPException: 403 if the caller is not a teacher of the section,
            400 on invalid input.
    """
    if current_user.role != "teacher":
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Only teachers can create QR codes.",
        )
    try:
        model = qr_code_manager.create_code(
            teacher_id=current_user.user_id,
            section_id=req.section_id,
            title=req.title,
            description=req.description,
            max_uses=req.max_uses,
            expires_at=req.expires_at,
        )
    except PermissionDeniedError as e:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=str(e),
        )
    except ValidationError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e),
        )
    except CodeGenerationError as e:
        logger.error("QR code generation failed for teacher %s", current_user.user_id)
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=str(e),
        )
    return build_qr_code_info(model)


@router.get("", response_model=QRCodeListResponse, summary="List QR enrollment codes")
def list_qr_codes(
    qr_code_manager: QRCodeManagerDep,
    current_user: User = Depends(get_current_user),
) -> QRCodeListResponse:
    """List codes with usage stats and a freshly derived status.

    Teachers see the codes they issued; admins and developers see every code.
    """
    _require_teacher(current_user, "list QR codes")
    teacher_id = None if current_user.role in PRIVILEGED_ROLES else current_user.user_id
    models = qr_code_manager.list_codes(teacher_id=teacher_id)
    return QRCodeListResponse(qr_codes=[build_qr_code_info(m) for m in models])


@router.get("/{qr_code_id}", response_model=QRCodeInfo, summary="Get QR enrollment code")
def get_qr_code(
    qr_code_id: str,
    qr_code_manager: QRCodeManagerDep,
    current_user: User = Depends(get_current_user),
) -> QRCodeInfo:
    model = _get_managed_code(qr_code_manager, qr_code_id, current_user)
    return build_qr_code_info(model)


@router.patch(
    "/{qr_code_id}/toggle",
    response_model=QRCodeInfo,
    summary="Activate or deactivate QR enrollment code",
)
def toggle_qr_code(
    qr_code_id: str,
    qr_code_manager: QRCodeManagerDep,
    current_user: User = Depends(get_current_user),
) -> QRCodeInfo:
    _get_managed_code(qr_code_manager, qr_code_id, current_user)
    model = qr_code_manager.toggle_active(qr_code_id)
    return build_qr_code_info(model)


@router.delete("/{qr_code_id}", summary="Delete QR enrollment code")
def delete_qr_code(
    qr_code_id: str,
    qr_code_manager: QRCodeManagerDep,
    confirm: bool = Query(
        default=False,
        description="Must be true; deletion cannot be undone.",
    ),
    current_user: User = Depends(get_current_user),
) -> dict:
    """Delete a code; its enrollment logs are kept.

    Raises:
        HTTPException: 400 without confirm=true, 403/404 as for other
            management routes.
    """
    _get_managed_code(qr_code_manager, qr_code_id, current_user)
    if not confirm:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Deleting a QR code cannot be undone. Repeat with confirm=true.",
        )
    qr_code_manager.delete_code(qr_code_id)
    return {"success": True, "message": "QR code deleted successfully"}


@router.get(
    "/{qr_code_id}/logs",
    response_model=QREnrollmentLogListResponse,
    summary="List enrollment logs of a QR code",
)
def list_qr_code_logs(
    qr_code_id: str,
    qr_code_manager: QRCodeManagerDep,
    current_user: User = Depends(get_current_user),
) -> QREnrollmentLogListResponse:
    _get_managed_code(qr_code_manager, qr_code_id, current_user)
    rows = qr_code_manager.list_logs(qr_code_id)
    return QREnrollmentLogListResponse(
        logs=[build_log_info(log, student) for log, student in rows]
    )
