"""Enrollment routes.

Student-facing redemption of QR enrollment codes and the "My Classes" view.
"""

from fastapi import APIRouter, Depends, HTTPException, status

from api.routes.auth import get_current_user
from config import PRIVILEGED_ROLES
from core.dependencies import EnrollmentManagerDep, SchoolManagerDep
from core.exceptions import SectionNotFoundError
from schemas.enrollment import (
    EnrollmentListResponse,
    RedeemRequest,
    RedemptionResult,
    SectionDetail,
)
from schemas.user import User
from utils.enrollment_manager import build_enrollment_info

router = APIRouter(prefix="/api/enrollments", tags=["Enrollment"])


@router.post("/redeem", response_model=RedemptionResult, summary="Join a class with a QR code")
def redeem_qr_code(
    req: RedeemRequest,
    enrollment_manager: EnrollmentManagerDep,
    current_user: User = Depends(get_current_user),
) -> RedemptionResult:
    """Redeem a QR enrollment code.

    The body may carry a bare code or the full enrollment link. Failures
    (unknown, inactive, expired, exhausted code, or already enrolled) are
    returned in the result body rather than as HTTP errors.

    Args:
        req: Redeem request with the scanned text.
        enrollment_manager: Injected EnrollmentManager instance.
        current_user: Current authenticated user.

    Returns:
        RedemptionResult describing the outcome.

    Raises:
        HTTPException: 403 if the caller is not a student.
    """
    if current_user.role != "student":
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Only students can join classes with a QR code.",
        )
    return enrollment_manager.redeem(req.code, current_user.user_id)


@router.get("/me", response_model=EnrollmentListResponse, summary="List my classes")
def list_my_enrollments(
    enrollment_manager: EnrollmentManagerDep,
    current_user: User = Depends(get_current_user),
) -> EnrollmentListResponse:
    models = enrollment_manager.list_student_enrollments(current_user.user_id)
    return EnrollmentListResponse(
        enrollments=[build_enrollment_info(m) for m in models]
    )


@router.get("/sections/{section_id}", response_model=SectionDetail, summary="Get class details")
def get_section_detail(
    section_id: str,
    enrollment_manager: EnrollmentManagerDep,
    school_manager: SchoolManagerDep,
    current_user: User = Depends(get_current_user),
) -> SectionDetail:
    """Section, level and teacher names for a class the caller belongs to.

    Raises:
        HTTPException: 404 for an unknown section, 403 if the caller is
            neither enrolled in nor teaching it.
    """
    try:
        detail = enrollment_manager.get_section_detail(section_id)
    except SectionNotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Section not found",
        )

    allowed = (
        current_user.role in PRIVILEGED_ROLES
        or enrollment_manager.is_enrolled(current_user.user_id, section_id)
        or (
            current_user.role == "teacher"
            and school_manager.teaches_section(current_user.user_id, section_id)
        )
    )
    if not allowed:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="You are not a member of this class.",
        )
    return detail
