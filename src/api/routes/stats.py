"""Platform statistics for the developer overview."""

from fastapi import APIRouter, Depends, HTTPException, status

from api.routes.auth import get_current_user
from core.dependencies import (
    EnrollmentManagerDep,
    QRCodeManagerDep,
    SchoolManagerDep,
    UserManagerDep,
)
from schemas.stats import PlatformStats
from schemas.user import User

router = APIRouter(prefix="/api/stats", tags=["Stats"])


@router.get("", response_model=PlatformStats, summary="Platform statistics")
def get_platform_stats(
    user_manager: UserManagerDep,
    school_manager: SchoolManagerDep,
    enrollment_manager: EnrollmentManagerDep,
    qr_code_manager: QRCodeManagerDep,
    current_user: User = Depends(get_current_user),
) -> PlatformStats:
    if current_user.role != "developer":
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Only developers can view platform statistics.",
        )
    return PlatformStats(
        total_users=user_manager.count_users(),
        total_schools=school_manager.count_schools(),
        total_enrollments=enrollment_manager.count_enrollments(),
        active_qr_codes=qr_code_manager.count_active(),
    )
