"""QR enrollment code schema definitions."""

from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field


class QRCodeStatus(str, Enum):
    """Display status derived from a code's stored fields and the clock."""

    ACTIVE = "Active"
    INACTIVE = "Inactive"
    EXPIRED = "Expired"
    LIMIT_REACHED = "Limit Reached"


class CreateQRCodeRequest(BaseModel):
    section_id: str
    title: str = Field(min_length=1)
    description: Optional[str] = None
    max_uses: Optional[int] = Field(
        default=None,
        ge=1,
        description="Leave empty for unlimited uses.",
    )
    expires_at: Optional[datetime] = Field(
        default=None,
        description="Naive values are taken as UTC.",
    )


class QRCodeInfo(BaseModel):
    id: str
    qr_code: str
    teacher_id: str
    section_id: str
    section_name: Optional[str] = None
    level_name: Optional[str] = None
    school_year: str
    title: str
    description: Optional[str] = None
    max_uses: Optional[int] = None
    current_uses: int
    expires_at: Optional[str] = None
    is_active: bool
    created_at: str
    status: QRCodeStatus
    enrollment_url: str
    qr_image_url: str


class QRCodeListResponse(BaseModel):
    qr_codes: List[QRCodeInfo]


class QREnrollmentLogInfo(BaseModel):
    id: str
    qr_code_id: Optional[str] = None
    scanned_code: str
    student_id: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None
    scanned_at: str
    success: bool
    error_message: Optional[str] = None


class QREnrollmentLogListResponse(BaseModel):
    logs: List[QREnrollmentLogInfo]


class TeacherSectionInfo(BaseModel):
    id: str
    name: str
    level_name: Optional[str] = None
    school_year: str
