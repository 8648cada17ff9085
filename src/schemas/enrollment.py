"""Enrollment and redemption schema definitions."""

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator


class RedemptionError(str, Enum):
    """Reason codes for a failed redemption."""

    NOT_FOUND = "not_found"
    INACTIVE = "inactive"
    EXPIRED = "expired"
    LIMIT_REACHED = "limit_reached"
    ALREADY_ENROLLED = "already_enrolled"


class RedeemRequest(BaseModel):
    code: str = Field(
        min_length=1,
        description="A bare enrollment code or a link containing /enroll/<code>.",
    )

    @field_validator("code", mode="before")
    @classmethod
    def strip_code(cls, value):
        # Blank input is rejected like an empty body, before any attempt is logged
        if isinstance(value, str):
            return value.strip()
        return value


class RedemptionResult(BaseModel):
    """Outcome of one redemption attempt; exactly one log entry backs it."""

    success: bool
    error: Optional[RedemptionError] = None
    message: Optional[str] = None
    enrollment_id: Optional[str] = None
    section_id: Optional[str] = None
    log_id: Optional[str] = None


class EnrollmentInfo(BaseModel):
    id: str
    student_id: str
    section_id: str
    section_name: Optional[str] = None
    level_name: Optional[str] = None
    school_year: str
    enrollment_date: str
    is_active: bool


class EnrollmentListResponse(BaseModel):
    enrollments: List[EnrollmentInfo]


class SectionDetail(BaseModel):
    id: str
    name: str
    level_name: Optional[str] = None
    teachers: List[str] = Field(
        default_factory=list,
        description="Full names of teachers assigned this school year.",
    )
