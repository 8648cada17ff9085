"""School and academic structure schema definitions."""

from typing import List, Literal, Optional

from pydantic import BaseModel, Field


class SchoolInfo(BaseModel):
    id: str
    name: str
    school_code: str
    address: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    website: Optional[str] = None
    principal_name: Optional[str] = None
    principal_email: Optional[str] = None
    plan: str
    created_at: str
    updated_at: str


class CreateSchoolRequest(BaseModel):
    name: str = Field(min_length=1)
    address: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    website: Optional[str] = None
    principal_name: Optional[str] = None
    principal_email: Optional[str] = None
    plan: Literal["small", "medium", "large"] = "small"


class SchoolLevelInfo(BaseModel):
    id: str
    school_id: str
    name: str
    order_index: int


class CreateSchoolLevelRequest(BaseModel):
    name: str = Field(min_length=1)
    order_index: int = 0


class SectionInfo(BaseModel):
    id: str
    school_id: str
    level_id: str
    name: str
    level_name: Optional[str] = None


class CreateSectionRequest(BaseModel):
    level_id: str
    name: str = Field(min_length=1)


class TeacherAssignmentInfo(BaseModel):
    teacher_id: str
    teacher_name: str
    section_id: str
    school_year: str
    assigned_at: str


class AssignTeacherRequest(BaseModel):
    teacher_id: str
    school_year: Optional[str] = Field(
        default=None,
        description="Defaults to the current school year.",
    )


class TeacherAssignmentListResponse(BaseModel):
    assignments: List[TeacherAssignmentInfo]
