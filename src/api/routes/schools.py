"""School management routes.

Schools, school levels, sections and teacher-to-section assignments.
"""

from typing import List

from fastapi import APIRouter, Depends, HTTPException, status

from api.routes.auth import get_current_user
from config import PRIVILEGED_ROLES
from core.dependencies import SchoolManagerDep
from core.exceptions import (
    CodeGenerationError,
    SchoolNotFoundError,
    SectionNotFoundError,
    UserNotFoundError,
    ValidationError,
)
from schemas.school import (
    AssignTeacherRequest,
    CreateSchoolLevelRequest,
    CreateSchoolRequest,
    CreateSectionRequest,
    SchoolInfo,
    SchoolLevelInfo,
    SectionInfo,
    TeacherAssignmentInfo,
    TeacherAssignmentListResponse,
)
from schemas.user import User
from utils.converters import model_to_school

router = APIRouter(prefix="/api/schools", tags=["School"])


def _get_school_or_404(school_manager, school_id: str):
    try:
        return school_manager.get_school(school_id)
    except SchoolNotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="School not found",
        )


def _require_school_admin(current_user: User, school_id: str) -> None:
    """Developers manage every school; admins only their own."""
    if current_user.role == "developer":
        return
    if current_user.role == "admin" and current_user.school_id == school_id:
        return
    raise HTTPException(
        status_code=status.HTTP_403_FORBIDDEN,
        detail="Only the school's administrators can manage it.",
    )


def _require_school_member(current_user: User, school_id: str) -> None:
    if current_user.role == "developer" or current_user.school_id == school_id:
        return
    raise HTTPException(
        status_code=status.HTTP_403_FORBIDDEN,
        detail="You do not belong to this school.",
    )


def _build_section_info(model) -> SectionInfo:
    return SectionInfo(
        id=model.id,
        school_id=model.school_id,
        level_id=model.level_id,
        name=model.name,
        level_name=model.level.name if model.level else None,
    )


def _build_assignment_info(model) -> TeacherAssignmentInfo:
    teacher = model.teacher
    return TeacherAssignmentInfo(
        teacher_id=model.teacher_id,
        teacher_name=f"{teacher.first_name} {teacher.last_name}".strip() if teacher else "",
        section_id=model.section_id,
        school_year=model.school_year,
        assigned_at=model.assigned_at,
    )


@router.post(
    "",
    response_model=SchoolInfo,
    status_code=status.HTTP_201_CREATED,
    summary="Create school",
)
def create_school(
    req: CreateSchoolRequest,
    school_manager: SchoolManagerDep,
    current_user: User = Depends(get_current_user),
) -> SchoolInfo:
    """Create a school and link the creating admin to it.

    Raises:
        HTTPException: 403 for non-admins, 400 on a blank name.
    """
    if current_user.role not in PRIVILEGED_ROLES:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Only administrators can create schools.",
        )
    name = req.name.strip()
    if not name:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="School name cannot be empty.",
        )
    try:
        school = school_manager.create_school(
            name,
            created_by=current_user.user_id if current_user.role == "admin" else None,
            plan=req.plan,
            address=req.address,
            phone=req.phone,
            email=req.email,
            website=req.website,
            principal_name=req.principal_name,
            principal_email=req.principal_email,
        )
    except CodeGenerationError as e:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=str(e),
        )
    return model_to_school(school)


@router.get("/by-code/{school_code}", response_model=SchoolInfo, summary="Look up school by code")
def get_school_by_code(school_code: str, school_manager: SchoolManagerDep) -> SchoolInfo:
    """Resolve a school join code; used by the registration form."""
    try:
        return model_to_school(school_manager.get_school_by_code(school_code))
    except SchoolNotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Invalid school code",
        )


@router.get("/{school_id}", response_model=SchoolInfo, summary="Get school")
def get_school(
    school_id: str,
    school_manager: SchoolManagerDep,
    current_user: User = Depends(get_current_user),
) -> SchoolInfo:
    school = _get_school_or_404(school_manager, school_id)
    _require_school_member(current_user, school_id)
    return model_to_school(school)


@router.post(
    "/{school_id}/levels",
    response_model=SchoolLevelInfo,
    status_code=status.HTTP_201_CREATED,
    summary="Create school level",
)
def create_level(
    school_id: str,
    req: CreateSchoolLevelRequest,
    school_manager: SchoolManagerDep,
    current_user: User = Depends(get_current_user),
) -> SchoolLevelInfo:
    _get_school_or_404(school_manager, school_id)
    _require_school_admin(current_user, school_id)
    level = school_manager.create_level(school_id, req.name, req.order_index)
    return SchoolLevelInfo(
        id=level.id,
        school_id=level.school_id,
        name=level.name,
        order_index=level.order_index,
    )


@router.get("/{school_id}/levels", response_model=List[SchoolLevelInfo], summary="List school levels")
def list_levels(
    school_id: str,
    school_manager: SchoolManagerDep,
    current_user: User = Depends(get_current_user),
) -> List[SchoolLevelInfo]:
    _get_school_or_404(school_manager, school_id)
    _require_school_member(current_user, school_id)
    return [
        SchoolLevelInfo(
            id=level.id,
            school_id=level.school_id,
            name=level.name,
            order_index=level.order_index,
        )
        for level in school_manager.list_levels(school_id)
    ]


@router.post(
    "/{school_id}/sections",
    response_model=SectionInfo,
    status_code=status.HTTP_201_CREATED,
    summary="Create section",
)
def create_section(
    school_id: str,
    req: CreateSectionRequest,
    school_manager: SchoolManagerDep,
    current_user: User = Depends(get_current_user),
) -> SectionInfo:
    _get_school_or_404(school_manager, school_id)
    _require_school_admin(current_user, school_id)
    try:
        section = school_manager.create_section(school_id, req.level_id, req.name)
    except SectionNotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="School level not found",
        )
    except ValidationError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e),
        )
    return _build_section_info(school_manager.get_section(section.id))


@router.get("/{school_id}/sections", response_model=List[SectionInfo], summary="List sections")
def list_sections(
    school_id: str,
    school_manager: SchoolManagerDep,
    current_user: User = Depends(get_current_user),
) -> List[SectionInfo]:
    _get_school_or_404(school_manager, school_id)
    _require_school_member(current_user, school_id)
    return [_build_section_info(m) for m in school_manager.list_sections(school_id)]


@router.post(
    "/{school_id}/sections/{section_id}/teachers",
    response_model=TeacherAssignmentInfo,
    status_code=status.HTTP_201_CREATED,
    summary="Assign teacher to section",
)
def assign_teacher(
    school_id: str,
    section_id: str,
    req: AssignTeacherRequest,
    school_manager: SchoolManagerDep,
    current_user: User = Depends(get_current_user),
) -> TeacherAssignmentInfo:
    """Assign a teacher of this school to one of its sections for a school year.

    Raises:
        HTTPException: 404 for an unknown section or teacher, 400 if the user
            is not a teacher of this school.
    """
    _get_school_or_404(school_manager, school_id)
    _require_school_admin(current_user, school_id)
    try:
        section = school_manager.get_section(section_id)
    except SectionNotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Section not found",
        )
    if section.school_id != school_id:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Section not found in this school",
        )

    try:
        assignment = school_manager.assign_teacher(
            section_id, req.teacher_id, school_year=req.school_year
        )
    except UserNotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Teacher not found",
        )
    except ValidationError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e),
        )
    return _build_assignment_info(assignment)


@router.get(
    "/{school_id}/sections/{section_id}/teachers",
    response_model=TeacherAssignmentListResponse,
    summary="List section teachers",
)
def list_section_teachers(
    school_id: str,
    section_id: str,
    school_manager: SchoolManagerDep,
    current_user: User = Depends(get_current_user),
) -> TeacherAssignmentListResponse:
    _get_school_or_404(school_manager, school_id)
    _require_school_member(current_user, school_id)
    assignments = school_manager.list_assignments(section_id)
    return TeacherAssignmentListResponse(
        assignments=[_build_assignment_info(a) for a in assignments]
    )
