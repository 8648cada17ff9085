"""School management utilities.

Schools, their levels and sections, and which teacher teaches which section
in a given school year.
"""

import logging
import re
import secrets
import uuid
from typing import List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from config import get_current_school_year
from core.exceptions import (
    CodeGenerationError,
    SchoolNotFoundError,
    SectionNotFoundError,
    UserNotFoundError,
    ValidationError,
)
from models.school import SchoolModel
from models.school_level import SchoolLevelModel
from models.section import SectionModel
from models.teacher_section import TeacherSectionModel
from models.user import UserModel
from utils.time_utils import utc_now_iso

logger = logging.getLogger(__name__)

SCHOOL_CODE_MAX_ATTEMPTS = 10


def make_school_code(name: str) -> str:
    """Build a join code: three letters of the school name plus four digits."""
    prefix = re.sub(r"[^a-zA-Z]", "", name)[:3].upper() or "SCH"
    return f"{prefix}{secrets.randbelow(9000) + 1000}"


class SchoolManager:
    """Manages schools, levels, sections and teacher assignments."""

    def __init__(self, db: Session):
        self.db = db

    def create_school(
        self,
        name: str,
        created_by: Optional[str] = None,
        plan: str = "small",
        **details,
    ) -> SchoolModel:
        """Create a school with a fresh join code.

        Args:
            name: School name; also seeds the join code prefix.
            created_by: Optional user ID to link to the new school.
            plan: Subscription plan ('small', 'medium' or 'large').
            **details: Optional contact columns (address, phone, email,
                website, principal_name, principal_email).

        Returns:
            The created SchoolModel.

        Raises:
            CodeGenerationError: If no unused join code was found.
        """
        code = self._unused_school_code(name)
        now = utc_now_iso()
        school = SchoolModel(
            id=str(uuid.uuid4()),
            name=name.strip(),
            school_code=code,
            plan=plan,
            created_at=now,
            updated_at=now,
            **{k: (v or None) for k, v in details.items()},
        )
        self.db.add(school)
        self.db.flush()

        if created_by:
            user = self.db.query(UserModel).filter(UserModel.user_id == created_by).first()
            if user:
                user.school_id = school.id
                user.updated_at = now

        self.db.commit()
        self.db.refresh(school)
        logger.info("Created school %s with code %s", school.id, code)
        return school

    def _unused_school_code(self, name: str) -> str:
        for _ in range(SCHOOL_CODE_MAX_ATTEMPTS):
            code = make_school_code(name)
            taken = (
                self.db.query(SchoolModel.id)
                .filter(SchoolModel.school_code == code)
                .first()
            )
            if not taken:
                return code
        raise CodeGenerationError("Could not generate a unique school code")

    def get_school(self, school_id: str) -> SchoolModel:
        model = self.db.query(SchoolModel).filter(SchoolModel.id == school_id).first()
        if not model:
            raise SchoolNotFoundError(school_id)
        return model

    def get_school_by_code(self, school_code: str) -> SchoolModel:
        code = school_code.strip().upper()
        model = (
            self.db.query(SchoolModel)
            .filter(SchoolModel.school_code == code)
            .first()
        )
        if not model:
            raise SchoolNotFoundError(code)
        return model

    def create_level(self, school_id: str, name: str, order_index: int = 0) -> SchoolLevelModel:
        self.get_school(school_id)
        level = SchoolLevelModel(
            id=str(uuid.uuid4()),
            school_id=school_id,
            name=name.strip(),
            order_index=order_index,
        )
        self.db.add(level)
        self.db.commit()
        self.db.refresh(level)
        logger.info("Created level %s in school %s", level.name, school_id)
        return level

    def list_levels(self, school_id: str) -> List[SchoolLevelModel]:
        return (
            self.db.query(SchoolLevelModel)
            .filter(SchoolLevelModel.school_id == school_id)
            .order_by(SchoolLevelModel.order_index, SchoolLevelModel.name)
            .all()
        )

    def create_section(self, school_id: str, level_id: str, name: str) -> SectionModel:
        """Create a section under a level of the same school.

        Raises:
            SchoolNotFoundError: If the school does not exist.
            SectionNotFoundError: If the level does not exist.
            ValidationError: If the level belongs to another school.
        """
        self.get_school(school_id)
        level = (
            self.db.query(SchoolLevelModel)
            .filter(SchoolLevelModel.id == level_id)
            .first()
        )
        if not level:
            raise SectionNotFoundError(level_id)
        if level.school_id != school_id:
            raise ValidationError("Level does not belong to this school")

        section = SectionModel(
            id=str(uuid.uuid4()),
            school_id=school_id,
            level_id=level_id,
            name=name.strip(),
            created_at=utc_now_iso(),
        )
        self.db.add(section)
        self.db.commit()
        self.db.refresh(section)
        logger.info("Created section %s (%s) in school %s", section.name, section.id, school_id)
        return section

    def get_section(self, section_id: str) -> SectionModel:
        model = (
            self.db.query(SectionModel)
            .options(joinedload(SectionModel.level))
            .filter(SectionModel.id == section_id)
            .first()
        )
        if not model:
            raise SectionNotFoundError(section_id)
        return model

    def list_sections(self, school_id: str) -> List[SectionModel]:
        return (
            self.db.query(SectionModel)
            .options(joinedload(SectionModel.level))
            .filter(SectionModel.school_id == school_id)
            .order_by(SectionModel.created_at)
            .all()
        )

    def assign_teacher(
        self, section_id: str, teacher_id: str, school_year: Optional[str] = None
    ) -> TeacherSectionModel:
        """Assign a teacher to a section for a school year.

        Assigning the same teacher twice returns the existing assignment.

        Raises:
            SectionNotFoundError: If the section does not exist.
            UserNotFoundError: If the teacher does not exist.
            ValidationError: If the user is not a teacher, or teaches at
                another school.
        """
        section = self.get_section(section_id)
        teacher = self.db.query(UserModel).filter(UserModel.user_id == teacher_id).first()
        if not teacher:
            raise UserNotFoundError(teacher_id)
        if teacher.role != "teacher":
            raise ValidationError("Only teachers can be assigned to sections")
        if teacher.school_id not in (None, section.school_id):
            raise ValidationError("Teacher belongs to another school")

        year = school_year or get_current_school_year()
        existing = (
            self.db.query(TeacherSectionModel)
            .filter(
                TeacherSectionModel.teacher_id == teacher_id,
                TeacherSectionModel.section_id == section.id,
                TeacherSectionModel.school_year == year,
            )
            .first()
        )
        if existing:
            return existing

        assignment = TeacherSectionModel(
            teacher_id=teacher_id,
            section_id=section.id,
            school_year=year,
            assigned_at=utc_now_iso(),
        )
        self.db.add(assignment)
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            logger.info("Assignment of %s to %s already exists", teacher_id, section_id)
            return (
                self.db.query(TeacherSectionModel)
                .filter(
                    TeacherSectionModel.teacher_id == teacher_id,
                    TeacherSectionModel.section_id == section.id,
                    TeacherSectionModel.school_year == year,
                )
                .one()
            )
        self.db.refresh(assignment)
        logger.info("Assigned teacher %s to section %s for %s", teacher_id, section_id, year)
        return assignment

    def list_assignments(
        self, section_id: str, school_year: Optional[str] = None
    ) -> List[TeacherSectionModel]:
        query = (
            self.db.query(TeacherSectionModel)
            .options(joinedload(TeacherSectionModel.teacher))
            .filter(TeacherSectionModel.section_id == section_id)
        )
        if school_year:
            query = query.filter(TeacherSectionModel.school_year == school_year)
        return query.order_by(TeacherSectionModel.assigned_at).all()

    def list_teacher_sections(
        self, teacher_id: str, school_year: Optional[str] = None
    ) -> List[TeacherSectionModel]:
        """List the sections a teacher is assigned to in a school year."""
        year = school_year or get_current_school_year()
        return (
            self.db.query(TeacherSectionModel)
            .options(
                joinedload(TeacherSectionModel.section).joinedload(SectionModel.level)
            )
            .filter(
                TeacherSectionModel.teacher_id == teacher_id,
                TeacherSectionModel.school_year == year,
            )
            .all()
        )

    def teaches_section(
        self, teacher_id: str, section_id: str, school_year: Optional[str] = None
    ) -> bool:
        year = school_year or get_current_school_year()
        return (
            self.db.query(TeacherSectionModel.id)
            .filter(
                TeacherSectionModel.teacher_id == teacher_id,
                TeacherSectionModel.section_id == section_id,
                TeacherSectionModel.school_year == year,
            )
            .first()
            is not None
        )

    def count_schools(self) -> int:
        return self.db.query(SchoolModel).count()
