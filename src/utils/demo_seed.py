"""Demo accounts and a demo school for trying the dashboards out.

Runs at startup when SEED_DEMO_DATA is enabled. Safe to run repeatedly.
"""

import logging
from typing import Dict

from sqlalchemy.orm import Session

from config import DEMO_PASSWORD, ROLES
from core.exceptions import UserAlreadyExistsError
from models.school import SchoolModel
from utils.school_manager import SchoolManager
from utils.user_manager import UserManager

logger = logging.getLogger(__name__)

DEMO_SCHOOL_NAME = "Demo Elementary School"

DEMO_NAMES: Dict[str, tuple] = {
    "developer": ("Alex", "Developer"),
    "admin": ("Sarah", "Admin"),
    "teacher": ("Michael", "Davis"),
    "student": ("Alex", "Johnson"),
    "parent": ("Jennifer", "Smith"),
    "accounting": ("Lisa", "Finance"),
}


def demo_email(role: str) -> str:
    return f"{role}@demo.com"


def seed_demo_data(db: Session) -> None:
    """Create the demo school, one user per role and a taught section."""
    school_manager = SchoolManager(db)
    user_manager = UserManager(db)

    school = db.query(SchoolModel).filter(SchoolModel.name == DEMO_SCHOOL_NAME).first()
    if school is None:
        school = school_manager.create_school(DEMO_SCHOOL_NAME, plan="small")
        level = school_manager.create_level(school.id, "Grade 1", order_index=1)
        school_manager.create_section(school.id, level.id, "Section A")

    for role in ROLES:
        first_name, last_name = DEMO_NAMES[role]
        try:
            user_manager.create_user(
                email=demo_email(role),
                password=DEMO_PASSWORD,
                role=role,
                first_name=first_name,
                last_name=last_name,
                school_id=None if role == "developer" else school.id,
            )
        except UserAlreadyExistsError:
            continue

    teacher = user_manager.get_user_by_email(demo_email("teacher"))
    sections = school_manager.list_sections(school.id)
    if teacher and sections:
        school_manager.assign_teacher(sections[0].id, teacher.user_id)
    logger.info("Demo data ready for %s", DEMO_SCHOOL_NAME)
