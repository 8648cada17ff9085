from sqlalchemy import Boolean, Column, String, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from .base import Base


class EnrollmentModel(Base):
    __tablename__ = "enrollments"
    # One row per student, section and school year; re-enrolling reactivates it
    __table_args__ = (
        UniqueConstraint(
            "student_id",
            "section_id",
            "school_year",
            name="uq_enrollments_student_section_year",
        ),
    )

    id = Column(String, primary_key=True, index=True)
    student_id = Column(String, ForeignKey("users.user_id", ondelete="CASCADE"), index=True, nullable=False)
    section_id = Column(String, ForeignKey("sections.id", ondelete="CASCADE"), index=True, nullable=False)
    school_year = Column(String, nullable=False)
    enrollment_date = Column(String, nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(String, nullable=False)

    section = relationship("SectionModel")
