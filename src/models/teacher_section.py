from sqlalchemy import Column, Integer, String, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from .base import Base


class TeacherSectionModel(Base):
    __tablename__ = "teacher_sections"
    __table_args__ = (
        UniqueConstraint(
            "teacher_id",
            "section_id",
            "school_year",
            name="uq_teacher_sections_teacher_section_year",
        ),
    )

    id = Column(Integer, primary_key=True, index=True)
    teacher_id = Column(String, ForeignKey("users.user_id", ondelete="CASCADE"), index=True, nullable=False)
    section_id = Column(String, ForeignKey("sections.id", ondelete="CASCADE"), index=True, nullable=False)
    school_year = Column(String, index=True, nullable=False)
    assigned_at = Column(String, nullable=False)

    section = relationship("SectionModel", back_populates="teacher_sections")
    teacher = relationship("UserModel")
