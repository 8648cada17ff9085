from sqlalchemy import Column, String, ForeignKey
from sqlalchemy.orm import relationship
from .base import Base


class SectionModel(Base):
    __tablename__ = "sections"

    id = Column(String, primary_key=True, index=True)
    school_id = Column(String, ForeignKey("schools.id", ondelete="CASCADE"), index=True, nullable=False)
    level_id = Column(String, ForeignKey("school_levels.id", ondelete="CASCADE"), index=True, nullable=False)
    name = Column(String, nullable=False)  # e.g. "Section A"
    created_at = Column(String, nullable=False)

    school = relationship("SchoolModel", back_populates="sections")
    level = relationship("SchoolLevelModel", back_populates="sections")
    teacher_sections = relationship(
        "TeacherSectionModel",
        back_populates="section",
        cascade="all, delete-orphan",
    )
