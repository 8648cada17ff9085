from sqlalchemy import Column, Integer, String, ForeignKey
from sqlalchemy.orm import relationship
from .base import Base


class SchoolLevelModel(Base):
    __tablename__ = "school_levels"

    id = Column(String, primary_key=True, index=True)
    school_id = Column(String, ForeignKey("schools.id", ondelete="CASCADE"), index=True, nullable=False)
    name = Column(String, nullable=False)  # e.g. "Grade 7"
    order_index = Column(Integer, nullable=False, default=0)

    school = relationship("SchoolModel", back_populates="levels")
    sections = relationship("SectionModel", back_populates="level")
