from sqlalchemy import Column, String
from sqlalchemy.orm import relationship
from .base import Base


class SchoolModel(Base):
    __tablename__ = "schools"

    id = Column(String, primary_key=True, index=True)
    name = Column(String, nullable=False)
    school_code = Column(String, unique=True, index=True, nullable=False)
    address = Column(String, nullable=True)
    phone = Column(String, nullable=True)
    email = Column(String, nullable=True)
    website = Column(String, nullable=True)
    principal_name = Column(String, nullable=True)
    principal_email = Column(String, nullable=True)
    plan = Column(String, nullable=False, default="small")  # 'small', 'medium' or 'large'
    created_at = Column(String, nullable=False)
    updated_at = Column(String, nullable=False)

    levels = relationship(
        "SchoolLevelModel",
        back_populates="school",
        cascade="all, delete-orphan",
    )
    sections = relationship(
        "SectionModel",
        back_populates="school",
        cascade="all, delete-orphan",
    )
