"""QR enrollment code database model."""

from sqlalchemy import Boolean, Column, Integer, String, Text, ForeignKey
from sqlalchemy.orm import relationship
from .base import Base


class EnrollmentQRCodeModel(Base):
    """A code students redeem to join a section."""

    __tablename__ = "enrollment_qr_codes"

    id = Column(String, primary_key=True, index=True)
    qr_code = Column(String, unique=True, index=True, nullable=False)
    teacher_id = Column(String, ForeignKey("users.user_id", ondelete="CASCADE"), index=True, nullable=False)
    section_id = Column(String, ForeignKey("sections.id", ondelete="CASCADE"), index=True, nullable=False)
    school_year = Column(String, nullable=False)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    max_uses = Column(Integer, nullable=True)  # NULL = unlimited
    current_uses = Column(Integer, nullable=False, default=0)
    expires_at = Column(String, nullable=True)  # ISO format string, UTC
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(String, nullable=False)

    section = relationship("SectionModel")
    logs = relationship(
        "QREnrollmentLogModel",
        back_populates="qr_code",
        # Logs outlive their code; the database nulls qr_code_id on delete
        passive_deletes="all",
    )
