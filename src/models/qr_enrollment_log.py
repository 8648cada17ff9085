from sqlalchemy import Boolean, Column, String, ForeignKey
from sqlalchemy.orm import relationship
from .base import Base


class QREnrollmentLogModel(Base):
    __tablename__ = "qr_enrollment_logs"

    id = Column(String, primary_key=True, index=True)
    # NULL when the scanned code matched nothing, or its code was later deleted
    qr_code_id = Column(
        String,
        ForeignKey("enrollment_qr_codes.id", ondelete="SET NULL"),
        index=True,
        nullable=True,
    )
    scanned_code = Column(String, nullable=False)
    student_id = Column(String, ForeignKey("users.user_id", ondelete="CASCADE"), index=True, nullable=False)
    scanned_at = Column(String, nullable=False)
    success = Column(Boolean, nullable=False)
    error_message = Column(String, nullable=True)

    qr_code = relationship("EnrollmentQRCodeModel", back_populates="logs")
    student = relationship("UserModel")
