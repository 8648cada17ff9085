"""Dependency injection module for FastAPI.

This module provides the manager dependencies injected into FastAPI routes,
each backed by a request-scoped database session.
"""

from typing import Annotated

from fastapi import Depends
from sqlalchemy.orm import Session

from core.database import get_db
from utils import enrollment_manager
from utils import qr_code_manager
from utils import school_manager
from utils import user_manager


def get_user_manager(db: Session = Depends(get_db)) -> user_manager.UserManager:
    """Get UserManager instance with request-scoped DB session.

    Args:
        db: Database session.

    Returns:
        UserManager instance.
    """
    return user_manager.UserManager(db)


def get_school_manager(db: Session = Depends(get_db)) -> school_manager.SchoolManager:
    """Get SchoolManager instance with request-scoped DB session."""
    return school_manager.SchoolManager(db)


def get_qr_code_manager(db: Session = Depends(get_db)) -> qr_code_manager.QRCodeManager:
    """Get QRCodeManager instance with request-scoped DB session."""
    return qr_code_manager.QRCodeManager(db)


def get_enrollment_manager(
    db: Session = Depends(get_db),
) -> enrollment_manager.EnrollmentManager:
    """Get EnrollmentManager instance with request-scoped DB session."""
    return enrollment_manager.EnrollmentManager(db)


# Type aliases for dependency injection
UserManagerDep = Annotated[
    user_manager.UserManager, Depends(get_user_manager)
]
SchoolManagerDep = Annotated[
    school_manager.SchoolManager, Depends(get_school_manager)
]
QRCodeManagerDep = Annotated[
    qr_code_manager.QRCodeManager, Depends(get_qr_code_manager)
]
EnrollmentManagerDep = Annotated[
    enrollment_manager.EnrollmentManager, Depends(get_enrollment_manager)
]
