"""Database models.

Importing this package registers every table with ``Base.metadata``.
"""

from .base import Base  # noqa: F401
from .school import SchoolModel  # noqa: F401
from .school_level import SchoolLevelModel  # noqa: F401
from .section import SectionModel  # noqa: F401
from .user import UserModel  # noqa: F401
from .teacher_section import TeacherSectionModel  # noqa: F401
from .enrollment import EnrollmentModel  # noqa: F401
from .enrollment_qr_code import EnrollmentQRCodeModel  # noqa: F401
from .qr_enrollment_log import QREnrollmentLogModel  # noqa: F401
