"""Custom exception classes for the SchoolHub API.

This module defines application-specific exceptions. Managers raise these;
routes translate them to HTTP errors.
"""


class SchoolHubError(Exception):
    """Base exception for all SchoolHub errors."""

    pass


class UserNotFoundError(SchoolHubError):
    """Raised when a requested user cannot be found."""

    def __init__(self, user_id: str):
        """Initialize the exception.

        Args:
            user_id: The ID or email of the user that was not found.
        """
        self.user_id = user_id
        super().__init__(f"User '{user_id}' not found")


class UserAlreadyExistsError(SchoolHubError):
    """Raised when trying to create a user whose email is already taken."""

    pass


class SchoolNotFoundError(SchoolHubError):
    """Raised when a requested school cannot be found."""

    def __init__(self, school_ref: str):
        """Initialize the exception.

        Args:
            school_ref: The ID or code of the school that was not found.
        """
        self.school_ref = school_ref
        super().__init__(f"School '{school_ref}' not found")


class SectionNotFoundError(SchoolHubError):
    """Raised when a requested section or school level cannot be found."""

    def __init__(self, section_id: str):
        self.section_id = section_id
        super().__init__(f"Section '{section_id}' not found")


class QRCodeNotFoundError(SchoolHubError):
    """Raised when a QR enrollment code cannot be found in the registry."""

    def __init__(self, qr_code_id: str):
        self.qr_code_id = qr_code_id
        super().__init__(f"QR code '{qr_code_id}' not found")


class PermissionDeniedError(SchoolHubError):
    """Raised when the acting user may not perform an operation."""

    pass


class ValidationError(SchoolHubError):
    """Raised when data validation fails."""

    pass


class CodeGenerationError(SchoolHubError):
    """Raised when no unique code could be generated."""

    pass
